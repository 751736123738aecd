import random
from collections import Counter

from quizgen.services.taxonomy import (
    COGNITIVE_GOALS,
    DIFFICULTIES,
    EDUCATION_LEVELS,
    LEVEL_SUBJECT_IDS,
    SUBJECTS,
    VALID_TERM_IDS,
    fallback_base_metadata,
    preselect,
    subjects_for_level,
)


def test_valid_id_tables():
    assert VALID_TERM_IDS["subject"] == frozenset(range(9, 21))
    assert VALID_TERM_IDS["education_level"] == frozenset(range(1, 9))
    assert VALID_TERM_IDS["difficulty"] == frozenset({21, 22, 23})
    assert VALID_TERM_IDS["cognitive_goal"] == frozenset(range(24, 30))


def test_every_level_has_subjects():
    for level in EDUCATION_LEVELS:
        assert level.id in LEVEL_SUBJECT_IDS
        assert subjects_for_level(level.id)


def test_early_levels_exclude_advanced_subjects():
    for level_id in (2, 3):
        ids = {s.id for s in subjects_for_level(level_id)}
        assert not ids & {12, 15, 19}
    assert {s.id for s in subjects_for_level(6)} == {s.id for s in SUBJECTS}


def test_preselect_respects_level_subject_mapping():
    rng = random.Random(1234)
    for _ in range(500):
        level, subject, difficulty = preselect(rng)
        assert subject.id in LEVEL_SUBJECT_IDS[level.id]
        assert difficulty.id in VALID_TERM_IDS["difficulty"]


def test_difficulty_weights_approximate_one_four_one():
    rng = random.Random(42)
    draws = 10_000
    counts = Counter(preselect(rng)[2].label for _ in range(draws))

    # 기대값 1/6, 4/6, 1/6
    assert abs(counts["Easy"] / draws - 1 / 6) < 0.02
    assert abs(counts["Medium"] / draws - 4 / 6) < 0.02
    assert abs(counts["Hard"] / draws - 1 / 6) < 0.02
    ratio = counts["Medium"] / ((counts["Easy"] + counts["Hard"]) / 2)
    assert 3.5 < ratio < 4.5


def test_fallback_is_deterministic_for_same_seed():
    first = fallback_base_metadata(now=1_700_000_042)
    second = fallback_base_metadata(now=1_700_999_942)  # same value mod 100

    assert first == second
    assert first.subject == SUBJECTS[42 % len(SUBJECTS)]
    assert first.education_level == EDUCATION_LEVELS[42 % len(EDUCATION_LEVELS)]
    assert first.difficulty == DIFFICULTIES[42 % len(DIFFICULTIES)]
    assert first.cognitive_goal == COGNITIVE_GOALS[42 % len(COGNITIVE_GOALS)]


def test_fallback_ids_stay_in_range():
    for now in range(0, 200):
        fallback = fallback_base_metadata(now=now)
        for name in VALID_TERM_IDS:
            assert getattr(fallback, name).id in VALID_TERM_IDS[name]
