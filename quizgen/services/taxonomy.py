"""
Static taxonomy tables for quiz classification.

Term ids match the content store's vocabularies and must not be renumbered.
"""

from __future__ import annotations

import random
import time
from typing import Mapping, Sequence

from quizgen.schemas.quiz_schema import BaseMetadata, TaxonomyTerm

TAXONOMY_FIELDS = ("subject", "education_level", "difficulty", "cognitive_goal")

SUBJECTS = [
    TaxonomyTerm(id=9, label="Arts & Humanities"),
    TaxonomyTerm(id=10, label="Business & Economics"),
    TaxonomyTerm(id=11, label="Computer Science & Technology"),
    TaxonomyTerm(id=12, label="Education"),
    TaxonomyTerm(id=13, label="Health & Medicine"),
    TaxonomyTerm(id=14, label="Language & Literature"),
    TaxonomyTerm(id=15, label="Law & Political Science"),
    TaxonomyTerm(id=16, label="Mathematics & Statistics"),
    TaxonomyTerm(id=17, label="Science"),
    TaxonomyTerm(id=18, label="Social Sciences"),
    TaxonomyTerm(id=19, label="Professional Studies"),
    TaxonomyTerm(id=20, label="Other"),
]

EDUCATION_LEVELS = [
    TaxonomyTerm(id=1, label="Any Level"),
    TaxonomyTerm(id=2, label="Pre-K to Grade 3"),
    TaxonomyTerm(id=3, label="Grade 3-6"),
    TaxonomyTerm(id=4, label="Grade 6-8"),
    TaxonomyTerm(id=5, label="Grade 9-12"),
    TaxonomyTerm(id=6, label="Undergraduate"),
    TaxonomyTerm(id=7, label="Graduate"),
    TaxonomyTerm(id=8, label="Adult Learning"),
]

DIFFICULTIES = [
    TaxonomyTerm(id=21, label="Easy"),
    TaxonomyTerm(id=22, label="Medium"),
    TaxonomyTerm(id=23, label="Hard"),
]

COGNITIVE_GOALS = [
    TaxonomyTerm(id=24, label="Remember"),
    TaxonomyTerm(id=25, label="Understand"),
    TaxonomyTerm(id=26, label="Apply"),
    TaxonomyTerm(id=27, label="Analyze"),
    TaxonomyTerm(id=28, label="Evaluate"),
    TaxonomyTerm(id=29, label="Create"),
]

OPTIONS: Mapping[str, Sequence[TaxonomyTerm]] = {
    "subject": SUBJECTS,
    "education_level": EDUCATION_LEVELS,
    "difficulty": DIFFICULTIES,
    "cognitive_goal": COGNITIVE_GOALS,
}

VALID_TERM_IDS: Mapping[str, frozenset[int]] = {
    name: frozenset(term.id for term in terms) for name, terms in OPTIONS.items()
}

# Easy:Medium:Hard
DIFFICULTY_WEIGHTS = (1, 4, 1)

_EARLY_EXCLUDED = {12, 15, 19}

# education_level id → 허용 subject id
LEVEL_SUBJECT_IDS: Mapping[int, tuple[int, ...]] = {
    1: tuple(t.id for t in SUBJECTS),
    2: tuple(t.id for t in SUBJECTS if t.id not in _EARLY_EXCLUDED | {10}),
    3: tuple(t.id for t in SUBJECTS if t.id not in _EARLY_EXCLUDED),
    4: tuple(t.id for t in SUBJECTS if t.id not in {12, 19}),
    5: tuple(t.id for t in SUBJECTS if t.id != 12),
    6: tuple(t.id for t in SUBJECTS),
    7: tuple(t.id for t in SUBJECTS),
    8: tuple(t.id for t in SUBJECTS),
}

_SUBJECTS_BY_ID = {t.id: t for t in SUBJECTS}


def subjects_for_level(level_id: int) -> list[TaxonomyTerm]:
    return [_SUBJECTS_BY_ID[sid] for sid in LEVEL_SUBJECT_IDS.get(level_id, LEVEL_SUBJECT_IDS[1])]


def preselect(rng: random.Random | None = None) -> tuple[TaxonomyTerm, TaxonomyTerm, TaxonomyTerm]:
    """Pick (education_level, subject, difficulty) locally, before any AI call."""
    rng = rng or random.Random()
    level = rng.choice(EDUCATION_LEVELS)
    subject = rng.choice(subjects_for_level(level.id))
    difficulty = rng.choices(DIFFICULTIES, weights=DIFFICULTY_WEIGHTS, k=1)[0]
    return level, subject, difficulty


def fallback_base_metadata(now: float | None = None) -> BaseMetadata:
    """
    Deterministic substitute used when the model omits fields.

    The same ``int(now) % 100`` always yields the same combination.
    """
    seed = int(time.time() if now is None else now) % 100
    return BaseMetadata(
        **{name: OPTIONS[name][seed % len(OPTIONS[name])] for name in TAXONOMY_FIELDS}
    )


def is_valid_term_id(field_name: str, term_id: int) -> bool:
    return term_id in VALID_TERM_IDS[field_name]
