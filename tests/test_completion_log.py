import json
import multiprocessing
import threading
from datetime import datetime, timezone

from quizgen.services.completion_log import JsonlCompletionLog


def _fields(i: int = 0) -> dict:
    return {
        "request": f"request {i}",
        "response": f"응답 {i}",
        "model": "gpt-4o",
        "input_tokens": 3,
        "output_tokens": 4,
        "total_tokens": 7,
        "temperature": 0.7,
        "response_time_ms": 12,
    }


def test_append_assigns_monotonic_ids(tmp_path):
    log = JsonlCompletionLog(tmp_path / "nested" / "completions.jsonl")

    first = log.append(**_fields(1))
    second = log.append(**_fields(2))

    assert (first.id, second.id) == (1, 2)
    assert first.type == "metadata_generation"
    assert log.count() == 2


def test_file_is_json_lines_with_unescaped_unicode(tmp_path):
    path = tmp_path / "completions.jsonl"
    log = JsonlCompletionLog(path)
    log.append(**_fields(1))

    lines = path.read_text(encoding="utf-8").splitlines()
    assert len(lines) == 1
    assert "응답 1" in lines[0]
    record = json.loads(lines[0])
    assert set(record) >= {
        "id",
        "request",
        "response",
        "model",
        "input_tokens",
        "output_tokens",
        "total_tokens",
        "temperature",
        "response_time_ms",
        "created",
        "type",
    }


def test_next_id_continues_after_existing_max(tmp_path):
    path = tmp_path / "completions.jsonl"
    log = JsonlCompletionLog(path)
    log.append(**_fields(1))
    with path.open("a", encoding="utf-8") as fh:
        fh.write("not json\n")

    entry = log.append(**_fields(2))

    assert entry.id == 2
    assert [e.id for e in log.read_all()] == [1, 2]


def test_read_recent_returns_tail(tmp_path):
    log = JsonlCompletionLog(tmp_path / "completions.jsonl")
    for i in range(5):
        log.append(**_fields(i))

    assert [e.id for e in log.read_recent(2)] == [4, 5]
    assert log.read_recent(0) == []


def test_concurrent_appends_lose_nothing(tmp_path):
    log = JsonlCompletionLog(tmp_path / "completions.jsonl")

    def worker(n: int):
        for i in range(10):
            log.append(**_fields(n * 100 + i))

    threads = [threading.Thread(target=worker, args=(n,)) for n in range(5)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    ids = [e.id for e in log.read_all()]
    assert len(ids) == 50
    assert sorted(ids) == list(range(1, 51))


def _append_from_process(path: str, n: int, count: int) -> None:
    log = JsonlCompletionLog(path)
    for i in range(count):
        log.append(**_fields(n * 1000 + i))


def test_appends_from_separate_processes_get_unique_ids(tmp_path):
    path = tmp_path / "completions.jsonl"
    procs = [
        multiprocessing.Process(target=_append_from_process, args=(str(path), n, 40))
        for n in range(4)
    ]
    for p in procs:
        p.start()
    for p in procs:
        p.join(timeout=60)
        assert p.exitcode == 0

    ids = [e.id for e in JsonlCompletionLog(path).read_all()]
    assert len(ids) == 160
    assert sorted(ids) == list(range(1, 161))


def test_next_id_read_from_tail_across_block_boundary(tmp_path):
    path = tmp_path / "completions.jsonl"
    log = JsonlCompletionLog(path)
    big = _fields(1)
    big["request"] = "x" * 20000
    log.append(**big)
    log.append(**big)
    with path.open("a", encoding="utf-8") as fh:
        fh.write('{"id": "broken"\n')

    assert log.append(**_fields(3)).id == 3


def test_created_timestamp_uses_injected_clock(tmp_path):
    log = JsonlCompletionLog(tmp_path / "completions.jsonl", clock=lambda: 1_700_000_000)

    entry = log.append(**_fields(1))

    assert entry.created == datetime.fromtimestamp(1_700_000_000, timezone.utc).isoformat()
    assert log.read_all()[0].created == "2023-11-14T22:13:20+00:00"
