from quizgen.cli import main
from quizgen.core.config import Settings
from quizgen.services.completion_log import JsonlCompletionLog


def _settings(tmp_path) -> Settings:
    return Settings(QUIZGEN_COMPLETIONS_LOG_PATH=str(tmp_path / "completions.jsonl"))


def test_view_completions_without_file(tmp_path, capsys):
    assert main(["view-completions"], settings=_settings(tmp_path)) == 0
    assert "No completions file found" in capsys.readouterr().out


def test_view_completions_prints_recent_entries(tmp_path, capsys):
    settings = _settings(tmp_path)
    log = JsonlCompletionLog(settings.completions_log_path)
    for i in range(4):
        log.append(request=f"req {i}", response="x" * 150, model="gpt-4o", total_tokens=i)

    assert main(["view-completions", "--limit", "2"], settings=settings) == 0
    out = capsys.readouterr().out

    assert "ID: 3" in out and "ID: 4" in out
    assert "ID: 1" not in out
    assert "x" * 100 + "..." in out
    assert "Total completions in file: 4" in out


def test_test_ai_failure_exits_nonzero_and_logs(tmp_path, capsys):
    settings = _settings(tmp_path)

    assert main(["test-ai", "ping", "--provider", "unknown"], settings=settings) == 1
    assert "AI integration test failed" in capsys.readouterr().out
    assert JsonlCompletionLog(settings.completions_log_path).count() == 1
