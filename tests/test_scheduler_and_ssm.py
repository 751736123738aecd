import os

from quizgen.core.config import Settings
from quizgen.core.scheduler import run_generation_job, start_scheduler
from quizgen.core.ssm import load_ssm_parameters
from quizgen.services.quiz_node_service import QuizNodeService

from test_quiz_node_service import METADATA, StubMetadataService, make_session


def test_scheduler_disabled_by_default():
    assert start_scheduler(Settings(CRON_GENERATION_ENABLED=False)) is None


def test_generation_job_creates_node():
    db = make_session()
    service = QuizNodeService(metadata_service=StubMetadataService(METADATA))

    nid = run_generation_job(service, session_factory=lambda: db)

    assert nid is not None
    assert service.get_quiz_node(db, nid).title == METADATA.title


def test_generation_job_swallows_pipeline_failure():
    db = make_session()
    service = QuizNodeService(metadata_service=StubMetadataService(None))

    assert run_generation_job(service, session_factory=lambda: db) is None


class FakeSSM:
    class exceptions:
        class ParameterNotFound(Exception):
            pass

    def __init__(self, values):
        self.values = values

    def get_parameter(self, Name, WithDecryption):  # noqa: N803
        key = Name.rsplit("/", 1)[-1]
        if key not in self.values:
            raise self.exceptions.ParameterNotFound(Name)
        return {"Parameter": {"Value": self.values[key]}}


def test_ssm_skipped_without_flag(monkeypatch):
    monkeypatch.delenv("USE_PARAMETER_STORE", raising=False)
    assert load_ssm_parameters(client=FakeSSM({"QUIZGEN_MODEL": "gpt-4o-mini"})) == 0


def test_ssm_injects_environment(monkeypatch):
    monkeypatch.setenv("USE_PARAMETER_STORE", "true")
    monkeypatch.setenv("QUIZGEN_MODEL", "placeholder")
    monkeypatch.setenv("API_KEY", "placeholder")

    loaded = load_ssm_parameters(client=FakeSSM({"QUIZGEN_MODEL": "gpt-4o-mini", "QUIZGEN_API_KEY": "k"}))

    assert loaded == 2
    assert os.environ["QUIZGEN_MODEL"] == "gpt-4o-mini"
    assert os.environ["API_KEY"] == "k"
