from fastapi import FastAPI
from fastapi.testclient import TestClient

from quizgen.api.routes.quiz import get_completion_log, get_node_service, router
from quizgen.core.config import Settings, get_settings
from quizgen.db.session import get_db
from quizgen.services.completion_log import JsonlCompletionLog
from quizgen.services.quiz_node_service import QuizNodeService

from test_quiz_node_service import METADATA, StubMetadataService, make_session

HEADERS = {"x-api-key": "secret"}


def build_client(tmp_path, metadata=METADATA) -> TestClient:
    db = make_session()
    service = QuizNodeService(metadata_service=StubMetadataService(metadata))
    log = JsonlCompletionLog(tmp_path / "completions.jsonl")
    for i in range(3):
        log.append(request=f"req {i}", response=f"resp {i}", model="gpt-4o")

    app = FastAPI()
    app.include_router(router)
    app.dependency_overrides[get_settings] = lambda: Settings(API_KEY="secret")
    app.dependency_overrides[get_db] = lambda: db
    app.dependency_overrides[get_node_service] = lambda: service
    app.dependency_overrides[get_completion_log] = lambda: log
    return TestClient(app)


def test_requires_api_key(tmp_path):
    client = build_client(tmp_path)

    assert client.post("/ai/quiz/metadata").status_code == 401
    assert client.post("/ai/quiz/metadata", headers={"x-api-key": "wrong"}).status_code == 401


def test_generate_metadata(tmp_path):
    client = build_client(tmp_path)
    resp = client.post("/ai/quiz/metadata", headers=HEADERS)

    assert resp.status_code == 200
    body = resp.json()
    assert body["title"] == METADATA.title
    assert body["subject"] == {"id": 16, "label": "Mathematics & Statistics"}


def test_generate_metadata_failure_is_502(tmp_path):
    client = build_client(tmp_path, metadata=None)
    resp = client.post("/ai/quiz/metadata", headers=HEADERS)

    assert resp.status_code == 502
    assert "check logs" in resp.json()["detail"]


def test_create_fetch_and_update_node(tmp_path):
    client = build_client(tmp_path)

    created = client.post("/ai/quiz/nodes", json={"author_uid": 3, "tags": ["algebra"]}, headers=HEADERS)
    assert created.status_code == 201
    node = created.json()
    assert node["author_uid"] == 3
    assert node["tags"] == ["algebra"]
    assert node["cognitive_goal_id"] == 26

    fetched = client.get(f"/ai/quiz/nodes/{node['id']}", headers=HEADERS)
    assert fetched.status_code == 200
    assert fetched.json()["title"] == METADATA.title

    updated = client.patch(f"/ai/quiz/nodes/{node['id']}/prompt", json={"prompt": "new prompt"}, headers=HEADERS)
    assert updated.status_code == 200
    assert updated.json()["prompt"] == "new prompt"

    assert client.get("/ai/quiz/nodes/999", headers=HEADERS).status_code == 404


def test_list_completions(tmp_path):
    client = build_client(tmp_path)
    resp = client.get("/ai/quiz/completions", params={"limit": 2}, headers=HEADERS)

    assert resp.status_code == 200
    body = resp.json()
    assert body["total"] == 3
    assert [c["id"] for c in body["completions"]] == [2, 3]
