import contextlib
from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient

from persona_rag_server.main import app
from persona_rag_server.api.dependencies import (
    get_assistant,
    get_profile_registry,
    get_vector_store,
)
from persona_rag_server.assistant import AskResult, PersonaAssistant
from persona_rag_server.core.errors import EmbeddingFailure, GenerationFailure
from persona_rag_server.profiles.loader import ProfileRegistry
from persona_rag_server.store import FaissVectorStore


@pytest.fixture
def registry(tmp_path):
    team = tmp_path / "team"
    team.mkdir()
    (team / "general.json").write_text('{"name": "Team"}', encoding="utf-8")
    (team / "arjun.json").write_text(
        '{"name": "Arjun", "greetingOverride": "Yo AJ!"}', encoding="utf-8"
    )
    return ProfileRegistry(str(tmp_path / "personas"), str(team), "Chandni")


@pytest.fixture
def mock_assistant():
    mock = AsyncMock(spec=PersonaAssistant)
    mock.ask.return_value = AskResult(answer="coffee first ☕")
    return mock


@pytest.fixture
def client(registry, mock_assistant):
    app.dependency_overrides[get_profile_registry] = lambda: registry
    app.dependency_overrides[get_vector_store] = lambda: FaissVectorStore()
    app.dependency_overrides[get_assistant] = lambda: mock_assistant

    # Mock lifespan to avoid loading real profiles / touching the store
    @contextlib.asynccontextmanager
    async def mock_lifespan(app):
        yield

    app.router.lifespan_context = mock_lifespan

    with TestClient(app, raise_server_exceptions=False) as c:
        yield c

    app.dependency_overrides = {}


def test_health(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok", "name": "ChandniBot", "vector_store": "faiss:memory"}


def test_persona_exposes_safe_fields_only(client):
    body = client.get("/persona").json()
    assert set(body) == {"name", "display_name", "emoji", "greeting"}
    assert body["name"] == "Chandni"


def test_team_listing(client):
    body = client.get("/team").json()
    assert sorted(m["key"] for m in body["team"]) == ["arjun", "general"]


def test_team_member_and_fallback(client):
    assert client.get("/team/arjun").json() == {
        "key": "arjun",
        "name": "Arjun",
        "greeting_override": "Yo AJ!",
    }
    assert client.get("/team/nobody").json()["key"] == "general"


def test_team_member_not_found_without_general(client, tmp_path):
    app.dependency_overrides[get_profile_registry] = lambda: ProfileRegistry(
        str(tmp_path), str(tmp_path / "none"), "Chandni"
    )
    resp = client.get("/team/nobody")
    assert resp.status_code == 404
    assert resp.json() == {"error": "Not found"}


def test_ask_returns_answer(client, mock_assistant):
    resp = client.post(
        "/ask",
        json={"question": "What is on-call policy?", "speaker": "arjun", "history": []},
    )

    assert resp.status_code == 200
    assert resp.json() == {"answer": "coffee first ☕"}
    mock_assistant.ask.assert_awaited_once_with(
        "What is on-call policy?", speaker="arjun", history=[]
    )


@pytest.mark.parametrize("payload", [{}, {"question": ""}, {"question": 42}])
def test_ask_rejects_bad_question(client, payload):
    resp = client.post("/ask", json=payload)
    assert resp.status_code == 400
    assert resp.json() == {"error": "Invalid payload. Expected { question: string }."}


def test_embedding_failure_is_a_500(client, mock_assistant):
    mock_assistant.ask.side_effect = EmbeddingFailure("Embedding generation failed: ConnectError")
    resp = client.post("/ask", json={"question": "hi"})
    assert resp.status_code == 500
    assert resp.json() == {"error": "Embedding generation failed: ConnectError"}


def test_generation_failure_keeps_upstream_status(client, mock_assistant):
    mock_assistant.ask.side_effect = GenerationFailure("Chat completion failed: HTTP 429", status_code=429)
    resp = client.post("/ask", json={"question": "hi"})
    assert resp.status_code == 429


def test_unexpected_error_is_generic_500(client, mock_assistant):
    mock_assistant.ask.side_effect = KeyError("secret detail")
    resp = client.post("/ask", json={"question": "hi"})
    assert resp.status_code == 500
    assert resp.json() == {"error": "Internal Server Error"}
