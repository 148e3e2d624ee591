from __future__ import annotations

import asyncio
from typing import List

import pytest
from fastapi.testclient import TestClient

from startup_companion.app import create_app
from startup_companion.config import load_settings
from startup_companion.errors import PersistenceError
from startup_companion.mentors import DEFAULT_MENTORS
from startup_companion.schemas import DocumentCategory, GeneratedDocument
from startup_companion.storage import InMemoryObjectStorage
from startup_companion.store import InMemoryStore

from conftest import FailingStorage, FakeCompleter

FAST_POLLING = {"COMPANION_POLL_INTERVAL_SECONDS": "0.01", "COMPANION_POLL_MAX_ATTEMPTS": "500"}


class UnreadableStore(InMemoryStore):
    async def list_session_documents(self, session_id: str) -> List[GeneratedDocument]:
        raise PersistenceError("Database error during document listing")


@pytest.fixture
def backends():
    return InMemoryStore(mentors=DEFAULT_MENTORS), InMemoryObjectStorage()


@pytest.fixture
def client(backends) -> TestClient:
    store, storage = backends
    app = create_app(
        settings=load_settings({"OPENROUTER_API_KEY": "or-key", **FAST_POLLING}),
        store=store,
        storage=storage,
        completer=FakeCompleter(),
    )
    return TestClient(app)


def _payload(**extra) -> dict[str, object]:
    return {"sessionId": "s1", "userId": "u1", **extra}


def test_healthcheck(client: TestClient) -> None:
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok", "store": "memory", "completion": "configured"}


def test_generate_single_document(client: TestClient, backends) -> None:
    _, storage = backends

    response = client.post(
        "/documents/compliance",
        json=_payload(businessProfile={"business_name": "Acme Foods", "location": "Mumbai"}),
    )

    assert response.status_code == 200
    body = response.json()
    assert body["response"] == body["fullContent"]
    assert len(body["keyPoints"]) == 6
    assert body["pdfGenerationStatus"] == "success"
    assert body["pdfUrl"].endswith(".pdf")
    assert body["documentId"]
    assert body["warning"] is None
    assert len(storage.objects) == 1


def test_storage_failure_returns_document_with_warning(backends) -> None:
    store, _ = backends
    app = create_app(
        settings=load_settings({"OPENROUTER_API_KEY": "or-key", **FAST_POLLING}),
        store=store,
        storage=FailingStorage(),
        completer=FakeCompleter(),
    )
    client = TestClient(app)

    response = client.post("/documents/hr", json=_payload())

    assert response.status_code == 200
    body = response.json()
    assert body["pdfGenerationStatus"] == "failed"
    assert body["warning"]
    assert body["pdfUrl"] is None
    rows = client.get("/documents/session/s1").json()
    assert [row["generation_status"] for row in rows] == ["completed"]


def test_generator_uses_configured_model(backends) -> None:
    store, storage = backends
    settings = load_settings({"OPENROUTER_API_KEY": "or-key", "OPENROUTER_MODEL": "anthropic/claude-3-haiku"})

    app = create_app(settings=settings, store=store, storage=storage, completer=FakeCompleter())

    assert app.state.generator.model == "anthropic/claude-3-haiku"


def test_unknown_category_is_rejected(client: TestClient) -> None:
    response = client.post("/documents/marketing", json=_payload())
    assert response.status_code == 422


def test_missing_user_id_is_rejected(client: TestClient) -> None:
    response = client.post("/documents/hr", json={"sessionId": "s1"})
    assert response.status_code == 422


def test_missing_api_key_returns_configuration_error(backends) -> None:
    store, storage = backends
    app = create_app(settings=load_settings(FAST_POLLING), store=store, storage=storage)
    client = TestClient(app)

    response = client.post("/documents/registration", json=_payload())

    assert response.status_code == 500
    body = response.json()
    assert body["error"] == "OpenRouter API key not configured"
    assert body["userMessage"] == "Configuration error: API key missing. Please contact support."
    rows = client.get("/documents/session/s1").json()
    assert [(row["document_type"], row["generation_status"]) for row in rows] == [("registration", "failed")]


def test_session_and_user_listings(client: TestClient) -> None:
    client.post("/documents/hr", json=_payload())
    client.post("/documents/registration", json=_payload())
    client.post("/documents/hr", json=_payload())

    session_rows = client.get("/documents/session/s1").json()
    latest_rows = client.get("/documents/user/u1", params={"latest": "true"}).json()

    assert [row["document_type"] for row in session_rows] == ["registration", "hr"]
    assert {row["document_type"] for row in latest_rows} == {"registration", "hr"}
    assert client.get("/documents/user/nobody").json() == []


def test_fetch_and_delete_document(client: TestClient, backends) -> None:
    _, storage = backends
    document_id = client.post("/documents/branding", json=_payload()).json()["documentId"]

    fetched = client.get(f"/documents/item/{document_id}")
    deleted = client.delete(f"/documents/item/{document_id}")

    assert fetched.status_code == 200
    assert fetched.json()["document_title"] == "Branding Guide"
    assert deleted.status_code == 200
    assert storage.objects == {}
    assert client.get(f"/documents/item/{document_id}").status_code == 404
    assert client.delete(f"/documents/item/{document_id}").status_code == 404


def test_generate_all_for_session(client: TestClient, backends) -> None:
    store, _ = backends
    assert client.post("/sessions/s1/generate").status_code == 404

    asyncio.run(store.upsert_profile("s1", "u1", {"business_name": "Acme Foods"}))
    response = client.post("/sessions/s1/generate")

    assert response.status_code == 200
    report = response.json()
    assert report["all_terminal"] is True
    assert report["timed_out"] is False
    assert set(report["statuses"]) == {category.value for category in DocumentCategory}
    assert client.get("/sessions/s1/profile").json()["business_name"] == "Acme Foods"


def test_wizard_over_http(client: TestClient) -> None:
    started = client.post("/wizard/sessions", json={"userId": "u1"})
    session_id = started.json()["session_id"]

    reply = client.post(f"/wizard/sessions/{session_id}/messages", json={"content": "2"})
    transcript = client.get(f"/wizard/sessions/{session_id}/messages").json()

    assert started.status_code == 200
    assert reply.json()["stage"] == "questioning"
    assert [message["message_type"] for message in transcript] == ["ai", "user", "ai"]
    assert client.get(f"/sessions/{session_id}").json()["service_type"] == "confirmed_idea_flow"
    missing = client.post("/wizard/sessions/nope/messages", json={"content": "2"})
    assert missing.status_code == 404


def test_mentor_endpoints(client: TestClient) -> None:
    mentors = client.get("/mentors").json()["mentors"]
    hr = client.get("/mentors/hr").json()

    assert len(mentors) == 6
    assert mentors[0]["name"] == "Rajesh Kumar"
    assert hr["name"] == "Sneha Reddy"


def test_low_rating_returns_mentors(client: TestClient) -> None:
    low = client.post("/ratings", json=_payload(rating=2, feedbackReason="Too generic"))
    high = client.post("/ratings", json=_payload(rating=5))
    invalid = client.post("/ratings", json=_payload(rating=9))

    assert low.status_code == 200
    assert len(low.json()["mentors"]) == 4
    assert low.json()["rating"]["mentor_assigned"] is True
    assert high.json()["mentors"] == []
    assert invalid.status_code == 422


def test_persistence_failure_becomes_500_payload() -> None:
    app = create_app(
        settings=load_settings({"OPENROUTER_API_KEY": "or-key"}),
        store=UnreadableStore(),
        storage=InMemoryObjectStorage(),
        completer=FakeCompleter(),
    )
    client = TestClient(app)

    response = client.get("/documents/session/s1")

    assert response.status_code == 500
    assert response.json()["error"] == "Internal server error"
    assert "document listing" in response.json()["details"]
