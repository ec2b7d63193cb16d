"""Tests for the HTTP surface.

Routes are exercised through FastAPI's ``TestClient`` with fake pipeline
clients placed on ``app.state``. The lifespan handler is not run, so no
provider credentials or database are needed.
"""

from __future__ import annotations

import json
from collections.abc import Iterator

import pytest
from api.main import app
from conftest import (
    USERS_TABLE,
    FakeModelProvider,
    FakeSchemaAccessor,
    FakeSqlExecutor,
    make_clients,
)
from entities.workflow.clients import PipelineClients
from fastapi.testclient import TestClient


@pytest.fixture
def clients() -> PipelineClients:
    model = FakeModelProvider(
        replies=[
            json.dumps({"sql": "SELECT * FROM users", "explanation": "All users", "confidence": 0.9})
        ],
        narrations=["Two users found.", "Who signed up last?\nHow many orders do they have?"],
        narration="Two users found.",
    )
    return make_clients(
        model=model,
        executor=FakeSqlExecutor(rows=[{"id": 1}, {"id": 2}], columns=["id"]),
        schema_accessor=FakeSchemaAccessor(
            [USERS_TABLE], samples={"users": [{"id": 1}, {"id": 2}]}
        ),
    )


@pytest.fixture
def client(clients: PipelineClients) -> Iterator[TestClient]:
    app.state.clients = clients
    yield TestClient(app, raise_server_exceptions=False)
    app.state.clients = None


# ── POST /api/chat/message ───────────────────────────────────────────────


class TestPostMessage:
    """Chat turns over HTTP."""

    def test_successful_turn(self, client: TestClient) -> None:
        response = client.post("/api/chat/message", json={"message": "Show me all users"})

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        data = body["data"]
        assert data["message"]["role"] == "assistant"
        assert data["message"]["content"] == "Two users found."
        assert data["queryResult"]["count"] == 2
        assert data["queryResult"]["columns"] == ["id"]
        assert data["sqlQuery"] == "SELECT * FROM users LIMIT 100"
        assert data["confidence"] == 0.9
        assert data["followUpSuggestions"] == [
            "Who signed up last?",
            "How many orders do they have?",
        ]
        assert data["message"]["tableUsed"] == "users"

    @pytest.mark.parametrize("message", ["", "x" * 501])
    def test_message_length_validation(self, client: TestClient, message: str) -> None:
        response = client.post("/api/chat/message", json={"message": message})

        assert response.status_code == 400
        body = response.json()
        assert body["success"] is False
        assert body["error"] == "Validation failed"
        assert [d["field"] for d in body["details"]] == ["message"]

    def test_max_length_accepted(self, client: TestClient) -> None:
        response = client.post("/api/chat/message", json={"message": "x" * 500})
        assert response.status_code == 200

    def test_missing_message(self, client: TestClient) -> None:
        response = client.post("/api/chat/message", json={"sessionId": "s1"})

        assert response.status_code == 400
        assert response.json()["details"][0]["field"] == "message"

    def test_session_id_used_for_history(self, client: TestClient) -> None:
        client.post("/api/chat/message", json={"message": "Show me all users", "sessionId": "abc"})

        history = client.get("/api/chat/history/abc").json()["data"]
        assert [m["role"] for m in history] == ["user", "assistant"]

    def test_unexpected_error_is_sanitized(self) -> None:
        app.state.clients = make_clients(
            schema_accessor=FakeSchemaAccessor(error=RuntimeError("password=hunter2"))
        )
        try:
            response = TestClient(app).post(
                "/api/chat/message", json={"message": "Show me all users"}
            )
        finally:
            app.state.clients = None

        assert response.status_code == 500
        body = response.json()
        assert body == {"success": False, "error": "Failed to process chat message"}
        assert "hunter2" not in response.text

    def test_uninitialized_clients(self) -> None:
        app.state.clients = None
        response = TestClient(app).post("/api/chat/message", json={"message": "hi"})
        assert response.status_code == 503


# ── History and sessions ─────────────────────────────────────────────────


class TestHistoryRoutes:
    """History read/clear and session management."""

    def test_unknown_history_is_empty(self, client: TestClient) -> None:
        response = client.get("/api/chat/history/nobody")

        assert response.status_code == 200
        assert response.json()["data"] == []

    def test_history_serialized_in_order(self, client: TestClient) -> None:
        client.post("/api/chat/message", json={"message": "Show me all users", "sessionId": "s1"})

        data = client.get("/api/chat/history/s1").json()["data"]

        assert [m["content"] for m in data] == ["Show me all users", "Two users found."]
        assert "timestamp" in data[0]
        assert data[1]["queryGenerated"] == "SELECT * FROM users LIMIT 100"
        assert data[1]["resultsCount"] == 2

    def test_delete_unknown_history_succeeds(self, client: TestClient) -> None:
        response = client.delete("/api/chat/history/never-seen")

        assert response.status_code == 200
        assert response.json()["success"] is True

    def test_sessions_listed_and_cleared(self, client: TestClient) -> None:
        client.post("/api/chat/message", json={"message": "hello", "sessionId": "s1"})
        client.post("/api/chat/message", json={"message": "thanks", "sessionId": "s2"})

        listed = client.get("/api/chat/sessions").json()["data"]
        assert {s["sessionId"]: s["messageCount"] for s in listed} == {"s1": 2, "s2": 2}

        assert client.delete("/api/chat/sessions").status_code == 200
        assert client.get("/api/chat/sessions").json()["data"] == []


# ── Suggestions ──────────────────────────────────────────────────────────


class TestSuggestions:
    """Starter questions for the current schema."""

    def test_includes_first_table(self, client: TestClient) -> None:
        data = client.get("/api/chat/suggestions").json()["data"]

        assert len(data) == 8
        assert sum("users" in s for s in data) == 2

    def test_no_tables(self) -> None:
        app.state.clients = make_clients(tables=[])
        try:
            data = TestClient(app).get("/api/chat/suggestions").json()["data"]
        finally:
            app.state.clients = None

        assert len(data) == 6


# ── Data routes / health ─────────────────────────────────────────────────


class TestDataRoutes:
    """Schema catalog views."""

    def test_list_tables(self, client: TestClient) -> None:
        data = client.get("/api/data/tables").json()["data"]

        assert data[0]["name"] == "users"
        assert data[0]["schema"] == "public"
        assert data[0]["columns"][0]["isPrimaryKey"] is True

    def test_sample_rows(self, client: TestClient) -> None:
        response = client.get("/api/data/tables/users/sample", params={"limit": 1})

        assert response.status_code == 200
        assert response.json()["data"] == [{"id": 1}]

    def test_sample_unknown_table(self, client: TestClient) -> None:
        response = client.get("/api/data/tables/salaries/sample")
        assert response.status_code == 404

    def test_sample_limit_validated(self, client: TestClient) -> None:
        response = client.get("/api/data/tables/users/sample", params={"limit": 0})

        assert response.status_code == 400
        assert response.json()["details"][0]["field"] == "limit"

    def test_health_reports_provider(self, client: TestClient) -> None:
        body = client.get("/health").json()
        assert body == {"status": "healthy", "provider": "fake"}
