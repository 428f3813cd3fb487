"""
Tests for API layer.

Tests:
- API service methods
- Request translation into engine actions
- Session lifecycle over HTTP
- Error handling
"""

import random

import pytest
from fastapi.testclient import TestClient

from ..api.app import create_app
from ..api.schemas import ActionRequest, ErrorCode, ErrorResponse, SessionStatus
from ..api.service import APIService
from ..config import Settings
from ..engine_core.engine import Engine


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(save_dir=tmp_path / "saves")


@pytest.fixture
def service(settings) -> APIService:
    """Create a fresh API service with a seeded engine."""
    return APIService.from_settings(settings, engine=Engine(rng=random.Random(7)))


@pytest.fixture
def client(service, settings) -> TestClient:
    return TestClient(create_app(service=service, settings=settings))


class TestAPIService:
    """Tests for APIService."""

    def test_create_session(self, service):
        """Opening a session for a new player starts a fresh game."""
        response = service.create_session("alice")

        assert response.session_id
        assert response.status == SessionStatus.ACTIVE
        assert response.player_id == "alice"
        assert response.state["coins"] == 500
        assert response.stats.attack == 20

    def test_get_nonexistent_session(self, service):
        """Getting nonexistent session returns error."""
        response = service.get_session("nonexistent-id")

        assert isinstance(response, ErrorResponse)
        assert response.error_code == ErrorCode.SESSION_NOT_FOUND

    def test_apply_action(self, service):
        """A successful action returns its value and the new state."""
        session = service.create_session("alice")

        response = service.apply_action(
            session.session_id, ActionRequest(action="mine_gem", x=1, y=2)
        )

        assert response.success
        assert response.value["gems"] + response.value["shiny_gems"] == 1
        assert response.state["gems"] + response.state["shiny_gems"] == 51

    def test_engine_failure_is_not_an_error_response(self, service):
        """Engine failures come back as success=false."""
        session = service.create_session("alice")

        response = service.apply_action(
            session.session_id, ActionRequest(action="equip_weapon", item_id="missing")
        )

        assert not response.success
        assert response.error_code == "INVALID_REFERENCE"
        assert response.value is None

    def test_unknown_action(self, service):
        """Unknown action names are rejected before reaching the engine."""
        session = service.create_session("alice")

        response = service.apply_action(session.session_id, ActionRequest(action="fly"))

        assert isinstance(response, ErrorResponse)
        assert response.error_code == ErrorCode.UNKNOWN_ACTION
        assert "mine_gem" in response.details["known_actions"]

    def test_missing_parameter(self, service):
        """Actions missing a required parameter are rejected."""
        session = service.create_session("alice")

        response = service.apply_action(session.session_id, ActionRequest(action="open_chest"))

        assert isinstance(response, ErrorResponse)
        assert response.error_code == ErrorCode.VALIDATION_ERROR
        assert "cost" in response.error

    def test_end_session_persists(self, service, settings):
        """Ending a session saves the player for the next open."""
        session = service.create_session("alice")
        service.apply_action(session.session_id, ActionRequest(action="mine_gem", x=0, y=0))

        assert service.end_session(session.session_id)
        assert (settings.save_dir / "alice.json").exists()
        assert isinstance(service.get_session(session.session_id), ErrorResponse)

        mining = service.create_session("alice").state["mining"]
        assert mining["total_gems_mined"] + mining["total_shiny_gems_mined"] == 1

    def test_list_sessions(self, service):
        """Can list active sessions."""
        for player in ("a", "b", "c"):
            service.create_session(player)

        assert len(service.list_sessions()) == 3


class TestHTTP:
    """Tests for the HTTP routes."""

    def test_health(self, client):
        response = client.get("/api/v1/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_root(self, client):
        assert client.get("/").json()["docs"] == "/api/docs"

    def test_session_round_trip(self, client):
        """Create, act, save, list and end over HTTP."""
        created = client.post("/api/v1/sessions", json={"player_id": "alice"})
        assert created.status_code == 200
        session_id = created.json()["session_id"]

        acted = client.post(
            f"/api/v1/sessions/{session_id}/actions",
            json={"action": "exchange_shiny_gems", "amount": 1},
        )
        assert acted.status_code == 200
        assert acted.json()["success"] is False

        saved = client.post(f"/api/v1/sessions/{session_id}/save")
        assert saved.status_code == 200
        assert saved.json()["success"] is True

        listed = client.get("/api/v1/sessions").json()
        assert listed["sessions"] == [session_id]
        assert listed["count"] == 1

        ended = client.delete(f"/api/v1/sessions/{session_id}")
        assert ended.json()["success"] is True

    def test_missing_session_is_404(self, client):
        response = client.get("/api/v1/sessions/nope")

        assert response.status_code == 404
        assert response.json()["error_code"] == "SESSION_NOT_FOUND"

    def test_action_on_missing_session_is_404(self, client):
        response = client.post("/api/v1/sessions/nope/actions", json={"action": "prestige"})

        assert response.status_code == 404

    def test_unknown_action_is_400(self, client):
        session_id = client.post("/api/v1/sessions", json={}).json()["session_id"]

        response = client.post(f"/api/v1/sessions/{session_id}/actions", json={"action": "fly"})

        assert response.status_code == 400
        assert response.json()["error_code"] == "UNKNOWN_ACTION"

    def test_negative_cost_is_422(self, client):
        session_id = client.post("/api/v1/sessions", json={}).json()["session_id"]

        response = client.post(
            f"/api/v1/sessions/{session_id}/actions",
            json={"action": "open_chest", "cost": -5},
        )

        assert response.status_code == 422
