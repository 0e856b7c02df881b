"""
Tests for the HTTP surface.

Services are replaced through FastAPI dependency overrides, so these
tests cover routing, authentication, error mapping and the wire format.
"""

from datetime import datetime, timezone
from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient

from app.api import deps
from app.config import settings
from app.features.coaching import AnalysisOutcome
from app.features.runs import RunResponse
from app.features.strava.sync import WebhookDispatcher
from app.main import app
from app.shared.exceptions import AIError, AuthenticationError, NotFoundError, TokenExpiredError
from conftest import ANALYSIS_PAYLOAD, FakeStravaClient


AUTH = {"Authorization": "Bearer good-token"}
RUN_DATA = {
    "id": 1,
    "strava_activity_id": 999,
    "distance": 5000,
    "duration": 1500,
    "pace": 5.0,
    "avgHR": 150,
    "cadence": 170,
    "elevation": 43,
}


# =============================================================================
# Fixtures
# =============================================================================

class StubVerifier:
    async def verify(self, token: str) -> str:
        if token != "good-token":
            raise AuthenticationError()
        return "user-1"


class StubService:
    """Records calls and returns or raises a preset result."""

    def __init__(self, result=None, error=None):
        self.result = result
        self.error = error
        self.calls = []

    async def _respond(self, *args):
        self.calls.append(args)
        if self.error:
            raise self.error
        return self.result

    sync_user_runs = _respond
    analyze = _respond
    chat = _respond
    save_connection = _respond


class StubDispatcher:
    def __init__(self):
        self.events = []

    def submit(self, event):
        self.events.append(event)


@pytest.fixture
def client():
    app.dependency_overrides[deps.get_identity_verifier] = StubVerifier
    yield TestClient(app)
    app.dependency_overrides.clear()


def override(dependency, value):
    app.dependency_overrides[dependency] = lambda: value
    return value


# =============================================================================
# Test Auth
# =============================================================================

class TestAuthentication:
    """Bearer token handling."""

    def test_missing_header(self, client):
        response = client.get("/api/v1/strava/activities")

        assert response.status_code == 401
        assert response.json() == {"error": "Unauthorized access"}

    def test_not_bearer(self, client):
        response = client.get("/api/v1/strava/activities", headers={"Authorization": "Basic abc"})
        assert response.status_code == 401

    def test_rejected_token(self, client):
        response = client.get("/api/v1/strava/activities", headers={"Authorization": "Bearer bad"})
        assert response.status_code == 401


# =============================================================================
# Test Strava
# =============================================================================

class TestStravaRoutes:
    """Connect and resync endpoints."""

    def test_connect(self, client):
        strava = override(deps.get_strava_client, FakeStravaClient())
        strava.tokens = {
            "access_token": "a",
            "refresh_token": "r",
            "expires_at": 1700000000,
            "athlete": {"id": 12345, "username": "runner", "firstname": "Ada", "lastname": "L",
                        "profile_medium": "https://example.com/a.jpg"},
        }
        profiles = override(deps.get_profile_repository, StubService())

        response = client.post("/api/v1/strava/connect", json={"code": "abc"}, headers=AUTH)

        assert response.status_code == 200
        assert response.json() == {
            "success": True,
            "athlete": {
                "id": 12345,
                "username": "runner",
                "firstname": "Ada",
                "lastname": "L",
                "profile": "https://example.com/a.jpg",
            },
        }
        assert profiles.calls == [("user-1", strava.tokens)]

    def test_activities_use_client_field_names(self, client):
        run = RunResponse(
            id=1,
            strava_activity_id="999",
            name="Morning Run",
            date=datetime(2024, 3, 10, 7, 30, tzinfo=timezone.utc),
            distance=5000,
            duration=1500,
            pace=5.0,
            avg_heart_rate=150,
            cadence=170,
            elevation_gain=43,
            analyzed=True,
        )
        service = override(deps.get_sync_service, StubService(result=[run]))

        response = client.get("/api/v1/strava/activities", headers=AUTH)

        assert response.status_code == 200
        body = response.json()
        assert body[0]["avgHR"] == 150
        assert body[0]["elevation"] == 43
        assert body[0]["analyzed"] is True
        assert body[0]["pace"] == 5.0
        assert service.calls == [("user-1",)]

    def test_expired_token_is_401(self, client):
        override(deps.get_sync_service, StubService(error=TokenExpiredError()))

        response = client.get("/api/v1/strava/activities", headers=AUTH)

        assert response.status_code == 401
        assert response.json() == {"error": "Strava token expired"}

    def test_not_connected_is_404(self, client):
        override(deps.get_sync_service, StubService(error=NotFoundError("User profile not found")))

        response = client.get("/api/v1/strava/activities", headers=AUTH)

        assert response.status_code == 404
        assert response.json() == {"error": "User profile not found"}

    def test_detail_hidden_outside_debug(self, client, monkeypatch):
        monkeypatch.setattr(settings, "debug", False)
        override(deps.get_sync_service, StubService(error=AIError("boom", detail="secret")))

        response = client.get("/api/v1/strava/activities", headers=AUTH)

        assert response.json() == {"error": "boom"}

    def test_detail_shown_in_debug(self, client, monkeypatch):
        monkeypatch.setattr(settings, "debug", True)
        override(deps.get_sync_service, StubService(error=AIError("boom", detail="secret")))

        response = client.get("/api/v1/strava/activities", headers=AUTH)

        assert response.json() == {"error": "boom", "details": "secret"}


# =============================================================================
# Test Coaching
# =============================================================================

class TestCoachingRoutes:
    """Analyze and chat endpoints."""

    def test_analyze(self, client):
        analysis = SimpleNamespace(id=7, **ANALYSIS_PAYLOAD)
        gate = override(deps.get_analysis_gate, StubService(result=AnalysisOutcome(analysis, from_cache=True)))

        response = client.post("/api/v1/runs/analyze", json={"runData": RUN_DATA}, headers=AUTH)

        assert response.status_code == 200
        body = response.json()
        assert body["id"] == 7
        assert body["fromCache"] is True
        assert body["summary"] == ANALYSIS_PAYLOAD["summary"]
        assert body["insights"] == ANALYSIS_PAYLOAD["insights"]
        user_id, metrics = gate.calls[0]
        assert user_id == "user-1"
        assert metrics.strava_activity_id == "999"
        assert metrics.avg_heart_rate == 150

    def test_analyze_requires_run_data(self, client):
        override(deps.get_analysis_gate, StubService())

        response = client.post("/api/v1/runs/analyze", json={}, headers=AUTH)

        assert response.status_code == 422

    def test_analyze_model_failure(self, client):
        override(deps.get_analysis_gate, StubService(error=AIError("Failed to analyze run")))

        response = client.post("/api/v1/runs/analyze", json={"runData": RUN_DATA}, headers=AUTH)

        assert response.status_code == 500
        assert response.json() == {"error": "Failed to analyze run"}

    def test_chat(self, client):
        service = override(deps.get_conversation_service, StubService(result="Slow down."))

        response = client.post(
            "/api/v1/chat",
            json={"question": "Too fast?", "runData": RUN_DATA},
            headers=AUTH,
        )

        assert response.status_code == 200
        assert response.json() == {"answer": "Slow down."}
        assert service.calls[0][1] == "Too fast?"

    def test_chat_unknown_run(self, client):
        override(deps.get_conversation_service, StubService(error=NotFoundError("Run not found")))

        response = client.post(
            "/api/v1/chat",
            json={"question": "Too fast?", "runData": RUN_DATA},
            headers=AUTH,
        )

        assert response.status_code == 404


# =============================================================================
# Test Webhook
# =============================================================================

class TestWebhookRoutes:
    """Subscription handshake and event delivery."""

    def test_handshake(self, client, monkeypatch):
        monkeypatch.setattr(settings, "strava_webhook_verify_token", "verify-me")

        response = client.get("/webhook/strava", params={
            "hub.mode": "subscribe",
            "hub.verify_token": "verify-me",
            "hub.challenge": "15f7d1a91c1f40f8a748fd134752feb3",
        })

        assert response.status_code == 200
        assert response.json() == {"hub.challenge": "15f7d1a91c1f40f8a748fd134752feb3"}

    def test_handshake_wrong_token(self, client, monkeypatch):
        monkeypatch.setattr(settings, "strava_webhook_verify_token", "verify-me")

        response = client.get("/webhook/strava", params={
            "hub.mode": "subscribe",
            "hub.verify_token": "guess",
            "hub.challenge": "abc",
        })

        assert response.status_code == 403

    def test_handshake_without_configured_token(self, client, monkeypatch):
        monkeypatch.setattr(settings, "strava_webhook_verify_token", None)

        response = client.get("/webhook/strava", params={"hub.mode": "subscribe", "hub.challenge": "abc"})

        assert response.status_code == 403

    def test_event_acknowledged_and_dispatched(self, client):
        dispatcher = override(deps.get_webhook_dispatcher, StubDispatcher())

        response = client.post("/webhook/strava", json={
            "aspect_type": "create",
            "event_time": 1710055800,
            "object_id": 999,
            "object_type": "activity",
            "owner_id": 12345,
            "subscription_id": 1,
            "updates": {},
        })

        assert response.status_code == 200
        assert response.json() == {"success": True}
        assert len(dispatcher.events) == 1
        assert dispatcher.events[0].object_id == 999

    def test_event_needs_no_bearer_token(self, client):
        override(deps.get_webhook_dispatcher, StubDispatcher())

        response = client.post("/webhook/strava", json={
            "aspect_type": "delete",
            "object_id": 1,
            "object_type": "activity",
            "owner_id": 2,
        })

        assert response.status_code == 200

    def test_health(self, client):
        assert client.get("/health").json()["status"] == "healthy"


class TestWebhookFailureIsolation:
    """Reconciliation failures never reach the webhook response."""

    def test_event_acknowledged_when_reconciliation_fails(self, client):
        def broken_session_factory():
            raise RuntimeError("database unavailable")

        override(deps.get_webhook_dispatcher, WebhookDispatcher(broken_session_factory, FakeStravaClient()))

        response = client.post("/webhook/strava", json={
            "aspect_type": "create",
            "object_id": 999,
            "object_type": "activity",
            "owner_id": 12345,
        })

        assert response.status_code == 200
        assert response.json() == {"success": True}


class TestUnhandledErrors:
    """Unexpected exceptions keep the {"error": ...} body."""

    @pytest.fixture
    def lenient_client(self):
        app.dependency_overrides[deps.get_identity_verifier] = StubVerifier
        yield TestClient(app, raise_server_exceptions=False)
        app.dependency_overrides.clear()

    def test_unexpected_exception_is_json_500(self, lenient_client, monkeypatch):
        monkeypatch.setattr(settings, "debug", False)
        override(deps.get_sync_service, StubService(error=KeyError("athlete")))

        response = lenient_client.get("/api/v1/strava/activities", headers=AUTH)

        assert response.status_code == 500
        assert response.json() == {"error": "Internal server error"}

    def test_details_in_debug(self, lenient_client, monkeypatch):
        monkeypatch.setattr(settings, "debug", True)
        override(deps.get_sync_service, StubService(error=ValueError("bad payload")))

        response = lenient_client.get("/api/v1/strava/activities", headers=AUTH)

        assert response.status_code == 500
        assert response.json() == {"error": "Internal server error", "details": "bad payload"}
