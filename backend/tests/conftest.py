"""
Shared fixtures.

Tests run against an in-memory SQLite database (aiosqlite) created from
the ORM metadata. Strava and the coaching model are replaced by fakes
that count their calls.
"""

from datetime import timedelta
from typing import Optional

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import StaticPool

from app.db.session import create_session_factory, init_db
from app.features.coaching.schemas import AnalysisResult
from app.features.runs.schemas import RunMetrics
from app.features.strava.client import StravaAPIError
from app.features.users.models import UserProfile
from app.models.base import utcnow


# =============================================================================
# Test Data
# =============================================================================

USER_ID = "user-1"
ATHLETE_ID = 12345

ANALYSIS_PAYLOAD = {
    "summary": "Solid aerobic run at an even pace.",
    "insights": [
        {"title": "Even pacing", "detail": "Splits stayed within 5 seconds.", "type": "positive"},
        {"title": "Cadence", "detail": "Try 170+ spm on easy days.", "type": "tip"},
    ],
    "recommendations": [
        {"title": "Add strides", "detail": "4x20s strides after easy runs."},
    ],
}


def make_activity(activity_id: int = 999, activity_type: str = "Run", **overrides) -> dict:
    """Strava activity payload as returned by the list and detail endpoints."""
    activity = {
        "id": activity_id,
        "name": "Morning Run",
        "type": activity_type,
        "start_date": "2024-03-10T07:30:00Z",
        "distance": 5000.0,
        "moving_time": 1500,
        "average_heartrate": 150.4,
        "average_cadence": 85.0,
        "total_elevation_gain": 42.6,
    }
    activity.update(overrides)
    return activity


# =============================================================================
# Fakes
# =============================================================================

class FakeStravaClient:
    """In-memory Strava API with call counters."""

    def __init__(self, activities: Optional[list[dict]] = None):
        self.activities = activities or []
        self.details: dict[int, dict] = {a["id"]: a for a in self.activities}
        self.error: Optional[Exception] = None
        self.list_calls = 0
        self.get_calls = 0
        self.exchange_calls = 0
        self.tokens: Optional[dict] = None

    async def exchange_code(self, code: str) -> dict:
        self.exchange_calls += 1
        if self.error:
            raise self.error
        return self.tokens

    async def list_activities(self, access_token: str, per_page: Optional[int] = None) -> list[dict]:
        self.list_calls += 1
        if self.error:
            raise self.error
        return list(self.activities)

    async def get_activity(self, access_token: str, activity_id) -> dict:
        self.get_calls += 1
        if self.error:
            raise self.error
        activity = self.details.get(int(activity_id))
        if activity is None:
            raise StravaAPIError("Strava request failed", detail="API error: 404")
        return activity


class FakeCoach:
    """Coaching model returning canned output."""

    def __init__(self, result: Optional[AnalysisResult] = None, answer: str = "Keep it easy tomorrow."):
        self.result = result or AnalysisResult.model_validate(ANALYSIS_PAYLOAD)
        self.answer = answer
        self.error: Optional[Exception] = None
        self.analyze_calls = 0
        self.chat_calls = 0
        self.last_metrics: Optional[RunMetrics] = None

    async def analyze_run(self, run: RunMetrics) -> AnalysisResult:
        self.analyze_calls += 1
        self.last_metrics = run
        if self.error:
            raise self.error
        return self.result

    async def chat(self, question: str, run: RunMetrics) -> str:
        self.chat_calls += 1
        self.last_metrics = run
        if self.error:
            raise self.error
        return self.answer


# =============================================================================
# Database
# =============================================================================

@pytest_asyncio.fixture
async def engine():
    """Fresh in-memory database per test."""
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    await init_db(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return create_session_factory(engine)


@pytest_asyncio.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


async def add_profile(db, user_id: str = USER_ID, athlete_id: int = ATHLETE_ID, expired: bool = False) -> UserProfile:
    """Store a connected profile with a token valid for an hour (or expired an hour ago)."""
    offset = timedelta(hours=-1) if expired else timedelta(hours=1)
    profile = UserProfile(
        id=user_id,
        strava_id=str(athlete_id),
        access_token="access-token",
        refresh_token="refresh-token",
        token_expires_at=utcnow() + offset,
    )
    db.add(profile)
    await db.commit()
    return profile


@pytest_asyncio.fixture
async def profile(db):
    return await add_profile(db)


@pytest_asyncio.fixture
async def expired_profile(db):
    return await add_profile(db, expired=True)


# =============================================================================
# Collaborators
# =============================================================================

@pytest.fixture
def strava():
    return FakeStravaClient([make_activity()])


@pytest.fixture
def coach():
    return FakeCoach()

