"""
Tests for ConversationService.
"""

from datetime import datetime, timezone

import pytest
import pytest_asyncio

from app.features.coaching import ConversationService
from app.features.runs.models import Run
from app.features.runs.repository import ConversationRepository, RunRepository
from app.features.runs.schemas import RunMetrics
from app.shared.exceptions import AIError, NotFoundError
from conftest import USER_ID


@pytest_asyncio.fixture
async def run(db):
    run = Run(
        user_id=USER_ID,
        strava_activity_id="999",
        name="Morning Run",
        date=datetime(2024, 3, 10, 7, 30, tzinfo=timezone.utc),
        distance=5000,
        duration=1500,
        pace=5.0,
    )
    db.add(run)
    await db.commit()
    return run


def build_service(db, coach) -> ConversationService:
    return ConversationService(RunRepository(db), ConversationRepository(db), coach)


class TestChat:
    """Tests for chat."""

    @pytest.mark.asyncio
    async def test_returns_answer_and_stores_exchange(self, db, run, coach):
        metrics = RunMetrics(id=run.id, strava_activity_id="999", distance=5000, pace=5.0)

        answer = await build_service(db, coach).chat(USER_ID, "Was this too fast?", metrics)

        assert answer == "Keep it easy tomorrow."
        conversation = await ConversationRepository(db).get_conversation(USER_ID, run.id)
        assert [(m["role"], m["content"]) for m in conversation.messages] == [
            ("user", "Was this too fast?"),
            ("assistant", "Keep it easy tomorrow."),
        ]
        assert all(m["timestamp"] for m in conversation.messages)

    @pytest.mark.asyncio
    async def test_messages_append_in_order(self, db, run, coach):
        service = build_service(db, coach)
        metrics = RunMetrics(id=run.id, strava_activity_id="999")

        await service.chat(USER_ID, "First?", metrics)
        coach.answer = "Second answer"
        await service.chat(USER_ID, "Second?", metrics)

        conversation = await ConversationRepository(db).get_conversation(USER_ID, run.id)
        assert [m["content"] for m in conversation.messages] == [
            "First?",
            "Keep it easy tomorrow.",
            "Second?",
            "Second answer",
        ]
        assert coach.chat_calls == 2

    @pytest.mark.asyncio
    async def test_model_failure_stores_nothing(self, db, run, coach):
        coach.error = AIError("Failed to generate coaching response")

        with pytest.raises(AIError):
            await build_service(db, coach).chat(
                USER_ID, "Hello?", RunMetrics(id=run.id, strava_activity_id="999")
            )

        assert await ConversationRepository(db).get_conversation(USER_ID, run.id) is None

    @pytest.mark.asyncio
    async def test_unknown_run(self, db, coach):
        with pytest.raises(NotFoundError):
            await build_service(db, coach).chat(
                USER_ID, "Hello?", RunMetrics(id=404, strava_activity_id="1")
            )

        assert coach.chat_calls == 0
