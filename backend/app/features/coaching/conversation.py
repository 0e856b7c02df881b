"""
Follow-up chat about a run.
"""

import logging

from app.features.runs.repository import ConversationRepository, RunRepository
from app.features.runs.schemas import RunMetrics
from app.models.base import utcnow
from .ai import CoachingModel

logger = logging.getLogger(__name__)


class ConversationService:
    """
    Asks the coach a question and appends the exchange to the run's history.

    Nothing is stored when the model fails.
    """

    def __init__(
        self,
        runs: RunRepository,
        conversations: ConversationRepository,
        coach: CoachingModel,
    ):
        self.runs = runs
        self.conversations = conversations
        self.coach = coach

    async def chat(self, user_id: str, question: str, metrics: RunMetrics) -> str:
        logger.info(f"Processing chat for run {metrics.id}")

        run = await self.runs.get_run(metrics.id, user_id)
        asked_at = utcnow().isoformat()
        answer = await self.coach.chat(question, metrics)

        await self.conversations.append_messages(
            user_id,
            run.id,
            [
                {"role": "user", "content": question, "timestamp": asked_at},
                {"role": "assistant", "content": answer, "timestamp": utcnow().isoformat()},
            ],
        )
        return answer
