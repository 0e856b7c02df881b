"""
Run repositories.

Data access layer for runs, analyses and conversations.
"""

import logging
from typing import Any

from sqlalchemy import desc, exists, select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.base import utcnow
from app.shared.exceptions import NotFoundError
from app.shared.repository import BaseRepository, persistence_guard
from .models import Run, RunAnalysis, Conversation

logger = logging.getLogger(__name__)

# Identity columns never rewritten by a partial update
IDENTITY_FIELDS = ("user_id", "strava_activity_id")


def _dialect_insert(db: AsyncSession):
    """Dialect-specific insert() that supports ON CONFLICT clauses."""
    if db.get_bind().dialect.name == "postgresql":
        return postgresql.insert
    return sqlite.insert


class RunRepository(BaseRepository[Run]):
    """Repository for runs."""

    def __init__(self, db: AsyncSession):
        super().__init__(db, Run)

    @persistence_guard("Failed to save runs to database")
    async def upsert_runs(self, runs: list[dict[str, Any]]) -> int:
        """
        Insert or overwrite runs keyed by strava_activity_id.

        On conflict every key present in the mapped dicts is replaced;
        columns the mapping does not produce are left untouched.

        Args:
            runs: Transformed activity dicts (see strava.transform)

        Returns:
            Number of rows written
        """
        if not runs:
            return 0

        insert = _dialect_insert(self.db)
        stmt = insert(Run).values(runs)
        stmt = stmt.on_conflict_do_update(
            index_elements=[Run.strava_activity_id],
            set_={
                key: stmt.excluded[key]
                for key in runs[0]
                if key != "strava_activity_id"
            }
        )
        await self.db.execute(stmt)
        await self.db.commit()
        return len(runs)

    @persistence_guard("Failed to fetch runs from database")
    async def get_user_runs(self, user_id: str) -> list[tuple[Run, bool]]:
        """
        Get all runs for a user with their analysis flag.

        Args:
            user_id: Local user ID

        Returns:
            (run, analyzed) pairs ordered by date, newest first
        """
        analyzed = exists().where(RunAnalysis.run_id == Run.id).label("analyzed")
        result = await self.db.execute(
            select(Run, analyzed)
            .where(Run.user_id == user_id)
            .order_by(desc(Run.date))
            .execution_options(populate_existing=True)
        )
        return [(run, bool(flag)) for run, flag in result.all()]

    @persistence_guard("Failed to fetch run")
    async def get_run(self, run_id: int, user_id: str) -> Run:
        """
        Get a run owned by the user.

        Raises:
            NotFoundError: If no such run belongs to the user
        """
        run = await self.get_by(id=run_id, user_id=user_id)
        if not run:
            raise NotFoundError("Run not found")
        return run

    @persistence_guard("Failed to fetch run")
    async def get_by_strava_id(self, strava_activity_id: str | int, user_id: str) -> Run | None:
        """Get a user's run by Strava activity ID."""
        result = await self.db.execute(
            select(Run)
            .where(Run.strava_activity_id == str(strava_activity_id))
            .where(Run.user_id == user_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    @persistence_guard("Failed to update run")
    async def update_run(self, run: Run, fields: dict[str, Any]) -> Run:
        """
        Apply a partial update, never touching identity columns.

        Args:
            run: Existing run
            fields: Column values to write

        Returns:
            Updated run
        """
        updates = {k: v for k, v in fields.items() if k not in IDENTITY_FIELDS}
        updates["updated_at"] = utcnow()
        return await self.update(run, **updates)

    @persistence_guard("Failed to delete run")
    async def delete_by_strava_id(self, strava_activity_id: str | int, user_id: str) -> bool:
        """
        Delete a user's run by Strava activity ID.

        Returns:
            True if a run was deleted, False if none matched
        """
        run = await self.get_by_strava_id(strava_activity_id, user_id)
        if not run:
            return False
        await self.delete(run)
        return True


class AnalysisRepository(BaseRepository[RunAnalysis]):
    """Repository for run analyses."""

    def __init__(self, db: AsyncSession):
        super().__init__(db, RunAnalysis)

    @persistence_guard("Failed to fetch analysis")
    async def get_for_run(self, run_id: int) -> RunAnalysis | None:
        """Get existing analysis for a run."""
        return await self.get_by(run_id=run_id)

    @persistence_guard("Failed to save analysis")
    async def insert_if_absent(
        self,
        run_id: int,
        user_id: str,
        summary: str,
        insights: list[dict],
        recommendations: list[dict],
    ) -> RunAnalysis | None:
        """
        Insert an analysis unless one already exists for the run.

        Uses ON CONFLICT DO NOTHING on the unique run_id so two
        concurrent first-time requests cannot both insert.

        Returns:
            The new analysis, or None if another writer got there first
        """
        insert = _dialect_insert(self.db)
        stmt = (
            insert(RunAnalysis)
            .values(
                run_id=run_id,
                user_id=user_id,
                summary=summary,
                insights=insights,
                recommendations=recommendations,
                created_at=utcnow(),
            )
            .on_conflict_do_nothing(index_elements=[RunAnalysis.run_id])
            .returning(RunAnalysis.id)
        )
        result = await self.db.execute(stmt)
        new_id = result.scalar_one_or_none()
        await self.db.commit()

        if new_id is None:
            return None
        return await self.get_by_id(new_id)


class ConversationRepository(BaseRepository[Conversation]):
    """Repository for run conversations."""

    def __init__(self, db: AsyncSession):
        super().__init__(db, Conversation)

    @persistence_guard("Failed to fetch conversation")
    async def get_conversation(self, user_id: str, run_id: int) -> Conversation | None:
        """Get conversation for a run."""
        return await self.get_by(user_id=user_id, run_id=run_id)

    @persistence_guard("Failed to save conversation")
    async def append_messages(
        self,
        user_id: str,
        run_id: int,
        messages: list[dict],
    ) -> Conversation:
        """
        Append messages, creating the conversation on the first turn.

        Args:
            user_id: Local user ID
            run_id: Run the conversation is about
            messages: New messages in order

        Returns:
            Conversation with the full message history
        """
        conversation = await self.get_by(user_id=user_id, run_id=run_id)
        if conversation:
            # Reassign so the JSON column is flagged dirty
            conversation.messages = [*(conversation.messages or []), *messages]
            conversation.updated_at = utcnow()
            logger.debug(f"Appending {len(messages)} messages to conversation {conversation.id}")
        else:
            conversation = Conversation(user_id=user_id, run_id=run_id, messages=list(messages))
            self.db.add(conversation)

        await self.db.commit()
        await self.db.refresh(conversation)
        return conversation
