"""
Webhook hand-off.

Strava expects a 200 within two seconds and does not care how the event
is processed. The route acknowledges first and then calls
WebhookDispatcher.submit(), which runs reconciliation as its own asyncio
task with its own DB session. Whatever happens inside that task is only
visible in the logs: there is no retry and no dead-letter queue.
"""

import asyncio
import logging
from typing import Callable

from sqlalchemy.ext.asyncio import AsyncSession

from app.features.runs.repository import RunRepository
from app.features.users.repository import UserProfileRepository
from ..client import StravaClient
from ..schemas import WebhookEvent
from .webhook import WebhookReconciler

logger = logging.getLogger(__name__)


class WebhookDispatcher:
    """
    Runs webhook reconciliation outside the request.

    Usage:
        dispatcher = WebhookDispatcher(AsyncSessionLocal, strava_client)
        dispatcher.submit(event)
        # ... on shutdown ...
        await dispatcher.drain()
    """

    def __init__(
        self,
        session_factory: Callable[[], AsyncSession],
        strava: StravaClient,
    ):
        self._session_factory = session_factory
        self._strava = strava
        # Keep strong references to running tasks to prevent GC
        self._tasks: set[asyncio.Task] = set()

    def submit(self, event: WebhookEvent) -> asyncio.Task:
        """
        Schedule reconciliation of one event and return immediately.

        Must be called from a running event loop.
        """
        task = asyncio.create_task(
            self._process(event),
            name=f"strava-webhook-{event.aspect_type}-{event.object_id}",
        )
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def _process(self, event: WebhookEvent) -> None:
        """Error boundary: failures are logged and dropped."""
        try:
            async with self._session_factory() as session:
                reconciler = WebhookReconciler(
                    UserProfileRepository(session),
                    self._strava,
                    RunRepository(session),
                )
                outcome = await reconciler.handle(event)
            logger.info(
                f"Webhook {event.aspect_type} {event.object_type} {event.object_id}: {outcome.value}"
            )
        except Exception as e:
            logger.exception(
                f"Error processing webhook {event.aspect_type} for {event.object_type} "
                f"{event.object_id}: {e}"
            )

    @property
    def pending(self) -> int:
        return len(self._tasks)

    async def drain(self) -> None:
        """Wait for every in-flight reconciliation to finish."""
        if self._tasks:
            logger.info(f"Waiting for {len(self._tasks)} webhook tasks")
            await asyncio.gather(*list(self._tasks), return_exceptions=True)
