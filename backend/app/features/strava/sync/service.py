"""
Full resync.

Pulls the athlete's most recent activity page, keeps the runs, upserts
them and returns the user's stored runs.

Sync Flow:
1. Load profile (NotFoundError if the user never connected)
2. Refuse expired tokens before touching Strava (TokenExpiredError)
3. List activities, drop everything that is not a Run
4. Transform and upsert by strava_activity_id
5. Re-read every stored run with its analysis flag, newest first
"""

import logging

from app.features.runs.repository import RunRepository
from app.features.runs.schemas import RunResponse, run_to_response
from app.features.users.repository import UserProfileRepository
from app.shared.exceptions import TokenExpiredError
from ..client import StravaClient
from ..transform import is_run, transform_activity

logger = logging.getLogger(__name__)


class StravaSyncService:
    """
    Full resync orchestrator.

    Usage:
        service = StravaSyncService(
            UserProfileRepository(db), strava_client, RunRepository(db)
        )
        runs = await service.sync_user_runs(user_id)
    """

    def __init__(
        self,
        profiles: UserProfileRepository,
        strava: StravaClient,
        runs: RunRepository,
    ):
        self.profiles = profiles
        self.strava = strava
        self.runs = runs

    async def sync_user_runs(self, user_id: str) -> list[RunResponse]:
        """
        Resync a user's recent runs.

        Args:
            user_id: Local user ID

        Returns:
            All stored runs for the user, newest first, each with its
            analysis flag. This is a fresh read, so it reflects writes
            made by concurrent requests too.

        Raises:
            NotFoundError: No Strava connection for the user
            TokenExpiredError: Stored token is expired (no provider call made)
            ProviderError: Strava call failed
            PersistenceError: Store read/write failed
        """
        logger.info(f"Syncing activities for user {user_id}")

        profile = await self.profiles.get_profile(user_id)
        if profile.is_token_expired():
            logger.warning(f"Strava token expired for user {user_id}")
            raise TokenExpiredError()

        activities = await self.strava.list_activities(profile.access_token)
        runs = [transform_activity(a, user_id) for a in activities if is_run(a)]

        skipped = len(activities) - len(runs)
        if skipped:
            logger.debug(f"Skipped {skipped} non-run activities for user {user_id}")

        await self.runs.upsert_runs(runs)

        stored = await self.runs.get_user_runs(user_id)
        logger.info(f"Synced {len(runs)} runs, {len(stored)} stored for user {user_id}")
        return [run_to_response(run, analyzed) for run, analyzed in stored]
