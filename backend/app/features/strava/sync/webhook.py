"""
Webhook reconciliation.

Brings the run store in line with one Strava push event. Events can
arrive out of order or more than once, so every handler tolerates the
activity being absent or already present:

- create: fetch detail, upsert if it is a run
- update: partial update if stored, otherwise handled as create
- delete: remove if stored, otherwise nothing

Expired tokens and unknown athletes abort quietly; a later full resync
is the recovery path.
"""

import enum
import logging

from app.features.runs.repository import RunRepository
from app.features.users.models import UserProfile
from app.features.users.repository import UserProfileRepository
from app.shared.constants import (
    ASPECT_CREATE,
    ASPECT_DELETE,
    ASPECT_UPDATE,
    WEBHOOK_OBJECT_ACTIVITY,
)
from ..client import StravaClient
from ..schemas import WebhookEvent
from ..transform import is_run, transform_activity

logger = logging.getLogger(__name__)


class ReconcileOutcome(str, enum.Enum):
    CREATED = "created"
    UPDATED = "updated"
    DELETED = "deleted"
    NOT_A_RUN = "not_a_run"
    NOT_STORED = "not_stored"
    TOKEN_EXPIRED = "token_expired"
    UNKNOWN_ATHLETE = "unknown_athlete"
    IGNORED = "ignored"


class WebhookReconciler:
    """
    Applies a single webhook event to the run store.

    Usage:
        reconciler = WebhookReconciler(
            UserProfileRepository(db), strava_client, RunRepository(db)
        )
        outcome = await reconciler.handle(event)
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

    async def handle(self, event: WebhookEvent) -> ReconcileOutcome:
        """
        Route an event to its handler.

        Raises whatever the store or Strava raise; the dispatcher is the
        error boundary.
        """
        if event.object_type != WEBHOOK_OBJECT_ACTIVITY:
            logger.info(f"Ignoring non-activity event: {event.object_type}")
            return ReconcileOutcome.IGNORED

        if event.aspect_type not in (ASPECT_CREATE, ASPECT_UPDATE, ASPECT_DELETE):
            logger.warning(f"Unknown event type: {event.aspect_type}")
            return ReconcileOutcome.IGNORED

        profile = await self.profiles.get_profile_by_external_id(event.owner_id)
        if not profile:
            logger.info(f"No user found for Strava athlete {event.owner_id}")
            return ReconcileOutcome.UNKNOWN_ATHLETE

        if event.aspect_type == ASPECT_CREATE:
            return await self.handle_create(event.object_id, profile)
        elif event.aspect_type == ASPECT_UPDATE:
            return await self.handle_update(event.object_id, profile)
        return await self.handle_delete(event.object_id, profile)

    async def handle_create(self, activity_id: int, profile: UserProfile) -> ReconcileOutcome:
        """Fetch the activity and upsert it if it is a run."""
        logger.info(f"Processing create event for activity {activity_id}")

        if profile.is_token_expired():
            logger.warning(f"Strava token expired for user {profile.id}")
            return ReconcileOutcome.TOKEN_EXPIRED

        activity = await self.strava.get_activity(profile.access_token, activity_id)
        if not is_run(activity):
            logger.info(f"Activity {activity_id} is not a run ({activity.get('type')}), skipping")
            return ReconcileOutcome.NOT_A_RUN

        # Same upsert path as full resync
        await self.runs.upsert_runs([transform_activity(activity, profile.id)])

        logger.info(f"Saved run {activity_id} for user {profile.id}")
        return ReconcileOutcome.CREATED

    async def handle_update(self, activity_id: int, profile: UserProfile) -> ReconcileOutcome:
        """Refresh a stored run; an unseen activity is treated as a create."""
        logger.info(f"Processing update event for activity {activity_id}")

        run = await self.runs.get_by_strava_id(activity_id, profile.id)
        if not run:
            logger.info(f"Activity {activity_id} not in database, treating as create")
            return await self.handle_create(activity_id, profile)

        if profile.is_token_expired():
            logger.warning(f"Strava token expired for user {profile.id}")
            return ReconcileOutcome.TOKEN_EXPIRED

        activity = await self.strava.get_activity(profile.access_token, activity_id)
        await self.runs.update_run(run, transform_activity(activity, profile.id))

        logger.info(f"Updated run {activity_id} for user {profile.id}")
        return ReconcileOutcome.UPDATED

    async def handle_delete(self, activity_id: int, profile: UserProfile) -> ReconcileOutcome:
        """Delete a stored run; deleting an unknown activity is a no-op."""
        logger.info(f"Processing delete event for activity {activity_id}")

        deleted = await self.runs.delete_by_strava_id(activity_id, profile.id)
        if not deleted:
            logger.info(f"Activity {activity_id} not stored for user {profile.id}, nothing to delete")
            return ReconcileOutcome.NOT_STORED

        logger.info(f"Deleted run {activity_id} for user {profile.id}")
        return ReconcileOutcome.DELETED
