"""
User repositories.

Data access layer for UserProfile (the Strava token store).
"""

import logging
from datetime import datetime, timezone

from sqlalchemy.ext.asyncio import AsyncSession

from app.models.base import utcnow
from app.shared.exceptions import NotFoundError
from app.shared.repository import BaseRepository, persistence_guard
from .models import UserProfile

logger = logging.getLogger(__name__)


class UserProfileRepository(BaseRepository[UserProfile]):
    """Repository for per-user Strava credentials."""

    def __init__(self, db: AsyncSession):
        super().__init__(db, UserProfile)

    @persistence_guard("Failed to fetch user profile")
    async def get_profile(self, user_id: str) -> UserProfile:
        """
        Get profile for user.

        Args:
            user_id: Local user ID

        Returns:
            UserProfile

        Raises:
            NotFoundError: If the user never connected Strava
        """
        profile = await self.get_by_id(user_id)
        if not profile:
            raise NotFoundError("User profile not found")
        return profile

    @persistence_guard("Failed to fetch user profile")
    async def get_profile_by_external_id(self, strava_id: str | int) -> UserProfile | None:
        """
        Get profile by Strava athlete ID.

        A miss is expected: webhook events arrive for athletes who
        never registered here.
        """
        return await self.get_by(strava_id=str(strava_id))

    @persistence_guard("Failed to save Strava connection")
    async def save_connection(self, user_id: str, tokens: dict) -> UserProfile:
        """
        Save or update Strava tokens for a user.

        Args:
            user_id: Local user ID
            tokens: Token response from Strava OAuth, with
                ``expires_at`` in epoch seconds and ``athlete.id``

        Returns:
            Stored UserProfile
        """
        expires_at = datetime.fromtimestamp(tokens["expires_at"], tz=timezone.utc)
        fields = {
            "strava_id": str(tokens["athlete"]["id"]),
            "access_token": tokens["access_token"],
            "refresh_token": tokens["refresh_token"],
            "token_expires_at": expires_at,
            "updated_at": utcnow(),
        }

        profile = await self.get_by_id(user_id)
        if profile:
            for key, value in fields.items():
                setattr(profile, key, value)
        else:
            profile = UserProfile(id=user_id, **fields)
            self.db.add(profile)

        await self.db.commit()
        await self.db.refresh(profile)
        logger.info(f"Saved Strava connection for user {user_id} (athlete {fields['strava_id']})")
        return profile
