"""
User-related models.

Models:
- UserProfile: local user linked to a Strava athlete, holding OAuth tokens
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import Column, String, DateTime, Text

from app.models.base import Base, as_utc, utcnow


class UserProfile(Base):
    """
    Strava connection for a local user.

    One profile per local user and at most one local user per Strava
    athlete. Created on the first successful code exchange and rewritten
    on every reconnect; the relay never deletes it.
    """

    __tablename__ = "user_profiles"

    # Local user id issued by the identity provider
    id = Column(String(64), primary_key=True)

    # Strava athlete id
    strava_id = Column(String(20), unique=True, index=True, nullable=False)

    # OAuth tokens
    access_token = Column(Text, nullable=False)
    refresh_token = Column(Text, nullable=False)
    token_expires_at = Column(DateTime(timezone=True), nullable=False)

    # Timestamps
    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    def is_token_expired(self, now: Optional[datetime] = None) -> bool:
        """Check if access token is expired. There is no refresh path."""
        now = now or utcnow()
        return as_utc(self.token_expires_at) <= as_utc(now)

    def __repr__(self):
        return f"<UserProfile {self.id} strava_id={self.strava_id}>"
