"""
User management module.

Usage:
    from app.features.users import UserProfile, UserProfileRepository

Models:
- UserProfile: Strava connection and OAuth tokens for a local user

Repositories:
- UserProfileRepository: token store (lookup by user or athlete, save connection)

Identity:
- IdentityVerifier: bearer token -> user id capability
- SupabaseIdentityVerifier: default implementation
"""

from .models import UserProfile
from .repository import UserProfileRepository
from .identity import IdentityVerifier, SupabaseIdentityVerifier

__all__ = [
    "UserProfile",
    "UserProfileRepository",
    "IdentityVerifier",
    "SupabaseIdentityVerifier",
]
