"""
Strava integration module.

Usage:
    from app.features.strava import StravaOAuth, StravaClient
    from app.features.strava.sync import StravaSyncService, WebhookDispatcher

Components:
- StravaOAuth: authorization code exchange
- StravaClient: API client (code exchange, activity list, activity detail)
- transform_activity: Strava activity -> Run columns
"""

from .oauth import StravaOAuth, StravaOAuthError
from .client import (
    StravaClient,
    StravaAPIError,
    StravaAuthError,
    StravaRateLimitError,
)
from .transform import transform_activity, is_run, calculate_pace
from .schemas import ConnectRequest, ConnectResponse, AthleteSummary, WebhookEvent

__all__ = [
    # OAuth
    "StravaOAuth",
    "StravaOAuthError",
    # Client
    "StravaClient",
    "StravaAPIError",
    "StravaAuthError",
    "StravaRateLimitError",
    # Transform
    "transform_activity",
    "is_run",
    "calculate_pace",
    # Schemas
    "ConnectRequest",
    "ConnectResponse",
    "AthleteSummary",
    "WebhookEvent",
]
