"""
Strava API client.

Stateless apart from the bearer token each call is given. Covers the
code exchange (via StravaOAuth) and the two reads the relay needs:
the recent activity page and a single activity's detail.

Strava API Limits:
- 200 requests per 15 minutes
- 2,000 requests per day
"""

import logging
from typing import Optional

import httpx

from app.shared.constants import STRAVA_API_URL
from app.shared.exceptions import ProviderError
from .oauth import StravaOAuth

logger = logging.getLogger(__name__)


# =============================================================================
# Exceptions
# =============================================================================

class StravaAPIError(ProviderError):
    """Strava API error."""
    pass


class StravaAuthError(StravaAPIError):
    """Strava rejected the access token."""
    pass


class StravaRateLimitError(StravaAPIError):
    """Rate limit exceeded."""
    pass


# =============================================================================
# Strava Client
# =============================================================================

class StravaClient:
    """
    Async client for Strava API.

    Usage:
        client = StravaClient(StravaOAuth(client_id, client_secret))
        tokens = await client.exchange_code(code)
        activities = await client.list_activities(tokens["access_token"])
        activity = await client.get_activity(tokens["access_token"], activity_id)
    """

    API_URL = STRAVA_API_URL

    def __init__(
        self,
        oauth: StravaOAuth,
        per_page: int = 30,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._oauth = oauth
        self.per_page = per_page
        self._transport = transport

    # -------------------------------------------------------------------------
    # OAuth Flow (delegated to StravaOAuth)
    # -------------------------------------------------------------------------

    async def exchange_code(self, code: str) -> dict:
        """Exchange authorization code for tokens."""
        return await self._oauth.exchange_code(code)

    # -------------------------------------------------------------------------
    # API Calls
    # -------------------------------------------------------------------------

    async def _api_request(
        self,
        method: str,
        endpoint: str,
        access_token: str,
        params: Optional[dict] = None
    ) -> dict | list:
        """
        Make an authenticated API request.

        Raises:
            StravaAuthError: If authentication fails
            StravaRateLimitError: If Strava rate limit is hit
            StravaAPIError: If API returns error or is unreachable
        """
        try:
            async with httpx.AsyncClient(transport=self._transport) as client:
                response = await client.request(
                    method=method,
                    url=f"{self.API_URL}{endpoint}",
                    headers={"Authorization": f"Bearer {access_token}"},
                    params=params
                )
        except httpx.HTTPError as e:
            logger.error(f"Strava request {method} {endpoint} failed: {e}")
            raise StravaAPIError("Strava request failed", detail=str(e)) from e

        # Log rate limit headers from Strava
        if "X-RateLimit-Limit" in response.headers:
            logger.debug(
                f"Strava rate limit: {response.headers.get('X-RateLimit-Usage')} "
                f"/ {response.headers.get('X-RateLimit-Limit')}"
            )

        if response.status_code == 401:
            raise StravaAuthError("Invalid or expired token", detail=response.text)
        elif response.status_code == 429:
            raise StravaRateLimitError("Strava rate limit exceeded", detail=response.text)
        elif response.status_code != 200:
            raise StravaAPIError(
                "Strava request failed",
                detail=f"API error: {response.status_code} - {response.text}"
            )

        try:
            return response.json()
        except ValueError as e:
            logger.error(f"Strava returned a non-JSON body for {method} {endpoint}")
            raise StravaAPIError(
                "Strava request failed",
                detail=f"Invalid JSON body: {response.text[:200]}"
            ) from e

    async def list_activities(
        self,
        access_token: str,
        per_page: Optional[int] = None
    ) -> list[dict]:
        """
        Get the athlete's most recent activities (all types).

        Args:
            access_token: Valid access token
            per_page: Page size, defaults to the client's configured size

        Raises:
            StravaAPIError: On any failure
        """
        params = {"per_page": per_page or self.per_page}
        activities = await self._api_request(
            "GET",
            "/athlete/activities",
            access_token,
            params
        )
        if not isinstance(activities, list):
            raise StravaAPIError(
                "Failed to fetch activities from Strava",
                detail=f"Unexpected payload: {activities!r}"
            )
        return activities

    async def get_activity(self, access_token: str, activity_id: int | str) -> dict:
        """
        Get detailed activity info.

        Raises:
            StravaAPIError: On any failure
        """
        activity = await self._api_request(
            "GET",
            f"/activities/{activity_id}",
            access_token
        )
        if not isinstance(activity, dict):
            raise StravaAPIError(
                "Failed to fetch activity details",
                detail=f"Unexpected payload: {activity!r}"
            )
        return activity
