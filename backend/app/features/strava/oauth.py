"""
Strava OAuth flow.

Handles the authorization code exchange. There is deliberately no
refresh path: an expired token means the user has to reconnect.
"""

import logging
from typing import Optional

import httpx

from app.shared.constants import STRAVA_OAUTH_TOKEN_URL
from app.shared.exceptions import ProviderError

logger = logging.getLogger(__name__)


class StravaOAuthError(ProviderError):
    """OAuth-related error."""
    pass


class StravaOAuth:
    """
    Strava OAuth handler.

    Usage:
        oauth = StravaOAuth(settings.strava_client_id, settings.strava_client_secret)
        tokens = await oauth.exchange_code(code)
    """

    TOKEN_URL = STRAVA_OAUTH_TOKEN_URL

    def __init__(
        self,
        client_id: Optional[str],
        client_secret: Optional[str],
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.client_id = client_id
        self.client_secret = client_secret
        self._transport = transport

    async def exchange_code(self, code: str) -> dict:
        """
        Exchange authorization code for tokens.

        Args:
            code: Authorization code from Strava callback

        Returns:
            {
                "access_token": "...",
                "refresh_token": "...",
                "expires_at": 1234567890,
                "athlete": {"id": 123, "username": "...", "firstname": "...", ...}
            }

        Raises:
            StravaOAuthError: If token exchange fails
        """
        try:
            async with httpx.AsyncClient(transport=self._transport) as client:
                response = await client.post(
                    self.TOKEN_URL,
                    data={
                        "client_id": self.client_id,
                        "client_secret": self.client_secret,
                        "code": code,
                        "grant_type": "authorization_code"
                    }
                )
        except httpx.HTTPError as e:
            logger.error(f"Strava token exchange failed: {e}")
            raise StravaOAuthError("Failed to connect Strava account", detail=str(e)) from e

        if response.status_code != 200:
            logger.error(f"Strava token exchange failed: {response.text}")
            raise StravaOAuthError(
                "Failed to connect Strava account",
                detail=f"Token exchange failed: {response.status_code} - {response.text}"
            )

        try:
            tokens = response.json()
        except ValueError as e:
            logger.error("Strava token exchange returned a non-JSON body")
            raise StravaOAuthError(
                "Failed to connect Strava account",
                detail=f"Invalid JSON body: {response.text[:200]}"
            ) from e

        if not isinstance(tokens, dict) or "athlete" not in tokens or "access_token" not in tokens:
            raise StravaOAuthError(
                "Failed to connect Strava account",
                detail="Token response missing athlete or access_token"
            )
        return tokens
