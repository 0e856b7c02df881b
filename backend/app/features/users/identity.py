"""
Bearer token verification.

The relay trusts whatever user id the identity provider returns. The
default verifier asks a Supabase-compatible auth service
(``GET {identity_url}/auth/v1/user``); tests and other deployments can pass
any object with the same ``verify`` coroutine.
"""

import logging
from typing import Optional, Protocol

import httpx

from app.shared.exceptions import AuthenticationError, RelayError

logger = logging.getLogger(__name__)


class IdentityVerifier(Protocol):
    """Maps a bearer credential to a stable local user id."""

    async def verify(self, token: str) -> str:
        ...


class SupabaseIdentityVerifier:
    """
    Verifies bearer tokens against a Supabase auth endpoint.

    Usage:
        verifier = SupabaseIdentityVerifier(settings.identity_url, settings.identity_api_key)
        user_id = await verifier.verify(token)
    """

    def __init__(
        self,
        base_url: Optional[str],
        api_key: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/") if base_url else None
        self.api_key = api_key
        self._transport = transport

    async def verify(self, token: str) -> str:
        """
        Resolve a bearer token to a user id.

        Raises:
            AuthenticationError: If the token is rejected
            RelayError: If no identity provider is configured
        """
        if not self.base_url:
            raise RelayError("Identity provider not configured", status_code=503)

        headers = {"Authorization": f"Bearer {token}"}
        if self.api_key:
            headers["apikey"] = self.api_key

        try:
            async with httpx.AsyncClient(transport=self._transport) as client:
                response = await client.get(f"{self.base_url}/auth/v1/user", headers=headers)
        except httpx.HTTPError as e:
            logger.error(f"Identity provider unreachable: {e}")
            raise AuthenticationError(detail=str(e)) from e

        if response.status_code != 200:
            logger.warning(f"Bearer token rejected: {response.status_code}")
            raise AuthenticationError()

        try:
            payload = response.json()
        except ValueError as e:
            logger.error("Identity provider returned a non-JSON body")
            raise AuthenticationError(detail=response.text[:200]) from e

        user_id = payload.get("id") if isinstance(payload, dict) else None
        if not user_id:
            raise AuthenticationError()
        return str(user_id)
