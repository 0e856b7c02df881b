"""
Error taxonomy shared by all features.

Every error the relay surfaces to a caller derives from RelayError and
carries the HTTP status the API layer answers with. The original cause
(provider body, validation error, driver message) goes in ``detail`` and is
only exposed in debug mode.
"""

from typing import Any, Optional


class RelayError(Exception):
    """Base error with an HTTP status and optional diagnostic detail."""

    status_code: int = 500

    def __init__(
        self,
        message: str,
        detail: Optional[Any] = None,
        status_code: Optional[int] = None,
    ):
        super().__init__(message)
        self.message = message
        self.detail = detail
        if status_code is not None:
            self.status_code = status_code


class NotFoundError(RelayError):
    """Profile or run does not exist."""

    status_code = 404


class TokenExpiredError(RelayError):
    """Stored Strava token is past its expiry; the user must reconnect."""

    status_code = 401

    def __init__(self, message: str = "Strava token expired", detail: Optional[Any] = None):
        super().__init__(message, detail)


class AuthenticationError(RelayError):
    """Bearer credential missing or rejected."""

    status_code = 401

    def __init__(self, message: str = "Unauthorized access", detail: Optional[Any] = None):
        super().__init__(message, detail)


class ProviderError(RelayError):
    """Strava call failed or returned an error body."""

    status_code = 502


class AIError(RelayError):
    """Coaching model failed or returned output that does not parse."""

    status_code = 500


class PersistenceError(RelayError):
    """Database read or write failed."""

    status_code = 500
