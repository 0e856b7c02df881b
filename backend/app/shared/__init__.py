"""
Shared utilities: error taxonomy, repository base, constants.
"""

from .exceptions import (
    RelayError,
    NotFoundError,
    TokenExpiredError,
    AuthenticationError,
    ProviderError,
    AIError,
    PersistenceError,
)
from .repository import BaseRepository, persistence_guard

__all__ = [
    "RelayError",
    "NotFoundError",
    "TokenExpiredError",
    "AuthenticationError",
    "ProviderError",
    "AIError",
    "PersistenceError",
    "BaseRepository",
    "persistence_guard",
]
