"""
Database Models

Feature models live in their feature packages and are imported
lazily to avoid circular imports (they import Base from here).
Call load_all_models() before create_all or Alembic autogenerate.
"""

from app.models.base import Base


def load_all_models() -> None:
    """Import every feature model so it registers with Base.metadata."""
    from app.features.users.models import UserProfile  # noqa
    from app.features.runs.models import Run, RunAnalysis, Conversation  # noqa


__all__ = [
    "Base",
    "load_all_models",
]
