"""
Base repository with common CRUD operations.

Provides generic database operations for all feature repositories.
Uses SQLAlchemy async session for non-blocking database access.

Usage:
    class RunRepository(BaseRepository[Run]):
        def __init__(self, db: AsyncSession):
            super().__init__(db, Run)

        @persistence_guard("Failed to fetch run")
        async def get_by_strava_id(self, strava_id: str) -> Run | None:
            return await self.get_by(strava_activity_id=strava_id)
"""

import functools
import logging
from typing import Awaitable, Callable, Generic, Type, TypeVar

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.shared.exceptions import PersistenceError

logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")


def persistence_guard(message: str):
    """
    Wrap a repository coroutine so driver errors surface as PersistenceError.

    The session is rolled back before re-raising so it stays usable.
    """

    def decorator(func: Callable[..., Awaitable[R]]) -> Callable[..., Awaitable[R]]:
        @functools.wraps(func)
        async def wrapper(self, *args, **kwargs) -> R:
            try:
                return await func(self, *args, **kwargs)
            except SQLAlchemyError as e:
                logger.error(f"{message}: {e}")
                await self.db.rollback()
                raise PersistenceError(message, detail=str(e)) from e

        return wrapper

    return decorator


class BaseRepository(Generic[T]):
    """
    Base repository for database operations.

    Provides common lookup and write helpers inherited by feature
    repositories. Write helpers commit, so every call is its own
    single-entity unit of work.
    """

    def __init__(self, db: AsyncSession, model: Type[T]):
        """
        Initialize repository.

        Args:
            db: Async database session
            model: SQLAlchemy model class
        """
        self.db = db
        self.model = model

    async def get_by_id(self, id: str | int) -> T | None:
        """
        Get entity by primary key ID.

        Args:
            id: Primary key value (string or integer)

        Returns:
            Entity if found, None otherwise
        """
        return await self.get_by(id=id)

    async def get_by(self, **kwargs) -> T | None:
        """
        Get single entity by arbitrary field values.

        Args:
            **kwargs: Field name-value pairs to filter by

        Returns:
            Matching entity or None
        """
        query = select(self.model)
        for key, value in kwargs.items():
            query = query.where(getattr(self.model, key) == value)
        result = await self.db.execute(query)
        return result.scalar_one_or_none()

    async def update(self, entity: T, **kwargs) -> T:
        """
        Update entity fields and commit.

        Args:
            entity: Entity to update
            **kwargs: Field values to update

        Returns:
            Updated entity
        """
        for key, value in kwargs.items():
            setattr(entity, key, value)
        await self.db.commit()
        await self.db.refresh(entity)
        return entity

    async def delete(self, entity: T) -> None:
        """
        Delete entity and commit.

        Args:
            entity: Entity to delete
        """
        await self.db.delete(entity)
        await self.db.commit()
