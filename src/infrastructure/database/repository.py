"""Base repository pattern implementation for database operations.

This module provides a generic repository base class that implements
the lookups and inserts shared by every aggregate, using async patterns.
Aggregate-specific queries live in the domain repositories.
"""

import uuid

from loguru import logger
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from src.infrastructure.database.base import BaseModel


class BaseRepository[T: BaseModel]:
    """Base repository class providing common operations.

    Args:
        session: The async SQLAlchemy session to use for operations.
        model_class: The SQLAlchemy model class this repository manages.

    Example:
        class UserRepository(BaseRepository[User]):
            def __init__(self, session: AsyncSession) -> None:
                super().__init__(session, User)
    """

    def __init__(self, session: AsyncSession, model_class: type[T]) -> None:
        self.session = session
        self.model_class = model_class

    async def get_by_id(self, entity_id: uuid.UUID) -> T | None:
        """Retrieve a model instance by its ID.

        Args:
            entity_id: The primary key of the model to retrieve.

        Returns:
            T | None: The model instance if found, None otherwise.
        """
        return await self.find_one_by(id=entity_id)

    async def create(self, obj: T) -> T:
        """Insert a new model instance.

        The row is flushed, not committed; callers commit once the whole
        unit of work has succeeded.

        Args:
            obj: The model instance to create.

        Returns:
            T: The created model instance with populated ID and timestamps.
        """
        logger.debug("Creating new {} instance", self.model_class.__name__)

        self.session.add(obj)
        await self.session.flush()
        await self.session.refresh(obj)

        logger.info(
            "Created {} instance with ID: {}", self.model_class.__name__, obj.id
        )

        return obj

    async def find_one_by(self, **kwargs: object) -> T | None:
        """Find the first model instance matching the given conditions.

        Args:
            **kwargs: Column-value pairs to filter by.

        Returns:
            T | None: The first matching instance if found, None otherwise.

        Raises:
            AttributeError: If a keyword does not name a mapped attribute.
        """
        stmt = select(self.model_class)
        for field, value in kwargs.items():
            stmt = stmt.where(getattr(self.model_class, field) == value)
        stmt = stmt.limit(1)

        result = await self.session.execute(stmt)
        instance = result.scalar_one_or_none()

        logger.debug(
            "{} lookup by {} - found: {}",
            self.model_class.__name__,
            ", ".join(kwargs),
            instance is not None,
        )

        return instance

    async def count_by(self, **kwargs: object) -> int:
        """Count model instances matching the given conditions.

        Args:
            **kwargs: Column-value pairs to filter by. None values are skipped.

        Returns:
            int: The number of matching instances.
        """
        stmt = select(func.count()).select_from(self.model_class)
        for field, value in kwargs.items():
            if value is not None:
                stmt = stmt.where(getattr(self.model_class, field) == value)

        result = await self.session.execute(stmt)
        count_value = result.scalar() or 0

        logger.debug("Counted {} {} instances", count_value, self.model_class.__name__)

        return count_value

    async def commit(self) -> None:
        """Commit the current unit of work."""
        await self.session.commit()

    async def rollback(self) -> None:
        """Discard the current unit of work."""
        await self.session.rollback()
