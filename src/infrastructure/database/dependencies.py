"""FastAPI dependency injection for database session management.

The ``DatabaseSession`` alias injects one session per request; the session
is rolled back if the handler raises and closed when the request ends.
"""

from collections.abc import AsyncGenerator
from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from src.infrastructure.database.session import get_async_session


async def get_db() -> AsyncGenerator[AsyncSession]:
    """Provide a database session for FastAPI dependency injection.

    Yields:
        AsyncSession: An async SQLAlchemy session scoped to the request.

    Example:
        @router.get("/tasks")
        async def list_tasks(db: DatabaseSession): ...
    """
    async with get_async_session() as session:
        yield session


# Type alias for cleaner dependency injection
DatabaseSession = Annotated[AsyncSession, Depends(get_db)]
