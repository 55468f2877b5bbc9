"""Async database engine and session lifecycle management.

Core functionality:
- **Connection pooling**: Configurable pool with overflow and recycling
- **Session factory**: Async session creation with proper cleanup
- **Health checks**: Database connectivity validation for startup
- **Query monitoring**: Slow query detection when ``LOG_SQL_ENABLED`` is set

Every statement carries a deadline through asyncpg's ``command_timeout``
(``DB_COMMAND_TIMEOUT``). The module uses a singleton ``_DatabaseManager`` so
that a single engine, and therefore a single pool, is shared by the process.
"""

import threading
import time
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any
from weakref import WeakKeyDictionary

from loguru import logger
from sqlalchemy import event, text
from sqlalchemy.engine import Connection
from sqlalchemy.engine.interfaces import DBAPICursor, ExecutionContext
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from src.core.config import get_settings
from src.core.context import RequestContext
from src.core.error_context import sanitize_sql_params
from src.infrastructure.constants import POOL_RECYCLE_SECONDS

# Store query start times for execution contexts
_query_start_times: WeakKeyDictionary[ExecutionContext, float] = WeakKeyDictionary()


def _before_cursor_execute(
    _conn: Connection,
    _cursor: DBAPICursor,
    _statement: str,
    _parameters: dict[str, Any] | list[Any] | tuple[Any, ...] | None,
    context: ExecutionContext,
    _executemany: bool,
) -> None:
    """Track query start time for slow query detection."""
    _query_start_times[context] = time.perf_counter()


def _after_cursor_execute(
    _conn: Connection,
    cursor: DBAPICursor,
    statement: str,
    parameters: dict[str, Any] | list[Any] | tuple[Any, ...] | None,
    context: ExecutionContext,
    executemany: bool,
) -> None:
    """Log queries slower than ``LOG_SLOW_QUERY_THRESHOLD_MS``."""
    start_time = _query_start_times.pop(context, None)
    if start_time is None:
        return

    duration_ms = (time.perf_counter() - start_time) * 1000
    threshold_ms = get_settings().log_config.slow_query_threshold_ms
    if duration_ms < threshold_ms:
        return

    rows_affected = getattr(cursor, "rowcount", -1)
    clean_statement = " ".join(statement.split())[:500]

    logger.warning(
        "Slow query detected: {}... Duration: {:.2f}ms",
        clean_statement[:100],
        duration_ms,
        query=clean_statement,
        duration_ms=round(duration_ms, 2),
        rows_affected=rows_affected if rows_affected is not None else -1,
        parameters=sanitize_sql_params(parameters),
        correlation_id=RequestContext.get_correlation_id(),
        executemany=executemany,
        threshold_ms=threshold_ms,
    )


def create_database_engine(database_url: str | None = None) -> AsyncEngine:
    """Create an async SQLAlchemy engine with connection pooling.

    Args:
        database_url: Optional database URL. If not provided, uses the
                     configured database URL from settings.

    Returns:
        AsyncEngine: Configured async engine instance.
    """
    settings = get_settings()
    db_config = settings.database_config

    connect_args: dict[str, Any] = {
        "server_settings": {"jit": "off"},
        "command_timeout": db_config.command_timeout,
    }
    if db_config.ssl_mode != "disable":
        connect_args["ssl"] = db_config.ssl_mode

    engine = create_async_engine(
        database_url or db_config.database_url,
        pool_size=db_config.pool_size,
        max_overflow=db_config.max_overflow,
        pool_timeout=db_config.pool_timeout,
        pool_pre_ping=db_config.pool_pre_ping,
        pool_recycle=POOL_RECYCLE_SECONDS,
        echo=db_config.echo,
        connect_args=connect_args,
    )

    if settings.log_config.sql_enabled:
        sync_engine = engine.sync_engine
        event.listen(sync_engine, "before_cursor_execute", _before_cursor_execute)
        event.listen(sync_engine, "after_cursor_execute", _after_cursor_execute)
        logger.info("Registered slow query event listeners")

    logger.info(
        "Created database engine - host: {}, pool_size: {}, max_overflow: {}",
        db_config.host,
        db_config.pool_size,
        db_config.max_overflow,
    )

    return engine


class _DatabaseManager:
    """Internal class to manage database engine and session factory instances.

    This class provides a singleton pattern without using global statements.
    """

    def __init__(self) -> None:
        self._engine: AsyncEngine | None = None
        self._async_session_factory: async_sessionmaker[AsyncSession] | None = None
        self._lock = threading.Lock()

    def get_engine(self) -> AsyncEngine:
        """Get or create the async engine instance."""
        if self._engine is None:
            with self._lock:
                if self._engine is None:
                    self._engine = create_database_engine()
        return self._engine

    def get_session_factory(self) -> async_sessionmaker[AsyncSession]:
        """Get or create the async session factory."""
        if self._async_session_factory is None:
            with self._lock:
                if self._async_session_factory is None:
                    self._async_session_factory = async_sessionmaker(
                        self.get_engine(),
                        class_=AsyncSession,
                        expire_on_commit=False,
                    )
                    logger.info("Created async session factory")
        return self._async_session_factory

    async def close(self) -> None:
        """Close the database engine and cleanup connections."""
        if self._engine is not None:
            await self._engine.dispose()
            logger.info("Database engine disposed")
            self._engine = None
            self._async_session_factory = None

    def reset(self) -> None:
        """Reset the manager state. Used primarily for testing."""
        self._engine = None
        self._async_session_factory = None


# Singleton instance
_db_manager = _DatabaseManager()


def get_engine() -> AsyncEngine:
    """Get or create the global async engine instance."""
    return _db_manager.get_engine()


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """Get or create the global async session factory."""
    return _db_manager.get_session_factory()


@asynccontextmanager
async def get_async_session() -> AsyncGenerator[AsyncSession]:
    """Get an async database session with automatic cleanup.

    Services commit explicitly once a write has succeeded; anything left
    uncommitted when the block raises is rolled back.

    Yields:
        AsyncSession: Database session for performing operations.

    Example:
        async with get_async_session() as session:
            user = await UserRepository(session).get_by_email(email)
    """
    async_session_factory = get_session_factory()
    async with async_session_factory() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            logger.debug("Database session rolled back due to error")
            raise


async def close_database() -> None:
    """Close the database engine and cleanup connections.

    This should be called during application shutdown to ensure
    all database connections are properly closed.
    """
    await _db_manager.close()


async def check_database_connection() -> tuple[bool, str | None]:
    """Check if database connection is available.

    Returns:
        tuple[bool, str | None]: A tuple containing:
            - bool: True if connection successful, False otherwise
            - str | None: Error message if connection failed, None if successful
    """
    try:
        engine = get_engine()
        async with engine.connect() as conn:
            result = await conn.execute(text("SELECT 1"))
            _ = result.scalar()
    except (SQLAlchemyError, OSError) as e:
        return False, str(e)
    else:
        return True, None
