"""Alembic environment script for async database migrations.

This module configures Alembic to work with our async SQLAlchemy setup
and integrates with the project's configuration and logging systems.

Applied revisions are recorded on ``config.attributes`` by ``revision_recorder``
so that callers of ``command.upgrade`` can tell whether anything changed.
"""

import asyncio
import logging
from typing import Any

from alembic import context
from sqlalchemy import pool
from sqlalchemy.engine import Connection
from sqlalchemy.ext.asyncio import async_engine_from_config

import src.domain.tasks.models  # noqa: F401 - registers tables on the metadata
import src.domain.users.models  # noqa: F401 - registers tables on the metadata
from src.core.config import get_settings
from src.infrastructure.database.base import Base
from src.infrastructure.database.migrations import revision_recorder

# this is the Alembic Config object, which provides
# access to the values within the .ini file in use.
config = context.config

logger = logging.getLogger(__name__)

target_metadata = Base.metadata


def _database_url() -> str:
    """URL set on the Alembic config, falling back to application settings."""
    return (
        config.get_main_option("sqlalchemy.url")
        or get_settings().database_config.database_url
    )


def run_migrations_offline() -> None:
    """Run migrations in 'offline' mode.

    This configures the context with just a URL and not an Engine.
    Calls to context.execute() here emit the given string to the
    script output.
    """
    logger.info("Running migrations in offline mode")

    context.configure(
        url=_database_url(),
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        compare_type=True,
        compare_server_default=True,
    )

    with context.begin_transaction():
        context.run_migrations()


def do_run_migrations(connection: Connection) -> None:
    """Run migrations using the provided connection.

    Args:
        connection: The database connection to use for migrations.
    """
    context.configure(
        connection=connection,
        target_metadata=target_metadata,
        compare_type=True,
        compare_server_default=True,
        on_version_apply=revision_recorder(config),
    )

    with context.begin_transaction():
        context.run_migrations()


async def run_async_migrations() -> None:
    """Run migrations in 'online' mode with async engine."""
    logger.info("Running migrations in online mode with async engine")

    configuration: dict[str, Any] = {
        "sqlalchemy.url": _database_url(),
        "sqlalchemy.echo": get_settings().database_config.echo,
    }

    connectable = async_engine_from_config(
        configuration,
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,  # Use NullPool for migrations (no connection pooling)
    )

    async with connectable.connect() as connection:
        await connection.run_sync(do_run_migrations)

    await connectable.dispose()


def run_migrations_online() -> None:
    """Run migrations in 'online' mode.

    This function creates an event loop and runs the async migration function.
    """
    asyncio.run(run_async_migrations())


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
