"""Apply Alembic migrations at startup.

The Alembic configuration is built in code so that the service does not
depend on the working directory or an ``alembic.ini`` file. Revisions live in
the top-level ``migrations`` directory.
"""

from collections.abc import Callable
from pathlib import Path
from typing import Any

from alembic import command
from alembic.config import Config
from alembic.runtime.migration import MigrationInfo
from loguru import logger

from src.core.config import Settings, get_settings

MIGRATIONS_DIR = Path(__file__).resolve().parents[3] / "migrations"
APPLIED_REVISIONS_KEY = "applied_revisions"


def build_alembic_config(database_url: str | None = None) -> Config:
    """Create an Alembic config pointing at the project's migrations.

    Args:
        database_url: Optional URL overriding the configured database.
    """
    config = Config()
    config.set_main_option("script_location", str(MIGRATIONS_DIR))
    if database_url:
        # ConfigParser interpolation treats % as special
        config.set_main_option("sqlalchemy.url", database_url.replace("%", "%%"))
    return config


def revision_recorder(config: Config) -> Callable[..., None]:
    """Build an ``on_version_apply`` hook that logs revisions onto ``config``.

    Each applied revision id is appended to ``config.attributes`` under
    ``APPLIED_REVISIONS_KEY``, so callers of ``command.upgrade`` can tell
    whether anything changed.
    """

    def record(*, step: MigrationInfo, **_: Any) -> None:
        applied = config.attributes.setdefault(APPLIED_REVISIONS_KEY, [])
        applied.append(step.up_revision_id)

    return record


def run_migrations(settings: Settings | None = None) -> list[str]:
    """Upgrade the database to the latest revision.

    Must be called outside a running event loop; the migration environment
    starts its own.

    Args:
        settings: Application settings; defaults to ``get_settings()``.

    Returns:
        list[str]: Revisions applied by this run, empty when already current.
    """
    settings = settings or get_settings()
    config = build_alembic_config(settings.database_config.database_url)

    logger.info("Running database migrations...")
    command.upgrade(config, "head")

    applied: list[str] = config.attributes.get(APPLIED_REVISIONS_KEY, [])
    if applied:
        logger.info(
            "Database migrations applied successfully: {}", ", ".join(applied)
        )
    else:
        logger.info("No new migrations to apply")
    return applied
