"""Main entry point for running the Taskhub API."""

import sys

import uvicorn
from alembic.util import CommandError
from loguru import logger
from sqlalchemy.exc import SQLAlchemyError

from src.core.config import get_settings
from src.core.logging import setup_logging
from src.infrastructure.database.migrations import run_migrations

KEEP_ALIVE_TIMEOUT_SECONDS = 60
GRACEFUL_SHUTDOWN_TIMEOUT_SECONDS = 30


def main() -> None:
    """Apply pending migrations, then serve the API until SIGINT/SIGTERM."""
    settings = get_settings()

    setup_logging(settings)

    if settings.migrate_on_startup:
        try:
            run_migrations(settings)
        except (CommandError, SQLAlchemyError, OSError) as e:
            logger.opt(exception=e).critical("Failed to run database migrations")
            sys.exit(1)

    # Configure uvicorn to use our logging
    log_config = {
        "version": 1,
        "disable_existing_loggers": False,
        "handlers": {
            "default": {
                "class": "src.core.logging.InterceptHandler",
            },
        },
        "loggers": {
            "uvicorn": {"handlers": ["default"], "level": "INFO", "propagate": False},
            "uvicorn.error": {
                "handlers": ["default"],
                "level": "INFO",
                "propagate": False,
            },
        },
    }

    # uvicorn installs the SIGINT/SIGTERM handlers and drains open requests
    server_options = {
        "host": settings.app_host,
        "port": settings.app_port,
        "log_config": log_config,
        "timeout_keep_alive": KEEP_ALIVE_TIMEOUT_SECONDS,
        "timeout_graceful_shutdown": GRACEFUL_SHUTDOWN_TIMEOUT_SECONDS,
    }

    # When reload is enabled, we must pass the app as an import string
    if settings.debug:
        logger.info(
            "Starting Uvicorn on http://{}:{} (development mode with auto-reload)",
            settings.app_host,
            settings.app_port,
        )
        uvicorn.run("src.api.main:app", reload=True, **server_options)
    else:
        from src.api.main import app  # noqa: PLC0415 - built after migrations

        logger.info(
            "Starting Uvicorn on http://{}:{} ({} mode)",
            settings.app_host,
            settings.app_port,
            settings.app_env,
        )
        uvicorn.run(app, reload=False, **server_options)


if __name__ == "__main__":
    main()
