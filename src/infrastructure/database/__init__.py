"""Database infrastructure with async PostgreSQL and repository pattern.

Core components:
- **base**: Declarative base and common model fields
- **session**: Async engine and session management
- **repository**: Generic repository shared by the domain repositories
- **dependencies**: FastAPI dependency injection helpers
- **migrations**: Alembic upgrade runner used at startup
"""

from src.infrastructure.database.base import Base, BaseModel
from src.infrastructure.database.dependencies import DatabaseSession, get_db
from src.infrastructure.database.migrations import build_alembic_config, run_migrations
from src.infrastructure.database.repository import BaseRepository
from src.infrastructure.database.session import (
    check_database_connection,
    close_database,
    create_database_engine,
    get_async_session,
    get_engine,
    get_session_factory,
)

__all__ = [
    "Base",
    "BaseModel",
    "BaseRepository",
    "DatabaseSession",
    "build_alembic_config",
    "check_database_connection",
    "close_database",
    "create_database_engine",
    "get_async_session",
    "get_db",
    "get_engine",
    "get_session_factory",
    "run_migrations",
]
