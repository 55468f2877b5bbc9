"""Fixtures for integration tests.

The application runs in-process through ``httpx.ASGITransport``. Postgres is
replaced with an in-memory SQLite database created from the ORM metadata and
Redis with ``fakeredis``; both are installed per test so no state leaks.
"""

from collections.abc import AsyncGenerator, Callable
from typing import Any

import pytest
from fakeredis import FakeAsyncRedis, FakeServer
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from src.api.main import create_app
from src.core.config import get_settings
from src.domain.tasks import models as task_models  # noqa: F401
from src.domain.users import models as user_models  # noqa: F401
from src.infrastructure.cache.client import _redis_manager
from src.infrastructure.database.base import Base
from src.infrastructure.database.dependencies import get_db
from tests.helpers import REGISTER_URL, ClientFactory, RegisterUser, clear_caches


@pytest.fixture(autouse=True)
def integration_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Cheap hashing and no tracing for every integration test."""
    monkeypatch.setenv("BCRYPT_COST", "4")
    monkeypatch.setenv("TRACING_ENABLED", "false")
    clear_caches()


@pytest.fixture
async def db_engine() -> AsyncGenerator[AsyncEngine]:
    """In-memory SQLite engine with the full schema."""
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(db_engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(db_engine, expire_on_commit=False)


@pytest.fixture
async def db_session(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncSession]:
    async with session_factory() as session:
        yield session


@pytest.fixture
async def fake_redis() -> AsyncGenerator[FakeAsyncRedis]:
    client = FakeAsyncRedis(server=FakeServer(), decode_responses=True)
    yield client
    await client.aclose()


@pytest.fixture
async def client_factory(
    monkeypatch: pytest.MonkeyPatch,
    session_factory: async_sessionmaker[AsyncSession],
    fake_redis: FakeAsyncRedis,
) -> AsyncGenerator[ClientFactory]:
    """Build clients for an app configured from extra environment variables.

    Pass ``redis=None`` to run the app without Redis.
    """
    clients: list[AsyncClient] = []

    async def override_get_db() -> AsyncGenerator[AsyncSession]:
        async with session_factory() as session:
            try:
                yield session
            except Exception:
                await session.rollback()
                raise

    async def _make(redis: Any = fake_redis, **env: str) -> AsyncClient:
        for key, value in env.items():
            monkeypatch.setenv(key.upper(), value)
        clear_caches()

        app = create_app(get_settings())
        app.dependency_overrides[get_db] = override_get_db
        _redis_manager.set_client(redis)

        client = AsyncClient(transport=ASGITransport(app=app), base_url="http://test")
        clients.append(client)
        return client

    yield _make

    for client in clients:
        await client.aclose()
    _redis_manager.set_client(None)


@pytest.fixture
async def client(client_factory: ClientFactory) -> AsyncClient:
    """Client for an app with default settings."""
    return await client_factory()


@pytest.fixture
def register_user(client: AsyncClient) -> RegisterUser:
    """Register a user and return the ``data`` part of the response."""

    async def _register(
        username: str = "alice",
        email: str = "alice@example.com",
        password: str = "pw123456",
    ) -> dict[str, Any]:
        response = await client.post(
            REGISTER_URL,
            json={"username": username, "email": email, "password": password},
        )
        assert response.status_code == 201, response.text
        return response.json()["data"]

    return _register
