"""Shared fixtures for unit tests."""

import uuid
from collections.abc import AsyncGenerator, Callable
from datetime import UTC, datetime

import pytest
from fakeredis import FakeAsyncRedis, FakeServer
from pytest_mock import MockerFixture, MockType

from src.core.config import Settings
from src.domain.tasks.models import Task, TaskStatus
from src.domain.users.models import User


@pytest.fixture
def mock_settings(monkeypatch: pytest.MonkeyPatch) -> Settings:
    """Provide a real Settings object built from test environment values.

    Returns:
        Settings: Settings with test defaults.
    """
    monkeypatch.setenv("APP_NAME", "TestApp")
    monkeypatch.setenv("APP_VERSION", "1.0.0")
    monkeypatch.setenv("APP_ENV", "development")
    monkeypatch.setenv("DEBUG", "false")
    monkeypatch.setenv("APP_HOST", "127.0.0.1")
    monkeypatch.setenv("APP_PORT", "3000")
    monkeypatch.setenv("BCRYPT_COST", "4")
    return Settings()


@pytest.fixture
def mock_uvicorn(mocker: MockerFixture) -> MockType:
    """Mock uvicorn.run to prevent server startup."""
    return mocker.patch("uvicorn.run")


@pytest.fixture
async def fake_redis() -> AsyncGenerator[FakeAsyncRedis]:
    """In-memory Redis with its own server, so state never leaks between tests."""
    client = FakeAsyncRedis(server=FakeServer(), decode_responses=True)
    yield client
    await client.aclose()


@pytest.fixture
def user_id() -> uuid.UUID:
    """Id of the authenticated user in service tests."""
    return uuid.uuid4()


@pytest.fixture
def make_task(user_id: uuid.UUID) -> Callable[..., Task]:
    """Factory for detached Task instances with all columns populated."""

    def _make(**overrides: object) -> Task:
        now = datetime.now(UTC)
        values: dict[str, object] = {
            "id": uuid.uuid4(),
            "title": "Write report",
            "description": "Quarterly numbers",
            "status": TaskStatus.TO_DO,
            "user_id": user_id,
            "created_at": now,
            "updated_at": now,
        }
        values.update(overrides)
        return Task(**values)

    return _make


@pytest.fixture
def make_user() -> Callable[..., User]:
    """Factory for detached User instances."""

    def _make(**overrides: object) -> User:
        values: dict[str, object] = {
            "id": uuid.uuid4(),
            "username": "alice",
            "email": "alice@example.com",
            "password_hash": "$2b$04$invalidhashforunittestsonly",
        }
        values.update(overrides)
        return User(**values)

    return _make
