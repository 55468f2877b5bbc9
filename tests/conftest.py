"""Root conftest.py for the Taskhub test suite.

This file contains project-wide fixtures and pytest configuration.
"""

import os
from collections.abc import Generator

import pytest

from src.core.context import RequestContext
from tests.helpers import clear_caches

# Environment prefixes read by the settings classes
APP_ENV_PREFIXES = (
    "APP_",
    "DEBUG",
    "LOG_",
    "TRACING_",
    "DB_",
    "REDIS_",
    "JWT_",
    "RATE_LIMIT_",
    "BCRYPT_",
    "MIGRATE_",
    "DOCS_",
    "REDOC_",
    "OPENAPI_",
)


def pytest_configure(config: pytest.Config) -> None:
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers", "unit: Unit tests that test individual components in isolation"
    )
    config.addinivalue_line(
        "markers", "integration: Integration tests that test multiple components"
    )


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> Generator[pytest.MonkeyPatch]:
    """Remove application environment variables so tests see the defaults.

    Args:
        monkeypatch: Pytest monkeypatch fixture.

    Yields:
        pytest.MonkeyPatch: The monkeypatch instance for env manipulation.
    """
    for key in list(os.environ):
        if key.upper().startswith(APP_ENV_PREFIXES):
            monkeypatch.delenv(key, raising=False)

    clear_caches()
    yield monkeypatch
    clear_caches()


@pytest.fixture(autouse=True)
def clean_context() -> Generator[None]:
    """Clear request context before and after each test."""
    RequestContext.clear()
    yield
    RequestContext.clear()
