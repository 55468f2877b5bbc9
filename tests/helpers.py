"""Helpers shared by the test suites."""

from collections.abc import Awaitable, Callable
from typing import Any

from httpx import AsyncClient

from src.api.dependencies.services import get_token_manager
from src.core.config import get_settings
from src.core.error_context import _get_sensitive_fields

REGISTER_URL = "/api/v1/auth/register"
LOGIN_URL = "/api/v1/auth/login"
TASKS_URL = "/api/v1/tasks"

ClientFactory = Callable[..., Awaitable[AsyncClient]]
RegisterUser = Callable[..., Awaitable[dict[str, Any]]]


def clear_caches() -> None:
    """Drop every cached object derived from settings."""
    get_settings.cache_clear()
    get_token_manager.cache_clear()
    _get_sensitive_fields.cache_clear()


def bearer(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}
