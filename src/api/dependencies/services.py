"""Wire services to the request-scoped session and the shared clients."""

from functools import lru_cache
from typing import Annotated

from fastapi import Depends

from src.core.config import get_settings
from src.domain.tasks.repository import TaskRepository
from src.domain.tasks.service import TaskService
from src.domain.users.repository import UserRepository
from src.domain.users.service import AuthService
from src.infrastructure.cache.client import get_redis
from src.infrastructure.cache.task_cache import TaskListCache
from src.infrastructure.database.dependencies import DatabaseSession
from src.infrastructure.security.tokens import TokenManager


@lru_cache
def get_token_manager() -> TokenManager:
    """Get the process-wide token manager built from settings."""
    return TokenManager.from_config(get_settings().jwt_config)


def get_auth_service(
    db: DatabaseSession,
    tokens: Annotated[TokenManager, Depends(get_token_manager)],
) -> AuthService:
    return AuthService(UserRepository(db), tokens, get_settings().bcrypt_cost)


def get_task_service(db: DatabaseSession) -> TaskService:
    return TaskService(TaskRepository(db), TaskListCache(get_redis()))


AuthServiceDep = Annotated[AuthService, Depends(get_auth_service)]
TaskServiceDep = Annotated[TaskService, Depends(get_task_service)]
