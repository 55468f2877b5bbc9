"""FastAPI dependencies shared by the routers."""

from src.api.dependencies.auth import CurrentUserId, get_current_user_id
from src.api.dependencies.services import (
    AuthServiceDep,
    TaskServiceDep,
    get_auth_service,
    get_task_service,
    get_token_manager,
)

__all__ = [
    "AuthServiceDep",
    "CurrentUserId",
    "TaskServiceDep",
    "get_auth_service",
    "get_current_user_id",
    "get_task_service",
    "get_token_manager",
]
