"""Task CRUD endpoints; every route requires a bearer token."""

import uuid
from typing import Annotated

from fastapi import APIRouter, Depends, Query, status

from src.api.constants import (
    API_V1_PREFIX,
    DEFAULT_PAGE,
    DEFAULT_PAGE_LIMIT,
    INVALID_TASK_ID_MESSAGE,
    MAX_PAGE_LIMIT,
)
from src.api.dependencies import CurrentUserId, TaskServiceDep, get_current_user_id
from src.api.schemas.envelope import ErrorResponse, SuccessResponse
from src.api.schemas.tasks import CreateTaskRequest, UpdateTaskRequest
from src.core.exceptions import ErrorCode, ValidationError
from src.domain.tasks.schemas import TaskResponse, TasksResponse

router = APIRouter(
    prefix=f"{API_V1_PREFIX}/tasks",
    tags=["tasks"],
    dependencies=[Depends(get_current_user_id)],
    responses={
        status.HTTP_400_BAD_REQUEST: {"model": ErrorResponse},
        status.HTTP_401_UNAUTHORIZED: {"model": ErrorResponse},
        status.HTTP_429_TOO_MANY_REQUESTS: {"model": ErrorResponse},
    },
)

NOT_FOUND_RESPONSE = {status.HTTP_404_NOT_FOUND: {"model": ErrorResponse}}


def parse_task_id(raw: str) -> uuid.UUID:
    """Parse a task id path segment.

    Raises:
        ValidationError: If the segment is not a UUID.
    """
    try:
        return uuid.UUID(raw)
    except ValueError as e:
        raise ValidationError(
            INVALID_TASK_ID_MESSAGE,
            error_code=ErrorCode.INVALID_TASK_ID,
            context={"task_id": raw},
            cause=e,
        ) from e


def parse_page(raw: str | None) -> int:
    """Page number from the query; anything unusable becomes 1."""
    try:
        page = int(raw) if raw is not None else DEFAULT_PAGE
    except ValueError:
        return DEFAULT_PAGE
    return max(page, DEFAULT_PAGE)


def parse_limit(raw: str | None) -> int:
    """Page size from the query, clamped to ``1..100``; unusable values become 10."""
    try:
        limit = int(raw) if raw is not None else DEFAULT_PAGE_LIMIT
    except ValueError:
        return DEFAULT_PAGE_LIMIT
    if limit < 1:
        return DEFAULT_PAGE_LIMIT
    return min(limit, MAX_PAGE_LIMIT)


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_task(
    body: CreateTaskRequest, user_id: CurrentUserId, service: TaskServiceDep
) -> SuccessResponse[TaskResponse]:
    """Create a task for the caller in ``TO_DO`` status."""
    task = await service.create(user_id, body.title, body.description)
    return SuccessResponse[TaskResponse](
        status_code=status.HTTP_201_CREATED,
        message="Success create task",
        data=task,
    )


@router.get("")
async def list_tasks(
    user_id: CurrentUserId,
    service: TaskServiceDep,
    status_filter: Annotated[str | None, Query(alias="status")] = None,
    page: Annotated[str | None, Query()] = None,
    limit: Annotated[str | None, Query()] = None,
) -> SuccessResponse[TasksResponse]:
    """List the caller's tasks, newest first, optionally filtered by status."""
    result = await service.list(
        user_id, status_filter, parse_page(page), parse_limit(limit)
    )
    return SuccessResponse[TasksResponse](
        status_code=status.HTTP_200_OK,
        message="Success get tasks",
        data=result,
    )


@router.get("/{task_id}", responses=NOT_FOUND_RESPONSE)
async def get_task(
    task_id: str, user_id: CurrentUserId, service: TaskServiceDep
) -> SuccessResponse[TaskResponse]:
    """Fetch one of the caller's tasks."""
    task = await service.get(user_id, parse_task_id(task_id))
    return SuccessResponse[TaskResponse](
        status_code=status.HTTP_200_OK,
        message="Success get task",
        data=task,
    )


@router.patch("/{task_id}", responses=NOT_FOUND_RESPONSE)
async def update_task(
    task_id: str,
    body: UpdateTaskRequest,
    user_id: CurrentUserId,
    service: TaskServiceDep,
) -> SuccessResponse[TaskResponse]:
    """Apply a partial update; only fields present in the body change."""
    task = await service.update(user_id, parse_task_id(task_id), body.changes())
    return SuccessResponse[TaskResponse](
        status_code=status.HTTP_200_OK,
        message="Success update task",
        data=task,
    )


@router.delete("/{task_id}", responses=NOT_FOUND_RESPONSE)
async def delete_task(
    task_id: str, user_id: CurrentUserId, service: TaskServiceDep
) -> SuccessResponse[None]:
    """Delete one of the caller's tasks."""
    await service.delete(user_id, parse_task_id(task_id))
    return SuccessResponse[None](
        status_code=status.HTTP_200_OK,
        message="Success delete task",
    )
