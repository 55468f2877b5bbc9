"""Task use cases on top of the task store and the list cache.

Every operation takes the authenticated user's id and passes it into the
store predicate; callers can never name another owner. Writes commit first
and then invalidate the owner's cached list pages, so a list read issued
after a write response always observes that write.
"""

import uuid
from collections.abc import Mapping
from typing import Any

from loguru import logger
from sqlalchemy.exc import SQLAlchemyError

from src.core.exceptions import (
    ErrorCode,
    NotFoundError,
    RepositoryError,
    ValidationError,
)
from src.core.observability import trace_operation
from src.domain.tasks.models import Task, TaskStatus
from src.domain.tasks.repository import TaskRepository
from src.domain.tasks.schemas import TaskResponse, TasksResponse
from src.infrastructure.cache.task_cache import TaskListCache

TASK_NOT_FOUND_MESSAGE = "task not found"

# Fields whose explicit null means "leave unchanged"; description accepts null
NON_NULLABLE_FIELDS = frozenset({"title", "status"})


def parse_status(value: str | TaskStatus | None) -> TaskStatus | None:
    """Validate a status value; empty means no status.

    Raises:
        ValidationError: If the value is not a known status.
    """
    if value is None or value == "":
        return None
    try:
        return TaskStatus(value)
    except ValueError as e:
        raise ValidationError(
            f"invalid status: {value}", error_code=ErrorCode.BAD_REQUEST, cause=e
        ) from e


class TaskService:
    """Create, read, list, update and delete a user's tasks.

    Args:
        tasks: Task store bound to the request session.
        cache: List cache shared by the process.
    """

    def __init__(self, tasks: TaskRepository, cache: TaskListCache) -> None:
        self.tasks = tasks
        self.cache = cache

    async def _commit_and_invalidate(self, user_id: uuid.UUID) -> None:
        await self.tasks.commit()
        await self.cache.invalidate(user_id)

    async def create(
        self, user_id: uuid.UUID, title: str, description: str | None = None
    ) -> TaskResponse:
        """Create a task in ``TO_DO`` status."""
        task = Task(
            title=title,
            description=description,
            status=TaskStatus.TO_DO,
            user_id=user_id,
        )
        try:
            task = await self.tasks.create(task)
            await self._commit_and_invalidate(user_id)
        except SQLAlchemyError as e:
            logger.error("Task creation failed in store: {}", type(e).__name__)
            raise RepositoryError("failed to create task", cause=e) from e

        return TaskResponse.model_validate(task)

    async def get(self, user_id: uuid.UUID, task_id: uuid.UUID) -> TaskResponse:
        """Fetch one owned task.

        Raises:
            NotFoundError: If the task does not exist or is owned by someone else.
        """
        try:
            task = await self.tasks.get(task_id, user_id)
        except SQLAlchemyError as e:
            logger.error("Task lookup failed in store: {}", type(e).__name__)
            raise RepositoryError("failed to get task", cause=e) from e

        if task is None:
            raise NotFoundError(
                TASK_NOT_FOUND_MESSAGE, context={"task_id": str(task_id)}
            )
        return TaskResponse.model_validate(task)

    async def list(
        self,
        user_id: uuid.UUID,
        status: str | None,
        page: int,
        limit: int,
    ) -> TasksResponse:
        """Return one page of the user's tasks, served from cache when possible.

        Raises:
            ValidationError: If ``status`` is not a known status.
        """
        task_status = parse_status(status)
        key = self.cache.key_for(user_id, task_status, page, limit)

        with trace_operation("task_list.cache_lookup", cache_key=key):
            cached = await self.cache.get(key)
        if cached is not None:
            return cached

        try:
            rows, total = await self.tasks.list(user_id, task_status, page, limit)
        except SQLAlchemyError as e:
            logger.error("Task listing failed in store: {}", type(e).__name__)
            raise RepositoryError("failed to get tasks", cause=e) from e

        response = TasksResponse(
            tasks=[TaskResponse.model_validate(row) for row in rows],
            total=total,
            page=page,
            limit=limit,
            total_pages=TasksResponse.count_pages(total, limit),
        )
        await self.cache.set(key, response)
        return response

    async def update(
        self,
        user_id: uuid.UUID,
        task_id: uuid.UUID,
        changes: Mapping[str, Any],
    ) -> TaskResponse:
        """Apply a partial update to one owned task.

        ``changes`` holds only the fields the client sent. An explicit null
        description clears it; a null title or status is ignored.

        Raises:
            ValidationError: If a status value is not a known status.
            NotFoundError: If the task does not exist or is owned by someone else.
        """
        values = {
            field: value
            for field, value in changes.items()
            if not (value is None and field in NON_NULLABLE_FIELDS)
        }
        if "status" in values:
            values["status"] = parse_status(values["status"])

        try:
            if values:
                task = await self.tasks.update(task_id, user_id, values)
            else:
                task = await self.tasks.get(task_id, user_id)

            if task is None:
                raise NotFoundError(
                    TASK_NOT_FOUND_MESSAGE, context={"task_id": str(task_id)}
                )
            if values:
                await self._commit_and_invalidate(user_id)
        except SQLAlchemyError as e:
            logger.error("Task update failed in store: {}", type(e).__name__)
            raise RepositoryError("failed to update task", cause=e) from e

        return TaskResponse.model_validate(task)

    async def delete(self, user_id: uuid.UUID, task_id: uuid.UUID) -> None:
        """Delete one owned task.

        Raises:
            NotFoundError: If the task does not exist or is owned by someone else.
        """
        try:
            deleted = await self.tasks.delete(task_id, user_id)
            if deleted:
                await self._commit_and_invalidate(user_id)
        except SQLAlchemyError as e:
            logger.error("Task deletion failed in store: {}", type(e).__name__)
            raise RepositoryError("failed to delete task", cause=e) from e

        if not deleted:
            raise NotFoundError(
                TASK_NOT_FOUND_MESSAGE, context={"task_id": str(task_id)}
            )
