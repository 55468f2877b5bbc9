"""Response shapes produced by the task service.

``TasksResponse`` is also the value stored in the list cache, so it must
round-trip through JSON without loss.
"""

import math
import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from src.domain.tasks.models import TaskStatus


class TaskResponse(BaseModel):
    """Public view of a task."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    title: str
    description: str | None = None
    status: TaskStatus
    created_at: datetime
    updated_at: datetime


class TasksResponse(BaseModel):
    """One page of a user's tasks."""

    tasks: list[TaskResponse] = Field(default_factory=list)
    total: int = Field(..., ge=0, description="Rows matching the filter")
    page: int = Field(..., ge=1)
    limit: int = Field(..., ge=1)
    total_pages: int = Field(..., ge=0)

    @staticmethod
    def count_pages(total: int, limit: int) -> int:
        """Number of pages needed to show ``total`` rows, ``limit`` per page."""
        return math.ceil(total / limit) if total else 0
