"""Request bodies of the task endpoints."""

from pydantic import BaseModel, Field

from src.domain.tasks.models import TaskStatus


class CreateTaskRequest(BaseModel):
    """Body of ``POST /api/v1/tasks``; new tasks always start in ``TO_DO``."""

    title: str = Field(..., min_length=1, max_length=255, examples=["Write report"])
    description: str | None = Field(default=None, examples=["Quarterly numbers"])


class UpdateTaskRequest(BaseModel):
    """Body of ``PATCH /api/v1/tasks/{id}``.

    Only fields present in the body are applied. An explicit ``null``
    description clears it.
    """

    title: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = None
    status: TaskStatus | None = Field(default=None, examples=["IN_PROGRESS"])

    def changes(self) -> dict[str, object]:
        """Fields the client actually sent, with their values."""
        return {field: getattr(self, field) for field in self.model_fields_set}
