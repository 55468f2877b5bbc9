"""Task ORM model and status enumeration."""

import uuid
from enum import StrEnum

from sqlalchemy import Enum, ForeignKey, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from src.infrastructure.database.base import BaseModel


class TaskStatus(StrEnum):
    """Lifecycle states of a task."""

    TO_DO = "TO_DO"
    IN_PROGRESS = "IN_PROGRESS"
    DONE = "DONE"

    @classmethod
    def choices(cls) -> str:
        """Space separated list of the accepted values."""
        return " ".join(member.value for member in cls)


class Task(BaseModel):
    """A task owned by exactly one user.

    Deleting the owner deletes the task (``ON DELETE CASCADE``).
    """

    __tablename__ = "tasks"
    __table_args__ = (Index("idx_tasks_user_id", "user_id"),)

    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[TaskStatus] = mapped_column(
        Enum(
            TaskStatus,
            name="task_status",
            values_callable=lambda enum_cls: [member.value for member in enum_cls],
            validate_strings=True,
        ),
        nullable=False,
        default=TaskStatus.TO_DO,
        server_default=TaskStatus.TO_DO.value,
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("users.id", onupdate="CASCADE", ondelete="CASCADE"),
        nullable=False,
    )
