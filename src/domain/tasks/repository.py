"""Task store: ownership-scoped persistence of tasks.

Every query carries ``user_id`` in its WHERE clause. A task owned by someone
else is indistinguishable from a task that does not exist.
"""

import uuid
from collections.abc import Mapping, Sequence

from loguru import logger
from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from src.domain.tasks.models import Task, TaskStatus
from src.infrastructure.database.base import utcnow
from src.infrastructure.database.repository import BaseRepository

UPDATABLE_FIELDS = frozenset({"title", "description", "status"})


class TaskRepository(BaseRepository[Task]):
    """Queries and writes for tasks, always filtered by owner."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, Task)

    async def get(self, task_id: uuid.UUID, user_id: uuid.UUID) -> Task | None:
        """Fetch a task if it exists and belongs to ``user_id``."""
        return await self.find_one_by(id=task_id, user_id=user_id)

    async def list(
        self,
        user_id: uuid.UUID,
        status: TaskStatus | None,
        page: int,
        limit: int,
    ) -> tuple[Sequence[Task], int]:
        """Return one page of a user's tasks and the total matching count.

        Rows are ordered newest first, ties broken by id. ``page`` and
        ``limit`` are trusted to be already clamped.
        """
        conditions = [Task.user_id == user_id]
        if status is not None:
            conditions.append(Task.status == status)

        total = await self.count_by(user_id=user_id, status=status)

        stmt = (
            select(Task)
            .where(*conditions)
            .order_by(Task.created_at.desc(), Task.id.asc())
            .offset((page - 1) * limit)
            .limit(limit)
        )
        rows = (await self.session.execute(stmt)).scalars().all()

        logger.debug(
            "Listed tasks - page: {}, limit: {}, returned: {}, total: {}",
            page,
            limit,
            len(rows),
            total,
        )
        return rows, total

    async def update(
        self,
        task_id: uuid.UUID,
        user_id: uuid.UUID,
        changes: Mapping[str, object],
    ) -> Task | None:
        """Apply ``changes`` to one owned task in a single statement.

        Only the given columns are written, plus ``updated_at``.

        Returns:
            Task | None: The updated row, or None if no owned task matched.

        Raises:
            ValueError: If ``changes`` names a column that may not be updated.
        """
        unknown = set(changes) - UPDATABLE_FIELDS
        if unknown:
            msg = f"Cannot update task fields: {', '.join(sorted(unknown))}"
            raise ValueError(msg)

        stmt = (
            update(Task)
            .where(Task.id == task_id, Task.user_id == user_id)
            .values(**changes, updated_at=utcnow())
            .returning(Task)
            .execution_options(populate_existing=True, synchronize_session=False)
        )
        task = (await self.session.execute(stmt)).scalar_one_or_none()

        if task is None:
            logger.debug("No owned task matched for update")
        else:
            logger.info("Updated task {} - fields: {}", task_id, sorted(changes))
        return task

    async def delete(self, task_id: uuid.UUID, user_id: uuid.UUID) -> bool:
        """Delete one owned task; False when no owned task matched."""
        stmt = delete(Task).where(Task.id == task_id, Task.user_id == user_id)
        result = await self.session.execute(
            stmt, execution_options={"synchronize_session": False}
        )
        deleted = bool(result.rowcount)

        if deleted:
            logger.info("Deleted task {}", task_id)
        return deleted
