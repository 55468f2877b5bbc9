"""SQLAlchemy declarative base and common model fields.

Key components:
- **Naming conventions**: Standardized constraint names for migrations
- **Base class**: Configured declarative base with metadata
- **BaseModel**: Abstract model with a UUID primary key and timestamps

Timestamps are assigned by the application in UTC so that inserts and
updates behave the same on every backend; the ``now()`` server defaults and
the ``update_updated_at_column`` trigger created by the migrations keep raw
SQL writes consistent.
"""

import uuid
from datetime import UTC, datetime

from sqlalchemy import DateTime, MetaData, Uuid, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from src.infrastructure.constants import NAMING_CONVENTION


def utcnow() -> datetime:
    """Current time as a timezone-aware UTC datetime."""
    return datetime.now(UTC)


class Base(DeclarativeBase):
    """SQLAlchemy declarative base with naming conventions."""

    metadata = MetaData(naming_convention=NAMING_CONVENTION)


class BaseModel(Base):
    """Abstract base model with common fields for all database models.

    This model provides:
    - Random UUID primary key, assigned on the client before insert
    - created_at timestamp
    - updated_at timestamp (bumped on modification)
    """

    __abstract__ = True

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
        doc="Primary key, random UUID",
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        server_default=func.now(),
        nullable=False,
        doc="Timestamp when the record was created (UTC)",
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        onupdate=utcnow,
        server_default=func.now(),
        nullable=False,
        doc="Timestamp when the record was last updated (UTC)",
    )

    def __repr__(self) -> str:
        """Return a string representation of the model instance."""
        return f"<{self.__class__.__name__}(id={self.id})>"
