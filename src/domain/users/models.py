"""User ORM model."""

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from src.infrastructure.database.base import BaseModel


class User(BaseModel):
    """An account that owns tasks.

    Rows are created once at registration and never updated by the service.
    ``password_hash`` holds the bcrypt hash and is stored in the ``password``
    column.
    """

    __tablename__ = "users"

    username: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    password_hash: Mapped[str] = mapped_column(
        "password", String(255), nullable=False
    )
