"""Identity store: persistence of user accounts."""

from loguru import logger
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.exceptions import DuplicateEntryError
from src.domain.users.models import User
from src.infrastructure.database.repository import BaseRepository

UNIQUE_FIELDS = ("email", "username")


def _duplicate_field(error: IntegrityError) -> str | None:
    """Name the unique column an integrity error refers to, if any."""
    detail = str(error.orig).lower()
    for field in UNIQUE_FIELDS:
        if field in detail:
            return field
    return None


class UserRepository(BaseRepository[User]):
    """Lookups and inserts for users.

    Lookups return ``None`` when no row matches; driver failures propagate
    as ``SQLAlchemyError`` so that callers can tell the two apart.
    """

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, User)

    async def get_by_email(self, email: str) -> User | None:
        return await self.find_one_by(email=email)

    async def get_by_username(self, username: str) -> User | None:
        return await self.find_one_by(username=username)

    async def create(self, obj: User) -> User:
        """Insert a user.

        Raises:
            DuplicateEntryError: If the email or username is already taken.
        """
        try:
            return await super().create(obj)
        except IntegrityError as e:
            await self.session.rollback()
            field = _duplicate_field(e)
            if field is None:
                raise
            logger.info("Rejected duplicate user {}", field)
            raise DuplicateEntryError(field, cause=e) from e
