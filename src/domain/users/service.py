"""Registration and login.

Login failures never reveal whether the email exists: unknown emails and
wrong passwords produce the same message, and both paths perform one bcrypt
verification so their timing matches.
"""

import asyncio
from functools import lru_cache

from loguru import logger
from sqlalchemy.exc import SQLAlchemyError

from src.core.exceptions import (
    DuplicateEntryError,
    ErrorCode,
    RepositoryError,
    UnauthorizedError,
    ValidationError,
)
from src.domain.users.models import User
from src.domain.users.repository import UserRepository
from src.domain.users.schemas import AuthResponse, UserResponse
from src.infrastructure.security.passwords import (
    hash_password,
    hash_password_sync,
    verify_password,
)
from src.infrastructure.security.tokens import TokenManager

EMAIL_TAKEN_MESSAGE = "user with this email already exists"
USERNAME_TAKEN_MESSAGE = "username is already taken"
INVALID_CREDENTIALS_MESSAGE = "invalid email or password"

DUPLICATE_MESSAGES = {
    "email": EMAIL_TAKEN_MESSAGE,
    "username": USERNAME_TAKEN_MESSAGE,
}


@lru_cache(maxsize=4)
def _dummy_hash(cost: int) -> str:
    """Hash checked when the email is unknown, so that login costs the same."""
    return hash_password_sync("taskhub-timing-equalizer", cost)


class AuthService:
    """Account registration and credential checks.

    Args:
        users: Identity store bound to the request session.
        tokens: Token issuer.
        bcrypt_cost: Work factor for new password hashes.
    """

    def __init__(
        self, users: UserRepository, tokens: TokenManager, bcrypt_cost: int
    ) -> None:
        self.users = users
        self.tokens = tokens
        self.bcrypt_cost = bcrypt_cost

    def _issue(self, user: User) -> AuthResponse:
        return AuthResponse(
            token=self.tokens.generate(user.id),
            user=UserResponse.model_validate(user),
        )

    async def register(
        self, username: str, email: str, password: str
    ) -> AuthResponse:
        """Create an account and return a token for it.

        Raises:
            ValidationError: If the email or username is already taken.
            RepositoryError: If the store fails.
        """
        try:
            if await self.users.get_by_email(email) is not None:
                raise ValidationError(
                    EMAIL_TAKEN_MESSAGE, error_code=ErrorCode.BAD_REQUEST
                )
            if await self.users.get_by_username(username) is not None:
                raise ValidationError(
                    USERNAME_TAKEN_MESSAGE, error_code=ErrorCode.BAD_REQUEST
                )

            password_hash = await hash_password(password, self.bcrypt_cost)
            user = await self.users.create(
                User(username=username, email=email, password_hash=password_hash)
            )
            await self.users.commit()
        except DuplicateEntryError as e:
            # Lost a race with a concurrent registration
            raise ValidationError(
                DUPLICATE_MESSAGES[e.field],
                error_code=ErrorCode.BAD_REQUEST,
                cause=e,
            ) from e
        except SQLAlchemyError as e:
            logger.error("User registration failed in store: {}", type(e).__name__)
            raise RepositoryError("failed to register user", cause=e) from e

        logger.info("Registered user {}", user.id)
        return self._issue(user)

    async def login(self, email: str, password: str) -> AuthResponse:
        """Verify credentials and return a fresh token.

        Raises:
            UnauthorizedError: If the email is unknown or the password is wrong.
            RepositoryError: If the store fails.
        """
        try:
            user = await self.users.get_by_email(email)
        except SQLAlchemyError as e:
            logger.error("User lookup failed in store: {}", type(e).__name__)
            raise RepositoryError("failed to login user", cause=e) from e

        if user is None:
            dummy_hash = await asyncio.to_thread(_dummy_hash, self.bcrypt_cost)
            await verify_password(password, dummy_hash)
            raise UnauthorizedError(
                INVALID_CREDENTIALS_MESSAGE, context={"reason": "unknown_email"}
            )

        if not await verify_password(password, user.password_hash):
            raise UnauthorizedError(
                INVALID_CREDENTIALS_MESSAGE, context={"reason": "password_mismatch"}
            )

        logger.info("User {} logged in", user.id)
        return self._issue(user)
