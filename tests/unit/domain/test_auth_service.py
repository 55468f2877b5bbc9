"""Unit tests for registration and login."""

from collections.abc import Callable

import pytest
from pytest_mock import MockerFixture, MockType
from sqlalchemy.exc import OperationalError

from src.core.exceptions import (
    DuplicateEntryError,
    RepositoryError,
    UnauthorizedError,
    ValidationError,
)
from src.domain.users.models import User
from src.domain.users.repository import UserRepository
from src.domain.users.service import AuthService
from src.infrastructure.security.passwords import hash_password_sync
from src.infrastructure.security.tokens import TokenManager

COST = 4


@pytest.fixture
def users(mocker: MockerFixture) -> MockType:
    return mocker.AsyncMock(spec=UserRepository)


@pytest.fixture
def tokens() -> TokenManager:
    return TokenManager("auth-service-secret")


@pytest.fixture
def service(users: MockType, tokens: TokenManager) -> AuthService:
    return AuthService(users, tokens, COST)


@pytest.mark.unit
class TestRegister:
    """Account creation."""

    async def test_hashes_password_and_issues_token(
        self,
        service: AuthService,
        users: MockType,
        tokens: TokenManager,
        make_user: Callable[..., User],
    ) -> None:
        # Arrange
        users.get_by_email.return_value = None
        users.get_by_username.return_value = None
        stored = make_user()
        users.create.return_value = stored

        # Act
        result = await service.register("alice", "alice@example.com", "pw123456")

        # Assert
        new_user: User = users.create.await_args.args[0]
        assert new_user.password_hash.startswith("$2b$04$")
        assert new_user.password_hash != "pw123456"
        users.commit.assert_awaited_once()
        assert result.user.id == stored.id
        assert tokens.validate(result.token).auth_id == str(stored.id)

    async def test_email_taken(
        self, service: AuthService, users: MockType, make_user: Callable[..., User]
    ) -> None:
        users.get_by_email.return_value = make_user()

        with pytest.raises(ValidationError) as exc_info:
            await service.register("bob", "alice@example.com", "pw123456")

        assert exc_info.value.message == "user with this email already exists"
        assert exc_info.value.error_code == "bad_request"
        users.create.assert_not_awaited()

    async def test_username_taken(
        self, service: AuthService, users: MockType, make_user: Callable[..., User]
    ) -> None:
        users.get_by_email.return_value = None
        users.get_by_username.return_value = make_user()

        with pytest.raises(ValidationError, match="username is already taken"):
            await service.register("alice", "other@example.com", "pw123456")

    async def test_concurrent_duplicate(
        self, service: AuthService, users: MockType
    ) -> None:
        users.get_by_email.return_value = None
        users.get_by_username.return_value = None
        users.create.side_effect = DuplicateEntryError("email")

        with pytest.raises(ValidationError, match="user with this email already"):
            await service.register("alice", "alice@example.com", "pw123456")

    async def test_store_failure(self, service: AuthService, users: MockType) -> None:
        users.get_by_email.side_effect = OperationalError(
            "SELECT 1", {}, Exception("down")
        )

        with pytest.raises(RepositoryError, match="failed to register user"):
            await service.register("alice", "alice@example.com", "pw123456")


@pytest.mark.unit
class TestLogin:
    """Credential checks."""

    async def test_valid_credentials(
        self,
        service: AuthService,
        users: MockType,
        tokens: TokenManager,
        make_user: Callable[..., User],
    ) -> None:
        user = make_user(password_hash=hash_password_sync("pw123456", COST))
        users.get_by_email.return_value = user

        result = await service.login("alice@example.com", "pw123456")

        assert result.user.email == "alice@example.com"
        assert tokens.validate(result.token).auth_id == str(user.id)

    async def test_wrong_password(
        self, service: AuthService, users: MockType, make_user: Callable[..., User]
    ) -> None:
        users.get_by_email.return_value = make_user(
            password_hash=hash_password_sync("pw123456", COST)
        )

        with pytest.raises(UnauthorizedError) as exc_info:
            await service.login("alice@example.com", "wrong-password")

        assert exc_info.value.message == "invalid email or password"
        assert exc_info.value.context == {"reason": "password_mismatch"}

    async def test_unknown_email_has_same_message(
        self, service: AuthService, users: MockType
    ) -> None:
        users.get_by_email.return_value = None

        with pytest.raises(UnauthorizedError) as exc_info:
            await service.login("nobody@example.com", "pw123456")

        assert exc_info.value.message == "invalid email or password"
        assert exc_info.value.context == {"reason": "unknown_email"}

    async def test_store_failure(self, service: AuthService, users: MockType) -> None:
        users.get_by_email.side_effect = OperationalError(
            "SELECT 1", {}, Exception("down")
        )

        with pytest.raises(RepositoryError, match="failed to login user"):
            await service.login("alice@example.com", "pw123456")
