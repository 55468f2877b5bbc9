"""Integration tests for registration and login."""

import uuid

import jwt
import pytest
from httpx import AsyncClient
from pytest_check import check

from tests.helpers import LOGIN_URL, REGISTER_URL, TASKS_URL, RegisterUser, bearer


@pytest.mark.integration
class TestRegister:
    """POST /api/v1/auth/register."""

    async def test_success_envelope(self, client: AsyncClient) -> None:
        # Act
        response = await client.post(
            REGISTER_URL,
            json={
                "username": "alice",
                "email": "alice@example.com",
                "password": "pw123456",
            },
        )

        # Assert
        assert response.status_code == 201
        body = response.json()
        with check:
            assert body["status"] is True
        with check:
            assert body["status_code"] == 201
        with check:
            assert body["message"] == "Success register user"
        user = body["data"]["user"]
        assert user["username"] == "alice"
        assert user["email"] == "alice@example.com"
        assert uuid.UUID(user["id"])
        assert set(user) == {"id", "username", "email"}

    async def test_token_carries_user_id(
        self, register_user: RegisterUser
    ) -> None:
        data = await register_user()

        claims = jwt.decode(data["token"], options={"verify_signature": False})

        assert claims["auth_id"] == data["user"]["id"]
        assert "exp" in claims

    async def test_duplicate_email(
        self, client: AsyncClient, register_user: RegisterUser
    ) -> None:
        await register_user()

        response = await client.post(
            REGISTER_URL,
            json={
                "username": "alice2",
                "email": "alice@example.com",
                "password": "pw123456",
            },
        )

        assert response.status_code == 400
        assert response.json() == {
            "status": False,
            "status_code": 400,
            "error": "bad_request",
            "message": "user with this email already exists",
        }

    async def test_duplicate_username(
        self, client: AsyncClient, register_user: RegisterUser
    ) -> None:
        await register_user()

        response = await client.post(
            REGISTER_URL,
            json={
                "username": "alice",
                "email": "other@example.com",
                "password": "pw123456",
            },
        )

        assert response.status_code == 400
        assert response.json()["message"] == "username is already taken"

    async def test_field_validation(self, client: AsyncClient) -> None:
        response = await client.post(
            REGISTER_URL,
            json={"username": "al", "email": "not-an-email", "password": "123"},
        )

        assert response.status_code == 400
        body = response.json()
        assert body["error"] == "validation_error"
        assert body["message"] == "Validation failed"
        assert body["errors"] == {
            "username": "This field must be at least 3 characters",
            "email": "This field must be a valid email",
            "password": "This field must be at least 6 characters",
        }

    async def test_missing_fields(self, client: AsyncClient) -> None:
        response = await client.post(REGISTER_URL, json={"email": "a@example.com"})

        assert response.status_code == 400
        assert response.json()["errors"] == {
            "username": "This field is required",
            "password": "This field is required",
        }

    async def test_malformed_json(self, client: AsyncClient) -> None:
        response = await client.post(
            REGISTER_URL,
            content=b'{"username": "alice",',
            headers={"Content-Type": "application/json"},
        )

        assert response.status_code == 400
        assert response.json() == {
            "status": False,
            "status_code": 400,
            "error": "invalid_request",
            "message": "Invalid JSON format",
        }


@pytest.mark.integration
class TestLogin:
    """POST /api/v1/auth/login."""

    async def test_success(
        self, client: AsyncClient, register_user: RegisterUser
    ) -> None:
        registered = await register_user()

        response = await client.post(
            LOGIN_URL, json={"email": "alice@example.com", "password": "pw123456"}
        )

        assert response.status_code == 200
        body = response.json()
        assert body["message"] == "Success login user"
        assert body["data"]["user"] == registered["user"]

    async def test_login_token_opens_task_routes(
        self, client: AsyncClient, register_user: RegisterUser
    ) -> None:
        await register_user()
        login = await client.post(
            LOGIN_URL, json={"email": "alice@example.com", "password": "pw123456"}
        )

        response = await client.get(
            TASKS_URL, headers=bearer(login.json()["data"]["token"])
        )

        assert response.status_code == 200

    @pytest.mark.parametrize(
        ("email", "password"),
        [
            ("alice@example.com", "wrong-password"),
            ("nobody@example.com", "pw123456"),
        ],
    )
    async def test_bad_credentials_look_the_same(
        self,
        client: AsyncClient,
        register_user: RegisterUser,
        email: str,
        password: str,
    ) -> None:
        await register_user()

        response = await client.post(
            LOGIN_URL, json={"email": email, "password": password}
        )

        assert response.status_code == 401
        assert response.json() == {
            "status": False,
            "status_code": 401,
            "error": "unauthorized",
            "message": "invalid email or password",
        }

    async def test_empty_password(self, client: AsyncClient) -> None:
        response = await client.post(
            LOGIN_URL, json={"email": "alice@example.com", "password": ""}
        )

        assert response.status_code == 400
        assert response.json()["errors"] == {"password": "This field is required"}
