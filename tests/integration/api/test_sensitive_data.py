"""Passwords and hashes never leave the service."""

from collections.abc import Generator

import pytest
from httpx import AsyncClient
from loguru import logger
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.domain.users.models import User
from tests.helpers import LOGIN_URL, REGISTER_URL

PASSWORD = "s3cret-Passw0rd"


@pytest.fixture
def captured_logs() -> Generator[list[str]]:
    """Every log line, serialized with its extra fields."""
    messages: list[str] = []
    handler_id = logger.add(messages.append, level="TRACE", serialize=True)
    yield messages
    logger.remove(handler_id)


@pytest.mark.integration
class TestPasswordHandling:
    """Registration and login keep the password private."""

    async def test_password_not_in_responses_or_logs(
        self, client: AsyncClient, captured_logs: list[str]
    ) -> None:
        # Act
        registered = await client.post(
            REGISTER_URL,
            json={
                "username": "carol",
                "email": "carol@example.com",
                "password": PASSWORD,
            },
        )
        logged_in = await client.post(
            LOGIN_URL, json={"email": "carol@example.com", "password": PASSWORD}
        )
        rejected = await client.post(
            LOGIN_URL, json={"email": "carol@example.com", "password": "wrong!!"}
        )

        # Assert
        assert registered.status_code == 201
        assert logged_in.status_code == 200
        assert rejected.status_code == 401
        for response in (registered, logged_in, rejected):
            assert PASSWORD not in response.text
            assert "password" not in response.json().get("data", {}).get("user", {})
        assert captured_logs
        assert not [line for line in captured_logs if PASSWORD in line]
        assert not [line for line in captured_logs if "wrong!!" in line]

    async def test_stored_hash_is_bcrypt(
        self, client: AsyncClient, db_session: AsyncSession
    ) -> None:
        await client.post(
            REGISTER_URL,
            json={
                "username": "carol",
                "email": "carol@example.com",
                "password": PASSWORD,
            },
        )

        user = (
            await db_session.execute(select(User).where(User.username == "carol"))
        ).scalar_one()

        assert user.password_hash.startswith("$2b$04$")
        assert PASSWORD not in user.password_hash
