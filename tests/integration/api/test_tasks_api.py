"""Integration tests for the task endpoints."""

import uuid
from datetime import datetime
from typing import Any

import pytest
from fakeredis import FakeAsyncRedis
from httpx import AsyncClient
from pytest_check import check

from tests.helpers import TASKS_URL, ClientFactory, RegisterUser, bearer


@pytest.fixture
async def alice(register_user: RegisterUser) -> dict[str, str]:
    data = await register_user()
    return bearer(data["token"])


@pytest.fixture
async def bob(register_user: RegisterUser) -> dict[str, str]:
    data = await register_user("bob", "bob@example.com", "pw654321")
    return bearer(data["token"])


async def create_task(
    client: AsyncClient, headers: dict[str, str], title: str, **fields: Any
) -> dict[str, Any]:
    response = await client.post(
        TASKS_URL, json={"title": title, **fields}, headers=headers
    )
    assert response.status_code == 201, response.text
    return response.json()["data"]


@pytest.mark.integration
class TestScenario:
    """Register, create and list in one session."""

    async def test_create_then_list(
        self, client: AsyncClient, alice: dict[str, str]
    ) -> None:
        # Act
        response = await client.post(
            TASKS_URL,
            json={"title": "Write report", "description": "Quarterly numbers"},
            headers=alice,
        )
        listing = await client.get(TASKS_URL, headers=alice)

        # Assert
        assert response.status_code == 201
        created = response.json()
        with check:
            assert created["message"] == "Success create task"
        with check:
            assert created["data"]["status"] == "TO_DO"
        with check:
            assert created["data"]["description"] == "Quarterly numbers"

        assert listing.status_code == 200
        body = listing.json()
        assert body["message"] == "Success get tasks"
        assert body["data"]["total"] == 1
        assert body["data"]["page"] == 1
        assert body["data"]["limit"] == 10
        assert body["data"]["total_pages"] == 1
        assert [t["id"] for t in body["data"]["tasks"]] == [created["data"]["id"]]


@pytest.mark.integration
class TestCreate:
    """POST /api/v1/tasks."""

    async def test_status_in_body_is_ignored(
        self, client: AsyncClient, alice: dict[str, str]
    ) -> None:
        task = await create_task(client, alice, "Ship it", status="DONE")

        assert task["status"] == "TO_DO"
        assert task["description"] is None

    @pytest.mark.parametrize(
        ("payload", "message"),
        [
            ({}, "This field is required"),
            ({"title": ""}, "This field is required"),
            ({"title": "x" * 256}, "This field exceeds maximum length of 255"),
        ],
    )
    async def test_title_validation(
        self,
        client: AsyncClient,
        alice: dict[str, str],
        payload: dict[str, str],
        message: str,
    ) -> None:
        response = await client.post(TASKS_URL, json=payload, headers=alice)

        assert response.status_code == 400
        assert response.json()["errors"] == {"title": message}


@pytest.mark.integration
class TestGet:
    """GET /api/v1/tasks/{id}."""

    async def test_owned_task(self, client: AsyncClient, alice: dict[str, str]) -> None:
        task = await create_task(client, alice, "Write report")

        response = await client.get(f"{TASKS_URL}/{task['id']}", headers=alice)

        assert response.status_code == 200
        assert response.json()["message"] == "Success get task"
        assert response.json()["data"] == task

    async def test_unknown_task(
        self, client: AsyncClient, alice: dict[str, str]
    ) -> None:
        response = await client.get(f"{TASKS_URL}/{uuid.uuid4()}", headers=alice)

        assert response.status_code == 404
        assert response.json() == {
            "status": False,
            "status_code": 404,
            "error": "not_found",
            "message": "task not found",
        }

    async def test_invalid_id(self, client: AsyncClient, alice: dict[str, str]) -> None:
        response = await client.get(f"{TASKS_URL}/123", headers=alice)

        assert response.status_code == 400
        assert response.json()["error"] == "invalid_task_id"
        assert response.json()["message"] == "Invalid task ID format"


@pytest.mark.integration
class TestIsolation:
    """Users never see each other's tasks."""

    async def test_other_users_task_is_not_found(
        self, client: AsyncClient, alice: dict[str, str], bob: dict[str, str]
    ) -> None:
        # Arrange
        task = await create_task(client, alice, "Private")
        url = f"{TASKS_URL}/{task['id']}"

        # Act
        responses = [
            await client.get(url, headers=bob),
            await client.patch(url, json={"title": "Hijacked"}, headers=bob),
            await client.delete(url, headers=bob),
        ]

        # Assert
        assert [r.status_code for r in responses] == [404, 404, 404]
        assert all(r.json()["message"] == "task not found" for r in responses)
        unchanged = await client.get(url, headers=alice)
        assert unchanged.json()["data"]["title"] == "Private"

    async def test_lists_are_scoped(
        self, client: AsyncClient, alice: dict[str, str], bob: dict[str, str]
    ) -> None:
        await create_task(client, alice, "Alice task")
        await create_task(client, bob, "Bob task")

        response = await client.get(TASKS_URL, headers=bob)

        titles = [t["title"] for t in response.json()["data"]["tasks"]]
        assert titles == ["Bob task"]


@pytest.mark.integration
class TestUpdate:
    """PATCH /api/v1/tasks/{id}."""

    async def test_partial_update_keeps_other_fields(
        self, client: AsyncClient, alice: dict[str, str]
    ) -> None:
        # Arrange
        task = await create_task(client, alice, "Write report", description="Draft")

        # Act
        response = await client.patch(
            f"{TASKS_URL}/{task['id']}", json={"status": "DONE"}, headers=alice
        )

        # Assert
        assert response.status_code == 200
        body = response.json()
        assert body["message"] == "Success update task"
        updated = body["data"]
        assert updated["status"] == "DONE"
        assert updated["title"] == "Write report"
        assert updated["description"] == "Draft"
        assert updated["created_at"] == task["created_at"]
        assert datetime.fromisoformat(updated["updated_at"]) > datetime.fromisoformat(
            task["updated_at"]
        )

    async def test_null_description_clears_it(
        self, client: AsyncClient, alice: dict[str, str]
    ) -> None:
        task = await create_task(client, alice, "Write report", description="Draft")

        response = await client.patch(
            f"{TASKS_URL}/{task['id']}",
            json={"description": None, "title": None},
            headers=alice,
        )

        assert response.json()["data"]["description"] is None
        assert response.json()["data"]["title"] == "Write report"

    async def test_empty_body_changes_nothing(
        self, client: AsyncClient, alice: dict[str, str]
    ) -> None:
        task = await create_task(client, alice, "Write report")

        response = await client.patch(
            f"{TASKS_URL}/{task['id']}", json={}, headers=alice
        )

        assert response.status_code == 200
        assert response.json()["data"] == task

    async def test_invalid_status(
        self, client: AsyncClient, alice: dict[str, str]
    ) -> None:
        task = await create_task(client, alice, "Write report")

        response = await client.patch(
            f"{TASKS_URL}/{task['id']}", json={"status": "WAT"}, headers=alice
        )

        assert response.status_code == 400
        assert response.json()["errors"] == {
            "status": "This field must be one of: TO_DO IN_PROGRESS DONE"
        }

    async def test_unknown_task(
        self, client: AsyncClient, alice: dict[str, str]
    ) -> None:
        response = await client.patch(
            f"{TASKS_URL}/{uuid.uuid4()}", json={"title": "New"}, headers=alice
        )

        assert response.status_code == 404


@pytest.mark.integration
class TestDelete:
    """DELETE /api/v1/tasks/{id}."""

    async def test_delete_then_get(
        self, client: AsyncClient, alice: dict[str, str]
    ) -> None:
        task = await create_task(client, alice, "Temporary")
        url = f"{TASKS_URL}/{task['id']}"

        deleted = await client.delete(url, headers=alice)
        again = await client.delete(url, headers=alice)
        fetched = await client.get(url, headers=alice)

        assert deleted.status_code == 200
        assert deleted.json() == {
            "status": True,
            "status_code": 200,
            "message": "Success delete task",
            "data": None,
        }
        assert again.status_code == 404
        assert fetched.status_code == 404


@pytest.mark.integration
class TestList:
    """GET /api/v1/tasks."""

    async def test_newest_first_with_pages(
        self, client: AsyncClient, alice: dict[str, str]
    ) -> None:
        # Arrange
        for i in range(5):
            await create_task(client, alice, f"Task {i}")

        # Act
        first = await client.get(TASKS_URL, params={"limit": 2}, headers=alice)
        last = await client.get(
            TASKS_URL, params={"limit": 2, "page": 3}, headers=alice
        )
        beyond = await client.get(
            TASKS_URL, params={"limit": 2, "page": 4}, headers=alice
        )

        # Assert
        first_data = first.json()["data"]
        assert [t["title"] for t in first_data["tasks"]] == ["Task 4", "Task 3"]
        assert first_data["total"] == 5
        assert first_data["total_pages"] == 3
        assert [t["title"] for t in last.json()["data"]["tasks"]] == ["Task 0"]
        assert beyond.json()["data"]["tasks"] == []
        assert beyond.json()["data"]["total"] == 5

    async def test_status_filter(
        self, client: AsyncClient, alice: dict[str, str]
    ) -> None:
        todo = await create_task(client, alice, "Todo")
        done = await create_task(client, alice, "Done")
        await client.patch(
            f"{TASKS_URL}/{done['id']}", json={"status": "DONE"}, headers=alice
        )

        response = await client.get(
            TASKS_URL, params={"status": "TO_DO"}, headers=alice
        )

        assert [t["id"] for t in response.json()["data"]["tasks"]] == [todo["id"]]

    async def test_invalid_status_filter(
        self, client: AsyncClient, alice: dict[str, str]
    ) -> None:
        response = await client.get(
            TASKS_URL, params={"status": "WAT"}, headers=alice
        )

        assert response.status_code == 400
        assert response.json()["error"] == "bad_request"
        assert response.json()["message"] == "invalid status: WAT"

    @pytest.mark.parametrize(
        ("params", "page", "limit"),
        [
            ({"limit": "500"}, 1, 100),
            ({"limit": "0"}, 1, 10),
            ({"limit": "abc", "page": "-3"}, 1, 10),
            ({"page": "2"}, 2, 10),
        ],
    )
    async def test_lenient_pagination(
        self,
        client: AsyncClient,
        alice: dict[str, str],
        params: dict[str, str],
        page: int,
        limit: int,
    ) -> None:
        response = await client.get(TASKS_URL, params=params, headers=alice)

        assert response.status_code == 200
        assert response.json()["data"]["page"] == page
        assert response.json()["data"]["limit"] == limit


@pytest.mark.integration
class TestListCache:
    """Cached pages stay coherent with writes."""

    async def test_writes_invalidate_cached_pages(
        self,
        client: AsyncClient,
        alice: dict[str, str],
        fake_redis: FakeAsyncRedis,
    ) -> None:
        # Arrange
        await client.get(TASKS_URL, headers=alice)
        assert len(await fake_redis.keys("tasks:*")) == 1

        # Act
        task = await create_task(client, alice, "Fresh")
        listing = await client.get(TASKS_URL, headers=alice)

        # Assert
        assert [t["id"] for t in listing.json()["data"]["tasks"]] == [task["id"]]

    async def test_update_and_delete_are_visible(
        self, client: AsyncClient, alice: dict[str, str]
    ) -> None:
        task = await create_task(client, alice, "Original")
        await client.get(TASKS_URL, headers=alice)

        await client.patch(
            f"{TASKS_URL}/{task['id']}", json={"title": "Renamed"}, headers=alice
        )
        renamed = await client.get(TASKS_URL, headers=alice)
        await client.delete(f"{TASKS_URL}/{task['id']}", headers=alice)
        emptied = await client.get(TASKS_URL, headers=alice)

        assert renamed.json()["data"]["tasks"][0]["title"] == "Renamed"
        assert emptied.json()["data"]["tasks"] == []

    async def test_works_without_redis(
        self, client_factory: ClientFactory, register_user: RegisterUser
    ) -> None:
        # register_user uses the default client; this one has no Redis
        data = await register_user()
        client = await client_factory(redis=None)

        created = await create_task(client, bearer(data["token"]), "Uncached")
        listing = await client.get(TASKS_URL, headers=bearer(data["token"]))

        assert listing.status_code == 200
        assert "X-RateLimit-Limit" not in listing.headers
        assert listing.json()["data"]["tasks"][0]["id"] == created["id"]
