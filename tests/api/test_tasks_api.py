"""Task routes with the service replaced by an AsyncMock."""

from unittest.mock import AsyncMock

import pytest
from httpx import AsyncClient

from app.api.v1.dependencies import get_task_service
from app.application.dtos.task import TaskResult
from app.domain.enums import TaskListType, TaskSourceType, TaskStatus
from app.domain.exceptions import AuthorizationException, ValidationException
from app.main import app


def _task(task_id: str = "t1", **overrides) -> TaskResult:
    data = {
        "id": task_id,
        "user_id": "user_member",
        "organization_id": "org_test",
        "title": "Morning walk",
        "status": TaskStatus.PENDING,
        "list_type": TaskListType.FOCUS,
        "order": 0,
        "date": "2026-10-19",
        "source_type": TaskSourceType.USER,
        **overrides,
    }
    return TaskResult(**data)


@pytest.fixture
def task_svc() -> AsyncMock:
    svc = AsyncMock()
    app.dependency_overrides[get_task_service] = lambda: svc
    return svc


async def test_list_tasks_for_date(client: AsyncClient, member_headers, task_svc) -> None:
    task_svc.list_for_date.return_value = [_task(), _task("t2", list_type=TaskListType.BACKLOG)]
    response = await client.get("/api/v1/tasks", params={"date": "2026-10-19"}, headers=member_headers)
    assert response.status_code == 200
    assert [t["list_type"] for t in response.json()] == ["focus", "backlog"]
    task_svc.list_for_date.assert_awaited_once_with("user_member", "org_test", "2026-10-19")


async def test_list_requires_date(client: AsyncClient, member_headers, task_svc) -> None:
    response = await client.get("/api/v1/tasks", headers=member_headers)
    assert response.status_code == 422
    assert response.json()["error"] == "VALIDATION_ERROR"


async def test_create_task(client: AsyncClient, member_headers, task_svc) -> None:
    task_svc.create_task.return_value = _task()
    response = await client.post(
        "/api/v1/tasks",
        json={"title": "Morning walk", "date": "2026-10-19"},
        headers=member_headers,
    )
    assert response.status_code == 201
    assert response.json()["id"] == "t1"
    task_svc.create_task.assert_awaited_once_with(
        "user_member", "org_test", "Morning walk", "2026-10-19", is_private=False, list_type=None
    )


async def test_create_task_empty_title_returns_422(
    client: AsyncClient, member_headers, task_svc
) -> None:
    response = await client.post(
        "/api/v1/tasks", json={"title": "", "date": "2026-10-19"}, headers=member_headers
    )
    assert response.status_code == 422
    task_svc.create_task.assert_not_awaited()


async def test_update_sends_only_set_fields(client: AsyncClient, member_headers, task_svc) -> None:
    task_svc.update_task.return_value = _task(status=TaskStatus.COMPLETED)
    response = await client.patch(
        "/api/v1/tasks/t1", json={"status": "completed"}, headers=member_headers
    )
    assert response.status_code == 200
    assert response.json()["status"] == "completed"
    task_svc.update_task.assert_awaited_once_with(
        "user_member", "org_test", "t1", {"status": "completed"}
    )


async def test_domain_errors_map_to_status(client: AsyncClient, member_headers, task_svc) -> None:
    task_svc.update_task.side_effect = ValidationException("Focus list is full", field="list_type")
    response = await client.patch(
        "/api/v1/tasks/t1", json={"list_type": "focus"}, headers=member_headers
    )
    assert response.status_code == 400
    assert response.json()["details"] == {"field": "list_type"}

    task_svc.delete_task.side_effect = AuthorizationException("task", "delete")
    response = await client.delete("/api/v1/tasks/t1", headers=member_headers)
    assert response.status_code == 403


async def test_delete_returns_204(client: AsyncClient, member_headers, task_svc) -> None:
    response = await client.delete("/api/v1/tasks/t1", headers=member_headers)
    assert response.status_code == 204
    task_svc.delete_task.assert_awaited_once_with("user_member", "org_test", "t1")
