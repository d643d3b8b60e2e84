"""TaskService unit tests with mocked repos."""

from datetime import datetime, timezone
from unittest.mock import AsyncMock

import pytest

from app.application.dtos.organization import OrgSettingsResult
from app.application.dtos.task import TaskResult
from app.application.use_cases.tasks import TaskService
from app.domain.enums import TaskListType, TaskSourceType, TaskStatus
from app.domain.exceptions import (
    AuthorizationException,
    ResourceNotFoundException,
    ValidationException,
)


def _task(
    task_id: str,
    list_type: TaskListType = TaskListType.FOCUS,
    status: TaskStatus = TaskStatus.PENDING,
    order: int = 0,
    date: str = "2026-10-19",
    user_id: str = "u1",
    source_type: TaskSourceType = TaskSourceType.USER,
    **kwargs,
) -> TaskResult:
    return TaskResult(
        id=task_id,
        user_id=user_id,
        organization_id="org1",
        title=f"Task {task_id}",
        status=status,
        list_type=list_type,
        order=order,
        date=date,
        source_type=source_type,
        **kwargs,
    )


@pytest.fixture
def repos():
    task_repo = AsyncMock()
    task_repo.list_for_date = AsyncMock(return_value=[])
    task_repo.list_before_date = AsyncMock(return_value=[])
    task_repo.create = AsyncMock(side_effect=lambda data: _task("new", **_created(data)))
    org_repo = AsyncMock()
    org_repo.get_settings = AsyncMock(
        return_value=OrgSettingsResult(organization_id="org1", daily_focus_slots=2)
    )
    return task_repo, org_repo


def _created(data: dict) -> dict:
    return {
        "list_type": TaskListType(data["list_type"]),
        "order": data["order"],
        "date": data["date"],
    }


@pytest.fixture
def service(repos):
    task_repo, org_repo = repos
    return TaskService(task_repo, org_repo)


class TestCreateTask:
    async def test_goes_to_focus_while_slots_remain(self, service, repos):
        task_repo, _ = repos
        task_repo.list_for_date.return_value = [_task("a")]
        await service.create_task("u1", "org1", "  Walk  ", "2026-10-19")
        data = task_repo.create.await_args.args[0]
        assert data["title"] == "Walk"
        assert data["list_type"] == "focus"
        assert data["order"] == 1
        assert data["source_type"] == "user"

    async def test_overflows_to_backlog_when_focus_is_full(self, service, repos):
        task_repo, _ = repos
        task_repo.list_for_date.return_value = [
            _task("a", order=0),
            _task("b", order=1),
            _task("c", TaskListType.BACKLOG, order=4),
        ]
        await service.create_task("u1", "org1", "Read", "2026-10-19")
        data = task_repo.create.await_args.args[0]
        assert data["list_type"] == "backlog"
        assert data["order"] == 5

    async def test_deleted_tasks_do_not_take_focus_slots(self, service, repos):
        task_repo, _ = repos
        task_repo.list_for_date.return_value = [
            _task("a"),
            _task("b", status=TaskStatus.DELETED),
        ]
        await service.create_task("u1", "org1", "Read", "2026-10-19")
        assert task_repo.create.await_args.args[0]["list_type"] == "focus"

    async def test_uses_default_slots_without_org_settings(self, repos):
        task_repo, org_repo = repos
        org_repo.get_settings.return_value = None
        task_repo.list_for_date.return_value = [_task("a"), _task("b")]
        await TaskService(task_repo, org_repo, default_focus_slots=3).create_task(
            "u1", "org1", "Read", "2026-10-19"
        )
        assert task_repo.create.await_args.args[0]["list_type"] == "focus"

    @pytest.mark.parametrize("title, date", [("   ", "2026-10-19"), ("Read", "19/10/2026")])
    async def test_rejects_bad_input(self, service, title, date):
        with pytest.raises(ValidationException):
            await service.create_task("u1", "org1", title, date)


class TestListForDate:
    async def test_migrates_pending_and_drops_completed_backlog(self, service, repos):
        task_repo, _ = repos
        today = [_task("t1", TaskListType.BACKLOG, order=2)]
        task_repo.list_for_date.side_effect = [today, today]
        task_repo.list_before_date.return_value = [
            _task("old-pending", date="2026-10-17"),
            _task(
                "already-moved",
                TaskListType.BACKLOG,
                date="2026-10-18",
                moved_to_backlog_at=datetime(2026, 10, 18, tzinfo=timezone.utc),
            ),
            _task("done-backlog", TaskListType.BACKLOG, TaskStatus.COMPLETED, date="2026-10-18"),
            _task("done-focus", status=TaskStatus.COMPLETED, date="2026-10-18"),
        ]

        await service.list_for_date("u1", "org1", "2026-10-19")

        kwargs = task_repo.apply_batch.await_args.kwargs
        assert kwargs["deletes"] == ["done-backlog"]
        updates = kwargs["updates"]
        assert set(updates) == {"old-pending", "already-moved"}
        assert updates["old-pending"]["order"] == 3
        assert updates["old-pending"]["list_type"] == "backlog"
        assert updates["old-pending"]["date"] == "2026-10-19"
        assert "moved_to_backlog_at" in updates["old-pending"]
        assert updates["already-moved"]["order"] == 4
        assert "moved_to_backlog_at" not in updates["already-moved"]

    async def test_no_batch_when_nothing_to_carry(self, service, repos):
        task_repo, _ = repos
        task_repo.list_for_date.return_value = [
            _task("b1", TaskListType.BACKLOG, order=0),
            _task("f1", order=1),
            _task("gone", status=TaskStatus.DELETED),
        ]
        result = await service.list_for_date("u1", "org1", "2026-10-19")
        task_repo.apply_batch.assert_not_awaited()
        assert [t.id for t in result] == ["f1", "b1"]


class TestUpdateAndDelete:
    async def test_other_users_task_is_forbidden(self, service, repos):
        task_repo, _ = repos
        task_repo.get = AsyncMock(return_value=_task("x", user_id="someone-else"))
        with pytest.raises(AuthorizationException):
            await service.update_task("u1", "org1", "x", {"title": "Mine"})

    async def test_task_of_another_org_is_not_found(self, service, repos):
        task_repo, _ = repos
        task_repo.get = AsyncMock(return_value=None)
        with pytest.raises(ResourceNotFoundException):
            await service.delete_task("u1", "org1", "x")

    async def test_completing_sets_completed_at(self, service, repos):
        task_repo, _ = repos
        task_repo.get = AsyncMock(return_value=_task("x"))
        await service.update_task("u1", "org1", "x", {"status": "completed", "user_id": "hacker"})
        updates = task_repo.update.await_args.args[1]
        assert updates["status"] == "completed"
        assert updates["completed_at"] is not None
        assert "user_id" not in updates

    async def test_renaming_program_task_locks_it(self, service, repos):
        task_repo, _ = repos
        task_repo.get = AsyncMock(
            return_value=_task("x", source_type=TaskSourceType.PROGRAM_DAY)
        )
        await service.update_task("u1", "org1", "x", {"title": "My words"})
        assert task_repo.update.await_args.args[1]["client_locked"] is True

    async def test_moving_into_full_focus_fails(self, service, repos):
        task_repo, _ = repos
        task_repo.get = AsyncMock(return_value=_task("x", TaskListType.BACKLOG))
        task_repo.list_for_date.return_value = [_task("a"), _task("b")]
        with pytest.raises(ValidationException):
            await service.update_task("u1", "org1", "x", {"list_type": "focus"})

    async def test_program_tasks_are_soft_deleted(self, service, repos):
        task_repo, _ = repos
        task_repo.get = AsyncMock(return_value=_task("x", source_type=TaskSourceType.PROGRAM))
        await service.delete_task("u1", "org1", "x")
        task_repo.update.assert_awaited_once_with(
            "x", {"status": "deleted", "client_locked": True}
        )
        task_repo.delete.assert_not_awaited()

    async def test_user_tasks_are_hard_deleted(self, service, repos):
        task_repo, _ = repos
        task_repo.get = AsyncMock(return_value=_task("x"))
        await service.delete_task("u1", "org1", "x")
        task_repo.delete.assert_awaited_once_with("x")
