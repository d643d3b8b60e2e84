"""Daily task operations (focus and backlog lists)."""

from __future__ import annotations

import re
from typing import Any

from app.application.dtos.task import TaskResult
from app.application.interfaces.repositories import IOrganizationRepository, ITaskRepository
from app.domain.calendar_weeks import parse_date
from app.domain.enums import TaskListType, TaskSourceType, TaskStatus
from app.domain.exceptions import (
    AuthorizationException,
    ResourceNotFoundException,
    ValidationException,
)
from app.shared.telemetry.logging import get_logger
from app.shared.telemetry.tracing import traced
from app.shared.utils.datetime import utc_now

logger = get_logger(__name__)

_ISO_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_EDITABLE_FIELDS = ("title", "status", "list_type", "order", "is_private", "date")


def _validate_date(value: str | None) -> str:
    if not value or not _ISO_DATE.match(value):
        raise ValidationException("date must be YYYY-MM-DD", field="date")
    try:
        parse_date(value)
    except ValueError as e:
        raise ValidationException("date must be YYYY-MM-DD", field="date") from e
    return value


def _sorted(tasks: list[TaskResult]) -> list[TaskResult]:
    return sorted(
        tasks, key=lambda t: (t.list_type is not TaskListType.FOCUS, t.order)
    )


def _next_order(tasks: list[TaskResult], list_type: TaskListType) -> int:
    return max((t.order for t in tasks if t.list_type is list_type), default=-1) + 1


def _focus_count(tasks: list[TaskResult], exclude_id: str | None = None) -> int:
    return sum(
        1
        for t in tasks
        if t.list_type is TaskListType.FOCUS
        and t.status is not TaskStatus.DELETED
        and t.id != exclude_id
    )


class TaskService:
    """A user's tasks within the active organization."""

    def __init__(
        self,
        task_repo: ITaskRepository,
        org_repo: IOrganizationRepository,
        default_focus_slots: int = 3,
    ) -> None:
        self.task_repo = task_repo
        self.org_repo = org_repo
        self.default_focus_slots = default_focus_slots

    async def _focus_slots(self, organization_id: str) -> int:
        settings = await self.org_repo.get_settings(organization_id)
        if settings and settings.daily_focus_slots:
            return settings.daily_focus_slots
        return self.default_focus_slots

    async def _get_owned(
        self, user_id: str, organization_id: str, task_id: str
    ) -> TaskResult:
        task = await self.task_repo.get(task_id)
        if not task or task.organization_id != organization_id:
            raise ResourceNotFoundException("task", task_id)
        if task.user_id != user_id:
            raise AuthorizationException("task", "modify")
        return task

    @traced("task.list_for_date")
    async def list_for_date(
        self, user_id: str, organization_id: str, date: str
    ) -> list[TaskResult]:
        """Tasks for date, after carrying unfinished earlier tasks forward.

        Pending tasks from earlier dates move to this date's backlog and
        completed backlog tasks from earlier dates are removed.
        """
        date = _validate_date(date)
        current = await self.task_repo.list_for_date(user_id, organization_id, date)
        earlier = await self.task_repo.list_before_date(user_id, organization_id, date)

        order = _next_order(current, TaskListType.BACKLOG)
        now = utc_now()
        updates: dict[str, dict[str, Any]] = {}
        deletes: list[str] = []
        for task in sorted(earlier, key=lambda t: (t.date, t.order)):
            if task.status is TaskStatus.PENDING:
                fields: dict[str, Any] = {
                    "date": date,
                    "list_type": TaskListType.BACKLOG.value,
                    "order": order,
                }
                if task.moved_to_backlog_at is None:
                    fields["moved_to_backlog_at"] = now
                updates[task.id] = fields
                order += 1
            elif task.status is TaskStatus.COMPLETED and task.list_type is TaskListType.BACKLOG:
                deletes.append(task.id)
        if updates or deletes:
            await self.task_repo.apply_batch(updates=updates, deletes=deletes)
            logger.debug(
                "Migrated %d and removed %d earlier tasks for user %s",
                len(updates),
                len(deletes),
                user_id,
            )
            current = await self.task_repo.list_for_date(user_id, organization_id, date)
        return _sorted([t for t in current if t.status is not TaskStatus.DELETED])

    @traced("task.create")
    async def create_task(
        self,
        user_id: str,
        organization_id: str,
        title: str,
        date: str,
        is_private: bool = False,
        list_type: TaskListType | None = None,
    ) -> TaskResult:
        """Create a user task; focus overflows into the backlog."""
        title = (title or "").strip()
        if not title:
            raise ValidationException("Title is required", field="title")
        date = _validate_date(date)
        current = [
            t
            for t in await self.task_repo.list_for_date(user_id, organization_id, date)
            if t.status is not TaskStatus.DELETED
        ]
        target = list_type or TaskListType.FOCUS
        if target is TaskListType.FOCUS and _focus_count(current) >= await self._focus_slots(
            organization_id
        ):
            target = TaskListType.BACKLOG
        return await self.task_repo.create({
            "user_id": user_id,
            "organization_id": organization_id,
            "title": title,
            "status": TaskStatus.PENDING.value,
            "list_type": target.value,
            "order": _next_order(current, target),
            "date": date,
            "is_private": is_private,
            "source_type": TaskSourceType.USER.value,
            "client_locked": False,
        })

    @traced("task.update")
    async def update_task(
        self,
        user_id: str,
        organization_id: str,
        task_id: str,
        patch: dict[str, Any],
    ) -> TaskResult:
        task = await self._get_owned(user_id, organization_id, task_id)
        updates = {k: v for k, v in patch.items() if k in _EDITABLE_FIELDS}
        if "title" in updates:
            updates["title"] = (updates["title"] or "").strip()
            if not updates["title"]:
                raise ValidationException("Title is required", field="title")
            if task.is_program_task and updates["title"] != task.title:
                updates["client_locked"] = True
        if "date" in updates:
            updates["date"] = _validate_date(updates["date"])

        status = updates.get("status")
        if status is not None:
            status = TaskStatus(status)
            updates["status"] = status.value
            if status is TaskStatus.COMPLETED and task.status is not TaskStatus.COMPLETED:
                updates["completed_at"] = utc_now()
            elif status is TaskStatus.PENDING:
                updates["completed_at"] = None

        list_type = updates.get("list_type")
        if list_type is not None:
            list_type = TaskListType(list_type)
            updates["list_type"] = list_type.value
            if list_type is TaskListType.FOCUS and task.list_type is not TaskListType.FOCUS:
                on_date = await self.task_repo.list_for_date(
                    user_id, organization_id, updates.get("date", task.date)
                )
                slots = await self._focus_slots(organization_id)
                if _focus_count(on_date, exclude_id=task.id) >= slots:
                    raise ValidationException(
                        f"Focus already holds {slots} tasks", field="list_type"
                    )
            if list_type is TaskListType.BACKLOG and task.moved_to_backlog_at is None:
                updates["moved_to_backlog_at"] = utc_now()
        return await self.task_repo.update(task_id, updates)

    async def delete_task(self, user_id: str, organization_id: str, task_id: str) -> None:
        """Remove a task. Program tasks are soft deleted so syncing does not recreate them."""
        task = await self._get_owned(user_id, organization_id, task_id)
        if task.is_program_task:
            await self.task_repo.update(
                task_id, {"status": TaskStatus.DELETED.value, "client_locked": True}
            )
            return
        await self.task_repo.delete(task_id)
