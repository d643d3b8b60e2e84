"""DTOs for daily user tasks (focus / backlog lists)."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from app.domain.enums import TaskListType, TaskSourceType, TaskStatus


@dataclass(frozen=True)
class TaskResult:
    """A task on a user's day."""

    id: str
    user_id: str
    organization_id: str
    title: str
    status: TaskStatus
    list_type: TaskListType
    order: int
    date: str
    is_private: bool = False
    source_type: TaskSourceType = TaskSourceType.USER
    program_enrollment_id: str | None = None
    instance_id: str | None = None
    instance_task_id: str | None = None
    program_day_index: int | None = None
    client_locked: bool = False
    completed_at: datetime | None = None
    moved_to_backlog_at: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def is_program_task(self) -> bool:
        return self.source_type.is_program
