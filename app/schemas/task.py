"""Daily task API schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from app.domain.enums import TaskListType, TaskSourceType, TaskStatus


class TaskCreateRequest(BaseModel):
    title: str = Field(..., min_length=1, max_length=500)
    date: str = Field(..., description="YYYY-MM-DD")
    is_private: bool = False
    list_type: TaskListType | None = Field(
        default=None, description="Defaults to focus while slots are free"
    )


class TaskUpdate(BaseModel):
    title: str | None = Field(default=None, min_length=1, max_length=500)
    status: TaskStatus | None = None
    list_type: TaskListType | None = None
    order: int | None = Field(default=None, ge=0)
    is_private: bool | None = None
    date: str | None = None


class TaskResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    title: str
    status: TaskStatus
    list_type: TaskListType
    order: int
    date: str
    is_private: bool
    source_type: TaskSourceType
    program_enrollment_id: str | None = None
    instance_id: str | None = None
    program_day_index: int | None = None
    client_locked: bool = False
    completed_at: datetime | None = None
    moved_to_backlog_at: datetime | None = None
