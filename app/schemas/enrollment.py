"""Enrollment and program instance API schemas."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from app.domain.enums import EnrollmentStatus, InstanceType, WeekDistribution


class EnrollRequest(BaseModel):
    """Enroll the caller in a free program (paid programs go through billing)."""

    program_id: str
    cohort_id: str | None = None
    start_date: str | None = Field(default=None, description="YYYY-MM-DD")


class EnrollmentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: str
    program_id: str
    organization_id: str
    status: EnrollmentStatus
    start_date: str
    cohort_id: str | None = None
    instance_id: str | None = None
    squad_id: str | None = None
    amount_paid: int = 0
    discount_code: str | None = None
    created_at: datetime | None = None
    stopped_at: datetime | None = None
    completed_at: datetime | None = None


class InstanceResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    program_id: str
    organization_id: str
    type: InstanceType
    start_date: str
    length_days: int
    include_weekends: bool
    daily_focus_slots: int
    weeks: list[dict[str, Any]] = Field(default_factory=list)
    cohort_id: str | None = None
    enrollment_id: str | None = None
    user_id: str | None = None
    template_synced_at: datetime | None = None


class InstanceTask(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: str | None = None
    label: str = Field(..., min_length=1, max_length=500)
    type: str | None = None
    is_primary: bool = False


class InstanceDayUpdate(BaseModel):
    title: str | None = Field(default=None, max_length=200)
    summary: str | None = Field(default=None, max_length=5000)
    tasks: list[InstanceTask] | None = None


class InstanceWeekUpdate(BaseModel):
    weekly_tasks: list[InstanceTask] | None = None
    distribution: WeekDistribution | None = None
