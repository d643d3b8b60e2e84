"""Program template API schemas (programs, modules, weeks, days, cohorts)."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from app.domain.enums import (
    CohortStatus,
    ProgramType,
    TaskDistribution,
    WeekDistribution,
)


class ProgramCreateRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    slug: str = Field(..., min_length=3, max_length=63)
    type: ProgramType = ProgramType.INDIVIDUAL
    description: str | None = Field(default=None, max_length=5000)
    length_days: int = Field(default=30, ge=1, le=730)
    include_weekends: bool = True
    task_distribution: TaskDistribution = TaskDistribution.SPREAD
    price_in_cents: int = Field(default=0, ge=0)
    currency: str = Field(default="usd", min_length=3, max_length=3)
    squad_capacity: int | None = Field(default=None, ge=1)
    daily_focus_slots: int | None = Field(default=None, ge=1, le=10)
    is_published: bool = False


class ProgramUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=200)
    slug: str | None = Field(default=None, min_length=3, max_length=63)
    type: ProgramType | None = None
    description: str | None = Field(default=None, max_length=5000)
    length_days: int | None = Field(default=None, ge=1, le=730)
    include_weekends: bool | None = None
    task_distribution: TaskDistribution | None = None
    price_in_cents: int | None = Field(default=None, ge=0)
    currency: str | None = Field(default=None, min_length=3, max_length=3)
    squad_capacity: int | None = Field(default=None, ge=1)
    daily_focus_slots: int | None = Field(default=None, ge=1, le=10)
    is_published: bool | None = None


class ProgramResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    organization_id: str
    name: str
    slug: str
    type: ProgramType
    description: str | None = None
    length_days: int
    include_weekends: bool
    task_distribution: TaskDistribution
    price_in_cents: int
    currency: str
    squad_capacity: int | None = None
    daily_focus_slots: int | None = None
    is_published: bool
    created_at: datetime | None = None
    updated_at: datetime | None = None


class ModuleCreateRequest(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    order: int | None = Field(default=None, ge=0)


class ModuleResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    program_id: str
    title: str
    order: int
    start_day_index: int | None = None
    end_day_index: int | None = None


class TemplateTask(BaseModel):
    """A task as stored on a template week or day."""

    model_config = ConfigDict(extra="allow")

    id: str | None = None
    label: str = Field(..., min_length=1, max_length=500)
    type: str | None = None
    is_primary: bool = False
    day_tag: str | int | None = None


class WeekUpdate(BaseModel):
    title: str | None = Field(default=None, max_length=200)
    module_id: str | None = None
    tasks: list[TemplateTask] | None = None
    distribution: WeekDistribution | None = None


class WeekResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    program_id: str
    week_number: int
    title: str | None = None
    module_id: str | None = None
    tasks: list[dict[str, Any]] = Field(default_factory=list)
    distribution: WeekDistribution | None = None
    start_day_index: int
    end_day_index: int


class DayUpdate(BaseModel):
    title: str | None = Field(default=None, max_length=200)
    summary: str | None = Field(default=None, max_length=5000)
    tasks: list[TemplateTask] | None = None


class DayResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    program_id: str
    day_index: int
    title: str | None = None
    summary: str | None = None
    tasks: list[dict[str, Any]] = Field(default_factory=list)


class CohortCreateRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    start_date: str | None = Field(default=None, description="YYYY-MM-DD")
    end_date: str | None = Field(default=None, description="YYYY-MM-DD")
    max_enrollment: int | None = None


class CohortResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    program_id: str
    name: str
    start_date: str | None = None
    end_date: str | None = None
    max_enrollment: int | None = None
    status: CohortStatus
    created_at: datetime | None = None


class SyncWeeksResponse(BaseModel):
    created: int
    existing: int


class RecalculateResponse(BaseModel):
    weeks_updated: int
    modules_updated: int


class DistributeResponse(BaseModel):
    created: int
    updated: int
    skipped: int
