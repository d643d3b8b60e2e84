"""DTOs for program templates (programs, modules, weeks, days, cohorts)."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from app.domain.enums import (
    CohortStatus,
    ProgramType,
    TaskDistribution,
    WeekDistribution,
)


@dataclass(frozen=True)
class ProgramResult:
    id: str
    organization_id: str
    name: str
    slug: str
    type: ProgramType = ProgramType.INDIVIDUAL
    description: str | None = None
    length_days: int = 30
    include_weekends: bool = True
    task_distribution: TaskDistribution = TaskDistribution.SPREAD
    price_in_cents: int = 0
    currency: str = "usd"
    squad_capacity: int | None = None
    daily_focus_slots: int | None = None
    is_published: bool = False
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def is_paid(self) -> bool:
        return self.price_in_cents > 0


@dataclass(frozen=True)
class ProgramModuleResult:
    id: str
    program_id: str
    organization_id: str
    title: str
    order: int = 0
    start_day_index: int | None = None
    end_day_index: int | None = None


@dataclass(frozen=True)
class ProgramWeekResult:
    """Template week. tasks are the week's tasks before placement on days."""

    id: str
    program_id: str
    organization_id: str
    week_number: int
    title: str | None = None
    module_id: str | None = None
    tasks: list[dict[str, Any]] = field(default_factory=list)
    distribution: WeekDistribution | None = None
    start_day_index: int = 0
    end_day_index: int = 0


@dataclass(frozen=True)
class ProgramDayResult:
    id: str
    program_id: str
    organization_id: str
    day_index: int
    title: str | None = None
    summary: str | None = None
    tasks: list[dict[str, Any]] = field(default_factory=list)


@dataclass(frozen=True)
class CohortResult:
    id: str
    program_id: str
    organization_id: str
    name: str
    start_date: str | None = None
    end_date: str | None = None
    max_enrollment: int | None = None
    status: CohortStatus = CohortStatus.UPCOMING
    created_at: datetime | None = None
