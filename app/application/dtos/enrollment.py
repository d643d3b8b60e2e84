"""DTOs for program enrollments and running program instances."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from app.domain.enums import EnrollmentStatus, InstanceType


@dataclass(frozen=True)
class EnrollmentResult:
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
    payment_intent_id: str | None = None
    discount_code: str | None = None
    created_at: datetime | None = None
    stopped_at: datetime | None = None
    completed_at: datetime | None = None


@dataclass(frozen=True)
class ProgramInstanceResult:
    """Materialized copy of a program for one cohort or one enrollment.

    weeks holds InstanceWeek maps, each with a days list of InstanceDay maps.
    """

    id: str
    program_id: str
    organization_id: str
    type: InstanceType
    start_date: str
    length_days: int
    include_weekends: bool
    daily_focus_slots: int
    weeks: list[dict[str, Any]] = field(default_factory=list)
    cohort_id: str | None = None
    enrollment_id: str | None = None
    user_id: str | None = None
    template_synced_at: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    def find_day(self, global_day_index: int) -> tuple[int, int] | None:
        """(week position, day position) of a global day, or None."""
        for wi, week in enumerate(self.weeks):
            for di, day in enumerate(week.get("days") or []):
                if day.get("global_day_index") == global_day_index:
                    return wi, di
        return None
