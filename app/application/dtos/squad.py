"""DTOs for squads (small peer groups)."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime


@dataclass(frozen=True)
class SquadResult:
    id: str
    organization_id: str
    name: str
    member_ids: list[str] = field(default_factory=list)
    program_id: str | None = None
    cohort_id: str | None = None
    coach_id: str | None = None
    capacity: int | None = None
    is_closed: bool = False
    created_at: datetime | None = None

    @property
    def member_count(self) -> int:
        return len(self.member_ids)


@dataclass(frozen=True)
class SquadAssignment:
    squad_id: str
    is_new: bool
    squad_name: str
