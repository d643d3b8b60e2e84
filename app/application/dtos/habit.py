"""DTOs for habits."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from app.domain.enums import HabitFrequency, HabitSource, HabitStatus


@dataclass(frozen=True)
class HabitResult:
    id: str
    user_id: str
    organization_id: str
    text: str
    frequency_type: HabitFrequency
    frequency_value: list[int] | int | None
    status: HabitStatus = HabitStatus.ACTIVE
    source: HabitSource = HabitSource.USER
    linked_routine: str | None = None
    reminder: dict[str, Any] | None = None
    target_repetitions: int | None = None
    progress: dict[str, Any] = field(default_factory=dict)
    program_id: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    def as_document(self) -> dict[str, Any]:
        """Plain values for the habit schedule rules."""
        return {
            "status": self.status.value,
            "frequency_type": self.frequency_type.value,
            "frequency_value": self.frequency_value,
            "target_repetitions": self.target_repetitions,
            "progress": self.progress,
        }
