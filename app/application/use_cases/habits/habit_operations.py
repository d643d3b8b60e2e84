"""Habit operations: CRUD plus completion, skip and undo per date."""

from __future__ import annotations

import re
from datetime import date
from typing import Any

from app.application.dtos.habit import HabitResult
from app.application.interfaces.repositories import IHabitRepository
from app.domain.calendar_weeks import parse_date
from app.domain.enums import HabitFrequency, HabitSource, HabitStatus
from app.domain.exceptions import (
    AuthorizationException,
    ResourceNotFoundException,
    ValidationException,
)
from app.domain.habit_schedule import (
    apply_completion,
    apply_skip,
    apply_undo,
    empty_progress,
    is_due,
    validate_frequency,
)
from app.shared.telemetry.tracing import traced

_REMINDER_TIME = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")
_EDITABLE_FIELDS = (
    "text",
    "linked_routine",
    "frequency_type",
    "frequency_value",
    "reminder",
    "target_repetitions",
)


def _validate_fields(fields: dict[str, Any]) -> None:
    if "text" in fields and not (fields["text"] or "").strip():
        raise ValidationException("Habit text is required", field="text")
    if "frequency_type" in fields:
        try:
            validate_frequency(
                HabitFrequency(fields["frequency_type"]), fields.get("frequency_value")
            )
        except ValueError as e:
            raise ValidationException(str(e), field="frequency_value") from e
    reminder = fields.get("reminder")
    if reminder is not None:
        if not _REMINDER_TIME.match(str(reminder.get("time") or "")):
            raise ValidationException("Reminder time must be HH:MM", field="reminder")
    target = fields.get("target_repetitions")
    if target is not None and target < 1:
        raise ValidationException(
            "target_repetitions must be positive", field="target_repetitions"
        )


def _day(value: date | str) -> date:
    try:
        return parse_date(value)
    except ValueError as e:
        raise ValidationException("date must be YYYY-MM-DD", field="date") from e


class HabitService:
    def __init__(self, habit_repo: IHabitRepository) -> None:
        self.habit_repo = habit_repo

    async def _get_owned(
        self, user_id: str, organization_id: str, habit_id: str
    ) -> HabitResult:
        habit = await self.habit_repo.get(habit_id)
        if not habit or habit.organization_id != organization_id:
            raise ResourceNotFoundException("habit", habit_id)
        if habit.user_id != user_id:
            raise AuthorizationException("habit", "modify")
        return habit

    @traced("habit.create")
    async def create_habit(
        self, user_id: str, organization_id: str, data: dict[str, Any]
    ) -> HabitResult:
        fields = {k: v for k, v in data.items() if k in _EDITABLE_FIELDS}
        fields.setdefault("frequency_type", HabitFrequency.DAILY.value)
        fields["text"] = (fields.get("text") or "").strip()
        _validate_fields(fields)
        return await self.habit_repo.create({
            **fields,
            "user_id": user_id,
            "organization_id": organization_id,
            "status": HabitStatus.ACTIVE.value,
            "source": data.get("source") or HabitSource.USER.value,
            "program_id": data.get("program_id"),
            "progress": empty_progress(),
        })

    async def list_habits(
        self, user_id: str, organization_id: str, include_archived: bool = False
    ) -> list[HabitResult]:
        habits = await self.habit_repo.list_for_user(user_id, organization_id)
        if include_archived:
            return habits
        return [h for h in habits if h.status is not HabitStatus.ARCHIVED]

    @staticmethod
    def is_due(habit: HabitResult, on: date) -> bool:
        return is_due(habit.as_document(), on)

    async def update_habit(
        self, user_id: str, organization_id: str, habit_id: str, patch: dict[str, Any]
    ) -> HabitResult:
        habit = await self._get_owned(user_id, organization_id, habit_id)
        updates = {k: v for k, v in patch.items() if k in _EDITABLE_FIELDS}
        if "frequency_value" in updates and "frequency_type" not in updates:
            updates["frequency_type"] = habit.frequency_type.value
        _validate_fields(updates)
        if "text" in updates:
            updates["text"] = updates["text"].strip()
        return await self.habit_repo.update(habit_id, updates)

    async def archive_habit(
        self, user_id: str, organization_id: str, habit_id: str
    ) -> HabitResult:
        await self._get_owned(user_id, organization_id, habit_id)
        return await self.habit_repo.update(
            habit_id, {"status": HabitStatus.ARCHIVED.value}
        )

    @traced("habit.complete")
    async def complete_habit(
        self, user_id: str, organization_id: str, habit_id: str, on: date | str
    ) -> HabitResult:
        """Record a completion for a date; repeating the same date changes nothing."""
        habit = await self._get_owned(user_id, organization_id, habit_id)
        if habit.status is HabitStatus.ARCHIVED:
            raise ValidationException("Archived habits cannot be completed")
        return await self.habit_repo.update(
            habit_id, apply_completion(habit.as_document(), _day(on))
        )

    async def skip_habit(
        self, user_id: str, organization_id: str, habit_id: str, on: date | str
    ) -> HabitResult:
        habit = await self._get_owned(user_id, organization_id, habit_id)
        return await self.habit_repo.update(
            habit_id, apply_skip(habit.as_document(), _day(on))
        )

    async def undo_habit(
        self, user_id: str, organization_id: str, habit_id: str, on: date | str
    ) -> HabitResult:
        habit = await self._get_owned(user_id, organization_id, habit_id)
        return await self.habit_repo.update(
            habit_id, apply_undo(habit.as_document(), _day(on))
        )
