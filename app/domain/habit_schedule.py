"""Habit frequency rules and progress bookkeeping.

Weekly specific days use 0 = Monday ... 6 = Sunday. Monthly specific days
are days of the month (1-31). Progress dates are ISO "YYYY-MM-DD" strings.
"""

from __future__ import annotations

from datetime import date
from typing import Any

from app.domain.enums import HabitFrequency, HabitStatus


def validate_frequency(frequency_type: HabitFrequency, frequency_value: Any) -> None:
    """Raise ValueError when frequency_value does not fit frequency_type."""
    if frequency_type is HabitFrequency.DAILY:
        return
    if frequency_type in (
        HabitFrequency.WEEKLY_SPECIFIC_DAYS,
        HabitFrequency.MONTHLY_SPECIFIC_DAYS,
    ):
        low, high = (0, 6) if frequency_type is HabitFrequency.WEEKLY_SPECIFIC_DAYS else (1, 31)
        if not isinstance(frequency_value, list) or not frequency_value:
            raise ValueError(f"{frequency_type.value} needs a non-empty list of days")
        for day in frequency_value:
            if isinstance(day, bool) or not isinstance(day, int) or not low <= day <= high:
                raise ValueError(f"Day {day!r} out of range {low}-{high}")
        return
    limit = 7 if frequency_type is HabitFrequency.WEEKLY_NUMBER else 31
    if (
        isinstance(frequency_value, bool)
        or not isinstance(frequency_value, int)
        or not 1 <= frequency_value <= limit
    ):
        raise ValueError(f"{frequency_type.value} needs a count between 1 and {limit}")


def empty_progress() -> dict[str, Any]:
    return {
        "current_count": 0,
        "last_completed_date": None,
        "completion_dates": [],
        "skip_dates": [],
    }


def _same_iso_week(a: date, b: date) -> bool:
    return a.isocalendar()[:2] == b.isocalendar()[:2]


def completions_in_period(habit: dict[str, Any], on: date) -> int:
    """Completions in the ISO week (weekly_number) or calendar month (monthly_number) of `on`."""
    frequency = HabitFrequency(habit.get("frequency_type", HabitFrequency.DAILY))
    dates = [date.fromisoformat(d) for d in (habit.get("progress") or {}).get("completion_dates", [])]
    if frequency is HabitFrequency.WEEKLY_NUMBER:
        return sum(1 for d in dates if _same_iso_week(d, on))
    if frequency is HabitFrequency.MONTHLY_NUMBER:
        return sum(1 for d in dates if (d.year, d.month) == (on.year, on.month))
    return 0


def is_due(habit: dict[str, Any], on: date) -> bool:
    """Whether the habit should be shown as to-do on the given date."""
    if habit.get("status", HabitStatus.ACTIVE.value) != HabitStatus.ACTIVE.value:
        return False
    progress = habit.get("progress") or {}
    day = on.isoformat()
    if day in progress.get("completion_dates", []) or day in progress.get("skip_dates", []):
        return False
    frequency = HabitFrequency(habit.get("frequency_type", HabitFrequency.DAILY))
    value = habit.get("frequency_value")
    if frequency is HabitFrequency.DAILY:
        return True
    if frequency is HabitFrequency.WEEKLY_SPECIFIC_DAYS:
        return on.weekday() in (value or [])
    if frequency is HabitFrequency.MONTHLY_SPECIFIC_DAYS:
        return on.day in (value or [])
    return completions_in_period(habit, on) < int(value or 0)


def apply_completion(habit: dict[str, Any], on: date) -> dict[str, Any]:
    """Progress and status after completing on a date. Idempotent per date."""
    progress = {**empty_progress(), **(habit.get("progress") or {})}
    day = on.isoformat()
    status = habit.get("status", HabitStatus.ACTIVE.value)
    if day in progress["completion_dates"]:
        return {"progress": progress, "status": status}
    completion_dates = sorted([*progress["completion_dates"], day])
    progress = {
        **progress,
        "current_count": progress["current_count"] + 1,
        "completion_dates": completion_dates,
        "last_completed_date": completion_dates[-1],
        "skip_dates": [d for d in progress["skip_dates"] if d != day],
    }
    target = habit.get("target_repetitions")
    if target and progress["current_count"] >= target:
        status = HabitStatus.COMPLETED.value
    return {"progress": progress, "status": status}


def apply_skip(habit: dict[str, Any], on: date) -> dict[str, Any]:
    progress = {**empty_progress(), **(habit.get("progress") or {})}
    day = on.isoformat()
    if day not in progress["skip_dates"]:
        progress = {**progress, "skip_dates": sorted([*progress["skip_dates"], day])}
    return {"progress": progress}


def apply_undo(habit: dict[str, Any], on: date) -> dict[str, Any]:
    """Remove a completion or skip recorded for a date.

    Undoing a completion of a habit that had reached its target makes it
    active again.
    """
    progress = {**empty_progress(), **(habit.get("progress") or {})}
    day = on.isoformat()
    status = habit.get("status", HabitStatus.ACTIVE.value)
    if day in progress["completion_dates"]:
        completion_dates = [d for d in progress["completion_dates"] if d != day]
        progress = {
            **progress,
            "current_count": max(progress["current_count"] - 1, 0),
            "completion_dates": completion_dates,
            "last_completed_date": completion_dates[-1] if completion_dates else None,
        }
        if status == HabitStatus.COMPLETED.value:
            status = HabitStatus.ACTIVE.value
    progress = {**progress, "skip_dates": [d for d in progress["skip_dates"] if d != day]}
    return {"progress": progress, "status": status}
