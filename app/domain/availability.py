"""Coach availability and bookable slot computation.

Weekly schedules are keyed by day of week as strings "0".."6" with
"0" = Sunday (Firestore map keys must be strings). Window times are
"HH:MM" wall-clock times in the coach's timezone; all computed slots are
timezone-aware UTC datetimes.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone
from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

DEFAULT_TIMEZONE = "America/New_York"
DEFAULT_DURATION_MINUTES = 60
DEFAULT_BUFFER_MINUTES = 15
DEFAULT_ADVANCE_BOOKING_DAYS = 30
DEFAULT_MIN_NOTICE_HOURS = 24
MAX_SLOT_RANGE_DAYS = 60

_HHMM = re.compile(r"^([01]\d|2[0-3]):([0-5]\d)$")


def default_weekly_schedule() -> dict[str, list[dict[str, str]]]:
    """Monday to Friday, 09:00-17:00."""
    workday = [{"start": "09:00", "end": "17:00"}]
    return {
        "0": [],
        "1": list(workday),
        "2": list(workday),
        "3": list(workday),
        "4": list(workday),
        "5": list(workday),
        "6": [],
    }


def default_availability() -> dict[str, Any]:
    return {
        "weekly_schedule": default_weekly_schedule(),
        "blocked_slots": [],
        "default_duration": DEFAULT_DURATION_MINUTES,
        "buffer_between_calls": DEFAULT_BUFFER_MINUTES,
        "timezone": DEFAULT_TIMEZONE,
        "advance_booking_days": DEFAULT_ADVANCE_BOOKING_DAYS,
        "min_notice_hours": DEFAULT_MIN_NOTICE_HOURS,
    }


def js_day_of_week(d: date) -> int:
    """0 = Sunday ... 6 = Saturday."""
    return (d.weekday() + 1) % 7


def parse_hhmm(value: str) -> time:
    match = _HHMM.match(value or "")
    if not match:
        raise ValueError(f"Invalid time {value!r}; expected HH:MM")
    return time(int(match.group(1)), int(match.group(2)))


def resolve_timezone(name: str | None) -> ZoneInfo:
    try:
        return ZoneInfo(name or DEFAULT_TIMEZONE)
    except (ZoneInfoNotFoundError, ValueError) as e:
        raise ValueError(f"Unknown timezone {name!r}") from e


def overlaps(
    start: datetime, end: datetime, other_start: datetime, other_end: datetime
) -> bool:
    """Half-open interval overlap: touching intervals do not overlap."""
    return start < other_end and end > other_start


@dataclass(frozen=True)
class BusyInterval:
    start: datetime
    end: datetime


@dataclass(frozen=True)
class Slot:
    start: datetime
    end: datetime
    duration: int


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def compute_available_slots(
    availability: dict[str, Any],
    busy: list[BusyInterval],
    range_start: date,
    range_end: date,
    now: datetime,
    duration: int | None = None,
) -> list[Slot]:
    """Bookable slots between range_start and range_end (dates, inclusive).

    Each schedule window of each day is walked in steps of duration + buffer.
    A slot is kept when it starts later than now + min notice, does not
    overlap a blocked slot, and does not overlap any busy interval widened
    by the buffer on both sides.

    Args:
        availability: Coach availability document (see default_availability).
        busy: Busy intervals (existing events) in UTC.
        range_start: First date to consider.
        range_end: Last date to consider.
        now: Current instant (aware).
        duration: Slot length in minutes; defaults to the coach's default.
    """
    tz = resolve_timezone(availability.get("timezone"))
    length = int(duration or availability.get("default_duration") or DEFAULT_DURATION_MINUTES)
    buffer = int(availability.get("buffer_between_calls") or 0)
    min_notice = timedelta(hours=availability.get("min_notice_hours") or 0)
    schedule = availability.get("weekly_schedule") or {}
    blocked = [
        BusyInterval(_as_utc(b["start"]), _as_utc(b["end"]))
        for b in availability.get("blocked_slots") or []
        if isinstance(b.get("start"), datetime) and isinstance(b.get("end"), datetime)
    ]
    padding = timedelta(minutes=buffer)
    buffered_busy = [
        BusyInterval(_as_utc(b.start) - padding, _as_utc(b.end) + padding) for b in busy
    ]
    earliest = _as_utc(now) + min_notice
    step = timedelta(minutes=length + buffer)
    slot_length = timedelta(minutes=length)

    slots: list[Slot] = []
    current_date = range_start
    while current_date <= range_end:
        windows = schedule.get(str(js_day_of_week(current_date))) or []
        for window in windows:
            window_start = datetime.combine(
                current_date, parse_hhmm(window["start"]), tzinfo=tz
            ).astimezone(timezone.utc)
            window_end = datetime.combine(
                current_date, parse_hhmm(window["end"]), tzinfo=tz
            ).astimezone(timezone.utc)
            slot_start = window_start
            while slot_start + slot_length <= window_end:
                slot_end = slot_start + slot_length
                if slot_start > earliest and not any(
                    overlaps(slot_start, slot_end, b.start, b.end)
                    for b in (*blocked, *buffered_busy)
                ):
                    slots.append(Slot(slot_start, slot_end, length))
                slot_start += step
        current_date += timedelta(days=1)
    return slots


def validate_weekly_schedule(schedule: dict[str, list[dict[str, str]]]) -> None:
    """Raise ValueError for unknown days, malformed times, or empty windows."""
    for day, windows in schedule.items():
        if day not in {str(i) for i in range(7)}:
            raise ValueError(f"Unknown day of week {day!r}; use 0 (Sunday) to 6")
        for window in windows:
            start = parse_hhmm(window.get("start", ""))
            end = parse_hhmm(window.get("end", ""))
            if start >= end:
                raise ValueError(f"Window {window['start']}-{window['end']} must end after it starts")
