"""Bookable slot computation."""

from datetime import date, datetime, timezone

import pytest

from app.domain.availability import (
    BusyInterval,
    compute_available_slots,
    default_availability,
    js_day_of_week,
    validate_weekly_schedule,
)

MONDAY = date(2026, 10, 19)
NOW = datetime(2026, 10, 18, 12, 0, tzinfo=timezone.utc)


def _utc(hour: int, minute: int = 0, day: int = 19) -> datetime:
    return datetime(2026, 10, day, hour, minute, tzinfo=timezone.utc)


def _availability(**overrides) -> dict:
    return {
        "weekly_schedule": {"1": [{"start": "09:00", "end": "11:00"}]},
        "blocked_slots": [],
        "default_duration": 30,
        "buffer_between_calls": 15,
        "timezone": "UTC",
        "min_notice_hours": 0,
        **overrides,
    }


def test_js_day_of_week():
    assert js_day_of_week(date(2026, 10, 18)) == 0
    assert js_day_of_week(MONDAY) == 1
    assert js_day_of_week(date(2026, 10, 24)) == 6


def test_slots_step_by_duration_plus_buffer():
    slots = compute_available_slots(_availability(), [], MONDAY, MONDAY, NOW)
    assert [s.start for s in slots] == [_utc(9), _utc(9, 45), _utc(10, 30)]
    assert all(s.duration == 30 for s in slots)
    assert slots[-1].end == _utc(11)


def test_busy_interval_is_widened_by_buffer():
    busy = [BusyInterval(_utc(9, 45), _utc(10, 15))]
    slots = compute_available_slots(_availability(), busy, MONDAY, MONDAY, NOW)
    assert [s.start for s in slots] == [_utc(9), _utc(10, 30)]


def test_blocked_slot_and_min_notice():
    availability = _availability(
        blocked_slots=[{"start": _utc(10, 30), "end": _utc(11)}], min_notice_hours=1
    )
    now = _utc(8)
    slots = compute_available_slots(availability, [], MONDAY, MONDAY, now)
    assert [s.start for s in slots] == [_utc(9, 45)]


def test_windows_are_in_the_coach_timezone():
    availability = _availability(timezone="America/New_York")
    slots = compute_available_slots(availability, [], MONDAY, MONDAY, NOW, duration=60)
    assert slots[0].start == _utc(13)
    assert [s.duration for s in slots] == [60]


def test_days_without_windows_have_no_slots():
    sunday = date(2026, 10, 25)
    assert compute_available_slots(_availability(), [], sunday, sunday, NOW) == []


def test_default_availability_is_weekdays():
    schedule = default_availability()["weekly_schedule"]
    assert schedule["0"] == [] and schedule["6"] == []
    assert schedule["3"] == [{"start": "09:00", "end": "17:00"}]


@pytest.mark.parametrize(
    "schedule",
    [
        {"7": []},
        {"1": [{"start": "9:00", "end": "10:00"}]},
        {"1": [{"start": "10:00", "end": "10:00"}]},
    ],
)
def test_invalid_weekly_schedule(schedule):
    with pytest.raises(ValueError):
        validate_weekly_schedule(schedule)
