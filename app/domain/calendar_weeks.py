"""Calendar-aligned program weeks.

A program runs for a number of content days starting on the enrollment (or
cohort) start date. Weeks are aligned to calendar weeks (Monday start):

- the onboarding week runs from the start date to the end of that calendar
  week (Sunday, or Friday for weekdays-only programs) and is week 1;
- regular weeks are full calendar weeks numbered from 2;
- the closing week is the last one and has week_number -1.

Day indices are 1-based across the whole program. Weekdays-only programs
never place a content day on Saturday or Sunday.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from datetime import date, datetime, timedelta

from app.domain.enums import CalendarWeekType

ONBOARDING_WEEK_NUMBER = 1
CLOSING_WEEK_NUMBER = -1


@dataclass(frozen=True)
class CalendarWeek:
    """One calendar-aligned week of a running program."""

    type: CalendarWeekType
    label: str
    week_number: int
    start_date: date
    end_date: date
    start_day_index: int
    end_day_index: int
    day_count: int

    def contains_day(self, day_index: int) -> bool:
        return self.start_day_index <= day_index <= self.end_day_index

    def to_dict(self) -> dict:
        data = asdict(self)
        data["type"] = self.type.value
        data["start_date"] = self.start_date.isoformat()
        data["end_date"] = self.end_date.isoformat()
        return data


@dataclass(frozen=True)
class ProgramDayPosition:
    """Where a calendar date falls inside a program."""

    week_index: int
    day_index: int
    global_day_index: int


def parse_date(value: date | str) -> date:
    """Accept a date, datetime or ISO string and return a date."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(value.split("T")[0])


def is_weekend(d: date) -> bool:
    return d.weekday() >= 5


def effective_start_date(start_date: date | str, include_weekends: bool = True) -> date:
    """Weekdays-only programs that start on a weekend begin the following Monday."""
    start = parse_date(start_date)
    if not include_weekends and is_weekend(start):
        return start + timedelta(days=7 - start.weekday())
    return start


def _add_program_days(start: date, days: int, include_weekends: bool) -> date:
    """Date of the program day `days` after start (0 returns start)."""
    if include_weekends:
        return start + timedelta(days=days)
    current = start
    while days > 0:
        current += timedelta(days=1)
        if not is_weekend(current):
            days -= 1
    return current


def _count_weekdays_between(start: date, end: date) -> int:
    """Weekdays between start and end, both inclusive."""
    count = 0
    current = start
    while current <= end:
        if not is_weekend(current):
            count += 1
        current += timedelta(days=1)
    return count


def calculate_calendar_weeks(
    start_date: date | str,
    length_days: int,
    include_weekends: bool = True,
) -> list[CalendarWeek]:
    """Split a program of length_days content days into calendar-aligned weeks.

    Args:
        start_date: Enrollment or cohort start date.
        length_days: Number of content days in the program.
        include_weekends: False for Mon-Fri programs.

    Returns:
        Ordered weeks; empty when length_days < 1.
    """
    if length_days < 1:
        return []
    start = effective_start_date(start_date, include_weekends)
    days_per_week = 7 if include_weekends else 5

    if include_weekends:
        days_in_first_week = 7 - start.weekday()
    else:
        days_in_first_week = max(5 - start.weekday(), 1)
    onboarding_days = min(days_in_first_week, length_days)
    onboarding_end = _add_program_days(start, onboarding_days - 1, include_weekends)

    onboarding_type = (
        CalendarWeekType.CLOSING
        if onboarding_days >= length_days
        else CalendarWeekType.ONBOARDING
    )
    weeks = [
        CalendarWeek(
            type=onboarding_type,
            label="Onboarding",
            week_number=ONBOARDING_WEEK_NUMBER,
            start_date=start,
            end_date=onboarding_end,
            start_day_index=1,
            end_day_index=onboarding_days,
            day_count=onboarding_days,
        )
    ]
    if onboarding_type is CalendarWeekType.CLOSING:
        return weeks

    current_day = onboarding_days + 1
    week_number = ONBOARDING_WEEK_NUMBER + 1
    monday = onboarding_end + timedelta(days=7 - onboarding_end.weekday())
    while current_day <= length_days:
        days_in_week = min(days_per_week, length_days - current_day + 1)
        is_last = current_day + days_in_week > length_days
        weeks.append(
            CalendarWeek(
                type=CalendarWeekType.CLOSING if is_last else CalendarWeekType.REGULAR,
                label="Closing" if is_last else f"Week {week_number}",
                week_number=CLOSING_WEEK_NUMBER if is_last else week_number,
                start_date=monday,
                end_date=_add_program_days(monday, days_in_week - 1, include_weekends),
                start_day_index=current_day,
                end_day_index=min(current_day + days_in_week - 1, length_days),
                day_count=days_in_week,
            )
        )
        current_day += days_in_week
        if not is_last:
            week_number += 1
        monday += timedelta(days=7)
    return weeks


def day_index_to_date(
    start_date: date | str, day_index: int, include_weekends: bool = True
) -> date:
    """Calendar date of a 1-based program day."""
    start = effective_start_date(start_date, include_weekends)
    return _add_program_days(start, max(day_index - 1, 0), include_weekends)


def date_to_day_index(
    start_date: date | str, target: date | str, include_weekends: bool = True
) -> int:
    """1-based program day for a calendar date.

    Returns 0 before the program starts and -1 for a weekend date in a
    weekdays-only program. No upper bound is applied.
    """
    start = effective_start_date(start_date, include_weekends)
    target_date = parse_date(target)
    if target_date < start:
        return 0
    if not include_weekends and is_weekend(target_date):
        return -1
    if include_weekends:
        return (target_date - start).days + 1
    return _count_weekdays_between(start, target_date)


def get_calendar_week_for_day(
    start_date: date | str,
    day_index: int,
    length_days: int,
    include_weekends: bool = True,
) -> CalendarWeek | None:
    if day_index < 1 or day_index > length_days:
        return None
    for week in calculate_calendar_weeks(start_date, length_days, include_weekends):
        if week.contains_day(day_index):
            return week
    return None


def get_current_calendar_week(
    start_date: date | str,
    length_days: int,
    include_weekends: bool = True,
    today: date | None = None,
) -> CalendarWeek | None:
    """Week containing today; None before the start. After the end, the closing week."""
    today = today or date.today()
    start = parse_date(start_date)
    if today < start:
        return None
    if include_weekends:
        current = (today - start).days + 1
    else:
        current = _count_weekdays_between(start, today)
    current = min(current, length_days)
    return get_calendar_week_for_day(start_date, current, length_days, include_weekends)


def calculate_program_day_for_date(
    start_date: date | str,
    target: date | str,
    total_days: int,
    include_weekends: bool = True,
) -> ProgramDayPosition | None:
    """Locate a calendar date inside the program (e.g. for a scheduled call).

    Returns None before the start, after the end, or on a weekend of a
    weekdays-only program.
    """
    global_day = date_to_day_index(start_date, target, include_weekends)
    if global_day <= 0 or global_day > total_days:
        return None
    weeks = calculate_calendar_weeks(start_date, total_days, include_weekends)
    for week_index, week in enumerate(weeks):
        if week.contains_day(global_day):
            return ProgramDayPosition(
                week_index=week_index,
                day_index=global_day - week.start_day_index + 1,
                global_day_index=global_day,
            )
    return None


def get_week_label(week: CalendarWeek, include_day_count: bool = False) -> str:
    """Display label, e.g. 'Onboarding (2 days)' for short weeks."""
    if include_day_count and week.day_count < 5:
        suffix = "day" if week.day_count == 1 else "days"
        return f"{week.label} ({week.day_count} {suffix})"
    return week.label


def program_end_date(
    start_date: date | str, length_days: int, include_weekends: bool = True
) -> date:
    """Calendar date of the last content day."""
    return day_index_to_date(start_date, length_days, include_weekends)
