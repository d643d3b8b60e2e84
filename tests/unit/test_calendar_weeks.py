"""Calendar-aligned program weeks and day index conversion."""

from datetime import date

from app.domain.calendar_weeks import (
    CLOSING_WEEK_NUMBER,
    calculate_calendar_weeks,
    calculate_program_day_for_date,
    date_to_day_index,
    day_index_to_date,
    effective_start_date,
    get_current_calendar_week,
    get_week_label,
    program_end_date,
)
from app.domain.enums import CalendarWeekType

MONDAY = date(2026, 10, 19)


def test_mid_week_start_has_short_onboarding_then_full_weeks():
    weeks = calculate_calendar_weeks(date(2026, 10, 21), 30)

    assert [w.week_number for w in weeks] == [1, 2, 3, 4, CLOSING_WEEK_NUMBER]
    onboarding = weeks[0]
    assert onboarding.type is CalendarWeekType.ONBOARDING
    assert (onboarding.start_date, onboarding.end_date) == (date(2026, 10, 21), date(2026, 10, 25))
    assert (onboarding.start_day_index, onboarding.end_day_index) == (1, 5)
    assert weeks[1].start_date == date(2026, 10, 26)
    assert (weeks[1].start_day_index, weeks[1].end_day_index) == (6, 12)
    closing = weeks[-1]
    assert closing.type is CalendarWeekType.CLOSING
    assert closing.label == "Closing"
    assert (closing.start_day_index, closing.end_day_index, closing.day_count) == (27, 30, 4)
    assert (closing.start_date, closing.end_date) == (date(2026, 11, 16), date(2026, 11, 19))


def test_day_indices_are_contiguous():
    weeks = calculate_calendar_weeks("2026-10-22", 45, include_weekends=False)
    assert weeks[0].start_day_index == 1
    for prev, nxt in zip(weeks, weeks[1:]):
        assert nxt.start_day_index == prev.end_day_index + 1
    assert weeks[-1].end_day_index == 45


def test_program_shorter_than_first_week_is_a_single_closing_week():
    weeks = calculate_calendar_weeks(MONDAY, 3)
    assert len(weeks) == 1
    assert weeks[0].type is CalendarWeekType.CLOSING
    assert weeks[0].week_number == 1
    assert weeks[0].end_date == date(2026, 10, 21)


def test_empty_program_has_no_weeks():
    assert calculate_calendar_weeks(MONDAY, 0) == []


def test_weekdays_only_weekend_start_moves_to_monday():
    saturday = date(2026, 10, 24)
    assert effective_start_date(saturday, include_weekends=False) == date(2026, 10, 26)
    assert effective_start_date(saturday, include_weekends=True) == saturday

    weeks = calculate_calendar_weeks(saturday, 10, include_weekends=False)
    assert [w.week_number for w in weeks] == [1, CLOSING_WEEK_NUMBER]
    assert weeks[0].start_date == date(2026, 10, 26)
    assert weeks[0].end_date == date(2026, 10, 30)
    assert weeks[1].start_date == date(2026, 11, 2)
    assert weeks[1].end_date == date(2026, 11, 6)


def test_date_to_day_index():
    assert date_to_day_index(MONDAY, date(2026, 10, 18)) == 0
    assert date_to_day_index(MONDAY, MONDAY) == 1
    assert date_to_day_index(MONDAY, "2026-10-26") == 8
    assert date_to_day_index(MONDAY, "2026-10-26", include_weekends=False) == 6
    assert date_to_day_index(MONDAY, "2026-10-24", include_weekends=False) == -1


def test_day_index_to_date_skips_weekends():
    assert day_index_to_date(MONDAY, 1) == MONDAY
    assert day_index_to_date(MONDAY, 6, include_weekends=False) == date(2026, 10, 26)
    assert day_index_to_date(MONDAY, 6) == date(2026, 10, 24)


def test_program_end_date():
    assert program_end_date(MONDAY, 10, include_weekends=False) == date(2026, 10, 30)
    assert program_end_date(MONDAY, 30) == date(2026, 11, 17)


def test_current_week_before_during_and_after():
    assert get_current_calendar_week(MONDAY, 30, today=date(2026, 10, 1)) is None
    assert get_current_calendar_week(MONDAY, 30, today=date(2026, 10, 28)).week_number == 2
    assert (
        get_current_calendar_week(MONDAY, 30, today=date(2027, 1, 1)).week_number
        == CLOSING_WEEK_NUMBER
    )


def test_program_day_for_date():
    position = calculate_program_day_for_date(date(2026, 10, 21), date(2026, 10, 28), 30)
    assert position.week_index == 1
    assert position.global_day_index == 8
    assert position.day_index == 3
    assert calculate_program_day_for_date(MONDAY, date(2027, 1, 1), 30) is None


def test_week_label_with_day_count():
    week = calculate_calendar_weeks(date(2026, 10, 24), 20)[0]
    assert get_week_label(week, include_day_count=True) == "Onboarding (2 days)"
    assert get_week_label(week) == "Onboarding"
