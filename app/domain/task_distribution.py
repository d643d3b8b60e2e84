"""Placement of weekly program tasks onto program days.

Program templates and program instances both store a week's tasks once
(weekly tasks) and materialise them onto the days of that week. Tasks a
coach typed directly onto a day are "manual" and survive every
redistribution; tasks produced from the week carry source="week" and are
replaced wholesale each time the week is redistributed.

Everything here is pure: inputs are plain dicts as stored in Firestore,
outputs are new lists and dicts.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any

from app.domain.enums import TaskDistribution, WeekDistribution
from app.shared.utils.generators import generate_cuid

WEEK_SOURCE = "week"

DAY_TAG_DAILY = "daily"
DAY_TAG_SPREAD = "spread"
DAY_TAG_AUTO = "auto"


def days_per_week(include_weekends: bool) -> int:
    return 7 if include_weekends else 5


def target_week_count(length_days: int, include_weekends: bool) -> int:
    """Number of template weeks a program of length_days needs."""
    return math.ceil(max(length_days, 0) / days_per_week(include_weekends))


def calculate_spread_day_indices(num_tasks: int, start_day: int, end_day: int) -> list[int]:
    """Evenly spaced day indices in [start_day, end_day] for num_tasks tasks.

    With a 7 day week starting on day 1: 2 tasks -> days 2 and 6, 3 tasks -> 2, 4 and 6.
    When there are at least as many tasks as days every day is returned.
    """
    days_in_week = end_day - start_day + 1
    if num_tasks <= 0 or days_in_week <= 0:
        return []
    if num_tasks >= days_in_week:
        return list(range(start_day, end_day + 1))
    interval = days_in_week / num_tasks
    indices = {
        start_day + min(math.floor(i * interval + interval / 2), days_in_week - 1)
        for i in range(num_tasks)
    }
    return sorted(indices)


def calculate_week_day_indices(
    week_number: int, include_weekends: bool, total_days: int
) -> tuple[int, int]:
    """Fallback (start, end) day range for a week that has no stored indices."""
    per_week = days_per_week(include_weekends)
    start = (week_number - 1) * per_week + 1
    return start, min(start + per_week - 1, total_days)


def is_manual_task(task: dict[str, Any]) -> bool:
    return task.get("source") != WEEK_SOURCE


def ensure_task_ids(tasks: list[dict[str, Any]]) -> list[dict[str, Any]]:
    """Copy tasks, giving any task without an id a new one."""
    return [{**task, "id": task.get("id") or generate_cuid()} for task in tasks]


def _week_task(task: dict[str, Any]) -> dict[str, Any]:
    return {**task, "id": task.get("id") or generate_cuid(), "source": WEEK_SOURCE}


# ---------------------------------------------------------------------------
# Template weeks (program_weeks / program_days)
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class WeekSlot:
    """Minimal view of a template week for day-range recalculation."""

    id: str
    week_number: int
    module_id: str | None = None
    start_day_index: int = 0
    end_day_index: int = 0


@dataclass
class DayRangePlan:
    """Result of recalculating template week/module day ranges."""

    weeks: dict[str, tuple[int, int]] = field(default_factory=dict)
    modules: dict[str, tuple[int, int]] = field(default_factory=dict)


def plan_week_day_indices(
    weeks: list[WeekSlot],
    module_ids: list[str],
    total_days: int,
    include_weekends: bool,
) -> DayRangePlan:
    """Assign sequential day ranges to weeks and derive module ranges from them.

    Weeks are walked in week_number order from day 1. Week 0 (an explicit
    onboarding week) keeps its stored length when it fits in a week; every
    other week takes a full week. Negative week numbers are ignored and the
    walk stops once total_days is covered. Module ranges span the min start
    and max end of their weeks; weeks without a known module count towards
    the first module.

    Args:
        weeks: Template weeks of one program.
        module_ids: Module ids ordered by module order.
        total_days: Program length in days.
        include_weekends: Program weekend setting.
    """
    per_week = days_per_week(include_weekends)
    plan = DayRangePlan()
    ranges: dict[str, tuple[int, int]] = {
        w.id: (w.start_day_index, w.end_day_index) for w in weeks
    }
    current = 1
    for week in sorted(weeks, key=lambda w: w.week_number):
        if week.week_number < 0:
            continue
        length = per_week
        if week.week_number == 0:
            stored = week.end_day_index - week.start_day_index + 1
            if 0 < stored <= per_week:
                length = stored
        start = current
        end = min(current + length - 1, total_days)
        plan.weeks[week.id] = (start, end)
        ranges[week.id] = (start, end)
        current = end + 1
        if current > total_days:
            break

    if module_ids:
        by_module: dict[str, list[tuple[int, int]]] = {m: [] for m in module_ids}
        for week in weeks:
            key = week.module_id if week.module_id in by_module else module_ids[0]
            by_module[key].append(ranges[week.id])
        for module_id, week_ranges in by_module.items():
            if week_ranges:
                plan.modules[module_id] = (
                    min(r[0] for r in week_ranges),
                    max(r[1] for r in week_ranges),
                )
    return plan


def plan_template_week_distribution(
    weekly_tasks: list[dict[str, Any]],
    start_day: int,
    end_day: int,
    distribution: TaskDistribution | str = TaskDistribution.SPREAD,
) -> dict[int, list[dict[str, Any]]]:
    """Week-sourced tasks for every template day in [start_day, end_day].

    repeat-daily copies every weekly task onto each day. spread places
    task k on the k-th evenly spaced day; tasks beyond the number of days
    in the range are not placed. Every day of the range is present in the result
    (possibly with an empty list) so callers can clear stale week tasks.
    """
    plan: dict[int, list[dict[str, Any]]] = {
        d: [] for d in range(start_day, end_day + 1)
    }
    if not weekly_tasks or not plan:
        return plan
    if TaskDistribution(distribution) is TaskDistribution.REPEAT_DAILY:
        for day in plan:
            plan[day] = [{**t, "source": WEEK_SOURCE} for t in weekly_tasks]
        return plan
    spread_days = calculate_spread_day_indices(len(weekly_tasks), start_day, end_day)
    for day, task in zip(spread_days, weekly_tasks):
        plan[day].append({**task, "source": WEEK_SOURCE})
    return plan


def merge_week_tasks(
    existing_tasks: list[dict[str, Any]], week_tasks: list[dict[str, Any]]
) -> list[dict[str, Any]]:
    """Manual tasks already on a day followed by the freshly distributed week tasks."""
    return [t for t in existing_tasks if is_manual_task(t)] + list(week_tasks)


# ---------------------------------------------------------------------------
# Instance weeks (program_instances.weeks[].days[])
# ---------------------------------------------------------------------------


def _spread_offsets(num_tasks: int, num_days: int) -> list[int]:
    if num_tasks == 1:
        return [0]
    # Halves round up.
    return [
        math.floor(i * (num_days - 1) / (num_tasks - 1) + 0.5) for i in range(num_tasks)
    ]


def _specific_days(day_tag: Any) -> list[int] | None:
    if isinstance(day_tag, bool):
        return None
    if isinstance(day_tag, int):
        return [day_tag]
    if isinstance(day_tag, list) and all(
        isinstance(d, int) and not isinstance(d, bool) for d in day_tag
    ):
        return list(day_tag)
    return None


def distribute_tasks_to_days(
    weekly_tasks: list[dict[str, Any]],
    days: list[dict[str, Any]],
    distribution: WeekDistribution | str | None = None,
) -> list[dict[str, Any]]:
    """Materialise an instance week's tasks onto its active days.

    Each weekly task's day_tag decides its placement:

    - "daily": every day;
    - "spread": evenly spaced among the spread-tagged tasks;
    - an int or list of ints: those positions in the week, counted from
      the first day's day_index. Out-of-week list entries are skipped and
      an out-of-week int is treated as "auto";
    - "auto" or missing: the week's distribution (spread, all_days or
      first_day).

    Returns copies of days with the new week tasks appended after the
    tasks already present.
    """
    updated = [{**d, "tasks": list(d.get("tasks") or [])} for d in days]
    num_days = len(updated)
    if num_days == 0 or not weekly_tasks:
        return updated

    daily: list[dict[str, Any]] = []
    spread: list[dict[str, Any]] = []
    auto: list[dict[str, Any]] = []
    pinned: list[tuple[int, dict[str, Any]]] = []
    first_day_index = updated[0].get("day_index") or 1
    for task in weekly_tasks:
        day_tag = task.get("day_tag")
        specific = _specific_days(day_tag)
        if day_tag == DAY_TAG_DAILY:
            daily.append(task)
        elif day_tag == DAY_TAG_SPREAD:
            spread.append(task)
        elif isinstance(day_tag, list) and specific is not None:
            for day_num in specific:
                position = day_num - first_day_index
                if 0 <= position < num_days:
                    pinned.append((position, task))
        elif specific is not None and 0 <= day_tag - first_day_index < num_days:
            pinned.append((day_tag - first_day_index, task))
        else:
            auto.append(task)

    for task in daily:
        for day in updated:
            day["tasks"].append(_week_task(task))

    for position, task in pinned:
        updated[position]["tasks"].append(_week_task(task))

    for task, offset in zip(spread, _spread_offsets(len(spread), num_days)):
        updated[offset]["tasks"].append(_week_task(task))

    if auto:
        mode = WeekDistribution(distribution or WeekDistribution.SPREAD)
        if mode is WeekDistribution.SPREAD:
            for task, offset in zip(auto, _spread_offsets(len(auto), num_days)):
                updated[offset]["tasks"].append(_week_task(task))
        elif mode is WeekDistribution.ALL_DAYS:
            for task in auto:
                for day in updated:
                    day["tasks"].append(_week_task(task))
        else:
            for task in auto:
                updated[0]["tasks"].append(_week_task(task))
    return updated


def redistribute_week(
    weekly_tasks: list[dict[str, Any]],
    days: list[dict[str, Any]],
    distribution: WeekDistribution | str | None = None,
) -> list[dict[str, Any]]:
    """Replace week-sourced tasks on days, keeping manual ones."""
    cleared = [
        {**d, "tasks": [t for t in d.get("tasks") or [] if is_manual_task(t)]}
        for d in days
    ]
    return distribute_tasks_to_days(weekly_tasks, cleared, distribution)
