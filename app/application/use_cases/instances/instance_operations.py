"""Program instances: the materialized copy of a program for a cohort or one client.

An instance stores its weeks (and their days) inline. Each week keeps the
weekly tasks it was built from so it can be redistributed later; each day
carries its calendar date and the tasks shown to enrolled users that day.
"""

from __future__ import annotations

from typing import Any

from app.application.dtos.enrollment import EnrollmentResult, ProgramInstanceResult
from app.application.dtos.program import ProgramDayResult, ProgramResult, ProgramWeekResult
from app.application.interfaces.repositories import (
    ICohortRepository,
    IEnrollmentRepository,
    IInstanceRepository,
    IProgramRepository,
    ITaskRepository,
)
from app.domain.calendar_weeks import (
    calculate_calendar_weeks,
    day_index_to_date,
    effective_start_date,
)
from app.domain.enums import (
    EnrollmentStatus,
    InstanceType,
    TaskListType,
    TaskSourceType,
    TaskStatus,
)
from app.domain.exceptions import ResourceNotFoundException, ValidationException
from app.domain.task_distribution import (
    distribute_tasks_to_days,
    ensure_task_ids,
    is_manual_task,
    redistribute_week,
)
from app.shared.telemetry.logging import get_logger
from app.shared.telemetry.tracing import traced
from app.shared.utils.datetime import utc_now

logger = get_logger(__name__)

_LIVE_ENROLLMENT_STATUSES = (EnrollmentStatus.ACTIVE, EnrollmentStatus.UPCOMING)


def _template_week_for(
    position: int, template_weeks: list[ProgramWeekResult]
) -> ProgramWeekResult | None:
    """Template week for the position-th calendar week.

    Templates that number their onboarding week 0 are matched by
    week_number; otherwise weeks are matched in order.
    """
    if any(w.week_number == 0 for w in template_weeks):
        return next((w for w in template_weeks if w.week_number == position), None)
    ordered = sorted(
        (w for w in template_weeks if w.week_number > 0), key=lambda w: w.week_number
    )
    return ordered[position] if position < len(ordered) else None


def build_instance_weeks(
    program: ProgramResult,
    template_weeks: list[ProgramWeekResult],
    template_days: list[ProgramDayResult],
    start_date: str,
    length_days: int | None = None,
    keep_days: dict[int, dict[str, Any]] | None = None,
) -> list[dict[str, Any]]:
    """Lay the program template over the calendar weeks starting at start_date.

    Args:
        program: Program the instance copies.
        template_weeks: The program's template weeks.
        template_days: The program's template days.
        start_date: ISO date the cohort or enrollment starts.
        length_days: Overrides program.length_days.
        keep_days: Stored days (by global day index) that replace freshly
            built ones, used to preserve local edits.

    Returns:
        Week maps ready to store on the instance document.
    """
    total = length_days or program.length_days
    days_by_index = {d.day_index: d for d in template_days}
    keep_days = keep_days or {}
    weeks: list[dict[str, Any]] = []
    for position, calendar_week in enumerate(
        calculate_calendar_weeks(start_date, total, program.include_weekends)
    ):
        template = _template_week_for(position, template_weeks)
        weekly_tasks = ensure_task_ids(template.tasks) if template else []
        distribution = (
            template.distribution.value if template and template.distribution else None
        )
        days = []
        for global_index in range(
            calendar_week.start_day_index, calendar_week.end_day_index + 1
        ):
            template_day = days_by_index.get(global_index)
            days.append({
                "day_index": global_index - calendar_week.start_day_index + 1,
                "global_day_index": global_index,
                "calendar_date": day_index_to_date(
                    start_date, global_index, program.include_weekends
                ).isoformat(),
                "title": template_day.title if template_day else None,
                "summary": template_day.summary if template_day else None,
                "tasks": ensure_task_ids(
                    [t for t in template_day.tasks if is_manual_task(t)]
                )
                if template_day
                else [],
                "has_local_changes": False,
            })
        days = distribute_tasks_to_days(weekly_tasks, days, distribution)
        days = [keep_days.get(d["global_day_index"], d) for d in days]
        weeks.append({
            "week_number": calendar_week.week_number,
            "type": calendar_week.type.value,
            "label": calendar_week.label,
            "module_id": template.module_id if template else None,
            "start_date": calendar_week.start_date.isoformat(),
            "end_date": calendar_week.end_date.isoformat(),
            "start_day_index": calendar_week.start_day_index,
            "end_day_index": calendar_week.end_day_index,
            "distribution": distribution,
            "weekly_tasks": weekly_tasks,
            "days": days,
        })
    return weeks


def _copy_weeks(weeks: list[dict[str, Any]]) -> list[dict[str, Any]]:
    return [
        {**w, "days": [dict(d) for d in w.get("days") or []]} for w in weeks
    ]


class InstanceService:
    """Creates program instances and keeps users' daily tasks in step with them."""

    def __init__(
        self,
        instance_repo: IInstanceRepository,
        program_repo: IProgramRepository,
        cohort_repo: ICohortRepository,
        enrollment_repo: IEnrollmentRepository,
        task_repo: ITaskRepository,
        default_length_days: int = 28,
        default_focus_slots: int = 3,
    ) -> None:
        self.instance_repo = instance_repo
        self.program_repo = program_repo
        self.cohort_repo = cohort_repo
        self.enrollment_repo = enrollment_repo
        self.task_repo = task_repo
        self.default_length_days = default_length_days
        self.default_focus_slots = default_focus_slots

    async def _create_instance(
        self, program: ProgramResult, start_date: str, links: dict[str, Any]
    ) -> ProgramInstanceResult:
        length_days = program.length_days or self.default_length_days
        template_weeks = await self.program_repo.list_weeks(program.id)
        template_days = await self.program_repo.list_days(program.id)
        start = effective_start_date(start_date, program.include_weekends).isoformat()
        weeks = build_instance_weeks(
            program, template_weeks, template_days, start, length_days
        )
        return await self.instance_repo.create({
            **links,
            "program_id": program.id,
            "organization_id": program.organization_id,
            "start_date": start,
            "length_days": length_days,
            "include_weekends": program.include_weekends,
            "daily_focus_slots": program.daily_focus_slots or self.default_focus_slots,
            "weeks": weeks,
            "template_synced_at": utc_now(),
        })

    @traced("instance.ensure_cohort")
    async def ensure_cohort_instance(
        self, program_id: str, cohort_id: str, organization_id: str
    ) -> str | None:
        """Id of the cohort's instance, creating it on first use.

        Returns None when the program is outside the org or the cohort has
        no start date yet.
        """
        existing = await self.instance_repo.get_for_cohort(cohort_id)
        if existing:
            return existing.id
        program = await self.program_repo.get_program(program_id)
        if not program or program.organization_id != organization_id:
            logger.warning("Program %s not found in org %s", program_id, organization_id)
            return None
        cohort = await self.cohort_repo.get(cohort_id)
        if not cohort or cohort.program_id != program_id or not cohort.start_date:
            return None
        instance = await self._create_instance(
            program,
            cohort.start_date,
            {"type": InstanceType.COHORT.value, "cohort_id": cohort_id},
        )
        logger.info("Created cohort instance %s for cohort %s", instance.id, cohort_id)
        return instance.id

    @traced("instance.ensure_enrollment")
    async def ensure_enrollment_instance(self, enrollment: EnrollmentResult) -> str | None:
        existing = await self.instance_repo.get_for_enrollment(enrollment.id)
        if existing:
            return existing.id
        program = await self.program_repo.get_program(enrollment.program_id)
        if not program or program.organization_id != enrollment.organization_id:
            return None
        instance = await self._create_instance(
            program,
            enrollment.start_date,
            {
                "type": InstanceType.INDIVIDUAL.value,
                "enrollment_id": enrollment.id,
                "user_id": enrollment.user_id,
            },
        )
        return instance.id

    async def get_instance(
        self, organization_id: str, instance_id: str
    ) -> ProgramInstanceResult:
        instance = await self.instance_repo.get(instance_id)
        if not instance or instance.organization_id != organization_id:
            raise ResourceNotFoundException("program_instance", instance_id)
        return instance

    async def get_day(
        self, organization_id: str, instance_id: str, global_day_index: int
    ) -> dict[str, Any]:
        instance = await self.get_instance(organization_id, instance_id)
        position = instance.find_day(global_day_index)
        if position is None:
            raise ResourceNotFoundException("program_instance_day", str(global_day_index))
        week_pos, day_pos = position
        return instance.weeks[week_pos]["days"][day_pos]

    @traced("instance.update_day")
    async def update_day(
        self,
        organization_id: str,
        instance_id: str,
        global_day_index: int,
        patch: dict[str, Any],
    ) -> dict[str, Any]:
        """Edit one day and push its tasks to every enrolled user."""
        instance = await self.get_instance(organization_id, instance_id)
        position = instance.find_day(global_day_index)
        if position is None:
            raise ResourceNotFoundException("program_instance_day", str(global_day_index))
        week_pos, day_pos = position
        weeks = _copy_weeks(instance.weeks)
        day = weeks[week_pos]["days"][day_pos]
        for key in ("title", "summary"):
            if key in patch:
                day[key] = patch[key]
        if "tasks" in patch:
            day["tasks"] = ensure_task_ids(patch["tasks"] or [])
        day["has_local_changes"] = True
        if not day.get("calendar_date"):
            day["calendar_date"] = day_index_to_date(
                instance.start_date, global_day_index, instance.include_weekends
            ).isoformat()
        instance = await self.instance_repo.update(instance_id, {"weeks": weeks})
        await self._sync_day_to_enrolled(instance, day)
        return day

    @traced("instance.update_week")
    async def update_week(
        self,
        organization_id: str,
        instance_id: str,
        week_number: int,
        patch: dict[str, Any],
    ) -> dict[str, Any]:
        """Replace a week's weekly tasks or distribution and redistribute its days."""
        instance = await self.get_instance(organization_id, instance_id)
        weeks = _copy_weeks(instance.weeks)
        week = next((w for w in weeks if w.get("week_number") == week_number), None)
        if week is None:
            raise ResourceNotFoundException("program_instance_week", str(week_number))
        if "weekly_tasks" in patch:
            week["weekly_tasks"] = ensure_task_ids(patch["weekly_tasks"] or [])
        if "distribution" in patch:
            week["distribution"] = patch["distribution"]
        week["days"] = redistribute_week(
            week.get("weekly_tasks") or [], week["days"], week.get("distribution")
        )
        instance = await self.instance_repo.update(instance_id, {"weeks": weeks})
        for day in week["days"]:
            await self._sync_day_to_enrolled(instance, day)
        return week

    @traced("instance.sync_template")
    async def sync_template(
        self, organization_id: str, instance_id: str
    ) -> ProgramInstanceResult:
        """Rebuild weeks from the current template, keeping locally edited days."""
        instance = await self.get_instance(organization_id, instance_id)
        program = await self.program_repo.get_program(instance.program_id)
        if not program:
            raise ResourceNotFoundException("program", instance.program_id)
        keep = {
            d["global_day_index"]: d
            for w in instance.weeks
            for d in w.get("days") or []
            if d.get("has_local_changes")
        }
        weeks = build_instance_weeks(
            program,
            await self.program_repo.list_weeks(program.id),
            await self.program_repo.list_days(program.id),
            instance.start_date,
            program.length_days or self.default_length_days,
            keep_days=keep,
        )
        return await self.instance_repo.update(
            instance_id,
            {
                "weeks": weeks,
                "length_days": program.length_days or self.default_length_days,
                "template_synced_at": utc_now(),
            },
        )

    async def _sync_day_to_enrolled(
        self, instance: ProgramInstanceResult, day: dict[str, Any]
    ) -> None:
        for enrollment in await self.enrollment_repo.list_for_instance(instance.id):
            if enrollment.status in _LIVE_ENROLLMENT_STATUSES:
                await self.sync_day_tasks_to_user(
                    instance, enrollment.user_id, day, enrollment_id=enrollment.id
                )

    @traced("instance.sync_day_tasks")
    async def sync_day_tasks_to_user(
        self,
        instance: ProgramInstanceResult,
        user_id: str,
        day: dict[str, Any],
        enrollment_id: str | None = None,
    ) -> dict[str, int]:
        """Mirror one instance day onto a user's tasks for its calendar date.

        Existing user tasks are matched by instance_task_id; tasks the user
        edited (client_locked) keep their title and deleted ones stay
        deleted. Primary tasks take free focus slots, counted without this
        instance's own tasks; everything else goes to the backlog. User
        tasks whose instance task is gone are removed.
        """
        date = day.get("calendar_date")
        if not date:
            raise ValidationException("Instance day has no calendar date", field="calendar_date")
        global_index = day["global_day_index"]
        existing = {
            t.instance_task_id: t
            for t in await self.task_repo.list_for_instance(instance.id, user_id)
            if t.program_day_index == global_index and t.instance_task_id
        }
        on_date = await self.task_repo.list_for_date(user_id, instance.organization_id, date)
        focus_used = sum(
            1
            for t in on_date
            if t.list_type is TaskListType.FOCUS
            and t.status is not TaskStatus.DELETED
            and t.instance_id != instance.id
        )
        free_focus = max((instance.daily_focus_slots or self.default_focus_slots) - focus_used, 0)
        next_order = {
            TaskListType.FOCUS: max(
                (t.order for t in on_date if t.list_type is TaskListType.FOCUS), default=-1
            ) + 1,
            TaskListType.BACKLOG: max(
                (t.order for t in on_date if t.list_type is TaskListType.BACKLOG), default=-1
            ) + 1,
        }

        creates: list[dict[str, Any]] = []
        updates: dict[str, dict[str, Any]] = {}
        seen: set[str] = set()
        for task in day.get("tasks") or []:
            task_id = task["id"]
            seen.add(task_id)
            title = task.get("label") or task.get("title") or ""
            current = existing.get(task_id)
            if current is not None:
                if current.list_type is TaskListType.FOCUS and current.status is not TaskStatus.DELETED:
                    free_focus = max(free_focus - 1, 0)
                if current.status is TaskStatus.DELETED or current.client_locked:
                    continue
                if current.title != title or current.date != date:
                    updates[current.id] = {"title": title, "date": date}
                continue
            if task.get("is_primary") and free_focus > 0:
                list_type = TaskListType.FOCUS
                free_focus -= 1
            else:
                list_type = TaskListType.BACKLOG
            creates.append({
                "user_id": user_id,
                "organization_id": instance.organization_id,
                "title": title,
                "status": TaskStatus.PENDING.value,
                "list_type": list_type.value,
                "order": next_order[list_type],
                "date": date,
                "is_private": False,
                "source_type": TaskSourceType.PROGRAM.value,
                "program_enrollment_id": enrollment_id,
                "instance_id": instance.id,
                "instance_task_id": task_id,
                "program_day_index": global_index,
                "client_locked": False,
            })
            next_order[list_type] += 1
        deletes = [t.id for key, t in existing.items() if key not in seen]
        await self.task_repo.apply_batch(creates, updates, deletes)
        return {"created": len(creates), "updated": len(updates), "deleted": len(deletes)}

    async def sync_enrollment_for_date(
        self, enrollment: EnrollmentResult, on: str
    ) -> bool:
        """Sync the instance day falling on ISO date on; False when there is none."""
        if not enrollment.instance_id:
            return False
        instance = await self.instance_repo.get(enrollment.instance_id)
        if not instance:
            return False
        for week in instance.weeks:
            for day in week.get("days") or []:
                if day.get("calendar_date") == on:
                    await self.sync_day_tasks_to_user(
                        instance, enrollment.user_id, day, enrollment_id=enrollment.id
                    )
                    return True
        return False
