"""Program template operations: programs, modules, weeks, days and cohorts.

Template weeks hold a week's tasks; distributing a week writes them onto the
template days of its day range. Instances copy this template when a cohort
or individual enrollment starts.
"""

from __future__ import annotations

from typing import Any

from app.application.dtos.program import (
    CohortResult,
    ProgramDayResult,
    ProgramModuleResult,
    ProgramResult,
    ProgramWeekResult,
)
from app.application.interfaces.repositories import (
    ICohortRepository,
    IEnrollmentRepository,
    IProgramRepository,
)
from app.domain.branding import is_valid_slug
from app.domain.calendar_weeks import parse_date, program_end_date
from app.domain.exceptions import (
    ConflictException,
    ResourceNotFoundException,
    ValidationException,
)
from app.domain.task_distribution import (
    WeekSlot,
    calculate_week_day_indices,
    ensure_task_ids,
    merge_week_tasks,
    plan_template_week_distribution,
    plan_week_day_indices,
    target_week_count,
)
from app.shared.telemetry.logging import get_logger
from app.shared.telemetry.tracing import traced

logger = get_logger(__name__)

_SCHEDULE_FIELDS = ("length_days", "include_weekends")


class ProgramService:
    """Coach-side program authoring, scoped to one organization."""

    def __init__(
        self,
        program_repo: IProgramRepository,
        cohort_repo: ICohortRepository,
        enrollment_repo: IEnrollmentRepository,
    ) -> None:
        self.program_repo = program_repo
        self.cohort_repo = cohort_repo
        self.enrollment_repo = enrollment_repo

    # ---- programs ----

    async def get_program(self, organization_id: str, program_id: str) -> ProgramResult:
        """Return program if it belongs to the org; else ResourceNotFoundException."""
        program = await self.program_repo.get_program(program_id)
        if not program or program.organization_id != organization_id:
            raise ResourceNotFoundException("program", program_id)
        return program

    async def list_programs(
        self, organization_id: str, published_only: bool = False
    ) -> list[ProgramResult]:
        return await self.program_repo.list_programs(organization_id, published_only)

    @traced("program.create")
    async def create_program(
        self, organization_id: str, data: dict[str, Any]
    ) -> ProgramResult:
        """Create a program and its initial weeks."""
        slug = (data.get("slug") or "").strip().lower()
        if not is_valid_slug(slug):
            raise ValidationException(
                "Slug must be 3-63 lowercase letters, digits or hyphens", field="slug"
            )
        program = await self.program_repo.create_program(
            organization_id, {**data, "slug": slug}
        )
        await self.sync_program_weeks(organization_id, program.id)
        await self.recalculate_week_day_indices(organization_id, program.id)
        logger.info("Created program %s in org %s", program.id, organization_id)
        return program

    @traced("program.update")
    async def update_program(
        self, organization_id: str, program_id: str, patch: dict[str, Any]
    ) -> ProgramResult:
        """Update fields; a new length or weekend setting re-syncs weeks and day ranges."""
        current = await self.get_program(organization_id, program_id)
        updates = dict(patch)
        if "slug" in updates:
            slug = (updates["slug"] or "").strip().lower()
            if not is_valid_slug(slug):
                raise ValidationException(
                    "Slug must be 3-63 lowercase letters, digits or hyphens", field="slug"
                )
            other = await self.program_repo.get_program_by_slug(organization_id, slug)
            if other and other.id != program_id:
                raise ConflictException(
                    f"A program with slug {slug!r} already exists", details={"field": "slug"}
                )
            updates["slug"] = slug
        program = await self.program_repo.update_program(program_id, updates)
        if any(
            f in updates and updates[f] != getattr(current, f) for f in _SCHEDULE_FIELDS
        ):
            await self.sync_program_weeks(organization_id, program_id)
            await self.recalculate_week_day_indices(organization_id, program_id)
        return program

    async def delete_program(self, organization_id: str, program_id: str) -> None:
        await self.get_program(organization_id, program_id)
        if await self.enrollment_repo.list_for_program(program_id):
            raise ConflictException(
                "Program has enrollments and cannot be deleted",
                details={"program_id": program_id},
            )
        await self.program_repo.delete_program(program_id)
        logger.info("Deleted program %s", program_id)

    # ---- modules ----

    async def create_module(
        self, organization_id: str, program_id: str, title: str, order: int | None = None
    ) -> ProgramModuleResult:
        program = await self.get_program(organization_id, program_id)
        if not title.strip():
            raise ValidationException("Module title is required", field="title")
        if order is None:
            order = len(await self.program_repo.list_modules(program_id))
        return await self.program_repo.create_module(
            program, {"title": title.strip(), "order": order}
        )

    async def list_modules(
        self, organization_id: str, program_id: str
    ) -> list[ProgramModuleResult]:
        await self.get_program(organization_id, program_id)
        return await self.program_repo.list_modules(program_id)

    # ---- weeks ----

    async def list_weeks(
        self, organization_id: str, program_id: str
    ) -> list[ProgramWeekResult]:
        await self.get_program(organization_id, program_id)
        return await self.program_repo.list_weeks(program_id)

    @traced("program.sync_weeks")
    async def sync_program_weeks(
        self, organization_id: str, program_id: str
    ) -> dict[str, int]:
        """Create the weeks a program of this length needs. Extra weeks are kept."""
        program = await self.get_program(organization_id, program_id)
        existing = {w.week_number for w in await self.program_repo.list_weeks(program_id)}
        target = target_week_count(program.length_days, program.include_weekends)
        missing = []
        for number in range(1, target + 1):
            if number in existing:
                continue
            start, end = calculate_week_day_indices(
                number, program.include_weekends, program.length_days
            )
            missing.append({
                "week_number": number,
                "title": f"Week {number}",
                "start_day_index": start,
                "end_day_index": end,
            })
        created = await self.program_repo.create_weeks(program, missing)
        return {"created": created, "existing": len(existing)}

    @traced("program.recalculate_day_indices")
    async def recalculate_week_day_indices(
        self, organization_id: str, program_id: str
    ) -> dict[str, int]:
        """Lay weeks end to end from day 1 and stretch modules over their weeks."""
        program = await self.get_program(organization_id, program_id)
        weeks = await self.program_repo.list_weeks(program_id)
        modules = await self.program_repo.list_modules(program_id)
        plan = plan_week_day_indices(
            [
                WeekSlot(
                    id=w.id,
                    week_number=w.week_number,
                    module_id=w.module_id,
                    start_day_index=w.start_day_index,
                    end_day_index=w.end_day_index,
                )
                for w in weeks
            ],
            [m.id for m in modules],
            program.length_days,
            program.include_weekends,
        )
        stored_weeks = {w.id: (w.start_day_index, w.end_day_index) for w in weeks}
        stored_modules = {m.id: (m.start_day_index, m.end_day_index) for m in modules}
        week_changes = {k: v for k, v in plan.weeks.items() if stored_weeks.get(k) != v}
        module_changes = {k: v for k, v in plan.modules.items() if stored_modules.get(k) != v}
        await self.program_repo.save_day_ranges(week_changes, module_changes)
        return {"weeks_updated": len(week_changes), "modules_updated": len(module_changes)}

    async def _get_week(self, program: ProgramResult, week_id: str) -> ProgramWeekResult:
        week = await self.program_repo.get_week(week_id)
        if not week or week.program_id != program.id:
            raise ResourceNotFoundException("program_week", week_id)
        return week

    @traced("program.update_week")
    async def update_week(
        self,
        organization_id: str,
        program_id: str,
        week_id: str,
        patch: dict[str, Any],
    ) -> ProgramWeekResult:
        program = await self.get_program(organization_id, program_id)
        await self._get_week(program, week_id)
        updates = dict(patch)
        if "tasks" in updates:
            updates["tasks"] = ensure_task_ids(updates["tasks"] or [])
        if updates.get("module_id"):
            module_ids = {m.id for m in await self.program_repo.list_modules(program_id)}
            if updates["module_id"] not in module_ids:
                raise ValidationException("Unknown module", field="module_id")
        week = await self.program_repo.update_week(week_id, updates)
        if "tasks" in updates:
            await self.distribute_weekly_tasks_to_days(organization_id, program_id, week_id)
        return week

    @traced("program.distribute_week")
    async def distribute_weekly_tasks_to_days(
        self, organization_id: str, program_id: str, week_id: str
    ) -> dict[str, int]:
        """Write a template week's tasks onto the template days of its range.

        Manual tasks already on a day are kept; week-sourced tasks are
        replaced. Days without tasks that have no document yet are skipped.
        """
        program = await self.get_program(organization_id, program_id)
        week = await self._get_week(program, week_id)
        start, end = week.start_day_index, week.end_day_index
        if start < 1 or end < start:
            start, end = calculate_week_day_indices(
                week.week_number, program.include_weekends, program.length_days
            )
        end = min(end, program.length_days)
        if end < start:
            return {"created": 0, "updated": 0, "skipped": 0}

        plan = plan_template_week_distribution(
            week.tasks, start, end, program.task_distribution
        )
        existing = {
            d.day_index: d for d in await self.program_repo.list_days(program_id, start, end)
        }
        writes: dict[int, dict[str, Any]] = {}
        created = updated = skipped = 0
        for day_index, week_tasks in plan.items():
            day = existing.get(day_index)
            if day is None:
                if not week_tasks:
                    skipped += 1
                    continue
                writes[day_index] = {"tasks": week_tasks}
                created += 1
                continue
            tasks = merge_week_tasks(day.tasks, week_tasks)
            if tasks == day.tasks:
                skipped += 1
                continue
            writes[day_index] = {"title": day.title, "summary": day.summary, "tasks": tasks}
            updated += 1
        await self.program_repo.save_days(program, writes)
        return {"created": created, "updated": updated, "skipped": skipped}

    # ---- days ----

    async def list_days(
        self, organization_id: str, program_id: str
    ) -> list[ProgramDayResult]:
        await self.get_program(organization_id, program_id)
        return await self.program_repo.list_days(program_id)

    async def update_day(
        self,
        organization_id: str,
        program_id: str,
        day_index: int,
        patch: dict[str, Any],
    ) -> ProgramDayResult:
        program = await self.get_program(organization_id, program_id)
        if not 1 <= day_index <= program.length_days:
            raise ValidationException(
                f"day_index must be between 1 and {program.length_days}", field="day_index"
            )
        existing = await self.program_repo.list_days(program_id, day_index, day_index)
        current = existing[0] if existing else None
        data = {
            "title": current.title if current else None,
            "summary": current.summary if current else None,
            "tasks": current.tasks if current else [],
        }
        data.update(patch)
        data["tasks"] = ensure_task_ids(data.get("tasks") or [])
        await self.program_repo.save_days(program, {day_index: data})
        return ProgramDayResult(
            id=current.id if current else f"{program_id}_{day_index}",
            program_id=program_id,
            organization_id=program.organization_id,
            day_index=day_index,
            title=data["title"],
            summary=data["summary"],
            tasks=data["tasks"],
        )

    # ---- cohorts ----

    async def create_cohort(
        self, organization_id: str, program_id: str, data: dict[str, Any]
    ) -> CohortResult:
        program = await self.get_program(organization_id, program_id)
        fields = dict(data)
        if not (fields.get("name") or "").strip():
            raise ValidationException("Cohort name is required", field="name")
        if fields.get("start_date"):
            try:
                start = parse_date(fields["start_date"])
            except ValueError as e:
                raise ValidationException("start_date must be YYYY-MM-DD", field="start_date") from e
            fields["start_date"] = start.isoformat()
            if not fields.get("end_date"):
                fields["end_date"] = program_end_date(
                    start, program.length_days, program.include_weekends
                ).isoformat()
        max_enrollment = fields.get("max_enrollment")
        if max_enrollment is not None and max_enrollment < 1:
            raise ValidationException("max_enrollment must be positive", field="max_enrollment")
        return await self.cohort_repo.create(program, fields)

    async def list_cohorts(
        self, organization_id: str, program_id: str
    ) -> list[CohortResult]:
        await self.get_program(organization_id, program_id)
        return await self.cohort_repo.list_for_program(program_id)
