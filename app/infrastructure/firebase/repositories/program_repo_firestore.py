"""Firestore-backed program templates and cohorts (IProgramRepository, ICohortRepository)."""

from __future__ import annotations

from typing import Any

from app.application.dtos.program import (
    CohortResult,
    ProgramDayResult,
    ProgramModuleResult,
    ProgramResult,
    ProgramWeekResult,
)
from app.domain.enums import CohortStatus, ProgramType, TaskDistribution, WeekDistribution
from app.domain.exceptions import ConflictException, ResourceNotFoundException
from app.infrastructure.firebase.collections import (
    COLLECTION_PROGRAM_COHORTS,
    COLLECTION_PROGRAM_DAYS,
    COLLECTION_PROGRAM_MODULES,
    COLLECTION_PROGRAM_WEEKS,
    COLLECTION_PROGRAMS,
)
from app.infrastructure.firebase._rest_client import (
    DocumentExistsError,
    DocumentNotFoundError,
    FirestoreRESTClient,
)
from app.shared.utils.datetime import utc_now
from app.shared.utils.generators import generate_cuid

# Firestore rejects commits with more than 500 writes.
_MAX_BATCH_WRITES = 500


def _day_doc_id(program_id: str, day_index: int) -> str:
    return f"{program_id}_{day_index}"


def program_from_doc(doc_id: str, data: dict) -> ProgramResult:
    return ProgramResult(
        id=doc_id,
        organization_id=data.get("organization_id", ""),
        name=data.get("name", ""),
        slug=data.get("slug", ""),
        type=ProgramType(data.get("type", ProgramType.INDIVIDUAL.value)),
        description=data.get("description"),
        length_days=data.get("length_days") or 30,
        include_weekends=data.get("include_weekends", True),
        task_distribution=TaskDistribution(
            data.get("task_distribution", TaskDistribution.SPREAD.value)
        ),
        price_in_cents=data.get("price_in_cents") or 0,
        currency=data.get("currency", "usd"),
        squad_capacity=data.get("squad_capacity"),
        daily_focus_slots=data.get("daily_focus_slots"),
        is_published=data.get("is_published", False),
        created_at=data.get("created_at"),
        updated_at=data.get("updated_at"),
    )


def _week_from_doc(doc_id: str, data: dict) -> ProgramWeekResult:
    distribution = data.get("distribution")
    return ProgramWeekResult(
        id=doc_id,
        program_id=data.get("program_id", ""),
        organization_id=data.get("organization_id", ""),
        week_number=data.get("week_number", 0),
        title=data.get("title"),
        module_id=data.get("module_id"),
        tasks=list(data.get("tasks") or []),
        distribution=WeekDistribution(distribution) if distribution else None,
        start_day_index=data.get("start_day_index") or 0,
        end_day_index=data.get("end_day_index") or 0,
    )


def _module_from_doc(doc_id: str, data: dict) -> ProgramModuleResult:
    return ProgramModuleResult(
        id=doc_id,
        program_id=data.get("program_id", ""),
        organization_id=data.get("organization_id", ""),
        title=data.get("title", ""),
        order=data.get("order", 0),
        start_day_index=data.get("start_day_index"),
        end_day_index=data.get("end_day_index"),
    )


def _day_from_doc(doc_id: str, data: dict) -> ProgramDayResult:
    return ProgramDayResult(
        id=doc_id,
        program_id=data.get("program_id", ""),
        organization_id=data.get("organization_id", ""),
        day_index=data.get("day_index", 0),
        title=data.get("title"),
        summary=data.get("summary"),
        tasks=list(data.get("tasks") or []),
    )


class FirestoreProgramRepository:
    """Programs plus their modules, weeks and days (four top-level collections)."""

    def __init__(self, client: FirestoreRESTClient) -> None:
        self._client = client
        self._coll = client.collection(COLLECTION_PROGRAMS)
        self._modules = client.collection(COLLECTION_PROGRAM_MODULES)
        self._weeks = client.collection(COLLECTION_PROGRAM_WEEKS)
        self._days = client.collection(COLLECTION_PROGRAM_DAYS)
        self._cohorts = client.collection(COLLECTION_PROGRAM_COHORTS)

    # ---- programs ----

    async def create_program(self, organization_id: str, data: dict[str, Any]) -> ProgramResult:
        """Create a program; slug is unique per org (409 otherwise)."""
        if await self.get_program_by_slug(organization_id, data["slug"]):
            raise ConflictException(
                f"A program with slug {data['slug']!r} already exists",
                details={"field": "slug"},
            )
        now = utc_now()
        doc_id = generate_cuid()
        doc = {**data, "organization_id": organization_id, "created_at": now, "updated_at": now}
        try:
            await self._coll.create(doc_id, doc)
        except DocumentExistsError:
            raise ConflictException("Program already exists") from None
        return program_from_doc(doc_id, doc)

    async def get_program(self, program_id: str) -> ProgramResult | None:
        doc = await self._coll.document(program_id).get()
        if not doc:
            return None
        return program_from_doc(doc.id, doc.to_dict())

    async def get_program_by_slug(self, organization_id: str, slug: str) -> ProgramResult | None:
        q = (
            self._coll.where("organization_id", "==", organization_id)
            .where("slug", "==", slug)
            .limit(1)
        )
        async for snapshot in q.stream():
            return program_from_doc(snapshot.id, snapshot.to_dict())
        return None

    async def list_programs(
        self, organization_id: str, published_only: bool = False
    ) -> list[ProgramResult]:
        q = self._coll.where("organization_id", "==", organization_id)
        if published_only:
            q = q.where("is_published", "==", True)
        results = [program_from_doc(s.id, s.to_dict()) async for s in q.stream()]
        return sorted(results, key=lambda p: p.name.lower())

    async def update_program(self, program_id: str, updates: dict[str, Any]) -> ProgramResult:
        doc_ref = self._coll.document(program_id)
        try:
            await doc_ref.update({**updates, "updated_at": utc_now()})
        except DocumentNotFoundError:
            raise ResourceNotFoundException("program", program_id) from None
        doc = await doc_ref.get()
        return program_from_doc(program_id, doc.to_dict())

    async def delete_program(self, program_id: str) -> None:
        refs = [self._coll.document(program_id)]
        for coll in (self._modules, self._weeks, self._days, self._cohorts):
            async for snapshot in coll.where("program_id", "==", program_id).stream():
                refs.append(coll.document(snapshot.id))
        for i in range(0, len(refs), _MAX_BATCH_WRITES):
            batch = self._client.batch()
            for ref in refs[i:i + _MAX_BATCH_WRITES]:
                batch.delete(ref)
            await batch.commit()

    # ---- modules ----

    async def create_module(
        self, program: ProgramResult, data: dict[str, Any]
    ) -> ProgramModuleResult:
        doc = {
            **data,
            "program_id": program.id,
            "organization_id": program.organization_id,
            "created_at": utc_now(),
        }
        ref = await self._modules.add(doc)
        return _module_from_doc(ref.id, doc)

    async def list_modules(self, program_id: str) -> list[ProgramModuleResult]:
        q = self._modules.where("program_id", "==", program_id).order_by("order")
        return [_module_from_doc(s.id, s.to_dict()) async for s in q.stream()]

    # ---- weeks ----

    async def list_weeks(self, program_id: str) -> list[ProgramWeekResult]:
        q = self._weeks.where("program_id", "==", program_id).order_by("week_number")
        return [_week_from_doc(s.id, s.to_dict()) async for s in q.stream()]

    async def get_week(self, week_id: str) -> ProgramWeekResult | None:
        doc = await self._weeks.document(week_id).get()
        if not doc:
            return None
        return _week_from_doc(doc.id, doc.to_dict())

    async def create_weeks(self, program: ProgramResult, weeks: list[dict[str, Any]]) -> int:
        if not weeks:
            return 0
        now = utc_now()
        batch = self._client.batch()
        for week in weeks:
            batch.set(self._weeks.document(), {
                "tasks": [],
                **week,
                "program_id": program.id,
                "organization_id": program.organization_id,
                "created_at": now,
                "updated_at": now,
            })
        await batch.commit()
        return len(weeks)

    async def update_week(self, week_id: str, updates: dict[str, Any]) -> ProgramWeekResult:
        doc_ref = self._weeks.document(week_id)
        try:
            await doc_ref.update({**updates, "updated_at": utc_now()})
        except DocumentNotFoundError:
            raise ResourceNotFoundException("program_week", week_id) from None
        doc = await doc_ref.get()
        return _week_from_doc(week_id, doc.to_dict())

    async def save_day_ranges(
        self,
        week_ranges: dict[str, tuple[int, int]],
        module_ranges: dict[str, tuple[int, int]],
    ) -> None:
        if not week_ranges and not module_ranges:
            return
        now = utc_now()
        batch = self._client.batch()
        for week_id, (start, end) in week_ranges.items():
            batch.update(self._weeks.document(week_id), {
                "start_day_index": start,
                "end_day_index": end,
                "updated_at": now,
            })
        for module_id, (start, end) in module_ranges.items():
            batch.update(self._modules.document(module_id), {
                "start_day_index": start,
                "end_day_index": end,
            })
        await batch.commit()

    # ---- days ----

    async def list_days(
        self, program_id: str, start: int | None = None, end: int | None = None
    ) -> list[ProgramDayResult]:
        q = self._days.where("program_id", "==", program_id)
        if start is not None:
            q = q.where("day_index", ">=", start)
        if end is not None:
            q = q.where("day_index", "<=", end)
        q = q.order_by("day_index")
        return [_day_from_doc(s.id, s.to_dict()) async for s in q.stream()]

    async def save_days(
        self, program: ProgramResult, days: dict[int, dict[str, Any]]
    ) -> None:
        if not days:
            return
        now = utc_now()
        batch = self._client.batch()
        for day_index, data in days.items():
            batch.set(self._days.document(_day_doc_id(program.id, day_index)), {
                "title": None,
                "summary": None,
                "tasks": [],
                **data,
                "program_id": program.id,
                "organization_id": program.organization_id,
                "day_index": day_index,
                "updated_at": now,
            })
        await batch.commit()


def _cohort_from_doc(doc_id: str, data: dict) -> CohortResult:
    return CohortResult(
        id=doc_id,
        program_id=data.get("program_id", ""),
        organization_id=data.get("organization_id", ""),
        name=data.get("name", ""),
        start_date=data.get("start_date"),
        end_date=data.get("end_date"),
        max_enrollment=data.get("max_enrollment"),
        status=CohortStatus(data.get("status", CohortStatus.UPCOMING.value)),
        created_at=data.get("created_at"),
    )


class FirestoreCohortRepository:
    def __init__(self, client: FirestoreRESTClient) -> None:
        self._client = client
        self._coll = client.collection(COLLECTION_PROGRAM_COHORTS)

    async def create(self, program: ProgramResult, data: dict[str, Any]) -> CohortResult:
        doc = {
            "status": CohortStatus.UPCOMING.value,
            **data,
            "program_id": program.id,
            "organization_id": program.organization_id,
            "created_at": utc_now(),
        }
        ref = await self._coll.add(doc)
        return _cohort_from_doc(ref.id, doc)

    async def get(self, cohort_id: str) -> CohortResult | None:
        doc = await self._coll.document(cohort_id).get()
        if not doc:
            return None
        return _cohort_from_doc(doc.id, doc.to_dict())

    async def list_for_program(self, program_id: str) -> list[CohortResult]:
        q = self._coll.where("program_id", "==", program_id)
        results = [_cohort_from_doc(s.id, s.to_dict()) async for s in q.stream()]
        return sorted(results, key=lambda c: c.start_date or "")
