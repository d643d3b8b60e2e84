"""Program templates: programs, modules, weeks, days and cohorts (coach only)."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request, Response

from app.api.v1.dependencies import (
    Coach,
    OrgUser,
    get_enrollment_service,
    get_program_service,
)
from app.application.use_cases.enrollments import EnrollmentService
from app.application.use_cases.programs import ProgramService
from app.core.limiter import limit_writes
from app.schemas.enrollment import EnrollmentResponse
from app.schemas.program import (
    CohortCreateRequest,
    CohortResponse,
    DayResponse,
    DayUpdate,
    DistributeResponse,
    ModuleCreateRequest,
    ModuleResponse,
    ProgramCreateRequest,
    ProgramResponse,
    ProgramUpdate,
    RecalculateResponse,
    SyncWeeksResponse,
    WeekResponse,
    WeekUpdate,
)

router = APIRouter()

ProgramServiceDep = Annotated[ProgramService, Depends(get_program_service)]


@router.post("", response_model=ProgramResponse, status_code=201)
@limit_writes
async def create_program(
    request: Request,
    body: ProgramCreateRequest,
    auth: Coach,
    program_svc: ProgramServiceDep,
):
    """Create a program and lay out its calendar weeks."""
    program = await program_svc.create_program(
        auth.organization_id, body.model_dump(mode="json")
    )
    return ProgramResponse.model_validate(program)


@router.get("", response_model=list[ProgramResponse])
async def list_programs(
    auth: OrgUser,
    program_svc: ProgramServiceDep,
    published_only: Annotated[bool, Query()] = False,
):
    """Coaches see drafts; members only see published programs."""
    programs = await program_svc.list_programs(
        auth.organization_id, published_only=published_only or not auth.is_coach
    )
    return [ProgramResponse.model_validate(p) for p in programs]


@router.get("/{program_id}", response_model=ProgramResponse)
async def get_program(program_id: str, auth: OrgUser, program_svc: ProgramServiceDep):
    return ProgramResponse.model_validate(
        await program_svc.get_program(auth.organization_id, program_id)
    )


@router.patch("/{program_id}", response_model=ProgramResponse)
@limit_writes
async def update_program(
    request: Request,
    program_id: str,
    body: ProgramUpdate,
    auth: Coach,
    program_svc: ProgramServiceDep,
):
    program = await program_svc.update_program(
        auth.organization_id, program_id, body.model_dump(mode="json", exclude_unset=True)
    )
    return ProgramResponse.model_validate(program)


@router.delete("/{program_id}", status_code=204)
@limit_writes
async def delete_program(
    request: Request, program_id: str, auth: Coach, program_svc: ProgramServiceDep
):
    await program_svc.delete_program(auth.organization_id, program_id)
    return Response(status_code=204)


@router.post("/{program_id}/modules", response_model=ModuleResponse, status_code=201)
@limit_writes
async def create_module(
    request: Request,
    program_id: str,
    body: ModuleCreateRequest,
    auth: Coach,
    program_svc: ProgramServiceDep,
):
    module = await program_svc.create_module(
        auth.organization_id, program_id, body.title, body.order
    )
    return ModuleResponse.model_validate(module)


@router.get("/{program_id}/modules", response_model=list[ModuleResponse])
async def list_modules(program_id: str, auth: OrgUser, program_svc: ProgramServiceDep):
    modules = await program_svc.list_modules(auth.organization_id, program_id)
    return [ModuleResponse.model_validate(m) for m in modules]


@router.get("/{program_id}/weeks", response_model=list[WeekResponse])
async def list_weeks(program_id: str, auth: OrgUser, program_svc: ProgramServiceDep):
    weeks = await program_svc.list_weeks(auth.organization_id, program_id)
    return [WeekResponse.model_validate(w) for w in weeks]


@router.post("/{program_id}/weeks/sync", response_model=SyncWeeksResponse)
@limit_writes
async def sync_weeks(
    request: Request, program_id: str, auth: Coach, program_svc: ProgramServiceDep
):
    """Create missing calendar weeks for the program's length."""
    return SyncWeeksResponse(
        **await program_svc.sync_program_weeks(auth.organization_id, program_id)
    )


@router.post("/{program_id}/weeks/recalculate", response_model=RecalculateResponse)
@limit_writes
async def recalculate_weeks(
    request: Request, program_id: str, auth: Coach, program_svc: ProgramServiceDep
):
    """Recompute week and module day ranges after schedule changes."""
    return RecalculateResponse(
        **await program_svc.recalculate_week_day_indices(auth.organization_id, program_id)
    )


@router.patch("/{program_id}/weeks/{week_id}", response_model=WeekResponse)
@limit_writes
async def update_week(
    request: Request,
    program_id: str,
    week_id: str,
    body: WeekUpdate,
    auth: Coach,
    program_svc: ProgramServiceDep,
):
    week = await program_svc.update_week(
        auth.organization_id,
        program_id,
        week_id,
        body.model_dump(mode="json", exclude_unset=True),
    )
    return WeekResponse.model_validate(week)


@router.post("/{program_id}/weeks/{week_id}/distribute", response_model=DistributeResponse)
@limit_writes
async def distribute_week(
    request: Request,
    program_id: str,
    week_id: str,
    auth: Coach,
    program_svc: ProgramServiceDep,
):
    """Place the week's tasks onto its days."""
    return DistributeResponse(
        **await program_svc.distribute_weekly_tasks_to_days(
            auth.organization_id, program_id, week_id
        )
    )


@router.get("/{program_id}/days", response_model=list[DayResponse])
async def list_days(program_id: str, auth: OrgUser, program_svc: ProgramServiceDep):
    days = await program_svc.list_days(auth.organization_id, program_id)
    return [DayResponse.model_validate(d) for d in days]


@router.patch("/{program_id}/days/{day_index}", response_model=DayResponse)
@limit_writes
async def update_day(
    request: Request,
    program_id: str,
    day_index: int,
    body: DayUpdate,
    auth: Coach,
    program_svc: ProgramServiceDep,
):
    day = await program_svc.update_day(
        auth.organization_id,
        program_id,
        day_index,
        body.model_dump(mode="json", exclude_unset=True),
    )
    return DayResponse.model_validate(day)


@router.post("/{program_id}/cohorts", response_model=CohortResponse, status_code=201)
@limit_writes
async def create_cohort(
    request: Request,
    program_id: str,
    body: CohortCreateRequest,
    auth: Coach,
    program_svc: ProgramServiceDep,
):
    cohort = await program_svc.create_cohort(
        auth.organization_id, program_id, body.model_dump(exclude_none=True)
    )
    return CohortResponse.model_validate(cohort)


@router.get("/{program_id}/cohorts", response_model=list[CohortResponse])
async def list_cohorts(program_id: str, auth: OrgUser, program_svc: ProgramServiceDep):
    cohorts = await program_svc.list_cohorts(auth.organization_id, program_id)
    return [CohortResponse.model_validate(c) for c in cohorts]


@router.get("/{program_id}/enrollments", response_model=list[EnrollmentResponse])
async def list_program_enrollments(
    program_id: str,
    auth: Coach,
    enrollment_svc: Annotated[EnrollmentService, Depends(get_enrollment_service)],
):
    enrollments = await enrollment_svc.list_enrollments(auth.organization_id, program_id)
    return [EnrollmentResponse.model_validate(e) for e in enrollments]
