"""Habits of the signed-in user and their daily check-ins."""

from datetime import date
from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request

from app.api.v1.dependencies import OrgUser, get_habit_service
from app.application.use_cases.habits import HabitService
from app.core.limiter import limit_writes
from app.schemas.habit import (
    HabitCreateRequest,
    HabitDayRequest,
    HabitResponse,
    HabitUpdate,
)
from app.shared.utils.datetime import utc_now

router = APIRouter()

HabitServiceDep = Annotated[HabitService, Depends(get_habit_service)]


def _day(body: HabitDayRequest | None) -> date:
    return (body.date if body else None) or utc_now().date()


@router.get("", response_model=list[HabitResponse])
async def list_habits(
    auth: OrgUser,
    habit_svc: HabitServiceDep,
    include_archived: Annotated[bool, Query()] = False,
):
    habits = await habit_svc.list_habits(
        auth.user_id, auth.organization_id, include_archived=include_archived
    )
    return [HabitResponse.model_validate(h) for h in habits]


@router.post("", response_model=HabitResponse, status_code=201)
@limit_writes
async def create_habit(
    request: Request, body: HabitCreateRequest, auth: OrgUser, habit_svc: HabitServiceDep
):
    habit = await habit_svc.create_habit(
        auth.user_id, auth.organization_id, body.model_dump(mode="json", exclude_none=True)
    )
    return HabitResponse.model_validate(habit)


@router.patch("/{habit_id}", response_model=HabitResponse)
@limit_writes
async def update_habit(
    request: Request,
    habit_id: str,
    body: HabitUpdate,
    auth: OrgUser,
    habit_svc: HabitServiceDep,
):
    habit = await habit_svc.update_habit(
        auth.user_id,
        auth.organization_id,
        habit_id,
        body.model_dump(mode="json", exclude_unset=True),
    )
    return HabitResponse.model_validate(habit)


@router.post("/{habit_id}/archive", response_model=HabitResponse)
@limit_writes
async def archive_habit(
    request: Request, habit_id: str, auth: OrgUser, habit_svc: HabitServiceDep
):
    return HabitResponse.model_validate(
        await habit_svc.archive_habit(auth.user_id, auth.organization_id, habit_id)
    )


@router.post("/{habit_id}/complete", response_model=HabitResponse)
@limit_writes
async def complete_habit(
    request: Request,
    habit_id: str,
    auth: OrgUser,
    habit_svc: HabitServiceDep,
    body: HabitDayRequest | None = None,
):
    """Mark the habit done for a date (today when omitted)."""
    habit = await habit_svc.complete_habit(
        auth.user_id, auth.organization_id, habit_id, _day(body)
    )
    return HabitResponse.model_validate(habit)


@router.post("/{habit_id}/skip", response_model=HabitResponse)
@limit_writes
async def skip_habit(
    request: Request,
    habit_id: str,
    auth: OrgUser,
    habit_svc: HabitServiceDep,
    body: HabitDayRequest | None = None,
):
    habit = await habit_svc.skip_habit(
        auth.user_id, auth.organization_id, habit_id, _day(body)
    )
    return HabitResponse.model_validate(habit)


@router.post("/{habit_id}/undo", response_model=HabitResponse)
@limit_writes
async def undo_habit(
    request: Request,
    habit_id: str,
    auth: OrgUser,
    habit_svc: HabitServiceDep,
    body: HabitDayRequest | None = None,
):
    habit = await habit_svc.undo_habit(
        auth.user_id, auth.organization_id, habit_id, _day(body)
    )
    return HabitResponse.model_validate(habit)
