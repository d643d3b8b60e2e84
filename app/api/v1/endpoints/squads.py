"""Squads: small groups inside a group program."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request

from app.api.v1.dependencies import Coach, OrgUser, get_squad_service
from app.application.use_cases.squads import SquadService
from app.core.limiter import limit_writes
from app.schemas.squad import SquadCreateRequest, SquadMemberRequest, SquadResponse

router = APIRouter()

SquadServiceDep = Annotated[SquadService, Depends(get_squad_service)]


@router.get("", response_model=list[SquadResponse])
async def list_squads(
    auth: Coach,
    squad_svc: SquadServiceDep,
    program_id: Annotated[str | None, Query()] = None,
):
    squads = await squad_svc.list_squads(auth.organization_id, program_id)
    return [SquadResponse.model_validate(s) for s in squads]


@router.post("", response_model=SquadResponse, status_code=201)
@limit_writes
async def create_squad(
    request: Request, body: SquadCreateRequest, auth: Coach, squad_svc: SquadServiceDep
):
    squad = await squad_svc.create_squad(auth.organization_id, body.model_dump(exclude_none=True))
    return SquadResponse.model_validate(squad)


@router.get("/me", response_model=list[SquadResponse])
async def list_my_squads(auth: OrgUser, squad_svc: SquadServiceDep):
    squads = await squad_svc.get_my_squads(auth.user_id, auth.organization_id)
    return [SquadResponse.model_validate(s) for s in squads]


@router.post("/{squad_id}/members", response_model=SquadResponse)
@limit_writes
async def add_squad_member(
    request: Request,
    squad_id: str,
    body: SquadMemberRequest,
    auth: Coach,
    squad_svc: SquadServiceDep,
):
    return SquadResponse.model_validate(
        await squad_svc.add_member(auth.organization_id, squad_id, body.user_id)
    )


@router.delete("/{squad_id}/members/{user_id}", response_model=SquadResponse)
@limit_writes
async def remove_squad_member(
    request: Request,
    squad_id: str,
    user_id: str,
    auth: Coach,
    squad_svc: SquadServiceDep,
):
    return SquadResponse.model_validate(
        await squad_svc.remove_member(auth.organization_id, squad_id, user_id)
    )
