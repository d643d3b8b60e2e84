"""Calendar events of the organization."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request

from app.api.v1.dependencies import Coach, OrgUser, get_scheduling_service
from app.application.use_cases.scheduling import SchedulingService
from app.core.limiter import limit_writes
from app.domain.enums import EventStatus, EventType
from app.schemas.scheduling import EventCancelRequest, EventCreateRequest, EventResponse

router = APIRouter()

SchedulingServiceDep = Annotated[SchedulingService, Depends(get_scheduling_service)]


@router.get("", response_model=list[EventResponse])
async def list_events(
    auth: OrgUser,
    scheduling_svc: SchedulingServiceDep,
    event_type: Annotated[EventType | None, Query()] = None,
    status: Annotated[list[EventStatus] | None, Query()] = None,
    upcoming: Annotated[bool, Query()] = False,
    limit: Annotated[int, Query(ge=1)] = 50,
):
    """Confirmed and completed events unless statuses are given."""
    events = await scheduling_svc.list_events(
        auth.organization_id, event_type, status, upcoming, limit
    )
    return [EventResponse.model_validate(e) for e in events]


@router.post("", response_model=EventResponse, status_code=201)
@limit_writes
async def create_event(
    request: Request,
    body: EventCreateRequest,
    auth: Coach,
    scheduling_svc: SchedulingServiceDep,
):
    event = await scheduling_svc.create_event(auth, body.model_dump())
    return EventResponse.model_validate(event)


@router.post("/{event_id}/cancel", response_model=EventResponse)
@limit_writes
async def cancel_event(
    request: Request,
    event_id: str,
    auth: Coach,
    scheduling_svc: SchedulingServiceDep,
    body: EventCancelRequest | None = None,
):
    event = await scheduling_svc.cancel_event(
        auth.organization_id, event_id, body.reason if body else None
    )
    return EventResponse.model_validate(event)
