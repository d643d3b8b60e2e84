"""Coach availability and bookable slots."""

from datetime import date
from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request

from app.api.v1.dependencies import Coach, OrgUser, get_scheduling_service
from app.application.use_cases.scheduling import SchedulingService
from app.core.limiter import limit_writes
from app.schemas.scheduling import (
    AvailabilityResponse,
    AvailabilityUpdate,
    AvailableSlotsResponse,
    SlotResponse,
)

router = APIRouter()

SchedulingServiceDep = Annotated[SchedulingService, Depends(get_scheduling_service)]


def slots_response(result: dict) -> AvailableSlotsResponse:
    return AvailableSlotsResponse(
        slots=[SlotResponse.model_validate(s) for s in result["slots"]],
        timezone=result["timezone"],
        duration=result["duration"],
        buffer=result["buffer"],
    )


@router.get("/availability", response_model=AvailabilityResponse)
async def get_availability(auth: OrgUser, scheduling_svc: SchedulingServiceDep):
    """Stored availability, or the defaults when the coach never saved one."""
    return AvailabilityResponse.model_validate(
        await scheduling_svc.get_availability(auth.organization_id)
    )


@router.put("/availability", response_model=AvailabilityResponse)
@limit_writes
async def update_availability(
    request: Request,
    body: AvailabilityUpdate,
    auth: Coach,
    scheduling_svc: SchedulingServiceDep,
):
    patch = body.model_dump(exclude_unset=True)
    if "weekly_schedule" in patch and patch["weekly_schedule"] is not None:
        patch["weekly_schedule"] = {
            day: [dict(r) for r in ranges] for day, ranges in patch["weekly_schedule"].items()
        }
    availability = await scheduling_svc.update_availability(auth.organization_id, patch)
    return AvailabilityResponse.model_validate(availability)


@router.get("/available-slots", response_model=AvailableSlotsResponse)
async def get_available_slots(
    auth: OrgUser,
    scheduling_svc: SchedulingServiceDep,
    start: Annotated[date, Query(description="First day, YYYY-MM-DD")],
    end: Annotated[date, Query(description="Last day, YYYY-MM-DD")],
    duration: Annotated[int | None, Query(ge=1)] = None,
):
    result = await scheduling_svc.get_available_slots(
        auth.organization_id, start, end, duration
    )
    return slots_response(result)
