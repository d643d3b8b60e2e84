"""Intake calls: coach-side booking configs and the public booking flow.

Public routes carry no auth. A booking is managed afterwards through the
token in the link emailed to the prospect.
"""

from datetime import date
from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request

from app.api.v1.dependencies import Coach, get_intake_service
from app.api.v1.endpoints.scheduling import slots_response
from app.application.dtos.scheduling import BookingResult
from app.application.use_cases.intake import IntakeService
from app.core.limiter import limit_public_booking, limit_writes
from app.schemas.intake import (
    BookingResponse,
    CancelBookingRequest,
    CoachBookRequest,
    IntakeConfigCreateRequest,
    IntakeConfigResponse,
    ProspectDetails,
    PublicBookRequest,
    RescheduleRequest,
)
from app.schemas.scheduling import AvailableSlotsResponse

router = APIRouter()
public_router = APIRouter()

IntakeServiceDep = Annotated[IntakeService, Depends(get_intake_service)]

_PROSPECT_FIELDS = set(ProspectDetails.model_fields)


def booking_response(booking: BookingResult) -> BookingResponse:
    event, config = booking.event, booking.config
    return BookingResponse(
        event_id=event.id,
        config_name=config.name,
        status=event.status,
        start=event.start_date_time,
        end=event.end_date_time,
        timezone=event.timezone,
        meeting_link=event.meeting_link,
        prospect_name=event.prospect_name,
        prospect_email=event.prospect_email,
        allow_reschedule=config.allow_reschedule,
        allow_cancellation=config.allow_cancellation,
        cancel_deadline_hours=config.cancel_deadline_hours,
        token=booking.token,
        manage_url=booking.manage_url,
    )


@router.get("/configs", response_model=list[IntakeConfigResponse])
async def list_configs(auth: Coach, intake_svc: IntakeServiceDep):
    configs = await intake_svc.list_configs(auth.organization_id)
    return [IntakeConfigResponse.model_validate(c) for c in configs]


@router.post("/configs", response_model=IntakeConfigResponse, status_code=201)
@limit_writes
async def create_config(
    request: Request,
    body: IntakeConfigCreateRequest,
    auth: Coach,
    intake_svc: IntakeServiceDep,
):
    config = await intake_svc.create_config(auth.organization_id, body.model_dump(mode="json"))
    return IntakeConfigResponse.model_validate(config)


@router.post("/book", response_model=BookingResponse, status_code=201)
@limit_writes
async def book_for_prospect(
    request: Request,
    body: CoachBookRequest,
    auth: Coach,
    intake_svc: IntakeServiceDep,
):
    """Coach books a call on a prospect's behalf; notice rules do not apply."""
    booking = await intake_svc.book(
        auth.organization_id,
        body.config_id,
        body.model_dump(include=_PROSPECT_FIELDS),
        body.start,
        body.end,
        created_by=auth.user_id,
    )
    return booking_response(booking)


# ---- public ----


@public_router.get("/token/{token}", response_model=BookingResponse)
async def get_booking(token: str, intake_svc: IntakeServiceDep):
    return booking_response(await intake_svc.get_booking(token))


@public_router.post("/token/{token}/reschedule", response_model=BookingResponse)
@limit_public_booking
async def reschedule_booking(
    request: Request, token: str, body: RescheduleRequest, intake_svc: IntakeServiceDep
):
    return booking_response(await intake_svc.reschedule(token, body.start, body.end))


@public_router.post("/token/{token}/cancel", response_model=BookingResponse)
@limit_public_booking
async def cancel_booking(
    request: Request,
    token: str,
    intake_svc: IntakeServiceDep,
    body: CancelBookingRequest | None = None,
):
    return booking_response(await intake_svc.cancel(token, body.reason if body else None))


@public_router.get("/{org_slug}/{config_slug}", response_model=IntakeConfigResponse)
async def get_public_config(org_slug: str, config_slug: str, intake_svc: IntakeServiceDep):
    return IntakeConfigResponse.model_validate(
        await intake_svc.get_public_config(org_slug, config_slug)
    )


@public_router.get("/{org_slug}/{config_slug}/slots", response_model=AvailableSlotsResponse)
async def get_public_slots(
    org_slug: str,
    config_slug: str,
    intake_svc: IntakeServiceDep,
    start: Annotated[date, Query()],
    end: Annotated[date, Query()],
):
    return slots_response(await intake_svc.get_public_slots(org_slug, config_slug, start, end))


@public_router.post(
    "/{org_slug}/{config_slug}/book", response_model=BookingResponse, status_code=201
)
@limit_public_booking
async def book_public(
    request: Request,
    org_slug: str,
    config_slug: str,
    body: PublicBookRequest,
    intake_svc: IntakeServiceDep,
):
    """Prospect books from the org's public page."""
    booking = await intake_svc.book_public(
        org_slug,
        config_slug,
        body.model_dump(include=_PROSPECT_FIELDS),
        body.start,
        body.end,
    )
    return booking_response(booking)
