"""Intake call booking API schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from app.domain.enums import EventStatus, MeetingProvider


class IntakeConfigCreateRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    slug: str = Field(..., min_length=3, max_length=63)
    description: str | None = Field(default=None, max_length=5000)
    duration: int = Field(default=30, ge=5, le=480)
    meeting_provider: MeetingProvider = MeetingProvider.MANUAL
    manual_meeting_url: str | None = Field(default=None, max_length=2048)
    confirmation_message: str | None = Field(default=None, max_length=5000)
    allow_cancellation: bool = True
    allow_reschedule: bool = True
    cancel_deadline_hours: int = Field(default=24, ge=0)
    is_active: bool = True


class IntakeConfigResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    organization_id: str
    name: str
    slug: str
    description: str | None = None
    duration: int
    meeting_provider: MeetingProvider
    manual_meeting_url: str | None = None
    confirmation_message: str | None = None
    allow_cancellation: bool
    allow_reschedule: bool
    cancel_deadline_hours: int
    is_active: bool


class ProspectDetails(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    email: EmailStr
    phone: str | None = Field(default=None, max_length=50)
    notes: str | None = Field(default=None, max_length=5000)


class PublicBookRequest(ProspectDetails):
    start: datetime
    end: datetime | None = None


class CoachBookRequest(PublicBookRequest):
    config_id: str


class RescheduleRequest(BaseModel):
    start: datetime
    end: datetime | None = None


class CancelBookingRequest(BaseModel):
    reason: str | None = Field(default=None, max_length=1000)


class BookingResponse(BaseModel):
    """A booking as seen by the prospect (no internal ids beyond the event)."""

    event_id: str
    config_name: str
    status: EventStatus
    start: datetime
    end: datetime
    timezone: str
    meeting_link: str | None = None
    prospect_name: str | None = None
    prospect_email: str | None = None
    allow_reschedule: bool
    allow_cancellation: bool
    cancel_deadline_hours: int
    token: str
    manage_url: str
