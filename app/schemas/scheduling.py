"""Availability, slot and calendar event API schemas."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from app.domain.enums import EventStatus, EventType


class TimeRange(BaseModel):
    start: str = Field(..., description="HH:MM")
    end: str = Field(..., description="HH:MM")


class BlockedSlot(BaseModel):
    start: datetime
    end: datetime
    reason: str | None = None


class AvailabilityUpdate(BaseModel):
    """Partial availability update. weekly_schedule keys are "0" (Sunday) to "6"."""

    weekly_schedule: dict[str, list[TimeRange]] | None = None
    blocked_slots: list[BlockedSlot] | None = None
    default_duration: int | None = None
    buffer_between_calls: int | None = None
    timezone: str | None = None
    advance_booking_days: int | None = None
    min_notice_hours: int | None = None


class AvailabilityResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    organization_id: str
    weekly_schedule: dict[str, list[dict[str, str]]]
    blocked_slots: list[dict[str, Any]]
    default_duration: int
    buffer_between_calls: int
    timezone: str
    advance_booking_days: int
    min_notice_hours: int


class SlotResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    start: datetime
    end: datetime
    duration: int


class AvailableSlotsResponse(BaseModel):
    slots: list[SlotResponse]
    timezone: str
    duration: int
    buffer: int


class EventCreateRequest(BaseModel):
    title: str = Field(..., min_length=1, max_length=300)
    description: str | None = Field(default=None, max_length=5000)
    start_date_time: datetime
    end_date_time: datetime | None = None
    duration_minutes: int | None = Field(default=None, ge=1)
    timezone: str
    event_type: EventType
    scope: str | None = None
    host_user_id: str | None = None
    attendee_ids: list[str] = Field(default_factory=list)
    meeting_link: str | None = Field(default=None, max_length=2048)


class EventCancelRequest(BaseModel):
    reason: str | None = Field(default=None, max_length=1000)


class EventResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    organization_id: str
    title: str
    description: str | None = None
    start_date_time: datetime
    end_date_time: datetime
    timezone: str
    duration_minutes: int | None = None
    event_type: EventType
    status: EventStatus
    scope: str | None = None
    host_user_id: str | None = None
    attendee_ids: list[str] = Field(default_factory=list)
    meeting_link: str | None = None
    intake_call_config_id: str | None = None
    prospect_name: str | None = None
    prospect_email: str | None = None
    prospect_phone: str | None = None
    rescheduled_at: datetime | None = None
    rescheduled_from_time: datetime | None = None
    cancelled_at: datetime | None = None
    cancellation_reason: str | None = None
    created_at: datetime | None = None
