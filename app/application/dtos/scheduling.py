"""DTOs for events, availability and intake booking."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from app.domain.enums import EventStatus, EventType, MeetingProvider


@dataclass(frozen=True)
class EventResult:
    id: str
    organization_id: str
    title: str
    start_date_time: datetime
    end_date_time: datetime
    timezone: str
    event_type: EventType
    status: EventStatus
    description: str | None = None
    duration_minutes: int | None = None
    scope: str | None = None
    host_user_id: str | None = None
    attendee_ids: list[str] = field(default_factory=list)
    meeting_link: str | None = None
    intake_call_config_id: str | None = None
    prospect_email: str | None = None
    prospect_name: str | None = None
    prospect_phone: str | None = None
    booking_token_id: str | None = None
    rescheduled_at: datetime | None = None
    rescheduled_from_time: datetime | None = None
    cancelled_at: datetime | None = None
    cancellation_reason: str | None = None
    created_by: str | None = None
    created_at: datetime | None = None


@dataclass(frozen=True)
class AvailabilityResult:
    """Coach availability. weekly_schedule keys are "0" (Sunday) .. "6"."""

    organization_id: str
    weekly_schedule: dict[str, list[dict[str, str]]]
    blocked_slots: list[dict[str, Any]]
    default_duration: int
    buffer_between_calls: int
    timezone: str
    advance_booking_days: int
    min_notice_hours: int

    def as_document(self) -> dict[str, Any]:
        return {
            "weekly_schedule": self.weekly_schedule,
            "blocked_slots": self.blocked_slots,
            "default_duration": self.default_duration,
            "buffer_between_calls": self.buffer_between_calls,
            "timezone": self.timezone,
            "advance_booking_days": self.advance_booking_days,
            "min_notice_hours": self.min_notice_hours,
        }


@dataclass(frozen=True)
class IntakeCallConfigResult:
    id: str
    organization_id: str
    name: str
    slug: str
    duration: int = 30
    description: str | None = None
    meeting_provider: MeetingProvider = MeetingProvider.MANUAL
    manual_meeting_url: str | None = None
    confirmation_message: str | None = None
    allow_cancellation: bool = True
    allow_reschedule: bool = True
    cancel_deadline_hours: int = 24
    is_active: bool = True
    created_at: datetime | None = None


@dataclass(frozen=True)
class BookingTokenResult:
    id: str
    event_id: str
    intake_call_config_id: str
    organization_id: str
    prospect_email: str
    expires_at: datetime
    created_at: datetime | None = None


@dataclass(frozen=True)
class BookingResult:
    """An intake booking as shown to the prospect and returned to the coach."""

    event: EventResult
    config: IntakeCallConfigResult
    token: str
    manage_url: str
