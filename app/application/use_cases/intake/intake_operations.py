"""Intake calls: booking configs and prospect bookings managed by token.

A booking creates an intake event and a booking token. The token's
document id is the secret in the prospect's manage link; it expires a fixed
time after the call starts and moves with the call when rescheduled.
"""

from __future__ import annotations

import re
from datetime import date, datetime, timedelta
from typing import Any

from app.application.dtos.scheduling import (
    BookingResult,
    BookingTokenResult,
    EventResult,
    IntakeCallConfigResult,
)
from app.application.interfaces.repositories import IEventRepository, IIntakeRepository
from app.application.services.notification_service import NotificationService
from app.application.use_cases.organizations.organization_operations import (
    OrganizationService,
)
from app.application.use_cases.scheduling.scheduling_operations import SchedulingService
from app.domain.branding import is_valid_slug
from app.domain.enums import EventStatus, EventType, MeetingProvider
from app.domain.exceptions import (
    BookingException,
    ConflictException,
    ResourceNotFoundException,
    ValidationException,
)
from app.shared.telemetry.logging import get_logger
from app.shared.telemetry.tracing import traced
from app.shared.utils.datetime import ensure_utc, utc_now

logger = get_logger(__name__)

_EMAIL = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


class IntakeService:
    def __init__(
        self,
        intake_repo: IIntakeRepository,
        event_repo: IEventRepository,
        org_service: OrganizationService,
        scheduling_service: SchedulingService,
        notifications: NotificationService,
        app_base_url: str,
        token_ttl_hours: int = 24,
        conflict_window_hours: int = 1,
    ) -> None:
        self.intake_repo = intake_repo
        self.event_repo = event_repo
        self.org_service = org_service
        self.scheduling_service = scheduling_service
        self.notifications = notifications
        self.app_base_url = app_base_url.rstrip("/")
        self.token_ttl_hours = token_ttl_hours
        self.conflict_window_hours = conflict_window_hours

    def manage_url(self, token_id: str) -> str:
        return f"{self.app_base_url}/book/manage/{token_id}"

    # ---- configs ----

    async def create_config(
        self, organization_id: str, data: dict[str, Any]
    ) -> IntakeCallConfigResult:
        fields = dict(data)
        fields["name"] = (fields.get("name") or "").strip()
        if not fields["name"]:
            raise ValidationException("Name is required", field="name")
        fields["slug"] = (fields.get("slug") or "").strip().lower()
        if not is_valid_slug(fields["slug"]):
            raise ValidationException(
                "Slug must be 3-63 lowercase letters, digits or hyphens", field="slug"
            )
        if (fields.get("duration") or 0) < 1:
            raise ValidationException("duration must be positive", field="duration")
        provider = MeetingProvider(fields.get("meeting_provider") or MeetingProvider.MANUAL)
        if provider is MeetingProvider.MANUAL and not fields.get("manual_meeting_url"):
            raise ValidationException(
                "manual_meeting_url is required for manual meetings", field="manual_meeting_url"
            )
        fields["meeting_provider"] = provider.value
        return await self.intake_repo.create_config({**fields, "organization_id": organization_id})

    async def list_configs(self, organization_id: str) -> list[IntakeCallConfigResult]:
        return await self.intake_repo.list_configs(organization_id)

    async def get_public_config(
        self, org_slug: str, config_slug: str
    ) -> IntakeCallConfigResult:
        """Active config behind a public booking page."""
        organization_id = await self.org_service.resolve_slug(org_slug)
        config = await self.intake_repo.get_config_by_slug(organization_id, config_slug)
        if not config or not config.is_active:
            raise ResourceNotFoundException("intake_call_config", config_slug)
        return config

    async def get_public_slots(
        self, org_slug: str, config_slug: str, start: date, end: date
    ) -> dict[str, Any]:
        """Open slots sized to the config's call duration."""
        config = await self.get_public_config(org_slug, config_slug)
        return await self.scheduling_service.get_available_slots(
            config.organization_id, start, end, config.duration
        )

    # ---- booking ----

    @traced("intake.book")
    async def book(
        self,
        organization_id: str,
        config_id: str,
        prospect: dict[str, Any],
        start: datetime,
        end: datetime | None = None,
        created_by: str | None = None,
        public: bool = False,
        now: datetime | None = None,
    ) -> BookingResult:
        """Book an intake call for a prospect.

        Raises:
            ValidationException: Missing prospect details, bad times, or (public
                bookings) a slot outside the notice and advance-booking window.
            ResourceNotFoundException: Config missing, inactive or of another org.
            ConflictException: The slot collides with another event.
        """
        now = now or utc_now()
        name = (prospect.get("name") or "").strip()
        email = (prospect.get("email") or "").strip().lower()
        if not name:
            raise ValidationException("Name is required", field="name")
        if not _EMAIL.match(email):
            raise ValidationException("A valid email is required", field="email")

        config = await self.intake_repo.get_config(config_id)
        if not config or config.organization_id != organization_id or not config.is_active:
            raise ResourceNotFoundException("intake_call_config", config_id)

        start = ensure_utc(start)
        end = ensure_utc(end) or start + timedelta(minutes=config.duration)
        if end <= start:
            raise ValidationException("end must be after start", field="end")
        if start <= now:
            raise ValidationException("Cannot book a time in the past", field="start")

        availability = await self.scheduling_service.get_availability(organization_id)
        if public:
            if start < now + timedelta(hours=availability.min_notice_hours):
                raise ValidationException(
                    f"Bookings need {availability.min_notice_hours} hours notice", field="start"
                )
            if start > now + timedelta(days=availability.advance_booking_days):
                raise ValidationException(
                    f"Bookings open {availability.advance_booking_days} days ahead", field="start"
                )
        if await self.scheduling_service.find_conflict(
            organization_id,
            start,
            end,
            availability.buffer_between_calls,
            window_hours=self.conflict_window_hours,
        ):
            raise ConflictException("This time slot is no longer available", "SLOT_UNAVAILABLE")

        event = await self.event_repo.create({
            "organization_id": organization_id,
            "title": f"{config.name} with {name}",
            "description": prospect.get("notes"),
            "start_date_time": start,
            "end_date_time": end,
            "timezone": availability.timezone,
            "duration_minutes": int((end - start).total_seconds() // 60),
            "event_type": EventType.INTAKE_CALL.value,
            "status": EventStatus.CONFIRMED.value,
            "host_user_id": created_by,
            "attendee_ids": [],
            "meeting_link": config.manual_meeting_url,
            "intake_call_config_id": config.id,
            "prospect_name": name,
            "prospect_email": email,
            "prospect_phone": prospect.get("phone"),
            "created_by": created_by,
        })
        token = await self.intake_repo.create_token({
            "event_id": event.id,
            "intake_call_config_id": config.id,
            "organization_id": organization_id,
            "prospect_email": email,
            "expires_at": start + timedelta(hours=self.token_ttl_hours),
        })
        event = await self.event_repo.update(event.id, {"booking_token_id": token.id})
        booking = BookingResult(
            event=event, config=config, token=token.id, manage_url=self.manage_url(token.id)
        )
        logger.info("Intake call %s booked for org %s", event.id, organization_id)
        await self.notifications.send_booking_confirmation(booking)
        return booking

    async def book_public(
        self,
        org_slug: str,
        config_slug: str,
        prospect: dict[str, Any],
        start: datetime,
        end: datetime | None = None,
        now: datetime | None = None,
    ) -> BookingResult:
        config = await self.get_public_config(org_slug, config_slug)
        return await self.book(
            config.organization_id, config.id, prospect, start, end, public=True, now=now
        )

    # ---- managing a booking by token ----

    async def _resolve(
        self, token_id: str, now: datetime
    ) -> tuple[BookingTokenResult, EventResult, IntakeCallConfigResult]:
        """Token, event and config behind a manage link, checked in that order."""
        token = await self.intake_repo.get_token(token_id)
        if not token:
            raise BookingException("TOKEN_INVALID", "This booking link is not valid")
        if token.expires_at <= now:
            raise BookingException("TOKEN_EXPIRED", "This booking link has expired")
        event = await self.event_repo.get(token.event_id)
        if not event:
            raise BookingException("EVENT_NOT_FOUND", "The booking no longer exists")
        if event.status is EventStatus.CANCELLED:
            raise BookingException("EVENT_CANCELLED", "This booking was cancelled")
        if event.start_date_time <= now:
            raise BookingException("EVENT_PAST", "This call has already taken place")
        config = await self.intake_repo.get_config(token.intake_call_config_id)
        if not config:
            raise BookingException("CONFIG_NOT_FOUND", "The booking page no longer exists")
        return token, event, config

    def _check_deadline(
        self, config: IntakeCallConfigResult, event: EventResult, now: datetime
    ) -> None:
        deadline = event.start_date_time - timedelta(hours=config.cancel_deadline_hours)
        if now >= deadline:
            raise BookingException(
                "PAST_DEADLINE",
                f"Changes are allowed up to {config.cancel_deadline_hours} hours before the call",
            )

    async def get_booking(self, token_id: str, now: datetime | None = None) -> BookingResult:
        _, event, config = await self._resolve(token_id, now or utc_now())
        return BookingResult(
            event=event, config=config, token=token_id, manage_url=self.manage_url(token_id)
        )

    @traced("intake.reschedule")
    async def reschedule(
        self,
        token_id: str,
        new_start: datetime,
        new_end: datetime | None = None,
        now: datetime | None = None,
    ) -> BookingResult:
        now = now or utc_now()
        token, event, config = await self._resolve(token_id, now)
        if not config.allow_reschedule:
            raise BookingException("RESCHEDULE_DISABLED", "Rescheduling is not available")
        self._check_deadline(config, event, now)
        new_start = ensure_utc(new_start)
        new_end = ensure_utc(new_end) or new_start + timedelta(minutes=config.duration)
        if new_start <= now:
            raise BookingException("SLOT_PAST", "The new time is in the past")
        if new_end <= new_start:
            raise BookingException("SLOT_INVALID", "The new time must end after it starts")
        availability = await self.scheduling_service.get_availability(event.organization_id)
        if await self.scheduling_service.find_conflict(
            event.organization_id,
            new_start,
            new_end,
            availability.buffer_between_calls,
            exclude_event_id=event.id,
            window_hours=self.conflict_window_hours,
        ):
            raise BookingException("SLOT_UNAVAILABLE", "This time slot is no longer available")

        previous_start = event.start_date_time
        event = await self.event_repo.update(
            event.id,
            {
                "start_date_time": new_start,
                "end_date_time": new_end,
                "duration_minutes": int((new_end - new_start).total_seconds() // 60),
                "rescheduled_at": now,
                "rescheduled_from_time": previous_start,
            },
        )
        await self.intake_repo.update_token(
            token.id, {"expires_at": new_start + timedelta(hours=self.token_ttl_hours)}
        )
        removed = await self.event_repo.delete_scheduled_jobs(event.id)
        logger.info("Intake call %s rescheduled (%d reminder jobs removed)", event.id, removed)
        booking = BookingResult(
            event=event, config=config, token=token.id, manage_url=self.manage_url(token.id)
        )
        await self.notifications.send_booking_rescheduled(booking, previous_start)
        return booking

    @traced("intake.cancel")
    async def cancel(
        self, token_id: str, reason: str | None = None, now: datetime | None = None
    ) -> BookingResult:
        now = now or utc_now()
        token, event, config = await self._resolve(token_id, now)
        if not config.allow_cancellation:
            raise BookingException("CANCELLATION_DISABLED", "Cancellation is not available")
        self._check_deadline(config, event, now)
        event = await self.event_repo.update(
            event.id,
            {
                "status": EventStatus.CANCELLED.value,
                "cancelled_at": now,
                "cancellation_reason": (reason or "").strip() or None,
            },
        )
        await self.event_repo.delete_scheduled_jobs(event.id)
        booking = BookingResult(
            event=event, config=config, token=token.id, manage_url=self.manage_url(token.id)
        )
        await self.notifications.send_booking_cancelled(booking)
        return booking
