"""Coach availability, bookable slots and calendar events."""

from __future__ import annotations

from datetime import date, datetime, time, timedelta, timezone
from typing import Any

from app.application.dtos.auth import AuthContext
from app.application.dtos.scheduling import AvailabilityResult, EventResult
from app.application.interfaces.repositories import IAvailabilityRepository, IEventRepository
from app.domain.availability import (
    DEFAULT_DURATION_MINUTES,
    MAX_SLOT_RANGE_DAYS,
    BusyInterval,
    compute_available_slots,
    default_availability,
    resolve_timezone,
    validate_weekly_schedule,
)
from app.domain.enums import BUSY_EVENT_STATUSES, EventStatus, EventType
from app.domain.exceptions import (
    GoneException,
    ResourceNotFoundException,
    ValidationException,
)
from app.shared.telemetry.logging import get_logger
from app.shared.telemetry.tracing import traced
from app.shared.utils.datetime import ensure_utc, utc_now

logger = get_logger(__name__)

_DEFAULT_LIST_STATUSES = [EventStatus.CONFIRMED.value, EventStatus.COMPLETED.value]
_POSITIVE_FIELDS = ("default_duration", "advance_booking_days")
_NON_NEGATIVE_FIELDS = ("buffer_between_calls", "min_notice_hours")


def busy_intervals(
    events: list[EventResult], exclude_event_id: str | None = None
) -> list[BusyInterval]:
    """Intervals held by events that block the coach's time.

    An event without a real end lasts its duration (or an hour).
    """
    intervals = []
    for event in events:
        if event.id == exclude_event_id or event.status.value not in BUSY_EVENT_STATUSES:
            continue
        end = event.end_date_time
        if end <= event.start_date_time:
            end = event.start_date_time + timedelta(
                minutes=event.duration_minutes or DEFAULT_DURATION_MINUTES
            )
        intervals.append(BusyInterval(event.start_date_time, end))
    return intervals


def _validate_availability(data: dict[str, Any]) -> None:
    try:
        validate_weekly_schedule(data["weekly_schedule"])
        resolve_timezone(data["timezone"])
    except (KeyError, ValueError) as e:
        raise ValidationException(str(e)) from e
    for name in _POSITIVE_FIELDS:
        if not isinstance(data.get(name), int) or data[name] < 1:
            raise ValidationException(f"{name} must be a positive integer", field=name)
    for name in _NON_NEGATIVE_FIELDS:
        if not isinstance(data.get(name), int) or data[name] < 0:
            raise ValidationException(f"{name} must not be negative", field=name)
    for slot in data.get("blocked_slots") or []:
        start, end = slot.get("start"), slot.get("end")
        if not isinstance(start, datetime) or not isinstance(end, datetime) or start >= end:
            raise ValidationException(
                "Blocked slots need a start before their end", field="blocked_slots"
            )


class SchedulingService:
    def __init__(
        self,
        availability_repo: IAvailabilityRepository,
        event_repo: IEventRepository,
        events_page_max: int = 100,
    ) -> None:
        self.availability_repo = availability_repo
        self.event_repo = event_repo
        self.events_page_max = events_page_max

    # ---- availability ----

    async def get_availability(self, organization_id: str) -> AvailabilityResult:
        stored = await self.availability_repo.get(organization_id)
        if stored:
            return stored
        return AvailabilityResult(organization_id=organization_id, **default_availability())

    @traced("scheduling.update_availability")
    async def update_availability(
        self, organization_id: str, patch: dict[str, Any]
    ) -> AvailabilityResult:
        current = await self.get_availability(organization_id)
        data = {**current.as_document(), **patch}
        _validate_availability(data)
        data["blocked_slots"] = [
            {**slot, "start": ensure_utc(slot["start"]), "end": ensure_utc(slot["end"])}
            for slot in data.get("blocked_slots") or []
        ]
        return await self.availability_repo.save(organization_id, data)

    @traced("scheduling.available_slots")
    async def get_available_slots(
        self,
        organization_id: str,
        start: date,
        end: date,
        duration: int | None = None,
        now: datetime | None = None,
    ) -> dict[str, Any]:
        """Bookable slots for [start, end] with the coach's timezone, duration and buffer."""
        if end < start:
            raise ValidationException("end must not be before start", field="end")
        if (end - start).days > MAX_SLOT_RANGE_DAYS:
            raise ValidationException(
                f"Date range is limited to {MAX_SLOT_RANGE_DAYS} days", field="end"
            )
        if duration is not None and duration < 1:
            raise ValidationException("duration must be positive", field="duration")
        availability = await self.get_availability(organization_id)
        events = await self.event_repo.list_starting_between(
            organization_id,
            datetime.combine(start - timedelta(days=1), time.min, tzinfo=timezone.utc),
            datetime.combine(end + timedelta(days=2), time.min, tzinfo=timezone.utc),
        )
        slots = compute_available_slots(
            availability.as_document(),
            busy_intervals(events),
            start,
            end,
            now or utc_now(),
            duration,
        )
        return {
            "slots": slots,
            "timezone": availability.timezone,
            "duration": duration or availability.default_duration,
            "buffer": availability.buffer_between_calls,
        }

    async def find_conflict(
        self,
        organization_id: str,
        start: datetime,
        end: datetime,
        buffer_minutes: int,
        exclude_event_id: str | None = None,
        window_hours: int = 1,
    ) -> bool:
        """Whether [start, end) collides with an event starting near it, buffer applied."""
        window = timedelta(hours=window_hours)
        padding = timedelta(minutes=buffer_minutes)
        nearby = await self.event_repo.list_starting_between(
            organization_id, start - window, end + window
        )
        return any(
            start < b.end + padding and end > b.start - padding
            for b in busy_intervals(nearby, exclude_event_id)
        )

    # ---- events ----

    async def list_events(
        self,
        organization_id: str,
        event_type: EventType | None = None,
        statuses: list[EventStatus] | None = None,
        upcoming: bool = False,
        limit: int = 50,
    ) -> list[EventResult]:
        if not 1 <= limit <= self.events_page_max:
            raise ValidationException(
                f"limit must be between 1 and {self.events_page_max}", field="limit"
            )
        return await self.event_repo.list_for_org(
            organization_id,
            [s.value for s in statuses] if statuses else _DEFAULT_LIST_STATUSES,
            event_type.value if event_type else None,
            utc_now() if upcoming else None,
            limit,
        )

    @traced("scheduling.create_event")
    async def create_event(self, auth: AuthContext, data: dict[str, Any]) -> EventResult:
        title = (data.get("title") or "").strip()
        if not title:
            raise ValidationException("Title is required", field="title")
        start = data.get("start_date_time")
        if not isinstance(start, datetime):
            raise ValidationException("start_date_time is required", field="start_date_time")
        try:
            resolve_timezone(data.get("timezone"))
        except ValueError as e:
            raise ValidationException(str(e), field="timezone") from e
        start = ensure_utc(start)
        duration = data.get("duration_minutes") or DEFAULT_DURATION_MINUTES
        end = ensure_utc(data.get("end_date_time")) or start + timedelta(minutes=duration)
        if end <= start:
            raise ValidationException("end_date_time must be after start", field="end_date_time")
        event_type = EventType(data["event_type"])
        return await self.event_repo.create({
            "organization_id": auth.organization_id,
            "title": title,
            "description": data.get("description"),
            "start_date_time": start,
            "end_date_time": end,
            "timezone": data["timezone"],
            "duration_minutes": int((end - start).total_seconds() // 60),
            "event_type": event_type.value,
            "scope": data.get("scope"),
            "status": EventStatus.CONFIRMED.value,
            "host_user_id": data.get("host_user_id") or auth.user_id,
            "attendee_ids": list(data.get("attendee_ids") or []),
            "meeting_link": data.get("meeting_link"),
            "created_by": auth.user_id,
        })

    async def cancel_event(
        self, organization_id: str, event_id: str, reason: str | None = None
    ) -> EventResult:
        event = await self.event_repo.get(event_id)
        if not event or event.organization_id != organization_id:
            raise ResourceNotFoundException("event", event_id)
        if event.status is EventStatus.CANCELLED:
            raise GoneException("Event is already cancelled", "EVENT_CANCELLED")
        result = await self.event_repo.update(
            event_id,
            {
                "status": EventStatus.CANCELLED.value,
                "cancelled_at": utc_now(),
                "cancellation_reason": reason,
            },
        )
        await self.event_repo.delete_scheduled_jobs(event_id)
        logger.info("Event %s cancelled", event_id)
        return result
