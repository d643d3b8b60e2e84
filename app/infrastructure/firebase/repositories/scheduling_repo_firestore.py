"""Firestore-backed events, coach availability and intake booking."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from app.application.dtos.scheduling import (
    AvailabilityResult,
    BookingTokenResult,
    EventResult,
    IntakeCallConfigResult,
)
from app.domain.availability import default_availability
from app.domain.enums import EventStatus, EventType, MeetingProvider
from app.domain.exceptions import ConflictException, ResourceNotFoundException
from app.infrastructure.firebase.collections import (
    COLLECTION_COACH_AVAILABILITY,
    COLLECTION_EVENT_SCHEDULED_JOBS,
    COLLECTION_EVENTS,
    COLLECTION_INTAKE_BOOKING_TOKENS,
    COLLECTION_INTAKE_CALL_CONFIGS,
)
from app.infrastructure.firebase._rest_client import (
    DocumentNotFoundError,
    FirestoreRESTClient,
)
from app.shared.utils.datetime import ensure_utc, utc_now


def event_from_doc(doc_id: str, data: dict) -> EventResult:
    return EventResult(
        id=doc_id,
        organization_id=data.get("organization_id", ""),
        title=data.get("title", ""),
        start_date_time=ensure_utc(data["start_date_time"]),
        end_date_time=ensure_utc(data.get("end_date_time") or data["start_date_time"]),
        timezone=data.get("timezone", "UTC"),
        event_type=EventType(data.get("event_type", EventType.COACHING_1ON1.value)),
        status=EventStatus(data.get("status", EventStatus.CONFIRMED.value)),
        description=data.get("description"),
        duration_minutes=data.get("duration_minutes"),
        scope=data.get("scope"),
        host_user_id=data.get("host_user_id"),
        attendee_ids=list(data.get("attendee_ids") or []),
        meeting_link=data.get("meeting_link"),
        intake_call_config_id=data.get("intake_call_config_id"),
        prospect_email=data.get("prospect_email"),
        prospect_name=data.get("prospect_name"),
        prospect_phone=data.get("prospect_phone"),
        booking_token_id=data.get("booking_token_id"),
        rescheduled_at=data.get("rescheduled_at"),
        rescheduled_from_time=data.get("rescheduled_from_time"),
        cancelled_at=data.get("cancelled_at"),
        cancellation_reason=data.get("cancellation_reason"),
        created_by=data.get("created_by"),
        created_at=data.get("created_at"),
    )


class FirestoreEventRepository:
    def __init__(self, client: FirestoreRESTClient) -> None:
        self._client = client
        self._coll = client.collection(COLLECTION_EVENTS)
        self._jobs = client.collection(COLLECTION_EVENT_SCHEDULED_JOBS)

    async def create(self, data: dict[str, Any]) -> EventResult:
        now = utc_now()
        doc = {**data, "created_at": now, "updated_at": now}
        ref = await self._coll.add(doc)
        return event_from_doc(ref.id, doc)

    async def get(self, event_id: str) -> EventResult | None:
        doc = await self._coll.document(event_id).get()
        if not doc:
            return None
        return event_from_doc(doc.id, doc.to_dict())

    async def update(self, event_id: str, updates: dict[str, Any]) -> EventResult:
        doc_ref = self._coll.document(event_id)
        try:
            await doc_ref.update({**updates, "updated_at": utc_now()})
        except DocumentNotFoundError:
            raise ResourceNotFoundException("event", event_id) from None
        doc = await doc_ref.get()
        return event_from_doc(event_id, doc.to_dict())

    async def list_for_org(
        self,
        organization_id: str,
        statuses: list[str],
        event_type: str | None = None,
        starts_after: datetime | None = None,
        limit: int = 50,
    ) -> list[EventResult]:
        q = self._coll.where("organization_id", "==", organization_id).where(
            "status", "in", statuses
        )
        if event_type:
            q = q.where("event_type", "==", event_type)
        if starts_after is not None:
            q = q.where("start_date_time", ">=", starts_after)
        q = q.order_by("start_date_time").limit(limit)
        return [event_from_doc(s.id, s.to_dict()) async for s in q.stream()]

    async def list_starting_between(
        self, organization_id: str, start: datetime, end: datetime
    ) -> list[EventResult]:
        q = (
            self._coll.where("organization_id", "==", organization_id)
            .where("start_date_time", ">=", start)
            .where("start_date_time", "<=", end)
        )
        return [event_from_doc(s.id, s.to_dict()) async for s in q.stream()]

    async def delete_scheduled_jobs(self, event_id: str) -> int:
        batch = self._client.batch()
        async for snapshot in self._jobs.where("event_id", "==", event_id).stream():
            batch.delete(self._jobs.document(snapshot.id))
        count = len(batch)
        if count:
            await batch.commit()
        return count


class FirestoreAvailabilityRepository:
    """coach_availability/{organization id}."""

    def __init__(self, client: FirestoreRESTClient) -> None:
        self._client = client
        self._coll = client.collection(COLLECTION_COACH_AVAILABILITY)

    def _to_result(self, organization_id: str, data: dict) -> AvailabilityResult:
        merged = {**default_availability(), **data}
        return AvailabilityResult(
            organization_id=organization_id,
            weekly_schedule=merged["weekly_schedule"],
            blocked_slots=[
                {**slot, "start": ensure_utc(slot.get("start")), "end": ensure_utc(slot.get("end"))}
                for slot in merged["blocked_slots"]
            ],
            default_duration=merged["default_duration"],
            buffer_between_calls=merged["buffer_between_calls"],
            timezone=merged["timezone"],
            advance_booking_days=merged["advance_booking_days"],
            min_notice_hours=merged["min_notice_hours"],
        )

    async def get(self, organization_id: str) -> AvailabilityResult | None:
        doc = await self._coll.document(organization_id).get()
        if not doc:
            return None
        return self._to_result(organization_id, doc.to_dict())

    async def save(self, organization_id: str, data: dict[str, Any]) -> AvailabilityResult:
        doc = {**data, "organization_id": organization_id, "updated_at": utc_now()}
        await self._coll.document(organization_id).set(doc)
        return self._to_result(organization_id, doc)


def _config_from_doc(doc_id: str, data: dict) -> IntakeCallConfigResult:
    return IntakeCallConfigResult(
        id=doc_id,
        organization_id=data.get("organization_id", ""),
        name=data.get("name", ""),
        slug=data.get("slug", ""),
        duration=data.get("duration") or 30,
        description=data.get("description"),
        meeting_provider=MeetingProvider(
            data.get("meeting_provider", MeetingProvider.MANUAL.value)
        ),
        manual_meeting_url=data.get("manual_meeting_url"),
        confirmation_message=data.get("confirmation_message"),
        allow_cancellation=data.get("allow_cancellation", True),
        allow_reschedule=data.get("allow_reschedule", True),
        cancel_deadline_hours=data.get("cancel_deadline_hours", 24),
        is_active=data.get("is_active", True),
        created_at=data.get("created_at"),
    )


def _token_from_doc(doc_id: str, data: dict) -> BookingTokenResult:
    return BookingTokenResult(
        id=doc_id,
        event_id=data.get("event_id", ""),
        intake_call_config_id=data.get("intake_call_config_id", ""),
        organization_id=data.get("organization_id", ""),
        prospect_email=data.get("prospect_email", ""),
        expires_at=ensure_utc(data["expires_at"]),
        created_at=data.get("created_at"),
    )


class FirestoreIntakeRepository:
    """Intake call configs and booking tokens. The token document id is the secret."""

    def __init__(self, client: FirestoreRESTClient) -> None:
        self._client = client
        self._configs = client.collection(COLLECTION_INTAKE_CALL_CONFIGS)
        self._tokens = client.collection(COLLECTION_INTAKE_BOOKING_TOKENS)

    async def create_config(self, data: dict[str, Any]) -> IntakeCallConfigResult:
        if await self.get_config_by_slug(data["organization_id"], data["slug"]):
            raise ConflictException(
                f"An intake call with slug {data['slug']!r} already exists",
                details={"field": "slug"},
            )
        doc = {**data, "created_at": utc_now()}
        ref = await self._configs.add(doc)
        return _config_from_doc(ref.id, doc)

    async def get_config(self, config_id: str) -> IntakeCallConfigResult | None:
        doc = await self._configs.document(config_id).get()
        if not doc:
            return None
        return _config_from_doc(doc.id, doc.to_dict())

    async def get_config_by_slug(
        self, organization_id: str, slug: str
    ) -> IntakeCallConfigResult | None:
        q = (
            self._configs.where("organization_id", "==", organization_id)
            .where("slug", "==", slug)
            .limit(1)
        )
        async for snapshot in q.stream():
            return _config_from_doc(snapshot.id, snapshot.to_dict())
        return None

    async def list_configs(self, organization_id: str) -> list[IntakeCallConfigResult]:
        q = self._configs.where("organization_id", "==", organization_id)
        return [_config_from_doc(s.id, s.to_dict()) async for s in q.stream()]

    async def create_token(self, data: dict[str, Any]) -> BookingTokenResult:
        doc = {**data, "created_at": utc_now()}
        ref = await self._tokens.add(doc)
        return _token_from_doc(ref.id, doc)

    async def get_token(self, token_id: str) -> BookingTokenResult | None:
        doc = await self._tokens.document(token_id).get()
        if not doc:
            return None
        return _token_from_doc(doc.id, doc.to_dict())

    async def update_token(self, token_id: str, updates: dict[str, Any]) -> None:
        try:
            await self._tokens.document(token_id).update(updates)
        except DocumentNotFoundError:
            raise ResourceNotFoundException("booking_token", token_id) from None
