"""IntakeService booking and token management with mocked collaborators."""

from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock

import pytest

from app.application.dtos.scheduling import (
    AvailabilityResult,
    BookingTokenResult,
    EventResult,
    IntakeCallConfigResult,
)
from app.application.use_cases.intake import IntakeService
from app.domain.availability import default_availability
from app.domain.enums import EventStatus, EventType
from app.domain.exceptions import (
    BookingException,
    ConflictException,
    ResourceNotFoundException,
    ValidationException,
)

NOW = datetime(2026, 10, 18, 12, 0, tzinfo=timezone.utc)
START = datetime(2026, 10, 21, 15, 0, tzinfo=timezone.utc)
PROSPECT = {"name": "Ada Prospect", "email": "Ada@Example.com ", "phone": "+1 555"}


def _config(**overrides) -> IntakeCallConfigResult:
    data = {
        "id": "cfg1",
        "organization_id": "org1",
        "name": "Discovery Call",
        "slug": "discovery",
        "duration": 30,
        "manual_meeting_url": "https://meet.example.com/coach",
        **overrides,
    }
    return IntakeCallConfigResult(**data)


def _event(**overrides) -> EventResult:
    data = {
        "id": "ev1",
        "organization_id": "org1",
        "title": "Discovery Call with Ada Prospect",
        "start_date_time": START,
        "end_date_time": START + timedelta(minutes=30),
        "timezone": "America/New_York",
        "event_type": EventType.INTAKE_CALL,
        "status": EventStatus.CONFIRMED,
        "prospect_email": "ada@example.com",
        "prospect_name": "Ada Prospect",
        **overrides,
    }
    return EventResult(**data)


def _token(**overrides) -> BookingTokenResult:
    data = {
        "id": "tok1",
        "event_id": "ev1",
        "intake_call_config_id": "cfg1",
        "organization_id": "org1",
        "prospect_email": "ada@example.com",
        "expires_at": START + timedelta(hours=24),
        **overrides,
    }
    return BookingTokenResult(**data)


def _updated_event(event_id: str, fields: dict) -> EventResult:
    data = {k: v for k, v in fields.items() if k in EventResult.__dataclass_fields__}
    if "status" in data:
        data["status"] = EventStatus(data["status"])
    return _event(id=event_id, **data)


@pytest.fixture
def mocks():
    intake_repo = AsyncMock()
    intake_repo.get_config = AsyncMock(return_value=_config())
    intake_repo.get_config_by_slug = AsyncMock(return_value=_config())
    intake_repo.create_token = AsyncMock(return_value=_token())
    intake_repo.get_token = AsyncMock(return_value=_token())
    event_repo = AsyncMock()
    event_repo.create = AsyncMock(return_value=_event())
    event_repo.get = AsyncMock(return_value=_event())
    event_repo.update = AsyncMock(side_effect=_updated_event)
    event_repo.delete_scheduled_jobs = AsyncMock(return_value=2)
    org_service = AsyncMock()
    org_service.resolve_slug = AsyncMock(return_value="org1")
    scheduling = AsyncMock()
    scheduling.get_availability = AsyncMock(
        return_value=AvailabilityResult(organization_id="org1", **default_availability())
    )
    scheduling.find_conflict = AsyncMock(return_value=False)
    notifications = AsyncMock()
    return intake_repo, event_repo, org_service, scheduling, notifications


@pytest.fixture
def service(mocks):
    intake_repo, event_repo, org_service, scheduling, notifications = mocks
    return IntakeService(
        intake_repo,
        event_repo,
        org_service,
        scheduling,
        notifications,
        app_base_url="https://app.test/",
    )


class TestBook:
    async def test_creates_event_token_and_sends_confirmation(self, service, mocks):
        intake_repo, event_repo, _, _, notifications = mocks
        booking = await service.book("org1", "cfg1", PROSPECT, START, now=NOW)

        event_data = event_repo.create.await_args.args[0]
        assert event_data["prospect_email"] == "ada@example.com"
        assert event_data["end_date_time"] == START + timedelta(minutes=30)
        assert event_data["duration_minutes"] == 30
        assert event_data["event_type"] == "intake_call"
        assert event_data["meeting_link"] == "https://meet.example.com/coach"
        token_data = intake_repo.create_token.await_args.args[0]
        assert token_data["expires_at"] == START + timedelta(hours=24)
        event_repo.update.assert_awaited_once_with("ev1", {"booking_token_id": "tok1"})
        assert booking.manage_url == "https://app.test/book/manage/tok1"
        notifications.send_booking_confirmation.assert_awaited_once_with(booking)

    async def test_taken_slot_conflicts(self, service, mocks):
        _, event_repo, _, scheduling, _ = mocks
        scheduling.find_conflict.return_value = True
        with pytest.raises(ConflictException) as exc_info:
            await service.book("org1", "cfg1", PROSPECT, START, now=NOW)
        assert exc_info.value.error_code == "SLOT_UNAVAILABLE"
        event_repo.create.assert_not_awaited()

    async def test_config_of_another_org_is_not_found(self, service, mocks):
        intake_repo = mocks[0]
        intake_repo.get_config.return_value = _config(organization_id="org2")
        with pytest.raises(ResourceNotFoundException):
            await service.book("org1", "cfg1", PROSPECT, START, now=NOW)

    @pytest.mark.parametrize(
        "prospect",
        [{"name": "", "email": "a@b.co"}, {"name": "Ada", "email": "not-an-email"}],
    )
    async def test_prospect_details_are_required(self, service, prospect):
        with pytest.raises(ValidationException):
            await service.book("org1", "cfg1", prospect, START, now=NOW)

    async def test_past_start_is_rejected(self, service):
        with pytest.raises(ValidationException):
            await service.book("org1", "cfg1", PROSPECT, NOW - timedelta(hours=1), now=NOW)

    async def test_public_booking_needs_notice(self, service):
        with pytest.raises(ValidationException, match="notice"):
            await service.book(
                "org1", "cfg1", PROSPECT, NOW + timedelta(hours=2), public=True, now=NOW
            )

    async def test_public_booking_window(self, service):
        with pytest.raises(ValidationException, match="days ahead"):
            await service.book(
                "org1", "cfg1", PROSPECT, NOW + timedelta(days=45), public=True, now=NOW
            )

    async def test_coach_booking_ignores_notice(self, service):
        booking = await service.book("org1", "cfg1", PROSPECT, NOW + timedelta(hours=2), now=NOW)
        assert booking.token == "tok1"

    async def test_book_public_resolves_slugs(self, service, mocks):
        intake_repo, _, org_service, _, _ = mocks
        await service.book_public("dev-coaching", "discovery", PROSPECT, START, now=NOW)
        org_service.resolve_slug.assert_awaited_once_with("dev-coaching")
        intake_repo.get_config_by_slug.assert_awaited_once_with("org1", "discovery")

    async def test_inactive_public_config_is_not_found(self, service, mocks):
        mocks[0].get_config_by_slug.return_value = _config(is_active=False)
        with pytest.raises(ResourceNotFoundException):
            await service.get_public_config("dev-coaching", "discovery")


class TestManageByToken:
    async def test_unknown_token(self, service, mocks):
        mocks[0].get_token.return_value = None
        with pytest.raises(BookingException) as exc_info:
            await service.get_booking("nope", now=NOW)
        assert exc_info.value.error_code == "TOKEN_INVALID"

    async def test_expired_token(self, service, mocks):
        mocks[0].get_token.return_value = _token(expires_at=NOW - timedelta(minutes=1))
        with pytest.raises(BookingException) as exc_info:
            await service.get_booking("tok1", now=NOW)
        assert exc_info.value.error_code == "TOKEN_EXPIRED"

    async def test_cancelled_event(self, service, mocks):
        mocks[1].get.return_value = _event(status=EventStatus.CANCELLED)
        with pytest.raises(BookingException) as exc_info:
            await service.get_booking("tok1", now=NOW)
        assert exc_info.value.error_code == "EVENT_CANCELLED"

    async def test_reschedule_moves_event_and_token(self, service, mocks):
        intake_repo, event_repo, _, scheduling, notifications = mocks
        new_start = START + timedelta(days=1)

        booking = await service.reschedule("tok1", new_start, now=NOW)

        fields = event_repo.update.await_args.args[1]
        assert fields["start_date_time"] == new_start
        assert fields["end_date_time"] == new_start + timedelta(minutes=30)
        assert fields["rescheduled_from_time"] == START
        assert scheduling.find_conflict.await_args.kwargs["exclude_event_id"] == "ev1"
        intake_repo.update_token.assert_awaited_once_with(
            "tok1", {"expires_at": new_start + timedelta(hours=24)}
        )
        event_repo.delete_scheduled_jobs.assert_awaited_once_with("ev1")
        notifications.send_booking_rescheduled.assert_awaited_once_with(booking, START)

    async def test_reschedule_into_taken_slot(self, service, mocks):
        mocks[3].find_conflict.return_value = True
        with pytest.raises(BookingException) as exc_info:
            await service.reschedule("tok1", START + timedelta(days=1), now=NOW)
        assert exc_info.value.error_code == "SLOT_UNAVAILABLE"

    async def test_reschedule_disabled(self, service, mocks):
        mocks[0].get_config.return_value = _config(allow_reschedule=False)
        with pytest.raises(BookingException) as exc_info:
            await service.reschedule("tok1", START + timedelta(days=1), now=NOW)
        assert exc_info.value.error_code == "RESCHEDULE_DISABLED"

    async def test_cancel_after_deadline(self, service):
        late = START - timedelta(hours=2)
        with pytest.raises(BookingException) as exc_info:
            await service.cancel("tok1", now=late)
        assert exc_info.value.error_code == "PAST_DEADLINE"

    async def test_cancel(self, service, mocks):
        _, event_repo, _, _, notifications = mocks
        booking = await service.cancel("tok1", reason="  Conflict at work ", now=NOW)
        fields = event_repo.update.await_args.args[1]
        assert fields["status"] == "cancelled"
        assert fields["cancellation_reason"] == "Conflict at work"
        assert booking.event.status is EventStatus.CANCELLED
        notifications.send_booking_cancelled.assert_awaited_once_with(booking)
