"""Public intake booking routes: no auth, token-managed, rate limited."""

from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock

import pytest
from httpx import AsyncClient

from app.api.v1.dependencies import get_intake_service
from app.application.dtos.scheduling import BookingResult, EventResult, IntakeCallConfigResult
from app.domain.enums import EventStatus, EventType
from app.domain.exceptions import BookingException
from app.main import app

START = datetime(2026, 10, 21, 15, 0, tzinfo=timezone.utc)
CONFIG = IntakeCallConfigResult(
    id="cfg1", organization_id="org_test", name="Discovery Call", slug="discovery"
)
BOOKING = BookingResult(
    event=EventResult(
        id="ev1",
        organization_id="org_test",
        title="Discovery Call with Ada",
        start_date_time=START,
        end_date_time=START + timedelta(minutes=30),
        timezone="America/New_York",
        event_type=EventType.INTAKE_CALL,
        status=EventStatus.CONFIRMED,
        prospect_name="Ada",
        prospect_email="ada@example.com",
    ),
    config=CONFIG,
    token="tok1",
    manage_url="https://app.test/book/manage/tok1",
)
BOOK_BODY = {"name": "Ada", "email": "ada@example.com", "start": "2026-10-21T15:00:00Z"}


@pytest.fixture
def intake_svc() -> AsyncMock:
    svc = AsyncMock()
    app.dependency_overrides[get_intake_service] = lambda: svc
    return svc


async def test_book_public(client: AsyncClient, intake_svc) -> None:
    intake_svc.book_public.return_value = BOOKING
    response = await client.post("/api/v1/public/intake/dev-coaching/discovery/book", json=BOOK_BODY)

    assert response.status_code == 201
    data = response.json()
    assert data["token"] == "tok1"
    assert data["manage_url"] == "https://app.test/book/manage/tok1"
    assert data["status"] == "confirmed"
    org_slug, config_slug, prospect, start, end = intake_svc.book_public.await_args.args
    assert (org_slug, config_slug) == ("dev-coaching", "discovery")
    assert prospect == {"name": "Ada", "email": "ada@example.com", "phone": None, "notes": None}
    assert start == START
    assert end is None


async def test_book_public_rejects_bad_email(client: AsyncClient, intake_svc) -> None:
    response = await client.post(
        "/api/v1/public/intake/dev-coaching/discovery/book",
        json={**BOOK_BODY, "email": "nope"},
    )
    assert response.status_code == 422
    intake_svc.book_public.assert_not_awaited()


@pytest.mark.parametrize(
    "code, status",
    [("TOKEN_INVALID", 404), ("TOKEN_EXPIRED", 410), ("PAST_DEADLINE", 403), ("SLOT_UNAVAILABLE", 409)],
)
async def test_booking_errors_use_stable_codes(
    client: AsyncClient, intake_svc, code: str, status: int
) -> None:
    intake_svc.cancel.side_effect = BookingException(code, "Cannot cancel")
    response = await client.post("/api/v1/public/intake/token/tok1/cancel", json={"reason": "x"})
    assert response.status_code == status
    assert response.json() == {"error": code, "message": "Cannot cancel"}


async def test_cancel_without_body(client: AsyncClient, intake_svc) -> None:
    intake_svc.cancel.return_value = BOOKING
    response = await client.post("/api/v1/public/intake/token/tok1/cancel")
    assert response.status_code == 200
    intake_svc.cancel.assert_awaited_once_with("tok1", None)


async def test_get_booking_by_token(client: AsyncClient, intake_svc) -> None:
    intake_svc.get_booking.return_value = BOOKING
    response = await client.get("/api/v1/public/intake/token/tok1")
    assert response.status_code == 200
    assert response.json()["event_id"] == "ev1"


async def test_public_booking_is_rate_limited(client: AsyncClient, intake_svc) -> None:
    intake_svc.book_public.return_value = BOOKING
    url = "/api/v1/public/intake/dev-coaching/discovery/book"
    statuses = [(await client.post(url, json=BOOK_BODY)).status_code for _ in range(11)]
    assert statuses[:10] == [201] * 10
    assert statuses[10] == 429
