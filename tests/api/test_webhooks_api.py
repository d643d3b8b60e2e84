"""Clerk (svix) and Stripe webhook routes."""

import json
import time
from unittest.mock import AsyncMock

import pytest
from httpx import AsyncClient

from app.api.v1.dependencies import get_billing_service, get_user_service
from app.core.config import get_settings
from app.domain.exceptions import WebhookVerificationException
from app.infrastructure.security.webhooks import sign_payload
from app.main import app

CLERK_EVENT = {
    "type": "user.created",
    "data": {
        "id": "user_new",
        "first_name": "Ada",
        "email_addresses": [{"id": "e1", "email_address": "ada@example.com"}],
        "primary_email_address_id": "e1",
    },
}


def _svix_headers(body: bytes, msg_id: str = "msg_1", timestamp: int | None = None) -> dict:
    ts = str(int(time.time()) if timestamp is None else timestamp)
    secret = get_settings().clerk_webhook_secret.get_secret_value()
    return {
        "svix-id": msg_id,
        "svix-timestamp": ts,
        "svix-signature": f"v1,{sign_payload(secret, msg_id, ts, body)}",
        "content-type": "application/json",
    }


@pytest.fixture
def user_svc() -> AsyncMock:
    svc = AsyncMock()
    svc.handle_clerk_event = AsyncMock(return_value="user_synced")
    app.dependency_overrides[get_user_service] = lambda: svc
    return svc


async def test_signed_clerk_event_is_handled(client: AsyncClient, user_svc) -> None:
    body = json.dumps(CLERK_EVENT).encode()
    response = await client.post("/api/v1/webhooks/clerk", content=body, headers=_svix_headers(body))
    assert response.status_code == 200
    assert response.json() == {"received": True, "action": "user_synced"}
    user_svc.handle_clerk_event.assert_awaited_once_with("user.created", CLERK_EVENT["data"])


async def test_tampered_clerk_body_is_rejected(client: AsyncClient, user_svc) -> None:
    body = json.dumps(CLERK_EVENT).encode()
    headers = _svix_headers(body)
    response = await client.post(
        "/api/v1/webhooks/clerk", content=body.replace(b"Ada", b"Eve"), headers=headers
    )
    assert response.status_code == 400
    assert response.json()["error"] == "WEBHOOK_VERIFICATION_FAILED"
    user_svc.handle_clerk_event.assert_not_awaited()


async def test_stale_clerk_delivery_is_rejected(client: AsyncClient, user_svc) -> None:
    body = json.dumps(CLERK_EVENT).encode()
    headers = _svix_headers(body, timestamp=int(time.time()) - 3600)
    response = await client.post("/api/v1/webhooks/clerk", content=body, headers=headers)
    assert response.status_code == 400


async def test_missing_svix_headers(client: AsyncClient, user_svc) -> None:
    response = await client.post("/api/v1/webhooks/clerk", json=CLERK_EVENT)
    assert response.status_code == 400
    user_svc.handle_clerk_event.assert_not_awaited()


async def test_stripe_webhook_passes_raw_body_and_signature(client: AsyncClient) -> None:
    billing_svc = AsyncMock()
    billing_svc.handle_stripe_webhook = AsyncMock(
        return_value={"received": True, "type": "payment_intent.succeeded", "handled": True}
    )
    app.dependency_overrides[get_billing_service] = lambda: billing_svc

    response = await client.post(
        "/api/v1/webhooks/stripe", content=b'{"id": "evt_1"}', headers={"Stripe-Signature": "t=1,v1=abc"}
    )

    assert response.status_code == 200
    assert response.json()["handled"] is True
    billing_svc.handle_stripe_webhook.assert_awaited_once_with(b'{"id": "evt_1"}', "t=1,v1=abc")


async def test_stripe_bad_signature(client: AsyncClient) -> None:
    billing_svc = AsyncMock()
    billing_svc.handle_stripe_webhook = AsyncMock(side_effect=WebhookVerificationException())
    app.dependency_overrides[get_billing_service] = lambda: billing_svc
    response = await client.post("/api/v1/webhooks/stripe", content=b"{}")
    assert response.status_code == 400
