"""Inbound webhooks from Clerk (users) and Stripe (payments)."""

from typing import Annotated, Any

from fastapi import APIRouter, Depends, Header, Request

from app.api.v1.dependencies import (
    get_billing_service,
    get_user_service,
    verify_clerk_webhook,
)
from app.application.use_cases.billing import BillingService
from app.application.use_cases.users import UserService
from app.core.limiter import limit_webhooks
from app.schemas.user import WebhookAck
from app.shared.telemetry.logging import get_logger

router = APIRouter()
logger = get_logger(__name__)


@router.post("/clerk", response_model=WebhookAck)
@limit_webhooks
async def clerk_webhook(
    request: Request,
    payload: Annotated[dict[str, Any], Depends(verify_clerk_webhook)],
    user_svc: Annotated[UserService, Depends(get_user_service)],
):
    """Mirror Clerk user lifecycle events into the users collection."""
    action = await user_svc.handle_clerk_event(payload.get("type", ""), payload.get("data") or {})
    return WebhookAck(received=True, action=action)


@router.post("/stripe")
@limit_webhooks
async def stripe_webhook(
    request: Request,
    billing_svc: Annotated[BillingService, Depends(get_billing_service)],
    stripe_signature: Annotated[str | None, Header(alias="Stripe-Signature")] = None,
) -> dict[str, Any]:
    payload = await request.body()
    result = await billing_svc.handle_stripe_webhook(payload, stripe_signature)
    if not result["handled"]:
        logger.info("Stripe event %s acknowledged without handling", result["type"])
    return result
