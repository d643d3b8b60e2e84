"""Stripe Connect gateway.

Every call is made on behalf of the org's connected account
(``stripe_account=``) with the platform secret key passed per request, so
no global ``stripe.api_key`` is mutated. The SDK is synchronous; calls run
in a worker thread. Card errors are translated into domain exceptions here
so services never import stripe.
"""

from __future__ import annotations

import asyncio
import logging
from functools import partial
from typing import Any

import stripe

from app.application.dtos.billing import PaymentIntentResult, SavedPaymentMethod
from app.domain.exceptions import (
    PaymentFailedException,
    PaymentRequiredActionException,
    ServiceNotConfiguredException,
    WebhookVerificationException,
)

logger = logging.getLogger(__name__)


def _as_dict(obj: Any) -> dict[str, Any]:
    """Plain dict view of a StripeObject."""
    if obj is None:
        return {}
    return obj.to_dict() if hasattr(obj, "to_dict") else dict(obj)


def _payment_method(obj: Any) -> SavedPaymentMethod:
    pm = _as_dict(obj)
    card = _as_dict(pm.get("card"))
    return SavedPaymentMethod(
        id=pm["id"],
        brand=card.get("brand"),
        last4=card.get("last4"),
        exp_month=card.get("exp_month"),
        exp_year=card.get("exp_year"),
        fingerprint=card.get("fingerprint"),
    )


class StripeGateway:
    """Thin async wrapper over the stripe SDK."""

    def __init__(self, secret_key: str | None, webhook_secret: str | None = None) -> None:
        self._secret_key = secret_key
        self._webhook_secret = webhook_secret

    async def _call(self, fn, *args: Any, connected_account_id: str | None = None, **kwargs: Any) -> Any:
        if not self._secret_key:
            raise ServiceNotConfiguredException("Stripe")
        kwargs["api_key"] = self._secret_key
        if connected_account_id:
            kwargs["stripe_account"] = connected_account_id
        return await asyncio.to_thread(partial(fn, *args, **kwargs))

    async def create_customer(
        self,
        connected_account_id: str,
        email: str | None,
        name: str | None,
        metadata: dict[str, str],
    ) -> str:
        customer = await self._call(
            stripe.Customer.create,
            connected_account_id=connected_account_id,
            email=email,
            name=name,
            metadata=metadata,
        )
        return _as_dict(customer)["id"]

    async def list_card_payment_methods(
        self, connected_account_id: str, customer_id: str
    ) -> list[SavedPaymentMethod]:
        result = await self._call(
            stripe.PaymentMethod.list,
            connected_account_id=connected_account_id,
            customer=customer_id,
            type="card",
        )
        return [_payment_method(pm) for pm in _as_dict(result).get("data") or []]

    async def retrieve_payment_method(
        self, connected_account_id: str, payment_method_id: str
    ) -> SavedPaymentMethod:
        pm = await self._call(
            stripe.PaymentMethod.retrieve,
            payment_method_id,
            connected_account_id=connected_account_id,
        )
        return _payment_method(pm)

    async def attach_payment_method(
        self, connected_account_id: str, customer_id: str, payment_method_id: str
    ) -> SavedPaymentMethod:
        try:
            pm = await self._call(
                stripe.PaymentMethod.attach,
                payment_method_id,
                connected_account_id=connected_account_id,
                customer=customer_id,
            )
        except stripe.CardError as e:
            raise PaymentFailedException(e.user_message or str(e), e.code) from e
        return _payment_method(pm)

    async def detach_payment_method(
        self, connected_account_id: str, payment_method_id: str
    ) -> None:
        await self._call(
            stripe.PaymentMethod.detach,
            payment_method_id,
            connected_account_id=connected_account_id,
        )

    async def charge_saved_method(
        self,
        connected_account_id: str,
        customer_id: str,
        payment_method_id: str,
        amount: int,
        currency: str,
        metadata: dict[str, str],
        description: str | None = None,
    ) -> PaymentIntentResult:
        """Create and confirm an off-session PaymentIntent.

        Raises:
            PaymentRequiredActionException: The bank asked for authentication.
            PaymentFailedException: The card was declined.
        """
        try:
            intent = await self._call(
                stripe.PaymentIntent.create,
                connected_account_id=connected_account_id,
                amount=amount,
                currency=currency,
                customer=customer_id,
                payment_method=payment_method_id,
                off_session=True,
                confirm=True,
                metadata=metadata,
                description=description,
            )
        except stripe.CardError as e:
            if e.code == "authentication_required":
                intent = _as_dict(e.error.payment_intent if e.error else None)
                raise PaymentRequiredActionException(
                    payment_intent_id=intent.get("id"),
                    client_secret=intent.get("client_secret"),
                ) from e
            logger.info("Card declined on %s: %s", connected_account_id, e.code)
            raise PaymentFailedException(e.user_message or "Your card was declined", e.code) from e
        intent = _as_dict(intent)
        return PaymentIntentResult(
            id=intent["id"],
            status=intent["status"],
            amount=intent["amount"],
            currency=intent["currency"],
            client_secret=intent.get("client_secret"),
        )

    def construct_webhook_event(self, payload: bytes, signature: str | None) -> dict[str, Any]:
        """Verify the Stripe-Signature header and return the event as a dict."""
        if not self._webhook_secret:
            raise ServiceNotConfiguredException("Stripe webhooks")
        if not signature:
            raise WebhookVerificationException("Missing Stripe-Signature header")
        try:
            event = stripe.Webhook.construct_event(payload, signature, self._webhook_secret)
        except ValueError as e:
            raise WebhookVerificationException("Invalid Stripe payload") from e
        except stripe.SignatureVerificationError as e:
            raise WebhookVerificationException("Invalid Stripe signature") from e
        return _as_dict(event)
