"""Program purchases on an org's Stripe connected account.

Saved cards live on a per-(user, connected account) customer. A purchase
confirms an off-session PaymentIntent; on success the user is enrolled and
an invoice recorded. The payment_intent.succeeded webhook repeats the same
completion idempotently in case the synchronous path did not finish.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from app.application.dtos.billing import (
    InvoiceResult,
    SavedPaymentMethod,
    StripeCustomerResult,
)
from app.application.dtos.enrollment import EnrollmentResult
from app.application.dtos.program import ProgramResult
from app.application.interfaces.repositories import (
    IBillingRepository,
    IEnrollmentRepository,
    IOrganizationRepository,
    IProgramRepository,
    IUserRepository,
)
from app.application.interfaces.services import IPaymentGateway
from app.application.use_cases.enrollments.enrollment_operations import EnrollmentService
from app.application.use_cases.organizations.organization_operations import (
    OrganizationService,
)
from app.domain.discounts import AppliedDiscount, apply_discount, normalize_code
from app.domain.enums import InvoiceStatus, SubscriptionStatus
from app.domain.exceptions import (
    ConflictException,
    PaymentRequiredActionException,
    ResourceNotFoundException,
    ValidationException,
)
from app.shared.telemetry.logging import get_logger
from app.shared.telemetry.tracing import traced
from app.shared.utils.datetime import utc_now

logger = get_logger(__name__)

PROGRAM_ENROLLMENT = "program_enrollment"
_SUBSCRIPTION_EVENTS = (
    "customer.subscription.created",
    "customer.subscription.updated",
    "customer.subscription.deleted",
)


class BillingService:
    def __init__(
        self,
        billing_repo: IBillingRepository,
        org_repo: IOrganizationRepository,
        program_repo: IProgramRepository,
        enrollment_repo: IEnrollmentRepository,
        user_repo: IUserRepository,
        gateway: IPaymentGateway,
        enrollment_service: EnrollmentService,
        org_service: OrganizationService,
    ) -> None:
        self.billing_repo = billing_repo
        self.org_repo = org_repo
        self.program_repo = program_repo
        self.enrollment_repo = enrollment_repo
        self.user_repo = user_repo
        self.gateway = gateway
        self.enrollment_service = enrollment_service
        self.org_service = org_service

    async def _connected_account(self, organization_id: str) -> str:
        settings = await self.org_repo.get_settings(organization_id)
        if not settings or not settings.stripe_connect_account_id:
            raise ValidationException("This organization is not set up to accept payments")
        return settings.stripe_connect_account_id

    async def _customer(
        self, user_id: str, organization_id: str, account: str, create: bool = False
    ) -> StripeCustomerResult | None:
        customer = await self.billing_repo.get_customer(user_id, account)
        if customer or not create:
            return customer
        user = await self.user_repo.get_by_id(user_id)
        name = " ".join(p for p in (user.first_name, user.last_name) if p) if user else None
        customer_id = await self.gateway.create_customer(
            account,
            user.email if user else None,
            name or None,
            {"user_id": user_id, "organization_id": organization_id},
        )
        customer = StripeCustomerResult(
            user_id=user_id,
            organization_id=organization_id,
            connected_account_id=account,
            customer_id=customer_id,
        )
        await self.billing_repo.save_customer(customer)
        logger.info("Created Stripe customer for user %s on %s", user_id, account)
        return customer

    # ---- saved cards ----

    async def list_payment_methods(
        self, user_id: str, organization_id: str
    ) -> list[SavedPaymentMethod]:
        """Cards on the user's customer, one per card fingerprint."""
        account = await self._connected_account(organization_id)
        customer = await self._customer(user_id, organization_id, account)
        if not customer:
            return []
        methods = await self.gateway.list_card_payment_methods(account, customer.customer_id)
        seen: set[str] = set()
        unique = []
        for pm in methods:
            key = pm.fingerprint or pm.id
            if key in seen:
                continue
            seen.add(key)
            unique.append(pm)
        return unique

    @traced("billing.attach_payment_method")
    async def attach_payment_method(
        self, user_id: str, organization_id: str, payment_method_id: str
    ) -> SavedPaymentMethod:
        account = await self._connected_account(organization_id)
        customer = await self._customer(user_id, organization_id, account, create=True)
        incoming = await self.gateway.retrieve_payment_method(account, payment_method_id)
        existing = await self.gateway.list_card_payment_methods(account, customer.customer_id)
        if incoming.fingerprint and any(
            pm.fingerprint == incoming.fingerprint and pm.id != incoming.id for pm in existing
        ):
            raise ConflictException(
                "This card is already saved", "DUPLICATE_PAYMENT_METHOD"
            )
        if any(pm.id == incoming.id for pm in existing):
            return incoming
        return await self.gateway.attach_payment_method(
            account, customer.customer_id, payment_method_id
        )

    async def detach_payment_method(
        self, user_id: str, organization_id: str, payment_method_id: str
    ) -> None:
        account = await self._connected_account(organization_id)
        customer = await self._customer(user_id, organization_id, account)
        owned = (
            await self.gateway.list_card_payment_methods(account, customer.customer_id)
            if customer
            else []
        )
        if not any(pm.id == payment_method_id for pm in owned):
            raise ResourceNotFoundException("payment_method", payment_method_id)
        await self.gateway.detach_payment_method(account, payment_method_id)

    # ---- discounts ----

    async def validate_discount(
        self,
        user_id: str,
        organization_id: str,
        program_id: str,
        code: str,
        amount: int | None = None,
        now: datetime | None = None,
    ) -> AppliedDiscount:
        """Apply code to the program price (or amount); 400 with the reason when it cannot."""
        if amount is None:
            program = await self.program_repo.get_program(program_id)
            if not program or program.organization_id != organization_id:
                raise ResourceNotFoundException("program", program_id)
            amount = program.price_in_cents
        discount = await self.billing_repo.get_discount_by_code(
            organization_id, normalize_code(code)
        )
        if not discount:
            raise ValidationException("Invalid discount code", field="discount_code")
        used = await self.billing_repo.count_discount_usages(discount.id, user_id)
        return apply_discount(
            discount.id, discount.as_document(), program_id, amount, used, now or utc_now()
        )

    # ---- purchase ----

    @traced("billing.charge_saved_method")
    async def charge_saved_method(
        self,
        user_id: str,
        organization_id: str,
        program_id: str,
        payment_method_id: str,
        cohort_id: str | None = None,
        discount_code: str | None = None,
        start_date: str | None = None,
    ) -> dict[str, Any]:
        """Charge a saved card for a program and enroll the buyer.

        Returns ``{"free": True}`` when nothing is owed, otherwise
        ``{"success": True, "enrollment": ...}``.

        Raises:
            ResourceNotFoundException: Unknown program.
            ValidationException: Already enrolled, no connected account, bad code.
            PaymentRequiredActionException: No saved customer, or the bank wants 3DS.
            PaymentFailedException: The card was declined.
        """
        program = await self.program_repo.get_program(program_id)
        if not program or program.organization_id != organization_id:
            raise ResourceNotFoundException("program", program_id)
        if await self.enrollment_service.find_open_enrollment(
            user_id, organization_id, program_id, cohort_id
        ):
            raise ValidationException("You are already enrolled in this program")
        account = await self._connected_account(organization_id)

        applied = None
        total = program.price_in_cents
        if discount_code:
            applied = await self.validate_discount(
                user_id, organization_id, program_id, discount_code, total
            )
            total = applied.final_amount
        if total <= 0:
            return {"free": True, "message": "No payment required"}

        customer = await self._customer(user_id, organization_id, account)
        if not customer:
            raise PaymentRequiredActionException("Add a card before purchasing")

        metadata = {
            "type": PROGRAM_ENROLLMENT,
            "user_id": user_id,
            "program_id": program_id,
            "cohort_id": cohort_id or "",
            "organization_id": organization_id,
            "start_date": start_date or "",
            "discount_code": applied.code if applied else "",
            "discount_code_id": applied.discount_code_id if applied else "",
            "discount_amount": str(applied.discount_amount if applied else 0),
        }
        intent = await self.gateway.charge_saved_method(
            account,
            customer.customer_id,
            payment_method_id,
            total,
            program.currency,
            metadata,
            description=program.name,
        )
        if intent.status != "succeeded":
            raise PaymentRequiredActionException(
                payment_intent_id=intent.id, client_secret=intent.client_secret
            )

        enrollment = await self._complete_enrollment(program, intent.id, total, metadata)
        return {"success": True, "enrollment": enrollment}

    async def _complete_enrollment(
        self,
        program: ProgramResult,
        payment_intent_id: str,
        amount: int,
        metadata: dict[str, str],
    ) -> EnrollmentResult:
        """Enroll, invoice and count the discount once per PaymentIntent."""
        enrollment = await self.enrollment_repo.get_by_payment_intent(payment_intent_id)
        created = enrollment is None
        if created:
            try:
                enrollment = await self.enrollment_service.enroll(
                    metadata["user_id"],
                    program.organization_id,
                    program.id,
                    cohort_id=metadata.get("cohort_id") or None,
                    start_date=metadata.get("start_date") or None,
                    payment_intent_id=payment_intent_id,
                    amount_paid=amount,
                    discount_code=metadata.get("discount_code") or None,
                )
            except ConflictException as e:
                # The other payment path enrolled for this intent first.
                enrollment = await self.enrollment_repo.get_by_payment_intent(payment_intent_id)
                if e.error_code != "ALREADY_ENROLLED" or enrollment is None:
                    raise
                created = False
        if not await self.billing_repo.get_invoice_by_payment_intent(payment_intent_id):
            await self.billing_repo.create_invoice({
                "user_id": metadata["user_id"],
                "organization_id": program.organization_id,
                "payment_type": PROGRAM_ENROLLMENT,
                "reference_id": program.id,
                "reference_name": program.name,
                "amount_paid": amount,
                "currency": program.currency,
                "stripe_payment_intent_id": payment_intent_id,
            })
        code = metadata.get("discount_code")
        if created and code:
            discount = await self.billing_repo.get_discount_by_code(
                program.organization_id, code
            )
            if discount:
                await self.billing_repo.record_discount_usage(
                    discount,
                    metadata["user_id"],
                    {
                        "program_id": program.id,
                        "enrollment_id": enrollment.id,
                        "discount_amount": int(metadata.get("discount_amount") or 0),
                    },
                )
        return enrollment

    # ---- invoices ----

    async def list_invoices(self, user_id: str) -> list[InvoiceResult]:
        return await self.billing_repo.list_invoices_for_user(user_id)

    async def list_org_invoices(self, organization_id: str) -> list[InvoiceResult]:
        return await self.billing_repo.list_invoices_for_org(organization_id)

    # ---- webhooks ----

    async def handle_stripe_webhook(
        self, payload: bytes, signature: str | None
    ) -> dict[str, Any]:
        event = self.gateway.construct_webhook_event(payload, signature)
        event_type = event.get("type", "")
        obj = (event.get("data") or {}).get("object") or {}
        handled = True
        if event_type == "payment_intent.succeeded":
            handled = await self._on_payment_succeeded(obj)
        elif event_type == "charge.refunded":
            handled = await self._on_charge_refunded(obj)
        elif event_type in _SUBSCRIPTION_EVENTS:
            handled = await self._on_subscription(obj)
        elif event_type == "invoice.payment_failed":
            handled = await self._on_invoice_failed(obj)
        else:
            handled = False
        logger.info("Stripe webhook %s %s", event_type, "handled" if handled else "ignored")
        return {"received": True, "type": event_type, "handled": handled}

    async def _on_payment_succeeded(self, intent: dict[str, Any]) -> bool:
        metadata = intent.get("metadata") or {}
        if metadata.get("type") != PROGRAM_ENROLLMENT:
            return False
        program = await self.program_repo.get_program(metadata.get("program_id", ""))
        if not program or not metadata.get("user_id"):
            logger.warning("PaymentIntent %s references an unknown program", intent.get("id"))
            return False
        await self._complete_enrollment(
            program, intent["id"], intent.get("amount_received") or intent.get("amount") or 0, metadata
        )
        return True

    async def _on_charge_refunded(self, charge: dict[str, Any]) -> bool:
        intent_id = charge.get("payment_intent")
        invoice = await self.billing_repo.get_invoice_by_payment_intent(intent_id) if intent_id else None
        if not invoice:
            return False
        refunded = charge.get("amount_refunded") or 0
        status = (
            InvoiceStatus.REFUNDED
            if refunded >= (charge.get("amount") or invoice.amount_paid)
            else InvoiceStatus.PARTIALLY_REFUNDED
        )
        await self.billing_repo.update_invoice(
            invoice.id, {"status": status.value, "amount_refunded": refunded}
        )
        return True

    async def _on_subscription(self, subscription: dict[str, Any]) -> bool:
        organization_id = (subscription.get("metadata") or {}).get("organization_id")
        if not organization_id:
            return False
        period_end = subscription.get("current_period_end")
        await self.org_service.set_subscription(
            organization_id,
            {
                "status": SubscriptionStatus.from_stripe(subscription.get("status")).value,
                "stripe_subscription_id": subscription.get("id"),
                "stripe_customer_id": subscription.get("customer"),
                "current_period_end": (
                    datetime.fromtimestamp(period_end, tz=timezone.utc) if period_end else None
                ),
            },
        )
        return True

    async def _on_invoice_failed(self, invoice: dict[str, Any]) -> bool:
        details = invoice.get("subscription_details") or {}
        organization_id = (details.get("metadata") or {}).get("organization_id") or (
            invoice.get("metadata") or {}
        ).get("organization_id")
        if not organization_id:
            return False
        current = (await self.org_service.get_settings(organization_id)).subscription
        await self.org_service.set_subscription(
            organization_id, {**current, "status": SubscriptionStatus.PAST_DUE.value}
        )
        return True
