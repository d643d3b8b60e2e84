"""Firestore-backed billing records: Connect customers, discount codes, invoices."""

from __future__ import annotations

from typing import Any

from app.application.dtos.billing import (
    DiscountCodeResult,
    InvoiceResult,
    StripeCustomerResult,
)
from app.domain.enums import DiscountApplicability, DiscountType, InvoiceStatus
from app.infrastructure.firebase.collections import (
    COLLECTION_DISCOUNT_CODE_USAGES,
    COLLECTION_DISCOUNT_CODES,
    COLLECTION_INVOICES,
    COLLECTION_STRIPE_CUSTOMERS,
)
from app.infrastructure.firebase._rest_client import FirestoreRESTClient
from app.shared.utils.datetime import ensure_utc, utc_now


def _customer_doc_id(user_id: str, connected_account_id: str) -> str:
    return f"{user_id}_{connected_account_id}"


def _discount_from_doc(doc_id: str, data: dict) -> DiscountCodeResult:
    return DiscountCodeResult(
        id=doc_id,
        organization_id=data.get("organization_id", ""),
        code=data.get("code", ""),
        type=DiscountType(data.get("type", DiscountType.PERCENTAGE.value)),
        value=data.get("value") or 0,
        is_active=data.get("is_active", True),
        applicable_to=DiscountApplicability(
            data.get("applicable_to", DiscountApplicability.ALL.value)
        ),
        program_ids=list(data.get("program_ids") or []),
        squad_ids=list(data.get("squad_ids") or []),
        content_ids=list(data.get("content_ids") or []),
        starts_at=ensure_utc(data.get("starts_at")),
        expires_at=ensure_utc(data.get("expires_at")),
        max_uses=data.get("max_uses"),
        use_count=data.get("use_count") or 0,
        max_uses_per_user=data.get("max_uses_per_user"),
    )


def _invoice_from_doc(doc_id: str, data: dict) -> InvoiceResult:
    return InvoiceResult(
        id=doc_id,
        user_id=data.get("user_id", ""),
        organization_id=data.get("organization_id", ""),
        payment_type=data.get("payment_type", ""),
        reference_id=data.get("reference_id", ""),
        reference_name=data.get("reference_name", ""),
        amount_paid=data.get("amount_paid") or 0,
        currency=data.get("currency", "usd"),
        status=InvoiceStatus(data.get("status", InvoiceStatus.PAID.value)),
        amount_refunded=data.get("amount_refunded") or 0,
        stripe_payment_intent_id=data.get("stripe_payment_intent_id"),
        stripe_invoice_id=data.get("stripe_invoice_id"),
        created_at=data.get("created_at"),
    )


class FirestoreBillingRepository:
    def __init__(self, client: FirestoreRESTClient) -> None:
        self._client = client
        self._customers = client.collection(COLLECTION_STRIPE_CUSTOMERS)
        self._discounts = client.collection(COLLECTION_DISCOUNT_CODES)
        self._usages = client.collection(COLLECTION_DISCOUNT_CODE_USAGES)
        self._invoices = client.collection(COLLECTION_INVOICES)

    # ---- connected-account customers ----

    async def get_customer(
        self, user_id: str, connected_account_id: str
    ) -> StripeCustomerResult | None:
        doc = await self._customers.document(
            _customer_doc_id(user_id, connected_account_id)
        ).get()
        if not doc:
            return None
        data = doc.to_dict()
        return StripeCustomerResult(
            user_id=user_id,
            organization_id=data.get("organization_id", ""),
            connected_account_id=connected_account_id,
            customer_id=data.get("customer_id", ""),
        )

    async def save_customer(self, customer: StripeCustomerResult) -> None:
        await self._customers.document(
            _customer_doc_id(customer.user_id, customer.connected_account_id)
        ).set({
            "user_id": customer.user_id,
            "organization_id": customer.organization_id,
            "connected_account_id": customer.connected_account_id,
            "customer_id": customer.customer_id,
            "created_at": utc_now(),
        })

    # ---- discount codes ----

    async def get_discount_by_code(
        self, organization_id: str, code: str
    ) -> DiscountCodeResult | None:
        """Codes are stored upper-case."""
        q = (
            self._discounts.where("organization_id", "==", organization_id)
            .where("code", "==", code)
            .limit(1)
        )
        async for snapshot in q.stream():
            return _discount_from_doc(snapshot.id, snapshot.to_dict())
        return None

    async def count_discount_usages(self, discount_code_id: str, user_id: str) -> int:
        q = self._usages.where("discount_code_id", "==", discount_code_id).where(
            "user_id", "==", user_id
        )
        return len([s async for s in q.stream()])

    async def record_discount_usage(
        self, discount: DiscountCodeResult, user_id: str, data: dict[str, Any]
    ) -> None:
        batch = self._client.batch()
        batch.set(self._usages.document(), {
            **data,
            "discount_code_id": discount.id,
            "code": discount.code,
            "organization_id": discount.organization_id,
            "user_id": user_id,
            "created_at": utc_now(),
        })
        batch.update(
            self._discounts.document(discount.id),
            {"use_count": discount.use_count + 1, "updated_at": utc_now()},
        )
        await batch.commit()

    # ---- invoices ----

    async def create_invoice(self, data: dict[str, Any]) -> InvoiceResult:
        doc = {
            "status": InvoiceStatus.PAID.value,
            "amount_refunded": 0,
            **data,
            "created_at": utc_now(),
        }
        ref = await self._invoices.add(doc)
        return _invoice_from_doc(ref.id, doc)

    async def get_invoice_by_payment_intent(
        self, payment_intent_id: str
    ) -> InvoiceResult | None:
        q = self._invoices.where("stripe_payment_intent_id", "==", payment_intent_id).limit(1)
        async for snapshot in q.stream():
            return _invoice_from_doc(snapshot.id, snapshot.to_dict())
        return None

    async def update_invoice(self, invoice_id: str, updates: dict[str, Any]) -> None:
        await self._invoices.document(invoice_id).update({**updates, "updated_at": utc_now()})

    async def list_invoices_for_user(self, user_id: str) -> list[InvoiceResult]:
        q = self._invoices.where("user_id", "==", user_id).order_by("created_at", "DESCENDING")
        return [_invoice_from_doc(s.id, s.to_dict()) async for s in q.stream()]

    async def list_invoices_for_org(self, organization_id: str) -> list[InvoiceResult]:
        q = self._invoices.where("organization_id", "==", organization_id).order_by(
            "created_at", "DESCENDING"
        )
        return [_invoice_from_doc(s.id, s.to_dict()) async for s in q.stream()]
