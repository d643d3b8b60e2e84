"""DTOs for Stripe Connect customers, discount codes and invoices."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from app.domain.enums import DiscountApplicability, DiscountType, InvoiceStatus


@dataclass(frozen=True)
class StripeCustomerResult:
    """Customer of a user on one org's connected account."""

    user_id: str
    organization_id: str
    connected_account_id: str
    customer_id: str


@dataclass(frozen=True)
class SavedPaymentMethod:
    id: str
    brand: str | None
    last4: str | None
    exp_month: int | None
    exp_year: int | None
    fingerprint: str | None = None


@dataclass(frozen=True)
class PaymentIntentResult:
    id: str
    status: str
    amount: int
    currency: str
    client_secret: str | None = None


@dataclass(frozen=True)
class DiscountCodeResult:
    id: str
    organization_id: str
    code: str
    type: DiscountType
    value: int
    is_active: bool = True
    applicable_to: DiscountApplicability = DiscountApplicability.ALL
    program_ids: list[str] = field(default_factory=list)
    squad_ids: list[str] = field(default_factory=list)
    content_ids: list[str] = field(default_factory=list)
    starts_at: datetime | None = None
    expires_at: datetime | None = None
    max_uses: int | None = None
    use_count: int = 0
    max_uses_per_user: int | None = None

    def as_document(self) -> dict:
        return {
            "code": self.code,
            "type": self.type.value,
            "value": self.value,
            "is_active": self.is_active,
            "applicable_to": self.applicable_to.value,
            "program_ids": self.program_ids,
            "squad_ids": self.squad_ids,
            "content_ids": self.content_ids,
            "starts_at": self.starts_at,
            "expires_at": self.expires_at,
            "max_uses": self.max_uses,
            "use_count": self.use_count,
            "max_uses_per_user": self.max_uses_per_user,
        }


@dataclass(frozen=True)
class InvoiceResult:
    id: str
    user_id: str
    organization_id: str
    payment_type: str
    reference_id: str
    reference_name: str
    amount_paid: int
    currency: str
    status: InvoiceStatus = InvoiceStatus.PAID
    amount_refunded: int = 0
    stripe_payment_intent_id: str | None = None
    stripe_invoice_id: str | None = None
    created_at: datetime | None = None
