"""Billing API schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from app.domain.enums import InvoiceStatus
from app.schemas.enrollment import EnrollmentResponse


class PaymentMethodResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    brand: str | None = None
    last4: str | None = None
    exp_month: int | None = None
    exp_year: int | None = None


class AttachPaymentMethodRequest(BaseModel):
    payment_method_id: str = Field(..., min_length=1)


class ChargeSavedMethodRequest(BaseModel):
    program_id: str
    payment_method_id: str
    cohort_id: str | None = None
    discount_code: str | None = Field(default=None, max_length=64)
    start_date: str | None = Field(default=None, description="YYYY-MM-DD")


class ValidateDiscountRequest(BaseModel):
    program_id: str
    code: str = Field(..., min_length=1, max_length=64)


class DiscountResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    code: str
    original_amount: int
    discount_amount: int
    final_amount: int


class InvoiceResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: str
    organization_id: str
    payment_type: str
    reference_id: str
    reference_name: str
    amount_paid: int
    amount_refunded: int = 0
    currency: str
    status: InvoiceStatus
    stripe_payment_intent_id: str | None = None
    created_at: datetime | None = None


class ChargeResponse(BaseModel):
    """Outcome of buying a program with a saved card."""

    success: bool = False
    free: bool = False
    message: str | None = None
    enrollment: EnrollmentResponse | None = None
