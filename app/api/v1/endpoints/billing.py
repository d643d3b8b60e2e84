"""Saved cards, program purchases and invoices (Stripe Connect)."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request, Response

from app.api.v1.dependencies import Coach, OrgUser, get_billing_service
from app.application.use_cases.billing import BillingService
from app.core.limiter import limit_writes
from app.schemas.billing import (
    AttachPaymentMethodRequest,
    ChargeResponse,
    ChargeSavedMethodRequest,
    DiscountResponse,
    InvoiceResponse,
    PaymentMethodResponse,
    ValidateDiscountRequest,
)
from app.schemas.enrollment import EnrollmentResponse

router = APIRouter()

BillingServiceDep = Annotated[BillingService, Depends(get_billing_service)]


@router.get("/payment-methods", response_model=list[PaymentMethodResponse])
async def list_payment_methods(auth: OrgUser, billing_svc: BillingServiceDep):
    methods = await billing_svc.list_payment_methods(auth.user_id, auth.organization_id)
    return [PaymentMethodResponse.model_validate(m) for m in methods]


@router.post("/payment-methods", response_model=PaymentMethodResponse, status_code=201)
@limit_writes
async def attach_payment_method(
    request: Request,
    body: AttachPaymentMethodRequest,
    auth: OrgUser,
    billing_svc: BillingServiceDep,
):
    method = await billing_svc.attach_payment_method(
        auth.user_id, auth.organization_id, body.payment_method_id
    )
    return PaymentMethodResponse.model_validate(method)


@router.delete("/payment-methods/{payment_method_id}", status_code=204)
@limit_writes
async def detach_payment_method(
    request: Request,
    payment_method_id: str,
    auth: OrgUser,
    billing_svc: BillingServiceDep,
):
    await billing_svc.detach_payment_method(
        auth.user_id, auth.organization_id, payment_method_id
    )
    return Response(status_code=204)


@router.post("/validate-discount", response_model=DiscountResponse)
@limit_writes
async def validate_discount(
    request: Request,
    body: ValidateDiscountRequest,
    auth: OrgUser,
    billing_svc: BillingServiceDep,
):
    applied = await billing_svc.validate_discount(
        auth.user_id, auth.organization_id, body.program_id, body.code
    )
    return DiscountResponse.model_validate(applied)


@router.post("/charge-saved-method", response_model=ChargeResponse)
@limit_writes
async def charge_saved_method(
    request: Request,
    body: ChargeSavedMethodRequest,
    auth: OrgUser,
    billing_svc: BillingServiceDep,
):
    """Buy a program with a saved card and enroll.

    A card that needs authentication answers 400 with requires_action and the
    intent's client secret so the client can finish the payment.
    """
    result = await billing_svc.charge_saved_method(
        auth.user_id,
        auth.organization_id,
        body.program_id,
        body.payment_method_id,
        cohort_id=body.cohort_id,
        discount_code=body.discount_code,
        start_date=body.start_date,
    )
    enrollment = result.get("enrollment")
    return ChargeResponse(
        success=bool(result.get("success")),
        free=bool(result.get("free")),
        message=result.get("message"),
        enrollment=EnrollmentResponse.model_validate(enrollment) if enrollment else None,
    )


@router.get("/invoices", response_model=list[InvoiceResponse])
async def list_invoices(auth: OrgUser, billing_svc: BillingServiceDep):
    invoices = await billing_svc.list_invoices(auth.user_id)
    return [InvoiceResponse.model_validate(i) for i in invoices]


@router.get("/org-invoices", response_model=list[InvoiceResponse])
async def list_org_invoices(auth: Coach, billing_svc: BillingServiceDep):
    invoices = await billing_svc.list_org_invoices(auth.organization_id)
    return [InvoiceResponse.model_validate(i) for i in invoices]
