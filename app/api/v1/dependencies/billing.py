"""Billing service dependency."""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends

from app.api.v1.dependencies.db import (
    get_billing_repo,
    get_enrollment_repo,
    get_org_repo,
    get_program_repo,
    get_user_repo,
)
from app.api.v1.dependencies.external import get_payment_gateway
from app.api.v1.dependencies.organization import get_organization_service
from app.api.v1.dependencies.program import get_enrollment_service
from app.application.interfaces.repositories import (
    IBillingRepository,
    IEnrollmentRepository,
    IOrganizationRepository,
    IProgramRepository,
    IUserRepository,
)
from app.application.interfaces.services import IPaymentGateway
from app.application.use_cases.billing import BillingService
from app.application.use_cases.enrollments import EnrollmentService
from app.application.use_cases.organizations import OrganizationService


def get_billing_service(
    billing_repo: Annotated[IBillingRepository, Depends(get_billing_repo)],
    org_repo: Annotated[IOrganizationRepository, Depends(get_org_repo)],
    program_repo: Annotated[IProgramRepository, Depends(get_program_repo)],
    enrollment_repo: Annotated[IEnrollmentRepository, Depends(get_enrollment_repo)],
    user_repo: Annotated[IUserRepository, Depends(get_user_repo)],
    gateway: Annotated[IPaymentGateway, Depends(get_payment_gateway)],
    enrollment_service: Annotated[EnrollmentService, Depends(get_enrollment_service)],
    org_service: Annotated[OrganizationService, Depends(get_organization_service)],
) -> BillingService:
    return BillingService(
        billing_repo,
        org_repo,
        program_repo,
        enrollment_repo,
        user_repo,
        gateway,
        enrollment_service,
        org_service,
    )
