"""Enrollments of the signed-in user in free programs (paid ones go through billing)."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request

from app.api.v1.dependencies import CurrentUser, OrgUser, get_enrollment_service
from app.application.use_cases.enrollments import EnrollmentService
from app.core.limiter import limit_writes
from app.schemas.enrollment import EnrollmentResponse, EnrollRequest

router = APIRouter()

EnrollmentServiceDep = Annotated[EnrollmentService, Depends(get_enrollment_service)]


@router.post("", response_model=EnrollmentResponse, status_code=201)
@limit_writes
async def enroll(
    request: Request,
    body: EnrollRequest,
    auth: OrgUser,
    enrollment_svc: EnrollmentServiceDep,
):
    enrollment = await enrollment_svc.enroll(
        auth.user_id,
        auth.organization_id,
        body.program_id,
        cohort_id=body.cohort_id,
        start_date=body.start_date,
    )
    return EnrollmentResponse.model_validate(enrollment)


@router.get("/me", response_model=list[EnrollmentResponse])
async def list_my_enrollments(auth: CurrentUser, enrollment_svc: EnrollmentServiceDep):
    """Enrollments of the caller, limited to the active org when one is set."""
    enrollments = await enrollment_svc.list_my_enrollments(auth.user_id, auth.organization_id)
    return [EnrollmentResponse.model_validate(e) for e in enrollments]


@router.post("/{enrollment_id}/stop", response_model=EnrollmentResponse)
@limit_writes
async def stop_enrollment(
    request: Request,
    enrollment_id: str,
    auth: OrgUser,
    enrollment_svc: EnrollmentServiceDep,
):
    return EnrollmentResponse.model_validate(
        await enrollment_svc.stop_enrollment(auth, enrollment_id)
    )
