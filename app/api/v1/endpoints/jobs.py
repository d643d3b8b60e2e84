"""Scheduled jobs triggered by the platform cron."""

from typing import Annotated

from fastapi import APIRouter, Depends

from app.api.v1.dependencies import get_lifecycle_service, verify_cron_secret
from app.application.use_cases.jobs import ProgramLifecycleService
from app.schemas.jobs import LifecycleRunResponse

router = APIRouter()


@router.post(
    "/program-lifecycle",
    response_model=LifecycleRunResponse,
    dependencies=[Depends(verify_cron_secret)],
)
async def run_program_lifecycle(
    lifecycle_svc: Annotated[ProgramLifecycleService, Depends(get_lifecycle_service)],
):
    """Activate, complete and sync program enrollments for today."""
    return LifecycleRunResponse(**await lifecycle_svc.run_program_lifecycle())
