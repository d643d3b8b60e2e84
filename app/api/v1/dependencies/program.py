"""Program, instance, squad, enrollment and lifecycle service dependencies."""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends

from app.api.v1.dependencies.db import (
    get_cohort_repo,
    get_enrollment_repo,
    get_instance_repo,
    get_program_repo,
    get_squad_repo,
    get_task_repo,
)
from app.application.interfaces.repositories import (
    ICohortRepository,
    IEnrollmentRepository,
    IInstanceRepository,
    IProgramRepository,
    ISquadRepository,
    ITaskRepository,
)
from app.application.use_cases.enrollments import EnrollmentService
from app.application.use_cases.instances import InstanceService
from app.application.use_cases.jobs import ProgramLifecycleService
from app.application.use_cases.programs import ProgramService
from app.application.use_cases.squads import SquadService
from app.core.constants import (
    DEFAULT_DAILY_FOCUS_SLOTS,
    DEFAULT_INSTANCE_LENGTH_DAYS,
    DEFAULT_SQUAD_CAPACITY,
)


def get_program_service(
    program_repo: Annotated[IProgramRepository, Depends(get_program_repo)],
    cohort_repo: Annotated[ICohortRepository, Depends(get_cohort_repo)],
    enrollment_repo: Annotated[IEnrollmentRepository, Depends(get_enrollment_repo)],
) -> ProgramService:
    return ProgramService(program_repo, cohort_repo, enrollment_repo)


def get_instance_service(
    instance_repo: Annotated[IInstanceRepository, Depends(get_instance_repo)],
    program_repo: Annotated[IProgramRepository, Depends(get_program_repo)],
    cohort_repo: Annotated[ICohortRepository, Depends(get_cohort_repo)],
    enrollment_repo: Annotated[IEnrollmentRepository, Depends(get_enrollment_repo)],
    task_repo: Annotated[ITaskRepository, Depends(get_task_repo)],
) -> InstanceService:
    return InstanceService(
        instance_repo,
        program_repo,
        cohort_repo,
        enrollment_repo,
        task_repo,
        default_length_days=DEFAULT_INSTANCE_LENGTH_DAYS,
        default_focus_slots=DEFAULT_DAILY_FOCUS_SLOTS,
    )


def get_squad_service(
    squad_repo: Annotated[ISquadRepository, Depends(get_squad_repo)],
) -> SquadService:
    return SquadService(squad_repo, default_capacity=DEFAULT_SQUAD_CAPACITY)


def get_enrollment_service(
    enrollment_repo: Annotated[IEnrollmentRepository, Depends(get_enrollment_repo)],
    program_repo: Annotated[IProgramRepository, Depends(get_program_repo)],
    cohort_repo: Annotated[ICohortRepository, Depends(get_cohort_repo)],
    task_repo: Annotated[ITaskRepository, Depends(get_task_repo)],
    instance_service: Annotated[InstanceService, Depends(get_instance_service)],
    squad_service: Annotated[SquadService, Depends(get_squad_service)],
) -> EnrollmentService:
    return EnrollmentService(
        enrollment_repo, program_repo, cohort_repo, task_repo, instance_service, squad_service
    )


def get_lifecycle_service(
    enrollment_repo: Annotated[IEnrollmentRepository, Depends(get_enrollment_repo)],
    instance_repo: Annotated[IInstanceRepository, Depends(get_instance_repo)],
    instance_service: Annotated[InstanceService, Depends(get_instance_service)],
) -> ProgramLifecycleService:
    return ProgramLifecycleService(enrollment_repo, instance_repo, instance_service)
