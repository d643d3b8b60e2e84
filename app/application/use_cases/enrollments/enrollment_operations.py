"""Enrollment operations: enrolling clients into programs and stopping them."""

from __future__ import annotations

from datetime import date

from app.application.dtos.auth import AuthContext
from app.application.dtos.enrollment import EnrollmentResult
from app.application.interfaces.repositories import (
    ICohortRepository,
    IEnrollmentRepository,
    IProgramRepository,
    ITaskRepository,
)
from app.application.use_cases.instances.instance_operations import InstanceService
from app.application.use_cases.squads.squad_operations import SquadService
from app.domain.calendar_weeks import parse_date
from app.domain.enums import EnrollmentStatus, ProgramType, TaskStatus
from app.domain.exceptions import (
    AuthorizationException,
    ConflictException,
    ResourceNotFoundException,
    ValidationException,
)
from app.shared.telemetry.logging import get_logger
from app.shared.telemetry.tracing import traced
from app.shared.utils.datetime import utc_now

logger = get_logger(__name__)

_OPEN_STATUSES = (EnrollmentStatus.ACTIVE, EnrollmentStatus.UPCOMING)


class EnrollmentService:
    def __init__(
        self,
        enrollment_repo: IEnrollmentRepository,
        program_repo: IProgramRepository,
        cohort_repo: ICohortRepository,
        task_repo: ITaskRepository,
        instance_service: InstanceService,
        squad_service: SquadService,
    ) -> None:
        self.enrollment_repo = enrollment_repo
        self.program_repo = program_repo
        self.cohort_repo = cohort_repo
        self.task_repo = task_repo
        self.instance_service = instance_service
        self.squad_service = squad_service

    async def find_open_enrollment(
        self, user_id: str, organization_id: str, program_id: str, cohort_id: str | None = None
    ) -> EnrollmentResult | None:
        """The user's active or upcoming enrollment in the program (and cohort), if any."""
        for enrollment in await self.enrollment_repo.list_for_user(user_id, organization_id):
            if enrollment.program_id != program_id or enrollment.status not in _OPEN_STATUSES:
                continue
            if cohort_id is None or enrollment.cohort_id == cohort_id:
                return enrollment
        return None

    @traced("enrollment.enroll")
    async def enroll(
        self,
        user_id: str,
        organization_id: str,
        program_id: str,
        cohort_id: str | None = None,
        start_date: str | None = None,
        payment_intent_id: str | None = None,
        amount_paid: int = 0,
        discount_code: str | None = None,
        today: date | None = None,
    ) -> EnrollmentResult:
        """Enroll user_id and materialize the program for them.

        Raises:
            ResourceNotFoundException: Unknown program or cohort.
            ValidationException: Unpublished program, unpaid paid program or bad date.
            ConflictException: Already enrolled, or the cohort is full.
        """
        today = today or utc_now().date()
        program = await self.program_repo.get_program(program_id)
        if not program or program.organization_id != organization_id:
            raise ResourceNotFoundException("program", program_id)
        if not program.is_published:
            raise ValidationException("Program is not open for enrollment", field="program_id")
        if await self.find_open_enrollment(user_id, organization_id, program_id, cohort_id):
            raise ConflictException(
                "Already enrolled in this program",
                "ALREADY_ENROLLED",
                {"program_id": program_id},
            )

        cohort = None
        if cohort_id:
            cohort = await self.cohort_repo.get(cohort_id)
            if not cohort or cohort.program_id != program_id:
                raise ResourceNotFoundException("cohort", cohort_id)
            if cohort.max_enrollment:
                taken = [
                    e
                    for e in await self.enrollment_repo.list_for_cohort(cohort_id)
                    if e.status in _OPEN_STATUSES
                ]
                if len(taken) >= cohort.max_enrollment:
                    raise ConflictException("Cohort is full", "COHORT_FULL", {"cohort_id": cohort_id})

        if program.is_paid and not payment_intent_id:
            raise ValidationException("Payment is required for this program", field="payment_intent_id")

        try:
            start = parse_date(
                (cohort.start_date if cohort and cohort.start_date else None)
                or start_date
                or today
            )
        except ValueError as e:
            raise ValidationException("start_date must be YYYY-MM-DD", field="start_date") from e
        status = EnrollmentStatus.UPCOMING if start > today else EnrollmentStatus.ACTIVE

        enrollment = await self.enrollment_repo.create({
            "user_id": user_id,
            "program_id": program_id,
            "organization_id": organization_id,
            "cohort_id": cohort_id,
            "status": status.value,
            "start_date": start.isoformat(),
            "amount_paid": amount_paid if program.is_paid else 0,
            "payment_intent_id": payment_intent_id,
            "discount_code": discount_code,
        })

        if cohort_id:
            instance_id = await self.instance_service.ensure_cohort_instance(
                program_id, cohort_id, organization_id
            )
        else:
            instance_id = await self.instance_service.ensure_enrollment_instance(enrollment)
        updates: dict = {}
        if instance_id:
            updates["instance_id"] = instance_id
        if program.type is ProgramType.GROUP:
            assignment = await self.squad_service.assign_user_to_squad(
                user_id, program, cohort_id, organization_id
            )
            updates["squad_id"] = assignment.squad_id
        if updates:
            enrollment = await self.enrollment_repo.update(enrollment.id, updates)
        if status is EnrollmentStatus.ACTIVE:
            await self.instance_service.sync_enrollment_for_date(enrollment, today.isoformat())
        logger.info(
            "User %s enrolled in program %s (%s)", user_id, program_id, status.value
        )
        return enrollment

    async def list_enrollments(
        self, organization_id: str, program_id: str
    ) -> list[EnrollmentResult]:
        program = await self.program_repo.get_program(program_id)
        if not program or program.organization_id != organization_id:
            raise ResourceNotFoundException("program", program_id)
        return await self.enrollment_repo.list_for_program(program_id)

    async def list_my_enrollments(
        self, user_id: str, organization_id: str | None = None
    ) -> list[EnrollmentResult]:
        return await self.enrollment_repo.list_for_user(user_id, organization_id)

    @traced("enrollment.stop")
    async def stop_enrollment(
        self, auth: AuthContext, enrollment_id: str
    ) -> EnrollmentResult:
        """Stop an enrollment (owner or coach) and drop its pending program tasks."""
        enrollment = await self.enrollment_repo.get(enrollment_id)
        if not enrollment or enrollment.organization_id != auth.organization_id:
            raise ResourceNotFoundException("enrollment", enrollment_id)
        if enrollment.user_id != auth.user_id and not auth.is_coach:
            raise AuthorizationException("enrollment", "stop")
        if enrollment.status is EnrollmentStatus.STOPPED:
            return enrollment
        updated = await self.enrollment_repo.update(
            enrollment_id,
            {"status": EnrollmentStatus.STOPPED.value, "stopped_at": utc_now()},
        )
        if enrollment.instance_id:
            pending = [
                t.id
                for t in await self.task_repo.list_for_instance(
                    enrollment.instance_id, enrollment.user_id
                )
                if t.status is TaskStatus.PENDING
            ]
            await self.task_repo.apply_batch(deletes=pending)
        return updated
