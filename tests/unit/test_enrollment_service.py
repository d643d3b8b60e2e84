"""EnrollmentService unit tests with mocked repos and collaborators."""

from dataclasses import replace
from datetime import date
from unittest.mock import AsyncMock, MagicMock

import pytest

from app.application.dtos.auth import AuthContext
from app.application.dtos.enrollment import EnrollmentResult
from app.application.dtos.program import CohortResult, ProgramResult
from app.application.dtos.task import TaskResult
from app.application.use_cases.enrollments import EnrollmentService
from app.domain.enums import (
    EnrollmentStatus,
    ProgramType,
    TaskListType,
    TaskSourceType,
    TaskStatus,
)
from app.domain.exceptions import (
    AuthorizationException,
    ConflictException,
    ResourceNotFoundException,
    ValidationException,
)

TODAY = date(2026, 10, 19)
PROGRAM = ProgramResult(
    id="prog1", organization_id="org1", name="Reset", slug="reset", is_published=True
)


def _enrollment(**overrides) -> EnrollmentResult:
    data = {
        "id": "enr1",
        "user_id": "u1",
        "program_id": "prog1",
        "organization_id": "org1",
        "status": EnrollmentStatus.ACTIVE,
        "start_date": "2026-10-19",
        **overrides,
    }
    return EnrollmentResult(**data)


def _created(data: dict) -> EnrollmentResult:
    return _enrollment(
        status=EnrollmentStatus(data["status"]),
        start_date=data["start_date"],
        cohort_id=data["cohort_id"],
        amount_paid=data["amount_paid"],
    )


@pytest.fixture
def mocks():
    enrollment_repo = AsyncMock()
    enrollment_repo.list_for_user = AsyncMock(return_value=[])
    enrollment_repo.list_for_cohort = AsyncMock(return_value=[])
    enrollment_repo.create = AsyncMock(side_effect=_created)
    enrollment_repo.update = AsyncMock(
        side_effect=lambda enrollment_id, fields: _enrollment(
            **{k: v for k, v in fields.items() if k in ("instance_id", "squad_id")}
        )
    )
    program_repo = AsyncMock()
    program_repo.get_program = AsyncMock(return_value=PROGRAM)
    cohort_repo = AsyncMock()
    task_repo = AsyncMock()
    instance_service = AsyncMock()
    instance_service.ensure_enrollment_instance = AsyncMock(return_value="inst1")
    instance_service.ensure_cohort_instance = AsyncMock(return_value="inst-cohort")
    squad_service = AsyncMock()
    squad_service.assign_user_to_squad = AsyncMock(return_value=MagicMock(squad_id="sq1"))
    return enrollment_repo, program_repo, cohort_repo, task_repo, instance_service, squad_service


@pytest.fixture
def service(mocks):
    return EnrollmentService(*mocks)


class TestEnroll:
    async def test_individual_enrollment_starts_today(self, service, mocks):
        enrollment_repo, _, _, _, instance_service, squad_service = mocks

        enrollment = await service.enroll("u1", "org1", "prog1", today=TODAY)

        data = enrollment_repo.create.await_args.args[0]
        assert data["status"] == "active"
        assert data["start_date"] == "2026-10-19"
        assert enrollment.instance_id == "inst1"
        squad_service.assign_user_to_squad.assert_not_awaited()
        instance_service.sync_enrollment_for_date.assert_awaited_once_with(
            enrollment, "2026-10-19"
        )

    async def test_future_start_is_upcoming_and_not_synced(self, service, mocks):
        enrollment_repo, _, _, _, instance_service, _ = mocks
        await service.enroll("u1", "org1", "prog1", start_date="2026-11-02", today=TODAY)
        assert enrollment_repo.create.await_args.args[0]["status"] == "upcoming"
        instance_service.sync_enrollment_for_date.assert_not_awaited()

    async def test_cohort_start_date_wins_and_group_gets_a_squad(self, service, mocks):
        enrollment_repo, program_repo, cohort_repo, _, instance_service, squad_service = mocks
        program_repo.get_program.return_value = replace(PROGRAM, type=ProgramType.GROUP)
        cohort_repo.get = AsyncMock(
            return_value=CohortResult(
                id="c1", program_id="prog1", organization_id="org1", name="Nov", start_date="2026-11-02"
            )
        )

        enrollment = await service.enroll(
            "u1", "org1", "prog1", cohort_id="c1", start_date="2026-10-20", today=TODAY
        )

        assert enrollment_repo.create.await_args.args[0]["start_date"] == "2026-11-02"
        instance_service.ensure_cohort_instance.assert_awaited_once_with("prog1", "c1", "org1")
        assert enrollment.squad_id == "sq1"
        assert enrollment.instance_id == "inst-cohort"

    async def test_already_enrolled(self, service, mocks):
        mocks[0].list_for_user.return_value = [_enrollment(status=EnrollmentStatus.UPCOMING)]
        with pytest.raises(ConflictException) as exc_info:
            await service.enroll("u1", "org1", "prog1", today=TODAY)
        assert exc_info.value.error_code == "ALREADY_ENROLLED"

    async def test_stopped_enrollment_does_not_block(self, service, mocks):
        mocks[0].list_for_user.return_value = [_enrollment(status=EnrollmentStatus.STOPPED)]
        await service.enroll("u1", "org1", "prog1", today=TODAY)
        mocks[0].create.assert_awaited_once()

    async def test_full_cohort(self, service, mocks):
        enrollment_repo, _, cohort_repo, *_ = mocks
        cohort_repo.get = AsyncMock(
            return_value=CohortResult(
                id="c1", program_id="prog1", organization_id="org1", name="Nov", max_enrollment=1
            )
        )
        enrollment_repo.list_for_cohort.return_value = [_enrollment(id="other", user_id="u2")]
        with pytest.raises(ConflictException) as exc_info:
            await service.enroll("u1", "org1", "prog1", cohort_id="c1", today=TODAY)
        assert exc_info.value.error_code == "COHORT_FULL"

    async def test_unpublished_program(self, service, mocks):
        mocks[1].get_program.return_value = replace(PROGRAM, is_published=False)
        with pytest.raises(ValidationException):
            await service.enroll("u1", "org1", "prog1", today=TODAY)

    async def test_paid_program_needs_payment(self, service, mocks):
        mocks[1].get_program.return_value = replace(PROGRAM, price_in_cents=19900)
        with pytest.raises(ValidationException):
            await service.enroll("u1", "org1", "prog1", today=TODAY)

    async def test_program_of_another_org(self, service):
        with pytest.raises(ResourceNotFoundException):
            await service.enroll("u1", "org2", "prog1", today=TODAY)


class TestStop:
    async def test_owner_stops_and_pending_program_tasks_go(self, service, mocks):
        enrollment_repo, _, _, task_repo, _, _ = mocks
        enrollment_repo.get = AsyncMock(return_value=_enrollment(instance_id="inst1"))

        def task(task_id: str, status: TaskStatus) -> TaskResult:
            return TaskResult(
                id=task_id,
                user_id="u1",
                organization_id="org1",
                title=task_id,
                status=status,
                list_type=TaskListType.FOCUS,
                order=0,
                date="2026-10-19",
                source_type=TaskSourceType.PROGRAM_DAY,
            )

        task_repo.list_for_instance = AsyncMock(
            return_value=[task("p", TaskStatus.PENDING), task("c", TaskStatus.COMPLETED)]
        )

        await service.stop_enrollment(AuthContext(user_id="u1", organization_id="org1"), "enr1")

        fields = enrollment_repo.update.await_args.args[1]
        assert fields["status"] == "stopped"
        task_repo.apply_batch.assert_awaited_once_with(deletes=["p"])

    async def test_other_member_cannot_stop(self, service, mocks):
        mocks[0].get = AsyncMock(return_value=_enrollment())
        auth = AuthContext(user_id="u2", organization_id="org1", org_role="org:member")
        with pytest.raises(AuthorizationException):
            await service.stop_enrollment(auth, "enr1")

    async def test_coach_can_stop_and_stopping_twice_is_a_no_op(self, service, mocks):
        stopped = _enrollment(status=EnrollmentStatus.STOPPED)
        mocks[0].get = AsyncMock(return_value=stopped)
        auth = AuthContext(user_id="coach", organization_id="org1", org_role="org:coach")
        assert await service.stop_enrollment(auth, "enr1") is stopped
        mocks[0].update.assert_not_awaited()
