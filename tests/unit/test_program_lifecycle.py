"""Daily program lifecycle pass with mocked repos."""

from datetime import date
from unittest.mock import AsyncMock

import pytest

from app.application.dtos.enrollment import EnrollmentResult, ProgramInstanceResult
from app.application.use_cases.jobs import ProgramLifecycleService
from app.application.use_cases.jobs.program_lifecycle import instance_end_date
from app.domain.enums import EnrollmentStatus, InstanceType

TODAY = date(2026, 10, 19)


def _enrollment(enrollment_id: str, status: EnrollmentStatus, **kwargs) -> EnrollmentResult:
    return EnrollmentResult(
        id=enrollment_id,
        user_id="u1",
        program_id="prog1",
        organization_id="org1",
        status=status,
        start_date=kwargs.pop("start_date", "2026-10-01"),
        **kwargs,
    )


def _instance(end_dates: list[str]) -> ProgramInstanceResult:
    return ProgramInstanceResult(
        id="inst1",
        program_id="prog1",
        organization_id="org1",
        type=InstanceType.INDIVIDUAL,
        start_date="2026-10-01",
        length_days=30,
        include_weekends=True,
        daily_focus_slots=3,
        weeks=[{"end_date": d, "days": []} for d in end_dates],
    )


@pytest.fixture
def mocks():
    enrollment_repo = AsyncMock()
    instance_repo = AsyncMock()
    instance_service = AsyncMock()
    instance_service.sync_enrollment_for_date = AsyncMock(return_value=True)
    return enrollment_repo, instance_repo, instance_service


def test_instance_end_date():
    assert instance_end_date(_instance(["2026-10-04", "2026-10-30"])) == "2026-10-30"
    assert instance_end_date(_instance([])) is None


async def test_activates_completes_and_syncs(mocks):
    enrollment_repo, instance_repo, instance_service = mocks
    enrollment_repo.list_by_status = AsyncMock(
        side_effect=lambda status: {
            "upcoming": [
                _enrollment("starts-today", EnrollmentStatus.UPCOMING, start_date="2026-10-19"),
                _enrollment("later", EnrollmentStatus.UPCOMING, start_date="2026-11-02"),
            ],
            "active": [
                _enrollment("ended", EnrollmentStatus.ACTIVE, instance_id="old"),
                _enrollment("running", EnrollmentStatus.ACTIVE, instance_id="inst1"),
            ],
        }[status]
    )
    instance_repo.get = AsyncMock(
        side_effect=lambda instance_id: _instance(
            ["2026-10-18"] if instance_id == "old" else ["2026-10-30"]
        )
    )

    counts = await ProgramLifecycleService(*mocks).run_program_lifecycle(TODAY)

    assert counts == {"activated": 1, "completed": 1, "synced": 1, "failed": 0}
    activated = enrollment_repo.update.await_args_list[0].args
    assert activated == ("starts-today", {"status": "active"})
    completed = enrollment_repo.update.await_args_list[1].args
    assert completed[0] == "ended"
    assert completed[1]["status"] == "completed"
    instance_service.sync_enrollment_for_date.assert_awaited_once()
    assert instance_service.sync_enrollment_for_date.await_args.args[1] == "2026-10-19"


async def test_one_failure_does_not_stop_the_pass(mocks):
    enrollment_repo, _, instance_service = mocks
    enrollment_repo.list_by_status = AsyncMock(
        side_effect=lambda status: []
        if status == "upcoming"
        else [_enrollment("a", EnrollmentStatus.ACTIVE), _enrollment("b", EnrollmentStatus.ACTIVE)]
    )
    instance_service.sync_enrollment_for_date = AsyncMock(side_effect=[RuntimeError("boom"), True])

    counts = await ProgramLifecycleService(*mocks).run_program_lifecycle(TODAY)

    assert counts["failed"] == 1
    assert counts["synced"] == 1


async def test_failed_activation_does_not_stop_the_pass(mocks):
    enrollment_repo, _, _ = mocks
    enrollment_repo.list_by_status = AsyncMock(
        side_effect=lambda status: [
            _enrollment("a", EnrollmentStatus.UPCOMING),
            _enrollment("b", EnrollmentStatus.UPCOMING),
        ]
        if status == "upcoming"
        else []
    )
    enrollment_repo.update = AsyncMock(side_effect=[RuntimeError("boom"), None])

    counts = await ProgramLifecycleService(*mocks).run_program_lifecycle(TODAY)

    assert counts["activated"] == 1
    assert counts["failed"] == 1
    assert enrollment_repo.update.await_args.args[0] == "b"
