"""Daily program lifecycle pass.

Run once a day (cron endpoint or scripts/run_program_lifecycle.py). Each
step is independent so one bad enrollment does not stop the rest.
"""

from __future__ import annotations

from datetime import date

from app.application.dtos.enrollment import EnrollmentResult, ProgramInstanceResult
from app.application.interfaces.repositories import IEnrollmentRepository, IInstanceRepository
from app.application.use_cases.instances.instance_operations import InstanceService
from app.domain.enums import EnrollmentStatus
from app.shared.telemetry.logging import get_logger
from app.shared.telemetry.tracing import traced
from app.shared.utils.datetime import utc_now

logger = get_logger(__name__)


def instance_end_date(instance: ProgramInstanceResult) -> str | None:
    """Last calendar date covered by the instance (ISO), or None when it has no weeks."""
    ends = [w["end_date"] for w in instance.weeks if w.get("end_date")]
    return max(ends) if ends else None


class ProgramLifecycleService:
    def __init__(
        self,
        enrollment_repo: IEnrollmentRepository,
        instance_repo: IInstanceRepository,
        instance_service: InstanceService,
    ) -> None:
        self.enrollment_repo = enrollment_repo
        self.instance_repo = instance_repo
        self.instance_service = instance_service

    async def _is_finished(self, enrollment: EnrollmentResult, today: str) -> bool:
        if not enrollment.instance_id:
            return False
        instance = await self.instance_repo.get(enrollment.instance_id)
        end = instance_end_date(instance) if instance else None
        return end is not None and end < today

    @traced("jobs.program_lifecycle")
    async def run_program_lifecycle(self, today: date | None = None) -> dict[str, int]:
        """Activate, complete and sync enrollments for today.

        Returns counts: activated, completed, synced, failed.
        """
        day = (today or utc_now().date()).isoformat()
        counts = {"activated": 0, "completed": 0, "synced": 0, "failed": 0}

        for enrollment in await self.enrollment_repo.list_by_status(
            EnrollmentStatus.UPCOMING.value
        ):
            if enrollment.start_date > day:
                continue
            try:
                await self.enrollment_repo.update(
                    enrollment.id, {"status": EnrollmentStatus.ACTIVE.value}
                )
                counts["activated"] += 1
            except Exception:
                logger.exception("Activation failed for enrollment %s", enrollment.id)
                counts["failed"] += 1

        for enrollment in await self.enrollment_repo.list_by_status(
            EnrollmentStatus.ACTIVE.value
        ):
            try:
                if await self._is_finished(enrollment, day):
                    await self.enrollment_repo.update(
                        enrollment.id,
                        {
                            "status": EnrollmentStatus.COMPLETED.value,
                            "completed_at": utc_now(),
                        },
                    )
                    counts["completed"] += 1
                elif await self.instance_service.sync_enrollment_for_date(enrollment, day):
                    counts["synced"] += 1
            except Exception:
                logger.exception("Lifecycle step failed for enrollment %s", enrollment.id)
                counts["failed"] += 1

        logger.info("Program lifecycle for %s: %s", day, counts)
        return counts
