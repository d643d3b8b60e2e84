"""Run the program lifecycle job once: activate, complete and sync enrollments.

Usage:
    uv run python -m scripts.run_program_lifecycle [YYYY-MM-DD]
If the date is omitted, today (UTC) is used.
Requires Firestore credentials (FIREBASE_SERVICE_ACCOUNT_KEY or _PATH).
"""

import asyncio
import sys
from datetime import date
from pathlib import Path

from dotenv import load_dotenv

from app.application.use_cases.instances import InstanceService
from app.application.use_cases.jobs import ProgramLifecycleService
from app.core.constants import DEFAULT_DAILY_FOCUS_SLOTS, DEFAULT_INSTANCE_LENGTH_DAYS
from app.infrastructure.firebase.client import close_firebase, get_firestore_client, init_firebase
from app.infrastructure.firebase.repositories import (
    FirestoreCohortRepository,
    FirestoreEnrollmentRepository,
    FirestoreInstanceRepository,
    FirestoreProgramRepository,
    FirestoreTaskRepository,
)
from app.shared.telemetry.logging import setup_logging


async def main() -> None:
    load_dotenv(Path(__file__).resolve().parent.parent / ".env", override=True)
    setup_logging()
    if not init_firebase():
        print("Firestore not configured", file=sys.stderr)
        sys.exit(1)
    try:
        today = date.fromisoformat(sys.argv[1]) if len(sys.argv) > 1 else None
    except ValueError:
        print(f"Invalid date: {sys.argv[1]}", file=sys.stderr)
        sys.exit(1)

    db = get_firestore_client()
    enrollment_repo = FirestoreEnrollmentRepository(db)
    instance_repo = FirestoreInstanceRepository(db)
    instance_service = InstanceService(
        instance_repo,
        FirestoreProgramRepository(db),
        FirestoreCohortRepository(db),
        enrollment_repo,
        FirestoreTaskRepository(db),
        default_length_days=DEFAULT_INSTANCE_LENGTH_DAYS,
        default_focus_slots=DEFAULT_DAILY_FOCUS_SLOTS,
    )
    job = ProgramLifecycleService(enrollment_repo, instance_repo, instance_service)
    try:
        counts = await job.run_program_lifecycle(today)
    finally:
        await close_firebase()
    print(
        "Done. activated={activated} completed={completed} synced={synced} failed={failed}".format(
            **counts
        )
    )
    if counts["failed"]:
        sys.exit(2)


if __name__ == "__main__":
    asyncio.run(main())
