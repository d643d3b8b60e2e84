"""Seed dev data from scripts/seed-data.json into Firestore.

Loads one organization (settings and branding), users, programs with their
template weeks and cohorts, intake call configs and discount codes. Goes
through the application services so weeks, day ranges and validation match
what the API would produce. Programs and configs whose slug already exists
are skipped, so the script can be re-run.

Usage:
    uv run python -m scripts.seed_dev_data [path/to/seed-data.json]

Requires Firestore credentials (FIREBASE_SERVICE_ACCOUNT_KEY or _PATH).
"""

from __future__ import annotations

import asyncio
import json
import sys
from pathlib import Path
from typing import Any

from dotenv import load_dotenv

from app.application.services import NotificationService
from app.application.use_cases.intake import IntakeService
from app.application.use_cases.organizations import OrganizationService
from app.application.use_cases.programs import ProgramService
from app.application.use_cases.scheduling import SchedulingService
from app.core.config import get_settings
from app.domain.discounts import normalize_code
from app.domain.exceptions import ConflictException
from app.infrastructure.external.email.logging_sender import LoggingEmailSender
from app.infrastructure.firebase.client import close_firebase, get_firestore_client, init_firebase
from app.infrastructure.firebase.collections import COLLECTION_DISCOUNT_CODES
from app.infrastructure.firebase.repositories import (
    FirestoreAvailabilityRepository,
    FirestoreCohortRepository,
    FirestoreEnrollmentRepository,
    FirestoreEventRepository,
    FirestoreIntakeRepository,
    FirestoreOrganizationRepository,
    FirestoreProgramRepository,
    FirestoreUserRepository,
)
from app.shared.utils.datetime import utc_now


def _project_root() -> Path:
    return Path(__file__).resolve().parent.parent


def _load_env() -> None:
    """Load .env from project root so get_settings() sees FIREBASE_* when run as script."""
    load_dotenv(_project_root() / ".env", override=True)


async def _seed_program(
    program_svc: ProgramService, organization_id: str, program_data: dict[str, Any]
) -> None:
    program_data = dict(program_data)
    weeks = program_data.pop("weeks", [])
    cohorts = program_data.pop("cohorts", [])
    try:
        program = await program_svc.create_program(organization_id, program_data)
    except ConflictException:
        print(f"Program {program_data['slug']}: exists, skipped")
        return
    by_number = {w.week_number: w for w in await program_svc.list_weeks(organization_id, program.id)}
    for week in weeks:
        target = by_number.get(week["week_number"])
        if target is None:
            continue
        await program_svc.update_week(
            organization_id,
            program.id,
            target.id,
            {"title": week.get("title"), "tasks": week.get("tasks", [])},
        )
        counts = await program_svc.distribute_weekly_tasks_to_days(
            organization_id, program.id, target.id
        )
        print(f"  week {target.week_number}: {counts}")
    for cohort in cohorts:
        await program_svc.create_cohort(organization_id, program.id, cohort)
    print(f"Program {program.slug}: created ({len(by_number)} weeks, {len(cohorts)} cohorts)")


async def seed(path: Path) -> None:
    data = json.loads(path.read_text(encoding="utf-8"))
    db = get_firestore_client()
    settings = get_settings()

    org = data["organization"]
    organization_id = org["id"]
    org_repo = FirestoreOrganizationRepository(db)
    org_svc = OrganizationService(
        org_repo,
        default_sender=settings.email_default_sender,
        auth_sender=settings.email_auth_sender,
    )
    await org_svc.update_settings(
        organization_id,
        {k: org[k] for k in ("slug", "daily_focus_slots", "feed_enabled") if k in org},
    )
    if org.get("branding"):
        await org_svc.update_branding(organization_id, org["branding"])
    print(f"Organization {org['slug']} ({organization_id}) ready")

    user_repo = FirestoreUserRepository(db)
    for user in data.get("users", []):
        fields = {k: v for k, v in user.items() if k != "id"}
        await user_repo.upsert(
            user["id"],
            {**fields, "organization_ids": [organization_id], "primary_organization_id": organization_id},
        )
    print(f"Users: {len(data.get('users', []))} upserted")

    program_svc = ProgramService(
        FirestoreProgramRepository(db),
        FirestoreCohortRepository(db),
        FirestoreEnrollmentRepository(db),
    )
    for program_data in data.get("programs", []):
        await _seed_program(program_svc, organization_id, program_data)

    event_repo = FirestoreEventRepository(db)
    intake_repo = FirestoreIntakeRepository(db)
    intake_svc = IntakeService(
        intake_repo,
        event_repo,
        org_svc,
        SchedulingService(FirestoreAvailabilityRepository(db), event_repo),
        NotificationService(LoggingEmailSender(), org_svc, user_repo),
        app_base_url=settings.app_base_url,
    )
    existing = {c.slug for c in await intake_svc.list_configs(organization_id)}
    for config in data.get("intake_configs", []):
        if config["slug"] in existing:
            print(f"Intake config {config['slug']}: exists, skipped")
            continue
        await intake_svc.create_config(organization_id, config)
        print(f"Intake config {config['slug']}: created")

    discounts = db.collection(COLLECTION_DISCOUNT_CODES)
    for discount in data.get("discount_codes", []):
        code = normalize_code(discount["code"])
        await discounts.document(f"{organization_id}_{code}").set({
            "organization_id": organization_id,
            "is_active": True,
            "applicable_to": "all",
            "use_count": 0,
            "created_at": utc_now(),
            **discount,
            "code": code,
        })
        print(f"Discount code {code}: saved")


async def main() -> None:
    _load_env()
    get_settings.cache_clear()
    path = Path(sys.argv[1]) if len(sys.argv) > 1 else _project_root() / "scripts" / "seed-data.json"
    if not path.is_file():
        print(f"Seed file not found: {path}", file=sys.stderr)
        sys.exit(1)
    if not init_firebase():
        print("Firestore not configured", file=sys.stderr)
        sys.exit(1)
    try:
        await seed(path)
    finally:
        await close_firebase()
    print("Done.")


if __name__ == "__main__":
    asyncio.run(main())
