"""Firestore client and repository dependencies (composition root)."""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, HTTPException, Request

from app.application.interfaces.services import ICacheService
from app.infrastructure.firebase._rest_client import FirestoreRESTClient
from app.infrastructure.firebase.client import get_firestore_client
from app.infrastructure.firebase.repositories import (
    FirestoreAvailabilityRepository,
    FirestoreBillingRepository,
    FirestoreCohortRepository,
    FirestoreEnrollmentRepository,
    FirestoreEventRepository,
    FirestoreFeedRepository,
    FirestoreHabitRepository,
    FirestoreInstanceRepository,
    FirestoreIntakeRepository,
    FirestoreOrganizationRepository,
    FirestoreProgramRepository,
    FirestoreSquadRepository,
    FirestoreTaskRepository,
    FirestoreUserRepository,
)


def get_firestore() -> FirestoreRESTClient:
    """Return the Firestore client or answer 503 when it is not configured."""
    client = get_firestore_client()
    if not client:
        raise HTTPException(
            status_code=503,
            detail="Firestore not configured (set FIREBASE_SERVICE_ACCOUNT_KEY or PATH)",
        )
    return client


def get_cache(request: Request) -> ICacheService | None:
    """Redis cache set in lifespan, or None when caching is disabled."""
    return getattr(request.app.state, "cache", None)


FirestoreDep = Annotated[FirestoreRESTClient, Depends(get_firestore)]


def get_user_repo(db: FirestoreDep) -> FirestoreUserRepository:
    return FirestoreUserRepository(db)


def get_org_repo(db: FirestoreDep) -> FirestoreOrganizationRepository:
    return FirestoreOrganizationRepository(db)


def get_program_repo(db: FirestoreDep) -> FirestoreProgramRepository:
    return FirestoreProgramRepository(db)


def get_cohort_repo(db: FirestoreDep) -> FirestoreCohortRepository:
    return FirestoreCohortRepository(db)


def get_enrollment_repo(db: FirestoreDep) -> FirestoreEnrollmentRepository:
    return FirestoreEnrollmentRepository(db)


def get_instance_repo(db: FirestoreDep) -> FirestoreInstanceRepository:
    return FirestoreInstanceRepository(db)


def get_task_repo(db: FirestoreDep) -> FirestoreTaskRepository:
    return FirestoreTaskRepository(db)


def get_habit_repo(db: FirestoreDep) -> FirestoreHabitRepository:
    return FirestoreHabitRepository(db)


def get_squad_repo(db: FirestoreDep) -> FirestoreSquadRepository:
    return FirestoreSquadRepository(db)


def get_feed_repo(db: FirestoreDep) -> FirestoreFeedRepository:
    return FirestoreFeedRepository(db)


def get_event_repo(db: FirestoreDep) -> FirestoreEventRepository:
    return FirestoreEventRepository(db)


def get_availability_repo(db: FirestoreDep) -> FirestoreAvailabilityRepository:
    return FirestoreAvailabilityRepository(db)


def get_intake_repo(db: FirestoreDep) -> FirestoreIntakeRepository:
    return FirestoreIntakeRepository(db)


def get_billing_repo(db: FirestoreDep) -> FirestoreBillingRepository:
    return FirestoreBillingRepository(db)
