"""Firestore-backed repository implementations."""

from app.infrastructure.firebase.repositories.billing_repo_firestore import (
    FirestoreBillingRepository,
)
from app.infrastructure.firebase.repositories.enrollment_repo_firestore import (
    FirestoreEnrollmentRepository,
    FirestoreInstanceRepository,
)
from app.infrastructure.firebase.repositories.feed_repo_firestore import (
    FirestoreFeedRepository,
)
from app.infrastructure.firebase.repositories.habit_repo_firestore import (
    FirestoreHabitRepository,
)
from app.infrastructure.firebase.repositories.organization_repo_firestore import (
    FirestoreOrganizationRepository,
)
from app.infrastructure.firebase.repositories.program_repo_firestore import (
    FirestoreCohortRepository,
    FirestoreProgramRepository,
)
from app.infrastructure.firebase.repositories.scheduling_repo_firestore import (
    FirestoreAvailabilityRepository,
    FirestoreEventRepository,
    FirestoreIntakeRepository,
)
from app.infrastructure.firebase.repositories.squad_repo_firestore import (
    FirestoreSquadRepository,
)
from app.infrastructure.firebase.repositories.task_repo_firestore import (
    FirestoreTaskRepository,
)
from app.infrastructure.firebase.repositories.user_repo_firestore import (
    FirestoreUserRepository,
)

__all__ = [
    "FirestoreAvailabilityRepository",
    "FirestoreBillingRepository",
    "FirestoreCohortRepository",
    "FirestoreEnrollmentRepository",
    "FirestoreEventRepository",
    "FirestoreFeedRepository",
    "FirestoreHabitRepository",
    "FirestoreInstanceRepository",
    "FirestoreIntakeRepository",
    "FirestoreOrganizationRepository",
    "FirestoreProgramRepository",
    "FirestoreSquadRepository",
    "FirestoreTaskRepository",
    "FirestoreUserRepository",
]
