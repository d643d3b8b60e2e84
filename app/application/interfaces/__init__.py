"""Application interfaces (ports): repository and service protocols.

Define contracts for infrastructure implementations (DIP).
No runtime imports from app.infrastructure or app.api.
"""

from app.application.interfaces.repositories import (
    IAvailabilityRepository,
    IBillingRepository,
    ICohortRepository,
    IEnrollmentRepository,
    IEventRepository,
    IFeedRepository,
    IHabitRepository,
    IInstanceRepository,
    IIntakeRepository,
    IOrganizationRepository,
    IProgramRepository,
    ISquadRepository,
    ITaskRepository,
    IUserRepository,
)
from app.application.interfaces.services import (
    ICacheService,
    IEmailSender,
    IPaymentGateway,
)

__all__ = [
    "IAvailabilityRepository",
    "IBillingRepository",
    "ICacheService",
    "ICohortRepository",
    "IEmailSender",
    "IEnrollmentRepository",
    "IEventRepository",
    "IFeedRepository",
    "IHabitRepository",
    "IInstanceRepository",
    "IIntakeRepository",
    "IOrganizationRepository",
    "IPaymentGateway",
    "IProgramRepository",
    "ISquadRepository",
    "ITaskRepository",
    "IUserRepository",
]
