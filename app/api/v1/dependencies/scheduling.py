"""Scheduling and intake booking service dependencies."""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends

from app.api.v1.dependencies.db import (
    get_availability_repo,
    get_event_repo,
    get_intake_repo,
)
from app.api.v1.dependencies.organization import (
    get_notification_service,
    get_organization_service,
)
from app.application.interfaces.repositories import (
    IAvailabilityRepository,
    IEventRepository,
    IIntakeRepository,
)
from app.application.services import NotificationService
from app.application.use_cases.intake import IntakeService
from app.application.use_cases.organizations import OrganizationService
from app.application.use_cases.scheduling import SchedulingService
from app.core.config import get_settings
from app.core.constants import (
    BOOKING_TOKEN_TTL_HOURS,
    CONFLICT_WINDOW_HOURS,
    EVENTS_PAGE_MAX,
)


def get_scheduling_service(
    availability_repo: Annotated[IAvailabilityRepository, Depends(get_availability_repo)],
    event_repo: Annotated[IEventRepository, Depends(get_event_repo)],
) -> SchedulingService:
    return SchedulingService(availability_repo, event_repo, events_page_max=EVENTS_PAGE_MAX)


def get_intake_service(
    intake_repo: Annotated[IIntakeRepository, Depends(get_intake_repo)],
    event_repo: Annotated[IEventRepository, Depends(get_event_repo)],
    org_service: Annotated[OrganizationService, Depends(get_organization_service)],
    scheduling_service: Annotated[SchedulingService, Depends(get_scheduling_service)],
    notifications: Annotated[NotificationService, Depends(get_notification_service)],
) -> IntakeService:
    return IntakeService(
        intake_repo,
        event_repo,
        org_service,
        scheduling_service,
        notifications,
        app_base_url=get_settings().app_base_url,
        token_ttl_hours=BOOKING_TOKEN_TTL_HOURS,
        conflict_window_hours=CONFLICT_WINDOW_HOURS,
    )
