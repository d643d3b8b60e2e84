"""Presentation-layer dependency injection (composition root).

Routes depend only on these providers; repositories and services are built
here from the Firestore client and settings.
"""

from app.api.v1.dependencies.auth import (
    Coach,
    CurrentUser,
    OrgUser,
    get_current_user,
    require_coach,
    require_org,
    verify_clerk_webhook,
    verify_cron_secret,
)
from app.api.v1.dependencies.billing import get_billing_service
from app.api.v1.dependencies.db import get_cache, get_firestore
from app.api.v1.dependencies.engagement import (
    get_feed_service,
    get_habit_service,
    get_task_service,
)
from app.api.v1.dependencies.external import get_email_sender, get_payment_gateway
from app.api.v1.dependencies.organization import (
    get_notification_service,
    get_organization_service,
    get_user_service,
)
from app.api.v1.dependencies.program import (
    get_enrollment_service,
    get_instance_service,
    get_lifecycle_service,
    get_program_service,
    get_squad_service,
)
from app.api.v1.dependencies.scheduling import get_intake_service, get_scheduling_service

__all__ = [
    "Coach",
    "CurrentUser",
    "OrgUser",
    "get_billing_service",
    "get_cache",
    "get_current_user",
    "get_email_sender",
    "get_enrollment_service",
    "get_feed_service",
    "get_firestore",
    "get_habit_service",
    "get_instance_service",
    "get_intake_service",
    "get_lifecycle_service",
    "get_notification_service",
    "get_organization_service",
    "get_payment_gateway",
    "get_program_service",
    "get_scheduling_service",
    "get_squad_service",
    "get_task_service",
    "get_user_service",
    "require_coach",
    "require_org",
    "verify_clerk_webhook",
    "verify_cron_secret",
]
