"""Organization, user and notification service dependencies."""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends

from app.api.v1.dependencies.db import get_cache, get_org_repo, get_user_repo
from app.api.v1.dependencies.external import get_email_sender
from app.application.interfaces.repositories import (
    IOrganizationRepository,
    IUserRepository,
)
from app.application.interfaces.services import ICacheService, IEmailSender
from app.application.services import NotificationService
from app.application.use_cases.organizations import OrganizationService
from app.application.use_cases.users import UserService
from app.core.config import get_settings


def get_organization_service(
    org_repo: Annotated[IOrganizationRepository, Depends(get_org_repo)],
    cache: Annotated[ICacheService | None, Depends(get_cache)],
) -> OrganizationService:
    """Branding and settings with Redis caching when enabled."""
    settings = get_settings()
    return OrganizationService(
        org_repo,
        cache=cache,
        branding_ttl=settings.cache_ttl_branding,
        settings_ttl=settings.cache_ttl_org_settings,
        default_sender=settings.email_default_sender,
        auth_sender=settings.email_auth_sender,
    )


def get_user_service(
    user_repo: Annotated[IUserRepository, Depends(get_user_repo)],
) -> UserService:
    return UserService(user_repo)


def get_notification_service(
    email_sender: Annotated[IEmailSender, Depends(get_email_sender)],
    org_service: Annotated[OrganizationService, Depends(get_organization_service)],
    user_repo: Annotated[IUserRepository, Depends(get_user_repo)],
) -> NotificationService:
    return NotificationService(email_sender, org_service, user_repo)
