"""Organization use cases: branding, settings, tenant email sender."""

from app.application.use_cases.organizations.organization_operations import (
    OrganizationService,
)

__all__ = ["OrganizationService"]
