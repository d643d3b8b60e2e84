"""Organization branding and settings."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request

from app.api.v1.dependencies import Coach, OrgUser, get_organization_service
from app.application.use_cases.organizations import OrganizationService
from app.core.limiter import limit_writes
from app.schemas.organization import (
    BrandingResponse,
    BrandingUpdate,
    OrgSettingsResponse,
    OrgSettingsUpdate,
)

router = APIRouter()
public_router = APIRouter()

OrgServiceDep = Annotated[OrganizationService, Depends(get_organization_service)]


@router.get("/branding", response_model=BrandingResponse)
async def get_branding(auth: OrgUser, org_svc: OrgServiceDep):
    """Branding of the active organization merged over the defaults."""
    return BrandingResponse.model_validate(await org_svc.get_branding(auth.organization_id))


@router.patch("/branding", response_model=BrandingResponse)
@limit_writes
async def update_branding(
    request: Request,
    body: BrandingUpdate,
    auth: Coach,
    org_svc: OrgServiceDep,
):
    branding = await org_svc.update_branding(
        auth.organization_id, body.model_dump(exclude_unset=True)
    )
    return BrandingResponse.model_validate(branding)


@router.get("/settings", response_model=OrgSettingsResponse)
async def get_settings(auth: OrgUser, org_svc: OrgServiceDep):
    return OrgSettingsResponse.model_validate(await org_svc.get_settings(auth.organization_id))


@router.patch("/settings", response_model=OrgSettingsResponse)
@limit_writes
async def update_settings(
    request: Request,
    body: OrgSettingsUpdate,
    auth: Coach,
    org_svc: OrgServiceDep,
):
    settings = await org_svc.update_settings(
        auth.organization_id, body.model_dump(exclude_unset=True)
    )
    return OrgSettingsResponse.model_validate(settings)


@public_router.get("/{slug}/branding", response_model=BrandingResponse)
async def get_public_branding(slug: str, org_svc: OrgServiceDep):
    """Branding by org slug for sign-in and booking pages (no auth)."""
    return BrandingResponse.model_validate(await org_svc.get_public_branding(slug))
