"""Organization operations: branding and settings (cache-aside) and email sender resolution."""

from __future__ import annotations

from dataclasses import asdict
from datetime import datetime
from typing import Any

from app.application.dtos.organization import OrgBrandingResult, OrgSettingsResult
from app.application.interfaces.repositories import IOrganizationRepository
from app.application.interfaces.services import ICacheService
from app.domain.branding import is_valid_slug, merge_branding, validate_branding_patch
from app.domain.enums import EmailDomainStatus, EmailKind
from app.domain.exceptions import (
    ConflictException,
    ResourceNotFoundException,
    ValidationException,
)
from app.infrastructure.cache.keys import org_branding_key, org_settings_key, org_slug_key
from app.shared.telemetry.logging import get_logger
from app.shared.telemetry.tracing import traced

logger = get_logger(__name__)

MIN_FOCUS_SLOTS = 1
MAX_FOCUS_SLOTS = 10
SUBSCRIPTION_DATETIME_FIELDS = ("current_period_end",)


def _settings_to_cache(result: OrgSettingsResult) -> dict[str, Any]:
    data = asdict(result)
    data["updated_at"] = result.updated_at.isoformat() if result.updated_at else None
    data["subscription"] = {
        k: v.isoformat() if isinstance(v, datetime) else v
        for k, v in result.subscription.items()
    }
    return data


def _settings_from_cache(data: dict[str, Any]) -> OrgSettingsResult:
    updated_at = data.get("updated_at")
    subscription = dict(data.get("subscription") or {})
    for name in SUBSCRIPTION_DATETIME_FIELDS:
        if isinstance(subscription.get(name), str):
            subscription[name] = datetime.fromisoformat(subscription[name])
    return OrgSettingsResult(
        **{
            **data,
            "subscription": subscription,
            "updated_at": datetime.fromisoformat(updated_at) if updated_at else None,
        }
    )


class OrganizationService:
    """Branding and settings of the active organization."""

    def __init__(
        self,
        org_repo: IOrganizationRepository,
        cache: ICacheService | None = None,
        branding_ttl: int = 300,
        settings_ttl: int = 120,
        default_sender: str = "CoachHub <notifications@coachhub.app>",
        auth_sender: str = "CoachHub <auth@coachhub.app>",
    ) -> None:
        self.org_repo = org_repo
        self.cache = cache
        self.branding_ttl = branding_ttl
        self.settings_ttl = settings_ttl
        self.default_sender = default_sender
        self.auth_sender = auth_sender

    def _cache_on(self) -> bool:
        return self.cache is not None and self.cache.is_available()

    # ---- branding ----

    @traced("org.get_branding")
    async def get_branding(self, organization_id: str) -> OrgBrandingResult:
        """Stored branding merged over platform defaults."""
        key = org_branding_key(organization_id)
        if self._cache_on():
            cached = await self.cache.get(key)
            if cached:
                return OrgBrandingResult(organization_id=organization_id, **cached)
        merged = merge_branding(await self.org_repo.get_branding(organization_id))
        if self._cache_on():
            await self.cache.set(key, merged, ttl=self.branding_ttl)
        return OrgBrandingResult(organization_id=organization_id, **merged)

    async def get_public_branding(self, slug: str) -> OrgBrandingResult:
        organization_id = await self.resolve_slug(slug)
        return await self.get_branding(organization_id)

    async def resolve_slug(self, slug: str) -> str:
        """Organization id owning slug; ResourceNotFoundException when unknown."""
        if not is_valid_slug(slug):
            raise ResourceNotFoundException("organization", slug)
        key = org_slug_key(slug)
        if self._cache_on():
            cached = await self.cache.get(key)
            if cached:
                return cached
        settings = await self.org_repo.get_by_slug(slug)
        if not settings:
            raise ResourceNotFoundException("organization", slug)
        if self._cache_on():
            await self.cache.set(key, settings.organization_id, ttl=self.settings_ttl)
        return settings.organization_id

    @traced("org.update_branding")
    async def update_branding(
        self, organization_id: str, patch: dict[str, Any]
    ) -> OrgBrandingResult:
        try:
            validate_branding_patch(patch)
        except ValueError as e:
            raise ValidationException(str(e)) from e
        await self.org_repo.save_branding(organization_id, patch)
        if self._cache_on():
            await self.cache.delete(org_branding_key(organization_id))
        logger.info("Branding updated for org %s", organization_id)
        return await self.get_branding(organization_id)

    # ---- settings ----

    async def get_settings(self, organization_id: str) -> OrgSettingsResult:
        """Settings document, or defaults when the org has none yet."""
        key = org_settings_key(organization_id)
        if self._cache_on():
            cached = await self.cache.get(key)
            if cached:
                return _settings_from_cache(cached)
        result = await self.org_repo.get_settings(organization_id)
        if result is None:
            return OrgSettingsResult(organization_id=organization_id)
        if self._cache_on():
            await self.cache.set(key, _settings_to_cache(result), ttl=self.settings_ttl)
        return result

    @traced("org.update_settings")
    async def update_settings(
        self, organization_id: str, patch: dict[str, Any]
    ) -> OrgSettingsResult:
        updates = dict(patch)
        slots = updates.get("daily_focus_slots")
        if slots is not None and not MIN_FOCUS_SLOTS <= slots <= MAX_FOCUS_SLOTS:
            raise ValidationException(
                f"daily_focus_slots must be between {MIN_FOCUS_SLOTS} and {MAX_FOCUS_SLOTS}",
                field="daily_focus_slots",
            )
        previous = await self.org_repo.get_settings(organization_id)
        slug = updates.get("slug")
        if slug is not None:
            slug = slug.strip().lower()
            if not is_valid_slug(slug):
                raise ValidationException(
                    "Slug must be 3-63 lowercase letters, digits or hyphens",
                    field="slug",
                )
            owner = await self.org_repo.get_by_slug(slug)
            if owner and owner.organization_id != organization_id:
                raise ConflictException(
                    f"Slug {slug!r} is already taken", details={"field": "slug"}
                )
            updates["slug"] = slug
        result = await self.org_repo.save_settings(organization_id, updates)
        if self._cache_on():
            await self.cache.delete(org_settings_key(organization_id))
            if previous and previous.slug and previous.slug != result.slug:
                await self.cache.delete(org_slug_key(previous.slug))
        return result

    async def set_subscription(
        self, organization_id: str, subscription: dict[str, Any]
    ) -> OrgSettingsResult:
        """Replace the org's platform subscription snapshot (from Stripe webhooks)."""
        result = await self.org_repo.save_settings(
            organization_id, {"subscription": subscription}
        )
        if self._cache_on():
            await self.cache.delete(org_settings_key(organization_id))
        return result

    # ---- email sender ----

    async def resolve_sender(
        self, organization_id: str | None, kind: EmailKind = EmailKind.NOTIFICATIONS
    ) -> tuple[str, bool]:
        """From-address for tenant mail and whether it is a whitelabel address.

        A verified org email domain yields "{from_name} <{kind}@{domain}>";
        anything else falls back to the platform sender for the kind.
        """
        platform = self.auth_sender if kind is EmailKind.AUTH else self.default_sender
        if not organization_id:
            return platform, False
        branding = await self.get_branding(organization_id)
        email_settings = branding.email_settings
        domain = email_settings.get("domain")
        if domain and email_settings.get("status") == EmailDomainStatus.VERIFIED.value:
            from_name = email_settings.get("from_name") or branding.app_title
            return f"{from_name} <{kind.value}@{domain}>", True
        return platform, False

    async def reply_to(self, organization_id: str | None) -> str | None:
        if not organization_id:
            return None
        return (await self.get_branding(organization_id)).email_settings.get("reply_to")
