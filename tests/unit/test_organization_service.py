"""OrganizationService branding/settings cache-aside and sender resolution."""

from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest

from app.application.dtos.organization import OrgSettingsResult
from app.application.use_cases.organizations import OrganizationService
from app.domain.branding import DEFAULT_APP_TITLE
from app.domain.enums import EmailKind
from app.domain.exceptions import (
    ConflictException,
    ResourceNotFoundException,
    ValidationException,
)
from app.infrastructure.cache.keys import org_branding_key, org_settings_key, org_slug_key
from app.infrastructure.cache.redis_cache import CacheService


@pytest.fixture
def org_repo():
    repo = AsyncMock()
    repo.get_branding = AsyncMock(return_value={"app_title": "Thrive"})
    repo.get_settings = AsyncMock(return_value=None)
    repo.get_by_slug = AsyncMock(return_value=None)
    repo.save_settings = AsyncMock(
        side_effect=lambda org_id, fields: OrgSettingsResult(
            organization_id=org_id, slug=fields.get("slug")
        )
    )
    return repo


@pytest.fixture
def cache():
    c = AsyncMock()
    c.is_available = MagicMock(return_value=True)
    c.get = AsyncMock(return_value=None)
    return c


class TestBranding:
    async def test_miss_reads_repo_and_fills_cache(self, org_repo, cache):
        branding = await OrganizationService(org_repo, cache).get_branding("org1")
        assert branding.app_title == "Thrive"
        key, value = cache.set.await_args.args
        assert key == org_branding_key("org1")
        assert value["app_title"] == "Thrive"
        assert cache.set.await_args.kwargs == {"ttl": 300}

    async def test_hit_skips_repo(self, org_repo, cache):
        cache.get.return_value = {
            "app_title": "Cached",
            "colors": {},
            "menu_titles": {},
        }
        branding = await OrganizationService(org_repo, cache).get_branding("org1")
        assert branding.app_title == "Cached"
        org_repo.get_branding.assert_not_awaited()

    async def test_works_without_cache(self, org_repo):
        org_repo.get_branding.return_value = None
        branding = await OrganizationService(org_repo).get_branding("org1")
        assert branding.app_title == DEFAULT_APP_TITLE

    async def test_update_validates_and_invalidates(self, org_repo, cache):
        service = OrganizationService(org_repo, cache)
        with pytest.raises(ValidationException):
            await service.update_branding("org1", {"colors": {"accent_light": "red"}})
        await service.update_branding("org1", {"app_title": "New"})
        org_repo.save_branding.assert_awaited_once_with("org1", {"app_title": "New"})
        cache.delete.assert_any_await(org_branding_key("org1"))


class TestSettings:
    async def test_defaults_when_missing(self, org_repo):
        settings = await OrganizationService(org_repo).get_settings("org1")
        assert settings.daily_focus_slots == 3
        assert settings.feed_enabled is True

    @pytest.mark.parametrize("slots", [0, 11])
    async def test_focus_slots_range(self, org_repo, slots):
        with pytest.raises(ValidationException):
            await OrganizationService(org_repo).update_settings("org1", {"daily_focus_slots": slots})

    async def test_taken_slug_conflicts(self, org_repo):
        org_repo.get_by_slug.return_value = OrgSettingsResult(organization_id="org2", slug="taken")
        with pytest.raises(ConflictException):
            await OrganizationService(org_repo).update_settings("org1", {"slug": "Taken"})

    async def test_slug_change_drops_old_slug_cache(self, org_repo, cache):
        org_repo.get_settings.return_value = OrgSettingsResult(organization_id="org1", slug="old-slug")
        result = await OrganizationService(org_repo, cache).update_settings(
            "org1", {"slug": " New-Slug "}
        )
        assert result.slug == "new-slug"
        cache.delete.assert_any_await(org_settings_key("org1"))
        cache.delete.assert_any_await(org_slug_key("old-slug"))

    async def test_subscription_period_end_survives_the_redis_cache(self, org_repo):
        stored: dict[str, str] = {}
        client = AsyncMock()
        client.setex = AsyncMock(side_effect=lambda key, ttl, value: stored.update({key: value}))
        client.get = AsyncMock(side_effect=lambda key: stored.get(key))
        redis_cache = CacheService(client)
        redis_cache._connected = True
        period_end = datetime(2026, 11, 1, tzinfo=timezone.utc)
        org_repo.get_settings.return_value = OrgSettingsResult(
            organization_id="org1",
            subscription={"status": "active", "current_period_end": period_end},
        )
        service = OrganizationService(org_repo, redis_cache)

        first = await service.get_settings("org1")
        cached = await service.get_settings("org1")

        assert org_settings_key("org1") in stored
        org_repo.get_settings.assert_awaited_once()
        assert cached.subscription == first.subscription
        assert cached.subscription["current_period_end"] == period_end


class TestSlugAndSender:
    async def test_unknown_or_malformed_slug(self, org_repo):
        service = OrganizationService(org_repo)
        with pytest.raises(ResourceNotFoundException):
            await service.resolve_slug("Not A Slug")
        with pytest.raises(ResourceNotFoundException):
            await service.resolve_slug("unknown-org")

    async def test_resolve_slug(self, org_repo):
        org_repo.get_by_slug.return_value = OrgSettingsResult(organization_id="org1", slug="dev")
        assert await OrganizationService(org_repo).resolve_slug("dev-coaching") == "org1"

    async def test_verified_domain_is_whitelabel(self, org_repo):
        org_repo.get_branding.return_value = {
            "app_title": "Thrive",
            "email_settings": {"domain": "mail.thrive.co", "status": "verified"},
        }
        sender, whitelabel = await OrganizationService(org_repo).resolve_sender("org1")
        assert sender == "Thrive <notifications@mail.thrive.co>"
        assert whitelabel is True

    async def test_unverified_domain_uses_platform_sender(self, org_repo):
        org_repo.get_branding.return_value = {
            "email_settings": {"domain": "mail.thrive.co", "status": "pending"}
        }
        service = OrganizationService(org_repo, auth_sender="Platform <auth@platform.test>")
        assert await service.resolve_sender("org1", EmailKind.AUTH) == (
            "Platform <auth@platform.test>",
            False,
        )
