"""DTOs for organization branding and settings."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any


@dataclass(frozen=True)
class OrgBrandingResult:
    """Branding of an org merged over the platform defaults."""

    organization_id: str
    app_title: str
    colors: dict[str, str]
    menu_titles: dict[str, str]
    logo_url: str | None = None
    horizontal_logo_url: str | None = None
    email_settings: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class OrgSettingsResult:
    """Per-org configuration (org_settings/{organization id})."""

    organization_id: str
    slug: str | None = None
    name: str | None = None
    daily_focus_slots: int = 3
    feed_enabled: bool = True
    stripe_connect_account_id: str | None = None
    subscription: dict[str, Any] = field(default_factory=dict)
    updated_at: datetime | None = None
