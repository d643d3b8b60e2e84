"""Organization branding and settings API schemas."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class BrandingResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    organization_id: str
    app_title: str
    colors: dict[str, str]
    menu_titles: dict[str, str]
    logo_url: str | None = None
    horizontal_logo_url: str | None = None


class BrandingUpdate(BaseModel):
    """Partial branding update; only the keys sent are changed."""

    app_title: str | None = Field(default=None, max_length=100)
    logo_url: str | None = Field(default=None, max_length=2048)
    horizontal_logo_url: str | None = Field(default=None, max_length=2048)
    colors: dict[str, str] | None = None
    menu_titles: dict[str, str] | None = None
    email_settings: dict[str, Any] | None = None


class OrgSettingsResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    organization_id: str
    slug: str | None = None
    name: str | None = None
    daily_focus_slots: int = 3
    feed_enabled: bool = True
    stripe_connect_account_id: str | None = None
    subscription: dict[str, Any] = Field(default_factory=dict)
    updated_at: datetime | None = None


class OrgSettingsUpdate(BaseModel):
    slug: str | None = Field(default=None, max_length=63)
    name: str | None = Field(default=None, max_length=200)
    daily_focus_slots: int | None = None
    feed_enabled: bool | None = None
    stripe_connect_account_id: str | None = Field(default=None, max_length=255)
