"""White-label branding defaults and validation rules for organizations."""

from __future__ import annotations

import re
from typing import Any

DEFAULT_APP_TITLE = "GrowthAddicts"
DEFAULT_COLORS: dict[str, str] = {
    "accent_light": "#a07855",
    "accent_dark": "#b8896a",
}
DEFAULT_MENU_TITLES: dict[str, str] = {
    "home": "Home",
    "squad": "Squad",
    "program": "Program",
    "learn": "Discover",
    "chat": "Chat",
    "coach": "Coach",
}

_HEX_COLOR = re.compile(r"^#(?:[0-9a-fA-F]{3}|[0-9a-fA-F]{6})$")
_SLUG = re.compile(r"^[a-z0-9](?:[a-z0-9-]{1,61}[a-z0-9])$")


def is_hex_color(value: str) -> bool:
    return bool(_HEX_COLOR.match(value))


def is_valid_slug(value: str) -> bool:
    """Lowercase letters, digits and inner hyphens, 3-63 characters."""
    return bool(_SLUG.match(value))


def merge_branding(stored: dict[str, Any] | None) -> dict[str, Any]:
    """Stored branding fields laid over the platform defaults."""
    stored = stored or {}
    return {
        "app_title": stored.get("app_title") or DEFAULT_APP_TITLE,
        "logo_url": stored.get("logo_url"),
        "horizontal_logo_url": stored.get("horizontal_logo_url"),
        "colors": {**DEFAULT_COLORS, **(stored.get("colors") or {})},
        "menu_titles": {**DEFAULT_MENU_TITLES, **(stored.get("menu_titles") or {})},
        "email_settings": dict(stored.get("email_settings") or {}),
    }


def validate_branding_patch(patch: dict[str, Any]) -> None:
    """Raise ValueError for malformed colors or blank titles."""
    for key, color in (patch.get("colors") or {}).items():
        if key not in DEFAULT_COLORS:
            raise ValueError(f"Unknown color {key!r}")
        if not isinstance(color, str) or not is_hex_color(color):
            raise ValueError(f"Color {key!r} must be a hex value like #a07855")
    for key, title in (patch.get("menu_titles") or {}).items():
        if key not in DEFAULT_MENU_TITLES:
            raise ValueError(f"Unknown menu title {key!r}")
        if not isinstance(title, str) or not title.strip():
            raise ValueError(f"Menu title {key!r} must not be empty")
    if "app_title" in patch and not (patch["app_title"] or "").strip():
        raise ValueError("App title must not be empty")
