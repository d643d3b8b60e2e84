"""Organization branding defaults and validation."""

import pytest

from app.domain.branding import (
    DEFAULT_APP_TITLE,
    DEFAULT_COLORS,
    is_valid_slug,
    merge_branding,
    validate_branding_patch,
)


def test_merge_over_defaults():
    merged = merge_branding({"colors": {"accent_light": "#112233"}, "menu_titles": {"squad": "Team"}})
    assert merged["app_title"] == DEFAULT_APP_TITLE
    assert merged["colors"] == {"accent_light": "#112233", "accent_dark": DEFAULT_COLORS["accent_dark"]}
    assert merged["menu_titles"]["squad"] == "Team"
    assert merged["menu_titles"]["home"] == "Home"
    assert merge_branding(None)["logo_url"] is None


@pytest.mark.parametrize("slug", ["abc", "dev-coaching", "a1-b2"])
def test_valid_slugs(slug):
    assert is_valid_slug(slug)


@pytest.mark.parametrize("slug", ["ab", "-abc", "abc-", "Dev", "dev_coaching", "a" * 64])
def test_invalid_slugs(slug):
    assert not is_valid_slug(slug)


@pytest.mark.parametrize(
    "patch",
    [
        {"colors": {"primary": "#fff"}},
        {"colors": {"accent_dark": "blue"}},
        {"menu_titles": {"home": "  "}},
        {"menu_titles": {"settings": "Settings"}},
        {"app_title": ""},
    ],
)
def test_invalid_patches(patch):
    with pytest.raises(ValueError):
        validate_branding_patch(patch)


def test_valid_patch():
    validate_branding_patch({"colors": {"accent_dark": "#ABC"}, "app_title": "Thrive"})
