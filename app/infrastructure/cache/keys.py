"""Cache key builders. Single place for key format (DRY).

Key components (organization_id, slug) must not contain CACHE_KEY_SEP to
avoid ambiguous or colliding keys.
"""

from app.core.constants import CACHE_KEY_SEP, CACHE_PREFIX_BRANDING, CACHE_PREFIX_ORG


def _validate_key_component(value: str, name: str) -> None:
    """Raise ValueError if value contains the cache key separator.

    Args:
        value: String component used in a cache key.
        name: Name of the component (for error message).

    Raises:
        ValueError: If value contains CACHE_KEY_SEP.
    """
    if CACHE_KEY_SEP in value:
        raise ValueError(
            f"Cache key component {name!r} must not contain separator {CACHE_KEY_SEP!r}"
        )


def org_branding_key(organization_id: str) -> str:
    """Cache key for merged branding of an org."""
    _validate_key_component(organization_id, "organization_id")
    return f"{CACHE_PREFIX_BRANDING}{CACHE_KEY_SEP}id{CACHE_KEY_SEP}{organization_id}"


def org_slug_key(slug: str) -> str:
    """Cache key for slug -> organization id."""
    _validate_key_component(slug, "slug")
    return f"{CACHE_PREFIX_ORG}{CACHE_KEY_SEP}slug{CACHE_KEY_SEP}{slug}"


def org_settings_key(organization_id: str) -> str:
    """Cache key for org settings (focus slots, feed flag, connect account)."""
    _validate_key_component(organization_id, "organization_id")
    return f"{CACHE_PREFIX_ORG}{CACHE_KEY_SEP}settings{CACHE_KEY_SEP}{organization_id}"
