"""Cache: Redis service and cache key utilities.

CacheService uses app.core.config; key format is in keys.py (DRY).
"""

from app.infrastructure.cache.keys import (
    org_branding_key,
    org_settings_key,
    org_slug_key,
)
from app.infrastructure.cache.redis_cache import CacheService

__all__ = [
    "CacheService",
    "org_branding_key",
    "org_settings_key",
    "org_slug_key",
]
