"""Rate limiter instance for SlowAPI.

Shared so both main (app.state.limiter) and route modules can use the same
instance without circular imports. Central limit strings and decorators
keep rate limits DRY.
"""

from slowapi import Limiter
from slowapi.util import get_remote_address

limiter = Limiter(key_func=get_remote_address)

# Single source of truth for rate limit strings and decorators.
WRITE_ENDPOINT_LIMIT = "120/minute"
PUBLIC_BOOKING_LIMIT = "10/minute"
WEBHOOK_LIMIT = "300/minute"

limit_writes = limiter.limit(WRITE_ENDPOINT_LIMIT)
limit_public_booking = limiter.limit(PUBLIC_BOOKING_LIMIT)
limit_webhooks = limiter.limit(WEBHOOK_LIMIT)
