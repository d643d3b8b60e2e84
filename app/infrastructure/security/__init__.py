"""Security: Clerk session tokens and webhook signatures."""

from app.infrastructure.security.clerk import ClerkClaims, verify_session_token
from app.infrastructure.security.webhooks import sign_payload, verify_svix_signature

__all__ = [
    "ClerkClaims",
    "sign_payload",
    "verify_session_token",
    "verify_svix_signature",
]
