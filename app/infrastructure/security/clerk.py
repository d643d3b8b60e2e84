"""Clerk session token verification.

Clerk signs session tokens with an RSA key per instance. Verification is
networkless: the PEM public key (CLERK_JWT_KEY) is configured once and
every request is checked locally with python-jose.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from jose import JWTError, jwt

from app.core.config import get_settings
from app.domain.exceptions import AuthenticationException, ServiceNotConfiguredException


@dataclass(frozen=True)
class ClerkClaims:
    """The subset of session claims the API uses."""

    user_id: str
    organization_id: str | None = None
    org_role: str | None = None
    org_slug: str | None = None


def _org_claims(payload: dict[str, Any]) -> tuple[str | None, str | None, str | None]:
    """Organization claims from v1 (org_id/org_role/org_slug) or v2 ("o") tokens."""
    org = payload.get("o")
    if isinstance(org, dict):
        role = org.get("rol")
        if role and not role.startswith("org:"):
            role = f"org:{role}"
        return org.get("id"), role, org.get("slg")
    return payload.get("org_id"), payload.get("org_role"), payload.get("org_slug")


def verify_session_token(token: str) -> ClerkClaims:
    """Verify a Clerk session JWT and return its claims.

    Raises:
        ServiceNotConfiguredException: CLERK_JWT_KEY is not set.
        AuthenticationException: Token is malformed, expired or badly signed.
    """
    settings = get_settings()
    if not settings.clerk_jwt_key:
        raise ServiceNotConfiguredException("Clerk")
    try:
        payload = jwt.decode(
            token,
            settings.clerk_jwt_key.get_secret_value(),
            algorithms=[settings.clerk_jwt_algorithm],
            issuer=settings.clerk_issuer,
            options={"verify_aud": False, "require_exp": True, "require_sub": True},
        )
    except JWTError as e:
        raise AuthenticationException("Invalid session token") from e
    user_id = payload.get("sub")
    if not user_id:
        raise AuthenticationException("Invalid session token")
    organization_id, org_role, org_slug = _org_claims(payload)
    return ClerkClaims(
        user_id=user_id,
        organization_id=organization_id,
        org_role=org_role,
        org_slug=org_slug,
    )
