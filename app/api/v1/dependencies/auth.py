"""Authentication dependencies: Clerk session, organization and role checks."""

from __future__ import annotations

import hmac
import json
from typing import Annotated, Any

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from app.application.dtos.auth import AuthContext
from app.core.config import get_settings
from app.domain.exceptions import (
    AuthenticationException,
    AuthorizationException,
    OrganizationRequiredException,
    ServiceNotConfiguredException,
    WebhookVerificationException,
)
from app.infrastructure.security.clerk import verify_session_token
from app.infrastructure.security.webhooks import verify_svix_signature

_bearer = HTTPBearer(auto_error=False)


def get_current_user(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(_bearer)],
) -> AuthContext:
    """Verify the Clerk session token; 401 when missing or invalid."""
    if not credentials or not credentials.credentials:
        raise AuthenticationException()
    claims = verify_session_token(credentials.credentials)
    return AuthContext(
        user_id=claims.user_id,
        organization_id=claims.organization_id,
        org_role=claims.org_role,
        org_slug=claims.org_slug,
    )


def require_org(
    auth: Annotated[AuthContext, Depends(get_current_user)],
) -> AuthContext:
    """Caller with an active organization in the session."""
    if not auth.organization_id:
        raise OrganizationRequiredException()
    return auth


def require_coach(
    auth: Annotated[AuthContext, Depends(require_org)],
) -> AuthContext:
    """Caller who is an admin or coach of the active organization."""
    if not auth.is_coach:
        raise AuthorizationException("organization", "manage")
    return auth


def verify_cron_secret(request: Request) -> None:
    """Accept only `Authorization: Bearer <CRON_SECRET>`."""
    secret = get_settings().cron_secret
    if not secret:
        raise ServiceNotConfiguredException("cron")
    header = request.headers.get("authorization") or ""
    expected = f"Bearer {secret.get_secret_value()}"
    if not hmac.compare_digest(header.encode(), expected.encode()):
        raise AuthenticationException("Invalid cron secret")


CurrentUser = Annotated[AuthContext, Depends(get_current_user)]
OrgUser = Annotated[AuthContext, Depends(require_org)]
Coach = Annotated[AuthContext, Depends(require_coach)]


async def verify_clerk_webhook(request: Request) -> dict[str, Any]:
    """Verify the svix signature of a Clerk webhook and return its JSON payload."""
    secret = get_settings().clerk_webhook_secret
    if not secret:
        raise ServiceNotConfiguredException("Clerk webhooks")
    body = await request.body()
    verify_svix_signature(
        secret.get_secret_value(),
        body,
        request.headers.get("svix-id"),
        request.headers.get("svix-timestamp"),
        request.headers.get("svix-signature"),
    )
    try:
        payload = json.loads(body)
    except ValueError as e:
        raise WebhookVerificationException("Webhook body is not JSON") from e
    if not isinstance(payload, dict):
        raise WebhookVerificationException("Webhook body is not an object")
    return payload
