"""Organization context middleware.

Puts the active Clerk organization of the bearer token into
app.core.request_context so log records and spans carry it. Authorization
is not decided here: route dependencies verify the token again and
reject bad ones.
"""

from __future__ import annotations

from typing import Callable

from app.core.request_context import current_organization_id
from app.domain.exceptions import CoachHubException
from app.infrastructure.security.clerk import verify_session_token


def _bearer_token(scope: dict) -> str | None:
    for key, value in scope.get("headers", []):
        if key.lower() == b"authorization":
            raw = value.decode("latin-1")
            if raw[:7].lower() == "bearer ":
                return raw[7:].strip() or None
    return None


def _organization_from_scope(scope: dict) -> str | None:
    token = _bearer_token(scope)
    if not token:
        return None
    try:
        return verify_session_token(token).organization_id
    except CoachHubException:
        return None


def OrgContextMiddleware(app: Callable) -> Callable:
    """Set organization context from the session token before the route runs. Raw ASGI."""

    async def asgi_app(scope: dict, receive: Callable, send: Callable) -> None:
        if scope["type"] != "http":
            await app(scope, receive, send)
            return
        token = current_organization_id.set(_organization_from_scope(scope))
        try:
            await app(scope, receive, send)
        finally:
            current_organization_id.reset(token)

    return asgi_app
