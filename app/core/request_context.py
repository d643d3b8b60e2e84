"""Per-request context (request id, organization id).

Middleware sets these context variables so logging and tracing can tag
records without threading the values through every call.
"""

from contextvars import ContextVar

current_request_id: ContextVar[str | None] = ContextVar(
    "current_request_id", default=None
)
current_organization_id: ContextVar[str | None] = ContextVar(
    "current_organization_id", default=None
)


def set_request_id(request_id: str | None) -> None:
    current_request_id.set(request_id)


def get_request_id() -> str | None:
    return current_request_id.get()


def set_organization_id(organization_id: str | None) -> None:
    """Set the active organization for this context (e.g. request)."""
    current_organization_id.set(organization_id)


def get_organization_id() -> str | None:
    """Return the active organization ID if set."""
    return current_organization_id.get()
