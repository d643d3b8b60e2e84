"""Centralized exception handlers for the FastAPI app.

Register with register_exception_handlers(app). Maps domain and framework
exceptions to HTTP responses.
"""

import logging
from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.core.config import get_settings
from app.domain.exceptions import (
    BOOKING_ERROR_STATUS,
    CoachHubException,
    ConflictException,
    GoneException,
)

logger = logging.getLogger(__name__)

# Map domain error_code to HTTP status when applicable
_ERROR_CODE_STATUS: dict[str, int] = {
    "RESOURCE_NOT_FOUND": 404,
    "AUTHENTICATION_ERROR": 401,
    "PERMISSION_DENIED": 403,
    "ORGANIZATION_REQUIRED": 400,
    "VALIDATION_ERROR": 400,
    "CONFLICT": 409,
    "GONE": 410,
    "PAYMENT_REQUIRES_ACTION": 400,
    "PAYMENT_FAILED": 400,
    "SERVICE_NOT_CONFIGURED": 503,
    "WEBHOOK_VERIFICATION_FAILED": 400,
    "FEATURE_DISABLED": 403,
    **BOOKING_ERROR_STATUS,
}


# Fallback for exceptions raised with a specific code (ALREADY_ENROLLED, SQUAD_FULL, ...)
_CLASS_STATUS: tuple[tuple[type[CoachHubException], int], ...] = (
    (ConflictException, 409),
    (GoneException, 410),
)


def status_for_exception(exc: CoachHubException) -> int:
    if exc.error_code in _ERROR_CODE_STATUS:
        return _ERROR_CODE_STATUS[exc.error_code]
    for cls, status in _CLASS_STATUS:
        if isinstance(exc, cls):
            return status
    return 400


def _coachhub_exception_handler(
    request: Request, exc: CoachHubException
) -> JSONResponse:
    """Return JSON from CoachHubException.to_dict() with appropriate status code."""
    status = status_for_exception(exc)
    if status >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=status, content=exc.to_dict())


def _validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Return 422 with validation error details."""
    return JSONResponse(
        status_code=422,
        content={
            "error": "VALIDATION_ERROR",
            "message": "Request validation failed",
            "details": jsonable_errors(exc),
        },
    )


def jsonable_errors(exc: RequestValidationError) -> list[dict[str, Any]]:
    """Pydantic errors without the non-serializable ctx values."""
    return [
        {key: value for key, value in err.items() if key in ("type", "loc", "msg")}
        for err in exc.errors()
    ]


def _http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    """Return JSON for Starlette HTTP exceptions (status + detail)."""
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": "HTTP_ERROR", "message": exc.detail},
        headers=getattr(exc, "headers", None),
    )


def _generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Return 500; include detail only when debug is True."""
    logger.exception("Unhandled exception: %s", exc)
    settings = get_settings()
    detail: Any = str(exc) if settings.debug else "Internal server error"
    return JSONResponse(
        status_code=500,
        content={"error": "INTERNAL_ERROR", "message": detail},
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Register all exception handlers on the FastAPI app.

    Call once after creating the app. Handlers: CoachHubException (and
    subclasses), RequestValidationError, StarletteHTTPException, generic Exception.
    """
    app.add_exception_handler(CoachHubException, _coachhub_exception_handler)
    app.add_exception_handler(RequestValidationError, _validation_exception_handler)
    app.add_exception_handler(StarletteHTTPException, _http_exception_handler)
    app.add_exception_handler(Exception, _generic_exception_handler)
