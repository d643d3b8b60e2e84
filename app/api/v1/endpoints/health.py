"""Health check endpoints for liveness and readiness probes."""

from typing import Annotated

from fastapi import APIRouter, Depends

from app.api.v1.dependencies import get_cache
from app.application.interfaces.services import ICacheService
from app.infrastructure.firebase.client import get_firestore_client
from app.schemas.health import HealthResponse, ReadinessResponse

router = APIRouter()


@router.get("", response_model=HealthResponse)
def health_check() -> HealthResponse:
    """Return simple ok status for liveness."""
    return HealthResponse()


@router.get("/ready", response_model=ReadinessResponse)
def readiness_check(
    cache: Annotated[ICacheService | None, Depends(get_cache)],
) -> ReadinessResponse:
    """Report whether Firestore is configured and Redis is reachable.

    Status is "degraded" when Firestore is missing or an enabled cache is down;
    the API still answers so public routes keep working.
    """
    firestore = get_firestore_client() is not None
    redis = cache.is_available() if cache is not None else None
    ok = firestore and redis is not False
    return ReadinessResponse(status="ok" if ok else "degraded", firestore=firestore, redis=redis)
