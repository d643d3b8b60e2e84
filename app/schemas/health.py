"""Health check API schemas."""

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    """Response for GET /health (liveness)."""

    status: str = Field(default="ok", description="Service status")


class ReadinessResponse(BaseModel):
    """Response for GET /health/ready."""

    status: str = Field(default="ok", description="ok or degraded")
    firestore: bool = Field(..., description="Firestore client is configured")
    redis: bool | None = Field(
        default=None, description="Redis reachable; null when caching is disabled"
    )
