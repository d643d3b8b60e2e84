"""Pydantic request/response schemas for the API."""

from app.schemas.enrollment import EnrollmentResponse, InstanceResponse
from app.schemas.health import HealthResponse, ReadinessResponse
from app.schemas.program import ProgramCreateRequest, ProgramResponse
from app.schemas.scheduling import EventResponse
from app.schemas.task import TaskResponse
from app.schemas.user import MeResponse, UserResponse

__all__ = [
    "EnrollmentResponse",
    "EventResponse",
    "HealthResponse",
    "InstanceResponse",
    "MeResponse",
    "ProgramCreateRequest",
    "ProgramResponse",
    "ReadinessResponse",
    "TaskResponse",
    "UserResponse",
]
