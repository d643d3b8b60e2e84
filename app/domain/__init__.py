"""Domain layer: enums, exceptions and pure scheduling/distribution rules.

No dependencies on infrastructure or presentation. Used by application
and infrastructure layers.
"""

from app.domain.exceptions import (
    AuthenticationException,
    AuthorizationException,
    CoachHubException,
    ConflictException,
    GoneException,
    ResourceNotFoundException,
    ValidationException,
)

__all__ = [
    "AuthenticationException",
    "AuthorizationException",
    "CoachHubException",
    "ConflictException",
    "GoneException",
    "ResourceNotFoundException",
    "ValidationException",
]
