"""Domain exceptions for the CoachHub application.

Defines domain-level exceptions that represent business rule violations.
These exceptions are independent of infrastructure concerns. Presentation
layer maps them to HTTP responses in exception handlers.
"""

from typing import Any


class CoachHubException(Exception):
    """Base exception for all CoachHub application errors.

    All custom exceptions should inherit from this class to allow
    consistent error handling and logging. Presentation layer maps
    these to HTTP responses using message, error_code, and details.

    Attributes:
        message: Human-readable error description.
        error_code: Machine-readable error code.
        details: Additional error context (e.g. field, resource_id).
    """

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize the exception.

        Args:
            message: Human-readable error description.
            error_code: Optional machine-readable code; defaults to class name.
            details: Optional dict of extra context.
        """
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """JSON body for API error responses."""
        body: dict[str, Any] = {"error": self.error_code, "message": self.message}
        if self.details:
            body["details"] = self.details
        return body


class ValidationException(CoachHubException):
    """Raised when input validation fails (e.g. invalid format or range)."""

    def __init__(self, message: str, field: str | None = None) -> None:
        """Initialize with message and optional field name.

        Args:
            message: Description of the validation failure.
            field: Optional field or attribute that failed validation.
        """
        details = {"field": field} if field else {}
        super().__init__(message, "VALIDATION_ERROR", details)


class AuthenticationException(CoachHubException):
    """Raised when authentication fails (missing, expired or invalid session token)."""

    def __init__(self, message: str = "Unauthorized") -> None:
        super().__init__(message, "AUTHENTICATION_ERROR")


class AuthorizationException(CoachHubException):
    """Raised when the user lacks the role or ownership required for the operation."""

    def __init__(
        self,
        resource: str | None = None,
        action: str | None = None,
        message: str = "Forbidden",
    ) -> None:
        """Initialize with optional resource, action, and message.

        Args:
            resource: Optional resource type (e.g. 'task', 'program').
            action: Optional action that was attempted (e.g. 'update').
            message: Human-readable message; default used when resource/action omitted.
        """
        if resource and action:
            message = f"Forbidden: cannot {action} {resource}"
        details: dict[str, Any] = {}
        if resource:
            details["resource"] = resource
        if action:
            details["action"] = action
        super().__init__(message, "PERMISSION_DENIED", details)


class OrganizationRequiredException(CoachHubException):
    """Raised when an org-scoped operation is called without an active organization."""

    def __init__(self) -> None:
        super().__init__("No active organization", "ORGANIZATION_REQUIRED")


class ResourceNotFoundException(CoachHubException):
    """Raised when a requested resource does not exist (or is outside the caller's org)."""

    def __init__(self, resource_type: str, resource_id: str) -> None:
        """Initialize with resource type and identifier.

        Args:
            resource_type: Kind of resource (e.g. 'program', 'task').
            resource_id: Identifier that was not found.
        """
        super().__init__(
            f"{resource_type.replace('_', ' ').capitalize()} not found",
            "RESOURCE_NOT_FOUND",
            {"resource_type": resource_type, "resource_id": resource_id},
        )


class ConflictException(CoachHubException):
    """Raised when the request conflicts with current state (duplicate, full, taken slot)."""

    def __init__(
        self,
        message: str,
        error_code: str = "CONFLICT",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, error_code, details)


class GoneException(CoachHubException):
    """Raised when a resource existed but can no longer be acted on (expired, cancelled, past)."""

    def __init__(self, message: str, error_code: str = "GONE") -> None:
        super().__init__(message, error_code)


class BookingException(CoachHubException):
    """Failure while rescheduling or cancelling an intake booking by token.

    The error_code is one of the BOOKING_ERROR_STATUS keys; the HTTP status
    is resolved from that table.
    """

    def __init__(self, error_code: str, message: str) -> None:
        super().__init__(message, error_code)


# Stable codes returned to prospects managing a booking link.
BOOKING_ERROR_STATUS: dict[str, int] = {
    "TOKEN_INVALID": 404,
    "TOKEN_EXPIRED": 410,
    "EVENT_NOT_FOUND": 404,
    "EVENT_CANCELLED": 410,
    "EVENT_PAST": 410,
    "CONFIG_NOT_FOUND": 404,
    "RESCHEDULE_DISABLED": 403,
    "CANCELLATION_DISABLED": 403,
    "PAST_DEADLINE": 403,
    "SLOT_PAST": 400,
    "SLOT_INVALID": 400,
    "SLOT_UNAVAILABLE": 409,
}


class PaymentRequiredActionException(CoachHubException):
    """Raised when a saved-card charge needs the customer to finish authentication."""

    def __init__(
        self,
        message: str = "Payment requires additional authentication",
        payment_intent_id: str | None = None,
        client_secret: str | None = None,
    ) -> None:
        details: dict[str, Any] = {"requires_action": True}
        if payment_intent_id:
            details["payment_intent_id"] = payment_intent_id
        if client_secret:
            details["client_secret"] = client_secret
        super().__init__(message, "PAYMENT_REQUIRES_ACTION", details)


class PaymentFailedException(CoachHubException):
    """Raised when the card was declined or the charge otherwise failed."""

    def __init__(self, message: str, decline_code: str | None = None) -> None:
        details = {"decline_code": decline_code} if decline_code else {}
        super().__init__(message, "PAYMENT_FAILED", details)


class ServiceNotConfiguredException(CoachHubException):
    """Raised when an integration (Firestore, Stripe, Resend) has no credentials."""

    def __init__(self, service: str) -> None:
        super().__init__(
            f"{service} is not configured",
            "SERVICE_NOT_CONFIGURED",
            {"service": service},
        )


class WebhookVerificationException(CoachHubException):
    """Raised when a webhook signature or timestamp does not verify."""

    def __init__(self, message: str = "Invalid webhook signature") -> None:
        super().__init__(message, "WEBHOOK_VERIFICATION_FAILED")


class FeatureDisabledException(CoachHubException):
    """Raised when an org has switched off a feature (e.g. the feed)."""

    def __init__(self, feature: str) -> None:
        super().__init__(
            f"{feature.capitalize()} is not enabled for this organization",
            "FEATURE_DISABLED",
            {"feature": feature},
        )
