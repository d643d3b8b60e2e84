"""Transactional email delivery (Resend, or logging when unconfigured)."""

from app.infrastructure.external.email.factory import EmailSenderFactory
from app.infrastructure.external.email.protocols import (
    EmailDeliveryError,
    IEmailSender,
    OutgoingEmail,
)

__all__ = [
    "EmailDeliveryError",
    "EmailSenderFactory",
    "IEmailSender",
    "OutgoingEmail",
]
