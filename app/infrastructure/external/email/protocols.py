"""Types shared by the email senders."""

from app.application.dtos.email import OutgoingEmail
from app.application.interfaces.services import IEmailSender


class EmailDeliveryError(Exception):
    """Raised by senders when the provider refuses a message."""


__all__ = ["EmailDeliveryError", "IEmailSender", "OutgoingEmail"]
