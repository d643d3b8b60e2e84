"""Email sender factory: Resend when an API key is configured, else a logging sender."""

from __future__ import annotations

from typing import TYPE_CHECKING

from app.infrastructure.external.email.protocols import IEmailSender
from app.shared.telemetry.logging import get_logger

if TYPE_CHECKING:
    from app.core.config import Settings

logger = get_logger(__name__)


class EmailSenderFactory:
    """Factory for the email delivery backend."""

    @staticmethod
    def create_sender(settings: "Settings | None" = None) -> IEmailSender:
        """Create the sender from settings.

        Args:
            settings: Application settings; if None, uses get_settings().

        Returns:
            ResendEmailSender or LoggingEmailSender.
        """
        from app.core.config import get_settings

        s = settings or get_settings()
        if s.resend_api_key:
            from app.infrastructure.external.email.resend_sender import ResendEmailSender

            return ResendEmailSender(s.resend_api_key.get_secret_value())
        from app.infrastructure.external.email.logging_sender import LoggingEmailSender

        logger.debug("RESEND_API_KEY not set; emails are logged only")
        return LoggingEmailSender()
