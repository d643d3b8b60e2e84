"""Email sender that only logs. Used when RESEND_API_KEY is not set (local dev, tests)."""

import logging

from app.infrastructure.external.email.protocols import OutgoingEmail

logger = logging.getLogger(__name__)


class LoggingEmailSender:
    async def send(self, message: OutgoingEmail) -> str | None:
        logger.info(
            "Email (not sent, no provider configured) from=%s to=%s subject=%r",
            message.from_address,
            message.to,
            message.subject,
        )
        return None
