"""Resend email sender. The SDK is synchronous, so calls run in a worker thread."""

import asyncio
import logging
from typing import Any

import resend

from app.infrastructure.external.email.protocols import EmailDeliveryError, OutgoingEmail

logger = logging.getLogger(__name__)


class ResendEmailSender:
    """Send through the Resend API (https://resend.com)."""

    def __init__(self, api_key: str) -> None:
        self._api_key = api_key

    def _payload(self, message: OutgoingEmail) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "from": message.from_address,
            "to": message.to,
            "subject": message.subject,
            "html": message.html,
        }
        if message.text:
            payload["text"] = message.text
        if message.reply_to:
            payload["reply_to"] = message.reply_to
        if message.tags:
            payload["tags"] = [{"name": k, "value": v} for k, v in message.tags.items()]
        return payload

    def _send_sync(self, payload: dict[str, Any]) -> dict[str, Any]:
        resend.api_key = self._api_key
        return resend.Emails.send(payload)

    async def send(self, message: OutgoingEmail) -> str | None:
        try:
            response = await asyncio.to_thread(self._send_sync, self._payload(message))
        except Exception as e:
            raise EmailDeliveryError(f"Resend rejected email from {message.from_address}: {e}") from e
        message_id = response.get("id") if isinstance(response, dict) else None
        logger.info("Email sent via Resend to %s (id=%s)", message.to, message_id)
        return message_id
