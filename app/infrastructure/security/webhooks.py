"""Svix webhook signature verification (used by Clerk).

The signed content is "{svix-id}.{svix-timestamp}.{raw body}", signed with
HMAC-SHA256 under the base64 key that follows the "whsec_" prefix. The
svix-signature header holds one or more space-separated "v1,<base64>"
entries; any match is accepted.
"""

from __future__ import annotations

import base64
import binascii
import hashlib
import hmac
import time

from app.domain.exceptions import WebhookVerificationException
from app.shared.telemetry.logging import get_logger

logger = get_logger(__name__)

# Maximum age of webhook in seconds (5 minutes)
MAX_WEBHOOK_AGE_SECONDS = 300


def extract_signing_key(secret: str) -> bytes:
    """Decode the HMAC key from a "whsec_<base64>" secret."""
    encoded = secret[len("whsec_"):] if secret.startswith("whsec_") else secret
    try:
        return base64.b64decode(encoded, validate=True)
    except (binascii.Error, ValueError) as e:
        raise WebhookVerificationException("Webhook secret is not valid base64") from e


def sign_payload(secret: str, msg_id: str, timestamp: str, body: bytes) -> str:
    """Base64 HMAC-SHA256 signature of a webhook delivery."""
    signed = b".".join([msg_id.encode(), timestamp.encode(), body])
    digest = hmac.new(extract_signing_key(secret), signed, hashlib.sha256).digest()
    return base64.b64encode(digest).decode()


def verify_svix_signature(
    secret: str,
    body: bytes,
    msg_id: str | None,
    timestamp: str | None,
    signature_header: str | None,
    now: float | None = None,
    tolerance: int = MAX_WEBHOOK_AGE_SECONDS,
) -> None:
    """Raise WebhookVerificationException unless the delivery is authentic and fresh."""
    if not msg_id or not timestamp or not signature_header:
        raise WebhookVerificationException("Missing svix headers")
    try:
        sent_at = int(timestamp)
    except ValueError:
        raise WebhookVerificationException("Invalid webhook timestamp") from None
    current = time.time() if now is None else now
    if abs(current - sent_at) > tolerance:
        logger.warning("Rejected webhook %s: timestamp outside tolerance", msg_id)
        raise WebhookVerificationException("Webhook timestamp too old")

    expected = sign_payload(secret, msg_id, timestamp, body)
    for entry in signature_header.split():
        version, _, signature = entry.partition(",")
        if version == "v1" and hmac.compare_digest(signature, expected):
            return
    logger.warning("Rejected webhook %s: no matching signature", msg_id)
    raise WebhookVerificationException()
