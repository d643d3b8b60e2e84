"""Svix webhook signature verification."""

import base64

import pytest

from app.domain.exceptions import WebhookVerificationException
from app.infrastructure.security.webhooks import sign_payload, verify_svix_signature

SECRET = "whsec_" + base64.b64encode(b"signing-key-for-tests").decode()
BODY = b'{"type":"user.created","data":{"id":"user_1"}}'
TS = "1792000000"


def _verify(signature_header: str | None, body: bytes = BODY, now: float = 1792000010):
    verify_svix_signature(SECRET, body, "msg_1", TS, signature_header, now=now)


def test_valid_signature():
    _verify(f"v1,{sign_payload(SECRET, 'msg_1', TS, BODY)}")


def test_any_matching_entry_is_accepted():
    good = sign_payload(SECRET, "msg_1", TS, BODY)
    _verify(f"v1,bm90LXRoaXMtb25l v1,{good}")


def test_tampered_body_is_rejected():
    signature = sign_payload(SECRET, "msg_1", TS, BODY)
    with pytest.raises(WebhookVerificationException):
        _verify(f"v1,{signature}", body=BODY + b" ")


def test_stale_timestamp_is_rejected():
    signature = sign_payload(SECRET, "msg_1", TS, BODY)
    with pytest.raises(WebhookVerificationException, match="too old"):
        _verify(f"v1,{signature}", now=1792000000 + 301)


def test_missing_headers_are_rejected():
    with pytest.raises(WebhookVerificationException, match="Missing"):
        _verify(None)


def test_other_versions_are_ignored():
    signature = sign_payload(SECRET, "msg_1", TS, BODY)
    with pytest.raises(WebhookVerificationException):
        _verify(f"v2,{signature}")
