"""Webhook signature verification.

The signature is an HMAC-SHA256 over the raw request body, hex encoded,
optionally prefixed with ``sha256=``. Verification fails closed.
"""

import hashlib
import hmac
import logging

from django.conf import settings

logger = logging.getLogger(__name__)

SIGNATURE_HEADER = "X-Signature"
_PREFIX = "sha256="


def sign_payload(raw_payload: bytes, secret: str) -> str:
    """Return the hex signature the provider sends for a payload."""
    return hmac.new(secret.encode(), raw_payload, hashlib.sha256).hexdigest()


class WebhookVerifier:
    """Checks that a notification was signed with the shared secret."""

    def __init__(self, secret: str | None) -> None:
        self._secret = secret or ""

    @classmethod
    def from_settings(cls) -> "WebhookVerifier":
        return cls(settings.PAYMENT_GATEWAY_WEBHOOK_SECRET)

    @property
    def configured(self) -> bool:
        return bool(self._secret)

    def verify(self, raw_payload: bytes, signature_header: str | None) -> bool:
        """Return True only if the signature matches the raw payload bytes."""
        if not self._secret:
            logger.error("Webhook secret is not configured; refusing notification")
            return False
        if not signature_header or not isinstance(raw_payload, (bytes, bytearray)):
            return False

        provided = signature_header.strip()
        if provided.lower().startswith(_PREFIX):
            provided = provided[len(_PREFIX):]
        try:
            provided_bytes = provided.lower().encode("ascii")
        except UnicodeEncodeError:
            return False

        expected = sign_payload(bytes(raw_payload), self._secret).encode("ascii")
        return hmac.compare_digest(expected, provided_bytes)
