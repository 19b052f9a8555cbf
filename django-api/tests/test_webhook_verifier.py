"""Unit tests for WebhookVerifier.

Run with: pytest tests/test_webhook_verifier.py -v
"""

import pytest

from checkout.services.webhook_verifier import WebhookVerifier, sign_payload

SECRET = "whsec_test"
PAYLOAD = b'{"transaction_id": "tx_1", "status": "approved"}'


class TestWebhookVerifier:
    def test_accepts_valid_signature(self):
        assert WebhookVerifier(SECRET).verify(PAYLOAD, sign_payload(PAYLOAD, SECRET))

    def test_accepts_prefixed_signature(self):
        signature = "sha256=" + sign_payload(PAYLOAD, SECRET)
        assert WebhookVerifier(SECRET).verify(PAYLOAD, signature)

    def test_rejects_single_bit_flip(self):
        signature = sign_payload(PAYLOAD, SECRET)
        tampered = bytearray(PAYLOAD)
        tampered[5] ^= 0x01
        assert not WebhookVerifier(SECRET).verify(bytes(tampered), signature)

    def test_rejects_reserialized_payload(self):
        """Signatures cover the raw bytes, not the parsed JSON."""
        signature = sign_payload(PAYLOAD, SECRET)
        reserialized = b'{"transaction_id":"tx_1","status":"approved"}'
        assert not WebhookVerifier(SECRET).verify(reserialized, signature)

    def test_rejects_wrong_secret(self):
        signature = sign_payload(PAYLOAD, "other")
        assert not WebhookVerifier(SECRET).verify(PAYLOAD, signature)

    @pytest.mark.parametrize("secret", ["", None])
    def test_fails_closed_without_secret(self, secret):
        verifier = WebhookVerifier(secret)
        assert not verifier.configured
        assert not verifier.verify(PAYLOAD, sign_payload(PAYLOAD, ""))

    @pytest.mark.parametrize("header", ["", None, "not-hex", "sha256=", "ñ" * 64])
    def test_rejects_bad_headers_without_raising(self, header):
        assert not WebhookVerifier(SECRET).verify(PAYLOAD, header)

    def test_from_settings(self, settings):
        settings.PAYMENT_GATEWAY_WEBHOOK_SECRET = SECRET
        verifier = WebhookVerifier.from_settings()
        assert verifier.verify(PAYLOAD, sign_payload(PAYLOAD, SECRET))
