"""Integration tests for the checkout HTTP API.

The gateway is an httpx.MockTransport; everything else is the real stack.
Run with: pytest tests/test_checkout_api.py -v
"""

import json

import httpx
import pytest
from rest_framework.test import APIClient

from checkout import models as checkout_models
from checkout.services.gateway_client import HttpGatewayClient
from checkout.services.webhook_verifier import sign_payload
from ebooks.models import CartItem, Customer, Ebook, Purchase

SECRET = "whsec_test"


class MockProvider:
    """Minimal in-memory payment provider."""

    def __init__(self) -> None:
        self.checkouts: list[dict] = []
        self.idempotency_keys: list[str] = []
        self.statuses: dict[str, str] = {}
        self.fail_next = 0
        self.status_error: int | None = None

    def __call__(self, request: httpx.Request) -> httpx.Response:
        if self.fail_next:
            self.fail_next -= 1
            return httpx.Response(503)
        if request.method == "POST" and request.url.path.endswith("/checkout"):
            self.checkouts.append(json.loads(request.content))
            self.idempotency_keys.append(request.headers["Idempotency-Key"])
            transaction_id = f"tx_{len(self.checkouts)}"
            self.statuses[transaction_id] = "waiting_payment"
            return httpx.Response(
                201,
                json={
                    "checkout_url": f"https://pay.example.com/c/{transaction_id}",
                    "id": transaction_id,
                    "status": "waiting_payment",
                },
            )
        if self.status_error:
            return httpx.Response(self.status_error)
        transaction_id = request.url.path.rsplit("/", 1)[-1]
        if transaction_id not in self.statuses:
            return httpx.Response(404)
        return httpx.Response(200, json={"id": transaction_id, "status": self.statuses[transaction_id]})


@pytest.fixture
def provider(settings, monkeypatch) -> MockProvider:
    provider = MockProvider()
    settings.PAYMENT_GATEWAY_API_KEY = "sk_test"
    settings.PAYMENT_GATEWAY_WEBHOOK_SECRET = SECRET
    settings.CHECKOUT_RETURN_POLL_TIMEOUT = 0.0
    settings.CHECKOUT_RETRY_DELAY = 0.0

    def from_settings(cls):
        return cls(
            api_key=settings.PAYMENT_GATEWAY_API_KEY,
            base_url="https://gateway.example.com/v1",
            transport=httpx.MockTransport(provider),
        )

    monkeypatch.setattr(HttpGatewayClient, "from_settings", classmethod(from_settings))
    return provider


@pytest.fixture
def ebooks() -> list[Ebook]:
    return [
        Ebook.objects.create(title=f"Book {n}", author="Author", category="Tech", pages=100, price=499)
        for n in range(1, 4)
    ]


def post_webhook(client: APIClient, transaction_id: str, status: str, secret: str = SECRET):
    payload = json.dumps({"data": {"id": transaction_id, "status": status}}).encode()
    return client.generic(
        "POST",
        "/api/checkout/webhook",
        payload,
        content_type="application/json",
        HTTP_X_SIGNATURE=sign_payload(payload, secret),
    )


@pytest.mark.django_db
class TestAccessCheckout:
    """Tests for POST /api/checkout/access"""

    def test_creates_pending_session(self, api_client, provider):
        response = api_client.post(
            "/api/checkout/access", {"email": "a@b.com", "name": "A"}, format="json"
        )

        assert response.status_code == 201
        assert response.data["status"] == "pending"
        assert response.data["checkout_url"] == "https://pay.example.com/c/tx_1"
        assert provider.checkouts[0]["amount"] == 1999
        assert checkout_models.CheckoutAttempt.objects.get().purchase_type == "access"

    def test_invalid_email_is_400_without_gateway_call(self, api_client, provider):
        response = api_client.post(
            "/api/checkout/access", {"email": "nope", "name": "A"}, format="json"
        )

        assert response.status_code == 400
        assert response.data["error"]["code"] == "INVALID_INTENT"
        assert response.data["error"]["reason"] == "INVALID_EMAIL"
        assert provider.checkouts == []

    def test_missing_api_key_is_503(self, api_client, settings):
        settings.PAYMENT_GATEWAY_API_KEY = ""
        response = api_client.post(
            "/api/checkout/access", {"email": "a@b.com", "name": "A"}, format="json"
        )
        assert response.status_code == 503
        assert response.data["error"]["code"] == "CONFIGURATION_MISSING"
        assert response.data["error"]["retryable"] is False

    def test_transient_failure_is_retried_with_same_key(self, api_client, provider):
        provider.fail_next = 1
        response = api_client.post(
            "/api/checkout/access", {"email": "a@b.com", "name": "A"}, format="json"
        )
        assert response.status_code == 201
        assert len(provider.checkouts) == 1

    def test_gateway_down_is_503_retryable(self, api_client, provider):
        provider.fail_next = 10
        response = api_client.post(
            "/api/checkout/access", {"email": "a@b.com", "name": "A"}, format="json"
        )
        assert response.status_code == 503
        assert response.data["error"]["retryable"] is True

    def test_approved_webhook_grants_access_once(self, api_client, provider):
        api_client.post("/api/checkout/access", {"email": "a@b.com", "name": "A"}, format="json")

        first = post_webhook(api_client, "tx_1", "approved")
        second = post_webhook(api_client, "tx_1", "approved")

        assert first.data == {"result": "applied"}
        assert second.data == {"result": "duplicate"}
        assert Customer.objects.get(email="a@b.com").has_access is True


@pytest.mark.django_db
class TestCartCheckout:
    """Tests for POST /api/checkout/cart"""

    def test_declined_leaves_cart_unchanged(self, api_client, provider, ebooks):
        customer = Customer.objects.create(email="a@b.com", has_access=True)
        for ebook in ebooks[:2]:
            CartItem.objects.create(customer=customer, ebook=ebook)

        response = api_client.post(
            "/api/checkout/cart",
            {"email": "a@b.com", "name": "A", "item_ids": [ebooks[0].id, ebooks[1].id]},
            format="json",
        )
        assert response.status_code == 201
        assert provider.checkouts[0]["amount"] == 998

        post_webhook(api_client, "tx_1", "declined")

        assert Purchase.objects.count() == 0
        assert CartItem.objects.filter(customer=customer).count() == 2

    def test_approved_marks_purchased_and_clears_cart(self, api_client, provider, ebooks):
        customer = Customer.objects.create(email="a@b.com", has_access=True)
        CartItem.objects.create(customer=customer, ebook=ebooks[0])
        CartItem.objects.create(customer=customer, ebook=ebooks[2])

        api_client.post(
            "/api/checkout/cart",
            {"email": "a@b.com", "name": "A", "item_ids": [ebooks[0].id]},
            format="json",
        )
        post_webhook(api_client, "tx_1", "paid")

        assert list(Purchase.objects.values_list("ebook_id", flat=True)) == [ebooks[0].id]
        assert list(CartItem.objects.values_list("ebook_id", flat=True)) == [ebooks[2].id]

    def test_already_owned_is_rejected(self, api_client, provider, ebooks):
        customer = Customer.objects.create(email="a@b.com", has_access=True)
        Purchase.objects.create(customer=customer, ebook=ebooks[0], transaction_id="tx_old")

        response = api_client.post(
            "/api/checkout/cart",
            {"email": "a@b.com", "name": "A", "item_ids": [ebooks[0].id]},
            format="json",
        )

        assert response.status_code == 400
        assert response.data["error"]["reason"] == "ALREADY_OWNED"

    def test_unknown_item_is_rejected(self, api_client, provider):
        response = api_client.post(
            "/api/checkout/cart",
            {"email": "a@b.com", "name": "A", "item_ids": [999]},
            format="json",
        )
        assert response.status_code == 400
        assert response.data["error"]["reason"] == "UNKNOWN_ITEM"

    def test_malformed_item_ids(self, api_client, provider):
        response = api_client.post(
            "/api/checkout/cart",
            {"email": "a@b.com", "name": "A", "item_ids": ["x"]},
            format="json",
        )
        assert response.status_code == 400
        assert response.data["error"]["code"] == "INVALID_INPUT"


@pytest.mark.django_db
class TestReturn:
    """Tests for GET /api/checkout/return"""

    def test_return_verifies_with_gateway(self, api_client, provider):
        api_client.post("/api/checkout/access", {"email": "a@b.com", "name": "A"}, format="json")
        provider.statuses["tx_1"] = "approved"

        response = api_client.get("/api/checkout/return", {"transaction_id": "tx_1"})

        assert response.status_code == 200
        assert response.data["status"] == "approved"
        assert response.data["confirmed"] is True
        assert Customer.objects.get(email="a@b.com").has_access is True

    def test_redirect_alone_is_not_proof_of_payment(self, api_client, provider):
        api_client.post("/api/checkout/access", {"email": "a@b.com", "name": "A"}, format="json")

        response = api_client.get("/api/checkout/return", {"transaction_id": "tx_1"})

        assert response.data["confirmed"] is False
        assert not Customer.objects.filter(email="a@b.com", has_access=True).exists()

    def test_unknown_transaction_is_404(self, api_client, provider):
        response = api_client.get("/api/checkout/return", {"transaction_id": "tx_forged"})
        assert response.status_code == 404

    def test_refused_status_lookup_returns_pending(self, api_client, provider):
        api_client.post("/api/checkout/access", {"email": "a@b.com", "name": "A"}, format="json")
        provider.status_error = 403

        response = api_client.get("/api/checkout/return", {"transaction_id": "tx_1"})

        assert response.status_code == 200
        assert response.data["status"] == "pending"
        assert response.data["confirmed"] is False

    def test_gateway_client_is_closed_after_each_request(self, api_client, provider, monkeypatch):
        closed = []
        monkeypatch.setattr(HttpGatewayClient, "close", lambda client: closed.append(client))

        api_client.post("/api/checkout/access", {"email": "a@b.com", "name": "A"}, format="json")
        api_client.get("/api/checkout/return", {"transaction_id": "tx_1"})
        post_webhook(api_client, "tx_1", "approved")

        assert len(closed) == 3
        assert len(set(map(id, closed))) == 3


@pytest.mark.django_db
class TestWebhook:
    """Tests for POST /api/checkout/webhook"""

    def test_bad_signature_is_400_and_ignored(self, api_client, provider):
        api_client.post("/api/checkout/access", {"email": "a@b.com", "name": "A"}, format="json")

        response = post_webhook(api_client, "tx_1", "approved", secret="forged")

        assert response.status_code == 400
        assert response.data["error"]["code"] == "INVALID_WEBHOOK"
        assert not Customer.objects.filter(has_access=True).exists()

    def test_conflicting_outcome_is_409_and_recorded(self, api_client, provider):
        api_client.post("/api/checkout/access", {"email": "a@b.com", "name": "A"}, format="json")
        post_webhook(api_client, "tx_1", "approved")

        response = post_webhook(api_client, "tx_1", "refunded")

        assert response.status_code == 409
        conflict = checkout_models.ReconciliationConflict.objects.get()
        assert (conflict.recorded_status, conflict.observed_status) == ("approved", "declined")
        assert Customer.objects.get(email="a@b.com").has_access is True

    def test_snapshots_are_append_only(self, api_client, provider):
        api_client.post("/api/checkout/access", {"email": "a@b.com", "name": "A"}, format="json")
        post_webhook(api_client, "tx_1", "pending")
        post_webhook(api_client, "tx_1", "approved")

        statuses = list(
            checkout_models.SessionSnapshot.objects.filter(transaction_id="tx_1").values_list(
                "status", flat=True
            )
        )
        assert statuses == ["pending", "pending", "approved"]
