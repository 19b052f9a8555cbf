"""Payment gateway client.

Adapts the provider's checkout and transaction endpoints to CheckoutSession
and maps transport and provider failures onto the checkout error taxonomy.
One HTTP request per call: retries belong to the caller.
"""

import logging
from abc import ABC, abstractmethod
from collections.abc import Callable
from datetime import datetime
from typing import Any

import httpx
from django.conf import settings
from django.utils import timezone

from checkout.domain import CheckoutRequest, CheckoutSession, SessionStatus, TransactionId
from checkout.domain.errors import (
    ConfigurationMissingError,
    GatewayRejectedError,
    GatewayUnavailableError,
    TransactionNotFoundError,
)

logger = logging.getLogger(__name__)

PROVIDER_STATUSES = {
    "approved": SessionStatus.APPROVED,
    "paid": SessionStatus.APPROVED,
    "completed": SessionStatus.APPROVED,
    "succeeded": SessionStatus.APPROVED,
    "declined": SessionStatus.DECLINED,
    "refused": SessionStatus.DECLINED,
    "failed": SessionStatus.DECLINED,
    "canceled": SessionStatus.DECLINED,
    "cancelled": SessionStatus.DECLINED,
    "refunded": SessionStatus.DECLINED,
    "pending": SessionStatus.PENDING,
    "waiting_payment": SessionStatus.PENDING,
    "processing": SessionStatus.PENDING,
    "created": SessionStatus.PENDING,
    "expired": SessionStatus.EXPIRED,
}


def parse_status(value: Any) -> SessionStatus:
    """Map a provider status string to a SessionStatus (UNKNOWN if unrecognized)."""
    if not isinstance(value, str):
        return SessionStatus.UNKNOWN
    return PROVIDER_STATUSES.get(value.strip().lower(), SessionStatus.UNKNOWN)


class GatewayClient(ABC):
    """Interface to the payment provider."""

    @abstractmethod
    def create_session(self, request: CheckoutRequest) -> CheckoutSession:
        """Open a checkout session. The returned session is always PENDING.

        Raises:
            GatewayUnavailableError: On transport failure, 5xx or 429.
            GatewayRejectedError: When the provider rejects the request.
        """
        ...

    @abstractmethod
    def get_status(self, transaction_id: TransactionId) -> CheckoutSession:
        """Return the provider's current view of a transaction.

        Raises:
            TransactionNotFoundError: If the provider does not know the id.
            GatewayUnavailableError: On transport failure or any other
                non-success response.
        """
        ...

    def close(self) -> None:
        """Release connections held by the client."""


class HttpGatewayClient(GatewayClient):
    """httpx-based client for the provider's REST API."""

    def __init__(
        self,
        api_key: str,
        base_url: str,
        timeout: float = 10.0,
        transport: httpx.BaseTransport | None = None,
        clock: Callable[[], datetime] = timezone.now,
    ) -> None:
        if not api_key:
            raise ConfigurationMissingError("PAYMENT_GATEWAY_API_KEY")
        if not base_url:
            raise ConfigurationMissingError("PAYMENT_GATEWAY_BASE_URL")
        self._clock = clock
        self._client = httpx.Client(
            base_url=base_url.rstrip("/"),
            timeout=httpx.Timeout(timeout, connect=min(timeout, 5.0)),
            headers={"Authorization": f"Bearer {api_key}"},
            transport=transport,
        )

    @classmethod
    def from_settings(cls) -> "HttpGatewayClient":
        return cls(
            api_key=settings.PAYMENT_GATEWAY_API_KEY,
            base_url=settings.PAYMENT_GATEWAY_BASE_URL,
            timeout=settings.PAYMENT_GATEWAY_TIMEOUT,
        )

    def close(self) -> None:
        self._client.close()

    def create_session(self, request: CheckoutRequest) -> CheckoutSession:
        payload = {
            "amount": request.amount.minor_units,
            "currency": request.currency,
            "description": request.description,
            "customer": {
                "email": str(request.customer.email),
                "name": request.customer.name,
            },
            "items": [
                {
                    "name": item.name,
                    "quantity": item.quantity,
                    "price": item.unit_price.minor_units,
                }
                for item in request.line_items
            ],
            "metadata": dict(request.metadata),
            "success_url": request.success_url,
            "cancel_url": request.cancel_url,
        }
        response = self._send(
            "POST",
            "/checkout",
            json=payload,
            headers={"Idempotency-Key": str(request.idempotency_key)},
        )
        if response.status_code >= 400:
            raise GatewayRejectedError(response.status_code, response.text[:500])

        body = self._json(response)
        checkout_url = body.get("checkout_url") or body.get("url")
        transaction_id = body.get("id") or body.get("transaction_id")
        if not checkout_url or not transaction_id:
            raise GatewayUnavailableError("checkout response missing url or transaction id")

        logger.info(
            "Checkout session %s created (provider status %r)",
            transaction_id,
            body.get("status"),
        )
        return CheckoutSession(
            transaction_id=TransactionId(str(transaction_id)),
            checkout_url=str(checkout_url),
            status=SessionStatus.PENDING,
            created_at=self._clock(),
        )

    def get_status(self, transaction_id: TransactionId) -> CheckoutSession:
        response = self._send("GET", f"/transactions/{transaction_id}")
        if response.status_code == 404:
            raise TransactionNotFoundError(str(transaction_id))
        if response.status_code >= 400:
            # Status lookups fail only as not found or unavailable.
            logger.error(
                "Gateway refused status lookup for %s: HTTP %s",
                transaction_id, response.status_code,
            )
            raise GatewayUnavailableError(f"HTTP {response.status_code}")

        body = self._json(response)
        data = body.get("data") if isinstance(body.get("data"), dict) else body
        return CheckoutSession(
            transaction_id=transaction_id,
            checkout_url=str(data.get("checkout_url") or data.get("url") or ""),
            status=parse_status(data.get("status")),
            created_at=self._clock(),
        )

    def _send(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        try:
            response = self._client.request(method, path, **kwargs)
        except httpx.TimeoutException as exc:
            logger.warning("Gateway %s %s timed out: %s", method, path, exc)
            raise GatewayUnavailableError("timeout") from exc
        except httpx.HTTPError as exc:
            logger.warning("Gateway %s %s failed: %s", method, path, exc)
            raise GatewayUnavailableError(str(exc)) from exc

        if response.status_code >= 500 or response.status_code == 429:
            logger.warning("Gateway %s %s returned %s", method, path, response.status_code)
            raise GatewayUnavailableError(f"HTTP {response.status_code}")
        return response

    @staticmethod
    def _json(response: httpx.Response) -> dict[str, Any]:
        try:
            body = response.json()
        except ValueError as exc:
            raise GatewayUnavailableError("response body is not JSON") from exc
        if not isinstance(body, dict):
            raise GatewayUnavailableError("response body is not a JSON object")
        return body
