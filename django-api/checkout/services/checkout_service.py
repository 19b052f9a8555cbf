"""Checkout service - orchestration of the checkout lifecycle.

Services:
- Depend only on interfaces (stores, gateway)
- Validate intents before any network call
- Perform orchestration and error mapping
- Return domain models or raise domain errors
"""

import json
import logging
import time
from collections.abc import Callable
from datetime import datetime

from django.conf import settings
from django.utils import timezone

from checkout.domain import (
    AccessGrant,
    CartIntent,
    CheckoutAttempt,
    CheckoutSession,
    ItemGrant,
    Money,
    TransactionId,
)
from checkout.domain.errors import GatewayUnavailableError, InvalidWebhookError, TransactionNotFoundError
from checkout.domain.models import PurchaseIntent
from checkout.services.gateway_client import GatewayClient, HttpGatewayClient, parse_status
from checkout.services.reconciler import ApplyResult, Reconciler
from checkout.services.retry import retry
from checkout.services.session_builder import SessionBuilder
from checkout.services.webhook_verifier import WebhookVerifier
from checkout.stores.interfaces import CheckoutAttemptStore, ItemLookup

logger = logging.getLogger(__name__)


class CheckoutService:
    """Service for starting and reconciling checkouts."""

    def __init__(
        self,
        builder: SessionBuilder,
        gateway: GatewayClient,
        reconciler: Reconciler,
        attempts: CheckoutAttemptStore,
        verifier: WebhookVerifier,
        create_attempts: int = 3,
        retry_delay: float = 0.5,
        return_poll_timeout: float = 10.0,
        clock: Callable[[], datetime] = timezone.now,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._builder = builder
        self._gateway = gateway
        self._reconciler = reconciler
        self._attempts = attempts
        self._verifier = verifier
        self._return_poll_timeout = return_poll_timeout
        self._clock = clock
        self._create_session = retry(
            max_attempts=create_attempts,
            delay=retry_delay,
            exceptions=(GatewayUnavailableError,),
            sleep=sleep,
        )(gateway.create_session)

    def close(self) -> None:
        self._gateway.close()

    def __enter__(self) -> "CheckoutService":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def start_checkout(self, intent: PurchaseIntent, catalog: ItemLookup) -> CheckoutSession:
        """Build the request and open a gateway session for it.

        Transport failures are retried with the same request, so the provider
        sees one idempotency key per attempt.

        Raises:
            InvalidIntentError: Before any network call, for a bad intent.
            GatewayUnavailableError: If every attempt failed in transport.
            GatewayRejectedError: If the provider refused the request.
        """
        request = self._builder.build(intent, catalog)
        session = self._create_session(request)

        customer_email = str(request.customer.email)
        if isinstance(intent, CartIntent):
            grant = ItemGrant(customer_email=customer_email, item_ids=frozenset(intent.item_ids))
        else:
            grant = AccessGrant(customer_email=customer_email)

        self._attempts.save_attempt(
            CheckoutAttempt(
                transaction_id=session.transaction_id,
                idempotency_key=request.idempotency_key,
                customer=request.customer,
                grant=grant,
                created_at=session.created_at,
            )
        )
        self._attempts.append_session(session)
        logger.info(
            "Checkout %s started for %s (%s %s)",
            session.transaction_id, customer_email, request.amount, request.currency,
        )
        return session

    def handle_return(self, transaction_id: str) -> CheckoutSession:
        """Verify a transaction after the customer returns from the gateway.

        The return URL only identifies which transaction to check.

        Raises:
            TransactionNotFoundError: If no checkout attempt exists for it.
        """
        try:
            txid = TransactionId(transaction_id)
        except ValueError:
            raise TransactionNotFoundError(transaction_id or "")
        return self._reconciler.poll(txid, wait=self._return_poll_timeout)

    def handle_webhook(self, raw_payload: bytes, signature: str | None) -> ApplyResult:
        """Apply a signed provider notification.

        Raises:
            InvalidWebhookError: If the signature does not verify or the
                payload lacks a transaction id or status.
            TransactionNotFoundError: If no checkout attempt exists for it.
        """
        if not self._verifier.verify(raw_payload, signature):
            logger.warning("Discarding webhook with invalid signature")
            raise InvalidWebhookError("signature")

        try:
            body = json.loads(raw_payload)
        except ValueError:
            raise InvalidWebhookError("payload")
        if not isinstance(body, dict):
            raise InvalidWebhookError("payload")
        data = body.get("data") if isinstance(body.get("data"), dict) else body

        transaction_id = data.get("transaction_id") or data.get("id")
        if not transaction_id or "status" not in data:
            raise InvalidWebhookError("payload")
        try:
            txid = TransactionId(str(transaction_id))
        except ValueError:
            raise InvalidWebhookError("payload")

        latest = self._attempts.latest_session(txid)
        if latest is None:
            raise TransactionNotFoundError(str(txid))
        observed = latest.with_status(parse_status(data.get("status")), self._clock())
        return self._reconciler.observe(observed)


def checkout_service_from_settings() -> CheckoutService:
    """Wire the service with the Django stores and the configured gateway.

    Raises:
        ConfigurationMissingError: If the gateway API key or URL is missing.
    """
    from checkout.signals import SignalEffectSink
    from checkout.stores.django_store import DjangoCheckoutAttemptStore, DjangoReconciliationLedger

    gateway = HttpGatewayClient.from_settings()
    attempts = DjangoCheckoutAttemptStore()
    reconciler = Reconciler(
        gateway=gateway,
        attempts=attempts,
        ledger=DjangoReconciliationLedger(),
        sink=SignalEffectSink(),
        poll_interval=settings.CHECKOUT_POLL_INTERVAL,
        poll_timeout=settings.CHECKOUT_POLL_TIMEOUT,
        not_found_grace=settings.CHECKOUT_NOT_FOUND_GRACE,
    )
    builder = SessionBuilder(
        access_price=Money(settings.CHECKOUT_ACCESS_PRICE, settings.CHECKOUT_CURRENCY),
        success_url=settings.CHECKOUT_SUCCESS_URL,
        cancel_url=settings.CHECKOUT_CANCEL_URL,
    )
    return CheckoutService(
        builder=builder,
        gateway=gateway,
        reconciler=reconciler,
        attempts=attempts,
        verifier=WebhookVerifier.from_settings(),
        create_attempts=settings.CHECKOUT_CREATE_ATTEMPTS,
        retry_delay=settings.CHECKOUT_RETRY_DELAY,
        return_poll_timeout=settings.CHECKOUT_RETURN_POLL_TIMEOUT,
    )
