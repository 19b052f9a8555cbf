"""Pytest configuration and shared fixtures."""

from datetime import datetime, timedelta, timezone

import pytest
from rest_framework.test import APIClient

from checkout.domain import (
    CatalogItem,
    CheckoutRequest,
    CheckoutSession,
    ItemId,
    Money,
    SessionStatus,
    TransactionId,
)
from checkout.domain.errors import TransactionNotFoundError
from checkout.services.gateway_client import GatewayClient
from checkout.services.reconciler import Reconciler
from checkout.services.session_builder import SessionBuilder
from checkout.stores.memory_store import (
    CollectingEffectSink,
    InMemoryCheckoutAttemptStore,
    InMemoryItemLookup,
    InMemoryReconciliationLedger,
)


class FakeClock:
    """Manual clock; sleeping advances it."""

    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or datetime(2025, 1, 1, 12, 0, tzinfo=timezone.utc)
        self.sleeps: list[float] = []

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += timedelta(seconds=seconds)

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.advance(seconds)


class FakeGateway(GatewayClient):
    """Scripted gateway.

    ``create_failures`` are raised by successive create_session calls before
    one succeeds. ``statuses`` maps transaction ids to a list of statuses (or
    exceptions) returned by successive get_status calls; the last one repeats.
    """

    def __init__(self, clock: FakeClock) -> None:
        self._clock = clock
        self.create_failures: list[Exception] = []
        self.created: list[CheckoutRequest] = []
        self.statuses: dict[str, list] = {}
        self.status_calls: list[str] = []
        self.closed = False
        self._counter = 0

    def create_session(self, request: CheckoutRequest) -> CheckoutSession:
        self.created.append(request)
        if self.create_failures:
            raise self.create_failures.pop(0)
        self._counter += 1
        transaction_id = f"tx_{self._counter}"
        return CheckoutSession(
            transaction_id=TransactionId(transaction_id),
            checkout_url=f"https://pay.example.com/c/{transaction_id}",
            status=SessionStatus.PENDING,
            created_at=self._clock(),
        )

    def get_status(self, transaction_id: TransactionId) -> CheckoutSession:
        self.status_calls.append(str(transaction_id))
        script = self.statuses.get(str(transaction_id))
        if not script:
            raise TransactionNotFoundError(str(transaction_id))
        outcome = script.pop(0) if len(script) > 1 else script[0]
        if isinstance(outcome, Exception):
            raise outcome
        return CheckoutSession(
            transaction_id=transaction_id,
            checkout_url=f"https://pay.example.com/c/{transaction_id}",
            status=outcome,
            created_at=self._clock(),
        )

    def close(self) -> None:
        self.closed = True


@pytest.fixture
def api_client() -> APIClient:
    return APIClient()


@pytest.fixture(autouse=True)
def clear_cache():
    from django.core.cache import cache
    cache.clear()
    yield
    cache.clear()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def gateway(clock: FakeClock) -> FakeGateway:
    return FakeGateway(clock)


@pytest.fixture
def attempts() -> InMemoryCheckoutAttemptStore:
    return InMemoryCheckoutAttemptStore()


@pytest.fixture
def ledger() -> InMemoryReconciliationLedger:
    return InMemoryReconciliationLedger()


@pytest.fixture
def sink() -> CollectingEffectSink:
    return CollectingEffectSink()


@pytest.fixture
def reconciler(gateway, attempts, ledger, sink, clock) -> Reconciler:
    return Reconciler(
        gateway=gateway,
        attempts=attempts,
        ledger=ledger,
        sink=sink,
        poll_interval=2.0,
        poll_timeout=30.0,
        not_found_grace=10.0,
        clock=clock,
        sleep=clock.sleep,
    )


@pytest.fixture
def builder() -> SessionBuilder:
    return SessionBuilder(
        access_price=Money(1999, "BRL"),
        success_url="https://shop.example.com/success",
        cancel_url="https://shop.example.com/",
    )


@pytest.fixture
def catalog() -> InMemoryItemLookup:
    return InMemoryItemLookup(
        [
            CatalogItem(ItemId(7), "Clean Architecture", Money(499, "BRL")),
            CatalogItem(ItemId(9), "Domain-Driven Design", Money(499, "BRL")),
            CatalogItem(ItemId(11), "Refactoring", Money(499, "BRL"), already_owned=True),
        ]
    )
