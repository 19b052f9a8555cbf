"""Reconciler - authoritative outcome tracking per transaction.

Two trigger paths feed the same state machine:
- verified webhook notifications (via observe)
- return-URL arrival, which only identifies the transaction to poll (via poll)

Per transaction: UNKNOWN/PENDING -> APPROVED | DECLINED | EXPIRED. The first
terminal status recorded in the ledger wins; later contradicting observations
are kept as conflicts and never applied. Only the reconciler emits effects
that change ownership.
"""

import logging
import threading
import time
import weakref
from collections.abc import Callable
from datetime import datetime, timedelta
from enum import Enum

from django.utils import timezone

from checkout.domain import (
    AccessGrant,
    CheckoutSession,
    DomainEffect,
    EffectKind,
    Outcome,
    ReconciliationEvent,
    SessionStatus,
    TerminalRecord,
    TransactionId,
)
from checkout.domain.errors import (
    GatewayUnavailableError,
    ReconciliationConflictError,
    TransactionNotFoundError,
)
from checkout.services.gateway_client import GatewayClient
from checkout.stores.interfaces import CheckoutAttemptStore, EffectSink, ReconciliationLedger

logger = logging.getLogger(__name__)


class ApplyResult(Enum):
    APPLIED = "applied"
    DUPLICATE = "duplicate"
    CONFLICT = "conflict"
    PENDING = "pending"
    STALE = "stale"
    EXPIRED = "expired"
    IGNORED = "ignored"


class TransactionLocks:
    """One lock per transaction id, dropped once nobody holds a reference."""

    def __init__(self) -> None:
        self._locks: weakref.WeakValueDictionary = weakref.WeakValueDictionary()
        self._guard = threading.Lock()

    def lock_for(self, transaction_id: TransactionId) -> threading.Lock:
        with self._guard:
            lock = self._locks.get(transaction_id)
            if lock is None:
                lock = threading.Lock()
                self._locks[transaction_id] = lock
            return lock


# Shared by every Reconciler in the process, so a webhook and a return-URL
# poll handled by different requests serialize on the same transaction.
TRANSACTION_LOCKS = TransactionLocks()


class Reconciler:
    """Applies observed outcomes exactly once per transaction."""

    def __init__(
        self,
        gateway: GatewayClient,
        attempts: CheckoutAttemptStore,
        ledger: ReconciliationLedger,
        sink: EffectSink,
        poll_interval: float = 2.0,
        poll_timeout: float = 900.0,
        not_found_grace: float = 60.0,
        clock: Callable[[], datetime] = timezone.now,
        sleep: Callable[[float], None] = time.sleep,
        locks: TransactionLocks | None = None,
    ) -> None:
        self._gateway = gateway
        self._attempts = attempts
        self._ledger = ledger
        self._sink = sink
        self._poll_interval = poll_interval
        self._poll_timeout = poll_timeout
        self._not_found_grace = not_found_grace
        self._clock = clock
        self._sleep = sleep
        self._locks = locks or TRANSACTION_LOCKS

    def _lock_for(self, transaction_id: TransactionId) -> threading.Lock:
        return self._locks.lock_for(transaction_id)

    def apply(self, event: ReconciliationEvent) -> ApplyResult:
        """Apply an event. Serialized per transaction; idempotent for repeats."""
        with self._lock_for(event.transaction_id):
            return self._apply_locked(event)

    def _apply_locked(self, event: ReconciliationEvent) -> ApplyResult:
        transaction_id = event.transaction_id

        if not event.is_terminal:
            recorded = self._ledger.get_terminal(transaction_id)
            if recorded is not None:
                logger.warning(
                    "Ignoring %s observation for %s: already %s",
                    event.outcome.value, transaction_id, recorded.status.value,
                )
                return ApplyResult.STALE
            self._emit(EffectKind.PAYMENT_PENDING, event)
            return ApplyResult.PENDING

        record = TerminalRecord(
            transaction_id=transaction_id,
            status=event.outcome.status,
            recorded_at=event.observed_at,
        )
        if event.outcome is Outcome.APPROVED:
            kind = (
                EffectKind.ACCESS_GRANTED
                if isinstance(event.applies_to, AccessGrant)
                else EffectKind.ITEMS_PURCHASED
            )
        else:
            kind = EffectKind.PAYMENT_FAILED

        # The outcome only stays recorded if its effect was applied.
        try:
            with self._ledger.atomic():
                created = self._ledger.record_terminal(record)
                if created:
                    self._emit(kind, event)
        except ReconciliationConflictError as exc:
            recorded = self._ledger.get_terminal(transaction_id)
            logger.warning(
                "Reconciliation conflict for %s: recorded %s, observed %s",
                transaction_id, exc.recorded.value, exc.observed.value,
            )
            self._ledger.record_conflict(event, recorded)
            return ApplyResult.CONFLICT

        if not created:
            logger.info("Duplicate %s event for %s", event.outcome.value, transaction_id)
            return ApplyResult.DUPLICATE

        logger.info("Transaction %s resolved as %s", transaction_id, event.outcome.value)
        return ApplyResult.APPLIED

    def _emit(self, kind: EffectKind, event: ReconciliationEvent) -> None:
        self._sink.emit(
            DomainEffect(
                kind=kind,
                transaction_id=event.transaction_id,
                grant=event.applies_to,
                observed_at=event.observed_at,
            )
        )

    def observe(self, session: CheckoutSession) -> ApplyResult:
        """Record an observed session snapshot and apply what it implies.

        Raises:
            TransactionNotFoundError: If no checkout attempt exists for it.
        """
        attempt = self._attempts.get_attempt(session.transaction_id)
        if attempt is None:
            raise TransactionNotFoundError(str(session.transaction_id))

        if session.status is SessionStatus.EXPIRED:
            return self.expire(session.transaction_id)

        self._attempts.append_session(session)
        if session.status is SessionStatus.UNKNOWN:
            logger.info("Unrecognized status observed for %s", session.transaction_id)
            return ApplyResult.IGNORED

        return self.apply(
            ReconciliationEvent(
                transaction_id=session.transaction_id,
                outcome=Outcome(session.status.value),
                applies_to=attempt.grant,
                observed_at=session.created_at,
            )
        )

    def expire(self, transaction_id: TransactionId) -> ApplyResult:
        """Close a transaction as EXPIRED. Emits no effect."""
        now = self._clock()
        with self._lock_for(transaction_id):
            try:
                created = self._ledger.record_terminal(
                    TerminalRecord(transaction_id, SessionStatus.EXPIRED, now)
                )
            except ReconciliationConflictError as exc:
                logger.info(
                    "Not expiring %s: already %s", transaction_id, exc.recorded.value
                )
                return ApplyResult.STALE
            if not created:
                return ApplyResult.DUPLICATE

            latest = self._attempts.latest_session(transaction_id)
            self._attempts.append_session(
                CheckoutSession(
                    transaction_id=transaction_id,
                    checkout_url=latest.checkout_url if latest else "",
                    status=SessionStatus.EXPIRED,
                    created_at=now,
                )
            )
        logger.info("Transaction %s expired", transaction_id)
        return ApplyResult.EXPIRED

    def current(self, transaction_id: TransactionId) -> CheckoutSession | None:
        """Return the latest snapshot, with the ledger's terminal status taking precedence."""
        latest = self._attempts.latest_session(transaction_id)
        terminal = self._ledger.get_terminal(transaction_id)
        if latest is None or terminal is None or latest.status is terminal.status:
            return latest
        return latest.with_status(terminal.status, terminal.recorded_at)

    def poll(
        self,
        transaction_id: TransactionId,
        deadline: datetime | None = None,
        wait: float | None = None,
    ) -> CheckoutSession:
        """Poll the gateway until the transaction is terminal.

        The transaction expires once ``deadline`` passes (by default the
        attempt's creation time plus the poll timeout), or when the gateway
        still does not know it after the not-found grace period. ``wait``
        bounds how long this call blocks; when it runs out first, the current
        non-terminal snapshot is returned.

        Raises:
            TransactionNotFoundError: If no checkout attempt exists for it.
        """
        attempt = self._attempts.get_attempt(transaction_id)
        if attempt is None:
            raise TransactionNotFoundError(str(transaction_id))
        if deadline is None:
            deadline = attempt.created_at + timedelta(seconds=self._poll_timeout)
        give_up = deadline if wait is None else min(deadline, self._clock() + timedelta(seconds=wait))

        while True:
            if self._ledger.get_terminal(transaction_id) is not None:
                return self.current(transaction_id)

            now = self._clock()
            if now >= deadline:
                self.expire(transaction_id)
                continue

            try:
                session = self._gateway.get_status(transaction_id)
            except TransactionNotFoundError:
                if (now - attempt.created_at).total_seconds() >= self._not_found_grace:
                    logger.info("Gateway does not know %s; expiring", transaction_id)
                    self.expire(transaction_id)
                    continue
            except GatewayUnavailableError as exc:
                logger.warning("Status poll for %s failed: %s", transaction_id, exc.detail)
            else:
                self.observe(session)
                if session.status.is_terminal:
                    continue

            now = self._clock()
            if now >= give_up and give_up < deadline:
                return self.current(transaction_id)
            remaining = (give_up - now).total_seconds()
            self._sleep(max(0.0, min(self._poll_interval, remaining)))
