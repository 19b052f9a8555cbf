"""In-process store implementations.

Used for single-process deployments without a database and in tests.
"""

import threading
from collections import defaultdict
from contextlib import contextmanager

from checkout.domain import (
    CatalogItem,
    CheckoutAttempt,
    CheckoutSession,
    DomainEffect,
    ItemId,
    ReconciliationEvent,
    TerminalRecord,
    TransactionId,
)
from checkout.domain.errors import ReconciliationConflictError
from checkout.stores.interfaces import (
    CheckoutAttemptStore,
    EffectSink,
    ItemLookup,
    ReconciliationLedger,
)


class InMemoryItemLookup(ItemLookup):
    def __init__(self, items: list[CatalogItem] | None = None) -> None:
        self._items = {item.item_id: item for item in items or []}

    def lookup(self, item_id: ItemId) -> CatalogItem | None:
        return self._items.get(item_id)


class InMemoryCheckoutAttemptStore(CheckoutAttemptStore):
    def __init__(self) -> None:
        self._attempts: dict[TransactionId, CheckoutAttempt] = {}
        self._sessions: dict[TransactionId, list[CheckoutSession]] = defaultdict(list)
        self._lock = threading.Lock()

    def save_attempt(self, attempt: CheckoutAttempt) -> None:
        with self._lock:
            self._attempts[attempt.transaction_id] = attempt

    def get_attempt(self, transaction_id: TransactionId) -> CheckoutAttempt | None:
        return self._attempts.get(transaction_id)

    def append_session(self, session: CheckoutSession) -> None:
        with self._lock:
            self._sessions[session.transaction_id].append(session)

    def session_history(self, transaction_id: TransactionId) -> list[CheckoutSession]:
        with self._lock:
            return list(self._sessions.get(transaction_id, []))


class InMemoryReconciliationLedger(ReconciliationLedger):
    def __init__(self) -> None:
        self._terminal: dict[TransactionId, TerminalRecord] = {}
        self.conflicts: list[tuple[ReconciliationEvent, TerminalRecord]] = []
        self._lock = threading.Lock()
        self._scope = threading.local()

    def get_terminal(self, transaction_id: TransactionId) -> TerminalRecord | None:
        return self._terminal.get(transaction_id)

    def record_terminal(self, record: TerminalRecord) -> bool:
        with self._lock:
            existing = self._terminal.get(record.transaction_id)
            if existing is None:
                self._terminal[record.transaction_id] = record
                written = getattr(self._scope, "written", None)
                if written is not None:
                    written.append(record.transaction_id)
                return True
        if existing.status is record.status:
            return False
        raise ReconciliationConflictError(
            str(record.transaction_id), existing.status, record.status
        )

    @contextmanager
    def atomic(self):
        outer = getattr(self._scope, "written", None)
        written: list[TransactionId] = []
        self._scope.written = written
        try:
            yield
        except BaseException:
            with self._lock:
                for transaction_id in written:
                    self._terminal.pop(transaction_id, None)
            raise
        else:
            if outer is not None:
                outer.extend(written)
        finally:
            self._scope.written = outer

    def record_conflict(self, event: ReconciliationEvent, recorded: TerminalRecord) -> None:
        with self._lock:
            self.conflicts.append((event, recorded))


class CollectingEffectSink(EffectSink):
    """Keeps emitted effects in order."""

    def __init__(self) -> None:
        self.effects: list[DomainEffect] = []

    def emit(self, effect: DomainEffect) -> None:
        self.effects.append(effect)
