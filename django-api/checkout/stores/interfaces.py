"""Store interfaces (repository pattern).

Stores must be swappable and return domain models. The checkout core owns
none of the durable state: attempts, snapshots and the terminal ledger live
behind these interfaces, and ownership changes leave through the EffectSink.
"""

from abc import ABC, abstractmethod
from contextlib import AbstractContextManager

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


class ItemLookup(ABC):
    """Read-only catalog view for one customer."""

    @abstractmethod
    def lookup(self, item_id: ItemId) -> CatalogItem | None:
        """Return the item with its price and ownership flag, or None if unknown."""
        ...


class CheckoutAttemptStore(ABC):
    """Checkout attempts and the append-only history of session snapshots."""

    @abstractmethod
    def save_attempt(self, attempt: CheckoutAttempt) -> None:
        """Record what a gateway session was opened for."""
        ...

    @abstractmethod
    def get_attempt(self, transaction_id: TransactionId) -> CheckoutAttempt | None:
        """Return the attempt for a transaction, or None if unknown."""
        ...

    @abstractmethod
    def append_session(self, session: CheckoutSession) -> None:
        """Append a session snapshot. Earlier snapshots are never modified."""
        ...

    @abstractmethod
    def session_history(self, transaction_id: TransactionId) -> list[CheckoutSession]:
        """Return all snapshots for a transaction, oldest first."""
        ...

    def latest_session(self, transaction_id: TransactionId) -> CheckoutSession | None:
        history = self.session_history(transaction_id)
        return history[-1] if history else None


class ReconciliationLedger(ABC):
    """First-terminal-write-wins record of transaction outcomes."""

    @abstractmethod
    def get_terminal(self, transaction_id: TransactionId) -> TerminalRecord | None:
        """Return the terminal record for a transaction, or None."""
        ...

    @abstractmethod
    def record_terminal(self, record: TerminalRecord) -> bool:
        """Record a terminal status.

        Returns True when newly recorded and False when the same status was
        already recorded.

        Raises:
            ReconciliationConflictError: If a different status is recorded.
        """
        ...

    @abstractmethod
    def atomic(self) -> AbstractContextManager:
        """Scope in which terminal records are discarded if the block raises.

        The reconciler records an outcome and emits its effect inside one
        scope, so a failing effect leaves the transaction unrecorded and a
        redelivered notification applies it again.
        """
        ...

    @abstractmethod
    def record_conflict(self, event: ReconciliationEvent, recorded: TerminalRecord) -> None:
        """Keep a contradicting observation for manual review."""
        ...


class EffectSink(ABC):
    """Receives domain effects and applies them to application state."""

    @abstractmethod
    def emit(self, effect: DomainEffect) -> None:
        ...
