"""Domain models for the checkout lifecycle.

These are pure domain objects. Django ORM models are in checkout/models.py
(persistence layer).
"""

from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum

from checkout.domain.value_objects import (
    Email,
    IdempotencyKey,
    ItemId,
    Money,
    TransactionId,
)


class SessionStatus(Enum):
    """Status of a gateway transaction as last observed."""

    PENDING = "pending"
    APPROVED = "approved"
    DECLINED = "declined"
    EXPIRED = "expired"
    UNKNOWN = "unknown"

    @property
    def is_terminal(self) -> bool:
        return self in (SessionStatus.APPROVED, SessionStatus.DECLINED, SessionStatus.EXPIRED)


class Outcome(Enum):
    """Outcome carried by a reconciliation event."""

    APPROVED = "approved"
    DECLINED = "declined"
    PENDING = "pending"

    @property
    def is_terminal(self) -> bool:
        return self is not Outcome.PENDING

    @property
    def status(self) -> SessionStatus:
        return SessionStatus(self.value)


class EffectKind(Enum):
    """Domain effects the surrounding application applies to local state."""

    ACCESS_GRANTED = "access_granted"
    ITEMS_PURCHASED = "items_purchased"
    PAYMENT_FAILED = "payment_failed"
    PAYMENT_PENDING = "payment_pending"


@dataclass(frozen=True)
class Customer:
    email: Email
    name: str


@dataclass(frozen=True)
class AccessIntent:
    """Intent to buy one-time platform access."""

    customer_email: str
    customer_name: str


@dataclass(frozen=True)
class CartIntent:
    """Intent to buy a set of e-books."""

    customer_email: str
    customer_name: str
    item_ids: frozenset[ItemId] = frozenset()


PurchaseIntent = AccessIntent | CartIntent


@dataclass(frozen=True)
class AccessGrant:
    """Sets the platform access flag for a customer."""

    customer_email: str


@dataclass(frozen=True)
class ItemGrant:
    """Marks e-books as purchased for a customer."""

    customer_email: str
    item_ids: frozenset[ItemId]


Grant = AccessGrant | ItemGrant


@dataclass(frozen=True)
class CatalogItem:
    """What the catalog collaborator reports for an item id."""

    item_id: ItemId
    title: str
    price: Money
    already_owned: bool = False


@dataclass(frozen=True)
class LineItem:
    name: str
    quantity: int
    unit_price: Money

    def __post_init__(self) -> None:
        if self.quantity < 1:
            raise ValueError("Line item quantity must be at least 1")

    @property
    def subtotal(self) -> Money:
        return self.unit_price.times(self.quantity)


@dataclass(frozen=True)
class CheckoutRequest:
    """Normalized, provider-agnostic checkout request."""

    idempotency_key: IdempotencyKey
    amount: Money
    description: str
    customer: Customer
    line_items: tuple[LineItem, ...]
    success_url: str
    cancel_url: str
    metadata: dict[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if self.amount.minor_units < 1:
            raise ValueError("Checkout amount must be at least one minor unit")
        total = Money.zero(self.amount.currency)
        for item in self.line_items:
            total = total + item.subtotal
        if total != self.amount:
            raise ValueError("Checkout amount must equal the sum of line items")

    @property
    def currency(self) -> str:
        return self.amount.currency


@dataclass(frozen=True)
class CheckoutSession:
    """Snapshot of a gateway session. Status changes produce a new snapshot."""

    transaction_id: TransactionId
    checkout_url: str
    status: SessionStatus
    created_at: datetime

    def with_status(self, status: SessionStatus, observed_at: datetime) -> "CheckoutSession":
        return replace(self, status=status, created_at=observed_at)


@dataclass(frozen=True)
class CheckoutAttempt:
    """What a gateway session was opened for."""

    transaction_id: TransactionId
    idempotency_key: IdempotencyKey
    customer: Customer
    grant: Grant
    created_at: datetime


@dataclass(frozen=True)
class ReconciliationEvent:
    transaction_id: TransactionId
    outcome: Outcome
    applies_to: Grant
    observed_at: datetime

    @property
    def is_terminal(self) -> bool:
        return self.outcome.is_terminal


@dataclass(frozen=True)
class TerminalRecord:
    """First terminal status recorded for a transaction."""

    transaction_id: TransactionId
    status: SessionStatus
    recorded_at: datetime


@dataclass(frozen=True)
class DomainEffect:
    kind: EffectKind
    transaction_id: TransactionId
    grant: Grant
    observed_at: datetime
