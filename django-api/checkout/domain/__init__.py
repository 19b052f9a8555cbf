from checkout.domain.models import (
    AccessGrant,
    AccessIntent,
    CartIntent,
    CatalogItem,
    CheckoutAttempt,
    CheckoutRequest,
    CheckoutSession,
    Customer,
    DomainEffect,
    EffectKind,
    ItemGrant,
    LineItem,
    Outcome,
    ReconciliationEvent,
    SessionStatus,
    TerminalRecord,
)
from checkout.domain.value_objects import Email, IdempotencyKey, ItemId, Money, TransactionId

__all__ = [
    "AccessGrant",
    "AccessIntent",
    "CartIntent",
    "CatalogItem",
    "CheckoutAttempt",
    "CheckoutRequest",
    "CheckoutSession",
    "Customer",
    "DomainEffect",
    "EffectKind",
    "ItemGrant",
    "LineItem",
    "Outcome",
    "ReconciliationEvent",
    "SessionStatus",
    "TerminalRecord",
    "Email",
    "IdempotencyKey",
    "ItemId",
    "Money",
    "TransactionId",
]
