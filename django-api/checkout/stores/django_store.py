"""Django ORM implementations of the checkout stores."""

from django.db import IntegrityError, transaction

from checkout import models
from checkout.domain import (
    AccessGrant,
    CheckoutAttempt,
    CheckoutSession,
    Customer,
    Email,
    IdempotencyKey,
    ItemGrant,
    ItemId,
    ReconciliationEvent,
    SessionStatus,
    TerminalRecord,
    TransactionId,
)
from checkout.domain.errors import ReconciliationConflictError
from checkout.stores.interfaces import CheckoutAttemptStore, ReconciliationLedger


class DjangoCheckoutAttemptStore(CheckoutAttemptStore):
    """Database-backed attempts and session snapshots."""

    def save_attempt(self, attempt: CheckoutAttempt) -> None:
        grant = attempt.grant
        if isinstance(grant, ItemGrant):
            purchase_type = models.CheckoutAttempt.PurchaseType.EBOOKS
            item_ids = sorted(item_id.value for item_id in grant.item_ids)
        else:
            purchase_type = models.CheckoutAttempt.PurchaseType.ACCESS
            item_ids = []
        models.CheckoutAttempt.objects.update_or_create(
            transaction_id=str(attempt.transaction_id),
            defaults={
                "idempotency_key": str(attempt.idempotency_key),
                "customer_email": str(attempt.customer.email),
                "customer_name": attempt.customer.name,
                "purchase_type": purchase_type,
                "item_ids": item_ids,
                "created_at": attempt.created_at,
            },
        )

    def get_attempt(self, transaction_id: TransactionId) -> CheckoutAttempt | None:
        record = models.CheckoutAttempt.objects.filter(
            transaction_id=str(transaction_id)
        ).first()
        if record is None:
            return None
        if record.purchase_type == models.CheckoutAttempt.PurchaseType.EBOOKS:
            grant = ItemGrant(
                customer_email=record.customer_email,
                item_ids=frozenset(ItemId(value) for value in record.item_ids),
            )
        else:
            grant = AccessGrant(customer_email=record.customer_email)
        return CheckoutAttempt(
            transaction_id=TransactionId(record.transaction_id),
            idempotency_key=IdempotencyKey(record.idempotency_key),
            customer=Customer(email=Email(record.customer_email), name=record.customer_name),
            grant=grant,
            created_at=record.created_at,
        )

    def append_session(self, session: CheckoutSession) -> None:
        models.SessionSnapshot.objects.create(
            transaction_id=str(session.transaction_id),
            checkout_url=session.checkout_url,
            status=session.status.value,
            observed_at=session.created_at,
        )

    def session_history(self, transaction_id: TransactionId) -> list[CheckoutSession]:
        snapshots = models.SessionSnapshot.objects.filter(transaction_id=str(transaction_id))
        return [
            CheckoutSession(
                transaction_id=TransactionId(snapshot.transaction_id),
                checkout_url=snapshot.checkout_url,
                status=SessionStatus(snapshot.status),
                created_at=snapshot.observed_at,
            )
            for snapshot in snapshots
        ]


class DjangoReconciliationLedger(ReconciliationLedger):
    """Terminal outcomes guarded by a unique constraint on transaction_id."""

    def get_terminal(self, transaction_id: TransactionId) -> TerminalRecord | None:
        record = models.TerminalOutcome.objects.filter(
            transaction_id=str(transaction_id)
        ).first()
        if record is None:
            return None
        return TerminalRecord(
            transaction_id=TransactionId(record.transaction_id),
            status=SessionStatus(record.status),
            recorded_at=record.recorded_at,
        )

    def record_terminal(self, record: TerminalRecord) -> bool:
        try:
            with transaction.atomic():
                models.TerminalOutcome.objects.create(
                    transaction_id=str(record.transaction_id),
                    status=record.status.value,
                    recorded_at=record.recorded_at,
                )
            return True
        except IntegrityError:
            existing = self.get_terminal(record.transaction_id)
        if existing.status is record.status:
            return False
        raise ReconciliationConflictError(
            str(record.transaction_id), existing.status, record.status
        )

    def atomic(self):
        return transaction.atomic()

    def record_conflict(self, event: ReconciliationEvent, recorded: TerminalRecord) -> None:
        models.ReconciliationConflict.objects.create(
            transaction_id=str(event.transaction_id),
            recorded_status=recorded.status.value,
            observed_status=event.outcome.status.value,
            observed_at=event.observed_at,
        )
