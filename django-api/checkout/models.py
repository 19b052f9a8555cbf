"""Django ORM models (persistence layer).

These models handle database concerns. Domain logic lives in domain/models.py.
"""

from django.db import models


class SessionStatusChoices(models.TextChoices):
    PENDING = "pending"
    APPROVED = "approved"
    DECLINED = "declined"
    EXPIRED = "expired"
    UNKNOWN = "unknown"


class CheckoutAttempt(models.Model):
    """Persistence model for a checkout attempt (one gateway session)."""

    class PurchaseType(models.TextChoices):
        ACCESS = "access"
        EBOOKS = "ebooks"

    transaction_id = models.CharField(max_length=255, unique=True)
    idempotency_key = models.CharField(max_length=64, unique=True)
    customer_email = models.EmailField()
    customer_name = models.CharField(max_length=255)
    purchase_type = models.CharField(max_length=16, choices=PurchaseType.choices)
    item_ids = models.JSONField(default=list, blank=True)
    created_at = models.DateTimeField()

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["customer_email"]),
        ]

    def __str__(self) -> str:
        return f"{self.transaction_id} ({self.purchase_type})"


class SessionSnapshot(models.Model):
    """Append-only history of observed session states."""

    transaction_id = models.CharField(max_length=255)
    checkout_url = models.URLField(max_length=1000)
    status = models.CharField(max_length=16, choices=SessionStatusChoices.choices)
    observed_at = models.DateTimeField()

    class Meta:
        ordering = ["id"]
        indexes = [
            models.Index(fields=["transaction_id", "id"]),
        ]

    def __str__(self) -> str:
        return f"{self.transaction_id} - {self.status}"


class TerminalOutcome(models.Model):
    """First terminal status recorded for a transaction."""

    transaction_id = models.CharField(max_length=255, unique=True)
    status = models.CharField(max_length=16, choices=SessionStatusChoices.choices)
    recorded_at = models.DateTimeField()

    def __str__(self) -> str:
        return f"{self.transaction_id} - {self.status}"


class ReconciliationConflict(models.Model):
    """Contradicting terminal observation kept for manual review."""

    transaction_id = models.CharField(max_length=255)
    recorded_status = models.CharField(max_length=16, choices=SessionStatusChoices.choices)
    observed_status = models.CharField(max_length=16, choices=SessionStatusChoices.choices)
    observed_at = models.DateTimeField()
    reviewed = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at"]

    def __str__(self) -> str:
        return f"{self.transaction_id}: {self.recorded_status} vs {self.observed_status}"
