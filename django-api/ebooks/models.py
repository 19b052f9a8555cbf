"""Django ORM models (persistence layer).

These models handle database concerns. Domain logic lives in domain/models.py.
"""

from django.db import models


class Ebook(models.Model):
    """Persistence model for catalog e-books."""

    title = models.CharField(max_length=255)
    author = models.CharField(max_length=255)
    category = models.CharField(max_length=100)
    description = models.TextField(blank=True)
    pages = models.PositiveIntegerField()
    cover_url = models.URLField(max_length=500, blank=True)
    price = models.PositiveIntegerField(help_text="Price in minor units (cents)")
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["id"]
        indexes = [
            models.Index(fields=["category"]),
        ]

    def __str__(self) -> str:
        return self.title


class Customer(models.Model):
    """Storefront customer, identified by e-mail."""

    email = models.EmailField(unique=True)
    name = models.CharField(max_length=255, blank=True)
    has_access = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self) -> str:
        return self.email


class Purchase(models.Model):
    """An e-book owned by a customer."""

    customer = models.ForeignKey(Customer, on_delete=models.CASCADE, related_name="purchases")
    ebook = models.ForeignKey(Ebook, on_delete=models.CASCADE, related_name="purchases")
    transaction_id = models.CharField(max_length=255)
    purchased_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=["customer", "ebook"], name="unique_purchase"),
        ]

    def __str__(self) -> str:
        return f"{self.customer} - {self.ebook}"


class CartItem(models.Model):
    """An e-book waiting in a customer's cart."""

    customer = models.ForeignKey(Customer, on_delete=models.CASCADE, related_name="cart_items")
    ebook = models.ForeignKey(Ebook, on_delete=models.CASCADE, related_name="+")
    added_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["added_at", "id"]
        constraints = [
            models.UniqueConstraint(fields=["customer", "ebook"], name="unique_cart_item"),
        ]

    def __str__(self) -> str:
        return f"{self.customer} - {self.ebook}"
