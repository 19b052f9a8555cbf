"""Django signal receivers.

- Category counts cache is invalidated when an e-book is saved or deleted.
- Reconciled payment effects are applied to ownership state.
"""

from django.conf import settings
from django.core.cache import cache
from django.db.models.signals import post_delete, post_save
from django.dispatch import receiver

from checkout.signals import payment_reconciled
from ebooks.models import Ebook
from ebooks.services.catalog_service import CATEGORIES_CACHE_KEY, CustomerService
from ebooks.stores.django_store import DjangoCustomerStore, DjangoEbookStore


@receiver([post_save, post_delete], sender=Ebook)
def invalidate_category_cache(sender, instance, **kwargs):
    """Invalidate category counts when an e-book is saved or deleted."""
    cache.delete(CATEGORIES_CACHE_KEY)


@receiver(payment_reconciled)
def apply_payment_effect(sender, effect, **kwargs):
    """Apply access grants and e-book purchases from reconciled payments."""
    service = CustomerService(DjangoCustomerStore(), DjangoEbookStore(), settings.CHECKOUT_CURRENCY)
    service.apply_effect(effect)
