"""Django ORM implementations of the ebooks stores."""

from django.conf import settings
from django.db.models import Count, Q

from checkout.domain import CatalogItem, Email, ItemId, Money
from checkout.stores.interfaces import ItemLookup
from ebooks import models
from ebooks.domain import CustomerProfile, Ebook, NewEbook, SearchCriteria
from ebooks.stores.interfaces import CustomerStore, EbookStore


def _to_domain(record: models.Ebook) -> Ebook:
    return Ebook(
        id=ItemId(record.id),
        title=record.title,
        author=record.author,
        category=record.category,
        description=record.description,
        pages=record.pages,
        cover_url=record.cover_url,
        price=Money(record.price, settings.CHECKOUT_CURRENCY),
        created_at=record.created_at,
    )


class DjangoEbookStore(EbookStore):
    """Database-backed catalog."""

    def search(self, criteria: SearchCriteria) -> list[Ebook]:
        queryset = models.Ebook.objects.all()
        if criteria.term:
            queryset = queryset.filter(
                Q(title__icontains=criteria.term) | Q(author__icontains=criteria.term)
            )
        if criteria.filters_category:
            queryset = queryset.filter(category=criteria.category)
        return [_to_domain(record) for record in queryset]

    def get_ebook(self, ebook_id: ItemId) -> Ebook | None:
        record = models.Ebook.objects.filter(pk=ebook_id.value).first()
        return _to_domain(record) if record else None

    def get_ebooks(self, ebook_ids: frozenset[ItemId]) -> list[Ebook]:
        records = models.Ebook.objects.filter(pk__in=[ebook_id.value for ebook_id in ebook_ids])
        return [_to_domain(record) for record in records]

    def create_ebook(self, data: NewEbook, price: Money) -> Ebook:
        record = models.Ebook.objects.create(
            title=data.title.strip(),
            author=data.author.strip(),
            category=data.category.strip(),
            description=data.description,
            pages=data.pages,
            cover_url=data.cover_url,
            price=price.minor_units,
        )
        return _to_domain(record)

    def category_counts(self) -> dict[str, int]:
        rows = (
            models.Ebook.objects.order_by()
            .values("category")
            .annotate(count=Count("id"))
            .order_by("category")
        )
        return {row["category"]: row["count"] for row in rows}


class DjangoCustomerStore(CustomerStore):
    """Database-backed ownership and carts."""

    def _customer(self, email: Email) -> models.Customer:
        customer, _ = models.Customer.objects.get_or_create(email=email.value)
        return customer

    def get_profile(self, email: Email) -> CustomerProfile:
        customer = models.Customer.objects.filter(email=email.value).first()
        if customer is None:
            return CustomerProfile(email=email, has_access=False)
        purchased = customer.purchases.values_list("ebook_id", flat=True)
        return CustomerProfile(
            email=email,
            has_access=customer.has_access,
            purchased_ids=frozenset(ItemId(ebook_id) for ebook_id in purchased),
        )

    def grant_access(self, email: Email) -> None:
        customer = self._customer(email)
        if not customer.has_access:
            customer.has_access = True
            customer.save(update_fields=["has_access"])

    def record_purchases(self, email: Email, ebook_ids: frozenset[ItemId], transaction_id: str) -> None:
        customer = self._customer(email)
        for ebook_id in sorted(ebook_ids):
            models.Purchase.objects.get_or_create(
                customer=customer,
                ebook_id=ebook_id.value,
                defaults={"transaction_id": transaction_id},
            )

    def cart_item_ids(self, email: Email) -> list[ItemId]:
        ebook_ids = models.CartItem.objects.filter(customer__email=email.value).values_list(
            "ebook_id", flat=True
        )
        return [ItemId(ebook_id) for ebook_id in ebook_ids]

    def add_to_cart(self, email: Email, ebook_id: ItemId) -> None:
        models.CartItem.objects.get_or_create(customer=self._customer(email), ebook_id=ebook_id.value)

    def remove_from_cart(self, email: Email, ebook_ids: frozenset[ItemId]) -> None:
        models.CartItem.objects.filter(
            customer__email=email.value,
            ebook_id__in=[ebook_id.value for ebook_id in ebook_ids],
        ).delete()


class DjangoItemLookup(ItemLookup):
    """Catalog view for checkout, scoped to one customer's ownership."""

    def __init__(self, customer_email: str) -> None:
        self._email = (customer_email or "").strip().lower()

    def lookup(self, item_id: ItemId) -> CatalogItem | None:
        record = models.Ebook.objects.filter(pk=item_id.value).first()
        if record is None:
            return None
        owned = models.Purchase.objects.filter(
            customer__email=self._email, ebook_id=record.pk
        ).exists()
        return CatalogItem(
            item_id=item_id,
            title=record.title,
            price=Money(record.price, settings.CHECKOUT_CURRENCY),
            already_owned=owned,
        )
