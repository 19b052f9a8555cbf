"""Catalog and customer services - all storefront business logic lives here.

Services:
- Depend only on interfaces (stores)
- Validate domain invariants
- Perform orchestration and error mapping
- Return domain models or domain errors
"""

import logging
import math

from django.core.cache import cache

from checkout.domain import DomainEffect, EffectKind, Email, ItemGrant, ItemId, Money
from ebooks.domain import (
    ALL_CATEGORIES,
    Cart,
    CustomerProfile,
    Ebook,
    EbookPage,
    NewEbook,
    PageRequest,
    SearchCriteria,
)
from ebooks.domain.errors import (
    AccessRequiredError,
    AlreadyPurchasedError,
    EbookNotFoundError,
    InvalidCustomerError,
    InvalidEbookError,
    InvalidEbookIdError,
)
from ebooks.stores.interfaces import CustomerStore, EbookStore

logger = logging.getLogger(__name__)

CATEGORIES_CACHE_KEY = "ebooks:categories"
CATEGORIES_CACHE_TTL = 300


def parse_ebook_id(value) -> ItemId:
    try:
        return ItemId.from_string(str(value))
    except ValueError:
        raise InvalidEbookIdError()


def parse_email(value: str) -> Email:
    try:
        return Email.parse(value)
    except ValueError:
        raise InvalidCustomerError()


def paginate(ebooks: list[Ebook], page_request: PageRequest) -> EbookPage:
    """Slice a filtered listing; out-of-range pages clamp to the last page."""
    total = len(ebooks)
    num_pages = max(1, math.ceil(total / page_request.page_size))
    page = min(page_request.page, num_pages)
    start = (page - 1) * page_request.page_size
    return EbookPage(
        items=tuple(ebooks[start:start + page_request.page_size]),
        total=total,
        page=page,
        page_size=page_request.page_size,
        num_pages=num_pages,
    )


class CatalogService:
    """Service for browsing and authoring e-books."""

    def __init__(self, store: EbookStore, customers: CustomerStore, default_price: Money) -> None:
        self._store = store
        self._customers = customers
        self._default_price = default_price

    def list_ebooks(self, criteria: SearchCriteria, page_request: PageRequest) -> EbookPage:
        """Return one page of e-books matching the search term and category."""
        return paginate(self._store.search(criteria), page_request)

    def get_ebook(self, ebook_id: str) -> Ebook:
        """Return an e-book by ID.

        Raises:
            InvalidEbookIdError: If the ebook_id is not a positive integer.
            EbookNotFoundError: If the e-book does not exist.
        """
        item_id = parse_ebook_id(ebook_id)
        ebook = self._store.get_ebook(item_id)
        if ebook is None:
            raise EbookNotFoundError(ebook_id)
        return ebook

    def category_counts(self) -> dict[str, int]:
        """Return e-book counts per category, with the ``all`` total first."""
        counts = cache.get(CATEGORIES_CACHE_KEY)
        if counts is None:
            per_category = self._store.category_counts()
            counts = {ALL_CATEGORIES: sum(per_category.values()), **per_category}
            cache.set(CATEGORIES_CACHE_KEY, counts, CATEGORIES_CACHE_TTL)
        return counts

    def create_ebook(self, author_email: str, data: dict) -> Ebook:
        """Publish a new e-book at the default price.

        Raises:
            InvalidCustomerError: If the author e-mail is invalid.
            AccessRequiredError: If the author has no platform access.
            InvalidEbookError: If a required field is blank or pages < 1.
        """
        email = parse_email(author_email)
        if not self._customers.get_profile(email).has_access:
            raise AccessRequiredError()
        try:
            new_ebook = NewEbook(
                title=data.get("title", ""),
                author=data.get("author", ""),
                category=data.get("category", ""),
                description=data.get("description", ""),
                pages=data.get("pages", 0),
                cover_url=data.get("cover_url", ""),
            )
        except ValueError as exc:
            raise InvalidEbookError(str(exc))
        ebook = self._store.create_ebook(new_ebook, self._default_price)
        logger.info("E-book %s created by %s", ebook.id, email)
        return ebook


class CustomerService:
    """Service for customer ownership state and carts."""

    def __init__(self, customers: CustomerStore, store: EbookStore, currency: str = "BRL") -> None:
        self._customers = customers
        self._store = store
        self._currency = currency

    def get_profile(self, email: str) -> CustomerProfile:
        return self._customers.get_profile(parse_email(email))

    def get_cart(self, email: str) -> Cart:
        customer_email = parse_email(email)
        ids = self._customers.cart_item_ids(customer_email)
        by_id = {ebook.id: ebook for ebook in self._store.get_ebooks(frozenset(ids))}
        return Cart(
            email=customer_email,
            items=tuple(by_id[item_id] for item_id in ids if item_id in by_id),
            currency=self._currency,
        )

    def add_to_cart(self, email: str, ebook_id) -> Cart:
        """Add an e-book to the cart. Adding it again leaves the cart unchanged.

        Raises:
            AccessRequiredError: If the customer has no platform access.
            EbookNotFoundError: If the e-book does not exist.
            AlreadyPurchasedError: If the customer already owns it.
        """
        customer_email = parse_email(email)
        item_id = parse_ebook_id(ebook_id)
        profile = self._customers.get_profile(customer_email)
        if not profile.has_access:
            raise AccessRequiredError()
        if self._store.get_ebook(item_id) is None:
            raise EbookNotFoundError(ebook_id)
        if item_id in profile.purchased_ids:
            raise AlreadyPurchasedError(ebook_id)
        self._customers.add_to_cart(customer_email, item_id)
        return self.get_cart(email)

    def remove_from_cart(self, email: str, ebook_id) -> Cart:
        customer_email = parse_email(email)
        self._customers.remove_from_cart(customer_email, frozenset({parse_ebook_id(ebook_id)}))
        return self.get_cart(email)

    def apply_effect(self, effect: DomainEffect) -> None:
        """Apply a reconciled payment outcome to ownership state."""
        email = Email.parse(effect.grant.customer_email)
        if effect.kind is EffectKind.ACCESS_GRANTED:
            self._customers.grant_access(email)
            logger.info("Access granted to %s (%s)", email, effect.transaction_id)
        elif effect.kind is EffectKind.ITEMS_PURCHASED and isinstance(effect.grant, ItemGrant):
            self._customers.record_purchases(email, effect.grant.item_ids, str(effect.transaction_id))
            self._customers.remove_from_cart(email, effect.grant.item_ids)
            logger.info(
                "%d e-book(s) purchased by %s (%s)",
                len(effect.grant.item_ids), email, effect.transaction_id,
            )
