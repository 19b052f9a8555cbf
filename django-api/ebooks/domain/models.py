"""Domain models representing persisted storefront state.

These are pure domain objects with no API input rules.
Django ORM models are in ebooks/models.py (persistence layer).
"""

from dataclasses import dataclass
from datetime import datetime

from checkout.domain import Email, ItemId, Money


@dataclass(frozen=True)
class Ebook:
    """Domain representation of a catalog e-book."""

    id: ItemId
    title: str
    author: str
    category: str
    description: str
    pages: int
    cover_url: str
    price: Money
    created_at: datetime


@dataclass(frozen=True)
class NewEbook:
    """Validated data for authoring an e-book."""

    title: str
    author: str
    category: str
    description: str
    pages: int
    cover_url: str = ""

    def __post_init__(self) -> None:
        for field in ("title", "author", "category"):
            if not getattr(self, field).strip():
                raise ValueError(field)
        if self.pages < 1:
            raise ValueError("pages")


@dataclass(frozen=True)
class CustomerProfile:
    """Access flag and owned e-books of a customer."""

    email: Email
    has_access: bool
    purchased_ids: frozenset[ItemId] = frozenset()


@dataclass(frozen=True)
class Cart:
    email: Email
    items: tuple[Ebook, ...]
    currency: str = "BRL"

    @property
    def item_ids(self) -> frozenset[ItemId]:
        return frozenset(ebook.id for ebook in self.items)

    @property
    def total(self) -> Money:
        total = Money.zero(self.currency)
        for ebook in self.items:
            total = total + ebook.price
        return total


@dataclass(frozen=True)
class EbookPage:
    """One page of a filtered catalog listing."""

    items: tuple[Ebook, ...]
    total: int
    page: int
    page_size: int
    num_pages: int

    @property
    def has_next(self) -> bool:
        return self.page < self.num_pages

    @property
    def has_previous(self) -> bool:
        return self.page > 1
