"""Store interfaces (repository pattern).

Stores must be swappable and return domain models.
"""

from abc import ABC, abstractmethod

from checkout.domain import Email, ItemId, Money
from ebooks.domain import CustomerProfile, Ebook, NewEbook, SearchCriteria


class EbookStore(ABC):
    """Interface for catalog persistence operations."""

    @abstractmethod
    def search(self, criteria: SearchCriteria) -> list[Ebook]:
        """Return e-books matching the criteria, ordered by id."""
        ...

    @abstractmethod
    def get_ebook(self, ebook_id: ItemId) -> Ebook | None:
        """Return an e-book by ID, or None if not found."""
        ...

    @abstractmethod
    def get_ebooks(self, ebook_ids: frozenset[ItemId]) -> list[Ebook]:
        """Return the existing e-books among the given IDs, ordered by id."""
        ...

    @abstractmethod
    def create_ebook(self, data: NewEbook, price: Money) -> Ebook:
        """Persist a new e-book and return it."""
        ...

    @abstractmethod
    def category_counts(self) -> dict[str, int]:
        """Return the number of e-books per category."""
        ...


class CustomerStore(ABC):
    """Interface for customer ownership and cart state."""

    @abstractmethod
    def get_profile(self, email: Email) -> CustomerProfile:
        """Return the customer's profile (an empty one if never seen)."""
        ...

    @abstractmethod
    def grant_access(self, email: Email) -> None:
        """Set the platform access flag."""
        ...

    @abstractmethod
    def record_purchases(self, email: Email, ebook_ids: frozenset[ItemId], transaction_id: str) -> None:
        """Mark e-books as owned. Already-owned ones are left untouched."""
        ...

    @abstractmethod
    def cart_item_ids(self, email: Email) -> list[ItemId]:
        """Return the cart's e-book IDs in insertion order."""
        ...

    @abstractmethod
    def add_to_cart(self, email: Email, ebook_id: ItemId) -> None:
        """Add an e-book to the cart. Adding it twice is a no-op."""
        ...

    @abstractmethod
    def remove_from_cart(self, email: Email, ebook_ids: frozenset[ItemId]) -> None:
        """Remove e-books from the cart."""
        ...
