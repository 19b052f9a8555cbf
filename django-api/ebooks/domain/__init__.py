from ebooks.domain.models import Cart, CustomerProfile, Ebook, EbookPage, NewEbook
from ebooks.domain.value_objects import ALL_CATEGORIES, PageRequest, SearchCriteria

__all__ = [
    "Cart",
    "CustomerProfile",
    "Ebook",
    "EbookPage",
    "NewEbook",
    "ALL_CATEGORIES",
    "PageRequest",
    "SearchCriteria",
]
