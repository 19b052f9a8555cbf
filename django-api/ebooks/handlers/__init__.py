from ebooks.handlers.views import (
    CartItemView,
    CartView,
    CategoryListView,
    CustomerView,
    EbookDetailView,
    EbookListView,
)

__all__ = [
    "CartItemView",
    "CartView",
    "CategoryListView",
    "CustomerView",
    "EbookDetailView",
    "EbookListView",
]
