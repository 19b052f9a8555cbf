from django.urls import path

from ebooks.handlers import (
    CartItemView,
    CartView,
    CategoryListView,
    CustomerView,
    EbookDetailView,
    EbookListView,
)

urlpatterns = [
    path("ebooks", EbookListView.as_view(), name="ebook-list"),
    path("ebooks/categories", CategoryListView.as_view(), name="category-list"),
    path("ebooks/<str:ebook_id>", EbookDetailView.as_view(), name="ebook-detail"),
    path("customers/<str:email>", CustomerView.as_view(), name="customer-detail"),
    path("customers/<str:email>/cart", CartView.as_view(), name="cart"),
    path(
        "customers/<str:email>/cart/<str:ebook_id>",
        CartItemView.as_view(),
        name="cart-item",
    ),
]
