from django.urls import path

from checkout.handlers import (
    AccessCheckoutView,
    CartCheckoutView,
    CheckoutReturnView,
    WebhookView,
)

urlpatterns = [
    path("access", AccessCheckoutView.as_view(), name="checkout-access"),
    path("cart", CartCheckoutView.as_view(), name="checkout-cart"),
    path("return", CheckoutReturnView.as_view(), name="checkout-return"),
    path("webhook", WebhookView.as_view(), name="checkout-webhook"),
]
