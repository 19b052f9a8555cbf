from checkout.handlers.views import (
    AccessCheckoutView,
    CartCheckoutView,
    CheckoutReturnView,
    WebhookView,
)

__all__ = [
    "AccessCheckoutView",
    "CartCheckoutView",
    "CheckoutReturnView",
    "WebhookView",
]
