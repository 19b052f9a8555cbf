"""Turns a purchase intent into a normalized checkout request.

Pure: no I/O beyond the catalog lookup it is handed, no clock.
"""

from collections.abc import Callable

from checkout.domain import (
    AccessIntent,
    CartIntent,
    CheckoutRequest,
    Customer,
    Email,
    IdempotencyKey,
    LineItem,
    Money,
)
from checkout.domain.errors import IntentViolation, InvalidIntentError
from checkout.domain.models import PurchaseIntent
from checkout.stores.interfaces import ItemLookup

ACCESS_DESCRIPTION = "Platform access"


class SessionBuilder:
    """Builds CheckoutRequests with integer minor-unit arithmetic."""

    def __init__(
        self,
        access_price: Money,
        success_url: str,
        cancel_url: str,
        key_factory: Callable[[], IdempotencyKey] = IdempotencyKey.generate,
    ) -> None:
        self._access_price = access_price
        self._success_url = success_url
        self._cancel_url = cancel_url
        self._key_factory = key_factory

    @property
    def currency(self) -> str:
        return self._access_price.currency

    def build(self, intent: PurchaseIntent, catalog: ItemLookup) -> CheckoutRequest:
        """Return the checkout request for an intent.

        Raises:
            InvalidIntentError: If the customer identity is invalid, the cart is
                empty, or an item is unknown or already owned.
        """
        customer = self._customer(intent)

        if isinstance(intent, CartIntent):
            line_items = self._cart_line_items(intent, catalog)
            description = f"E-books ({len(line_items)})"
            metadata = {
                "purchase_type": "ebooks",
                "item_ids": ",".join(str(item_id) for item_id in sorted(intent.item_ids)),
            }
        elif isinstance(intent, AccessIntent):
            line_items = (LineItem(name=ACCESS_DESCRIPTION, quantity=1, unit_price=self._access_price),)
            description = ACCESS_DESCRIPTION
            metadata = {"purchase_type": "access"}
        else:
            raise TypeError(f"Unsupported purchase intent: {type(intent).__name__}")

        amount = Money.zero(self.currency)
        for line_item in line_items:
            amount = amount + line_item.subtotal
        metadata["customer_email"] = str(customer.email)

        return CheckoutRequest(
            idempotency_key=self._key_factory(),
            amount=amount,
            description=description,
            customer=customer,
            line_items=line_items,
            success_url=self._success_url,
            cancel_url=self._cancel_url,
            metadata=metadata,
        )

    def _customer(self, intent: PurchaseIntent) -> Customer:
        try:
            email = Email.parse(intent.customer_email)
        except ValueError:
            raise InvalidIntentError(IntentViolation.INVALID_EMAIL)
        name = (intent.customer_name or "").strip()
        if not name:
            raise InvalidIntentError(IntentViolation.EMPTY_NAME)
        return Customer(email=email, name=name)

    def _cart_line_items(self, intent: CartIntent, catalog: ItemLookup) -> tuple[LineItem, ...]:
        if not intent.item_ids:
            raise InvalidIntentError(IntentViolation.EMPTY_CART)
        line_items = []
        for item_id in sorted(intent.item_ids):
            item = catalog.lookup(item_id)
            if item is None:
                raise InvalidIntentError(IntentViolation.UNKNOWN_ITEM, item_id=item_id)
            if item.already_owned:
                raise InvalidIntentError(IntentViolation.ALREADY_OWNED, item_id=item_id)
            if item.price.currency != self.currency:
                raise InvalidIntentError(IntentViolation.CURRENCY_MISMATCH, item_id=item_id)
            line_items.append(LineItem(name=item.title, quantity=1, unit_price=item.price))
        return tuple(line_items)
