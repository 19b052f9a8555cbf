"""Domain primitives that enforce validity at creation time."""

import re
import uuid
from dataclasses import dataclass
from typing import Self

_EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


@dataclass(frozen=True, order=True)
class ItemId:
    """Identifier of a catalog item (an e-book)."""

    value: int

    def __post_init__(self) -> None:
        if isinstance(self.value, bool) or not isinstance(self.value, int):
            raise ValueError("ItemId must be an integer")
        if self.value < 1:
            raise ValueError("ItemId must be positive")

    @classmethod
    def from_string(cls, value: str) -> Self:
        return cls(value=int(value))

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class TransactionId:
    """Gateway-assigned identifier of a checkout transaction."""

    value: str

    def __post_init__(self) -> None:
        if not isinstance(self.value, str) or not self.value.strip():
            raise ValueError("TransactionId cannot be empty")

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class IdempotencyKey:
    """Token letting the gateway deduplicate retries of one checkout attempt."""

    value: str

    def __post_init__(self) -> None:
        if not self.value:
            raise ValueError("IdempotencyKey cannot be empty")

    @classmethod
    def generate(cls) -> Self:
        return cls(value=uuid.uuid4().hex)

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class Email:
    """Syntactically valid, normalized e-mail address."""

    value: str

    def __post_init__(self) -> None:
        if not isinstance(self.value, str) or not _EMAIL_PATTERN.match(self.value):
            raise ValueError("Invalid e-mail address")

    @classmethod
    def parse(cls, value: str) -> Self:
        return cls(value=(value or "").strip().lower())

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class Money:
    """Amount in integer minor units (cents). Never a float."""

    minor_units: int
    currency: str = "BRL"

    def __post_init__(self) -> None:
        if isinstance(self.minor_units, bool) or not isinstance(self.minor_units, int):
            raise ValueError("Money must be expressed in integer minor units")
        if self.minor_units < 0:
            raise ValueError("Money amount cannot be negative")

    def __add__(self, other: "Money") -> "Money":
        if not isinstance(other, Money):
            return NotImplemented
        if other.currency != self.currency:
            raise ValueError("Cannot add amounts in different currencies")
        return Money(self.minor_units + other.minor_units, self.currency)

    def times(self, quantity: int) -> "Money":
        return Money(self.minor_units * quantity, self.currency)

    @classmethod
    def zero(cls, currency: str = "BRL") -> Self:
        return cls(0, currency)

    def __str__(self) -> str:
        major, minor = divmod(self.minor_units, 100)
        return f"{major}.{minor:02d}"
