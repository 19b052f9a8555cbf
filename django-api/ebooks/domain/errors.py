"""Domain error codes for the ebooks module."""

from dataclasses import dataclass
from enum import Enum


class ErrorCode(Enum):
    """Domain error codes."""

    EBOOK_NOT_FOUND = "EBOOK_NOT_FOUND"
    INVALID_EBOOK_ID = "INVALID_EBOOK_ID"
    INVALID_EBOOK = "INVALID_EBOOK"
    INVALID_CUSTOMER = "INVALID_CUSTOMER"
    ACCESS_REQUIRED = "ACCESS_REQUIRED"
    ALREADY_PURCHASED = "ALREADY_PURCHASED"


@dataclass(frozen=True)
class DomainError(Exception):
    """Base domain error with code and user-safe message."""

    code: ErrorCode
    message: str

    def __str__(self) -> str:
        return f"{self.code.value}: {self.message}"


class EbookNotFoundError(DomainError):
    """Raised when an e-book is not found."""

    def __init__(self, ebook_id) -> None:
        super().__init__(
            code=ErrorCode.EBOOK_NOT_FOUND,
            message="E-book not found",
        )
        self.ebook_id = ebook_id


class InvalidEbookIdError(DomainError):
    """Raised when an e-book ID is invalid."""

    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.INVALID_EBOOK_ID,
            message="Invalid e-book ID format",
        )


class InvalidEbookError(DomainError):
    """Raised when new e-book data is invalid."""

    def __init__(self, field: str) -> None:
        super().__init__(
            code=ErrorCode.INVALID_EBOOK,
            message=f"Invalid value for {field}",
        )
        self.field = field


class InvalidCustomerError(DomainError):
    """Raised when a customer e-mail is invalid."""

    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.INVALID_CUSTOMER,
            message="A valid e-mail address is required",
        )


class AccessRequiredError(DomainError):
    """Raised when an action needs platform access the customer lacks."""

    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.ACCESS_REQUIRED,
            message="Platform access is required",
        )


class AlreadyPurchasedError(DomainError):
    """Raised when adding an owned e-book to the cart."""

    def __init__(self, ebook_id) -> None:
        super().__init__(
            code=ErrorCode.ALREADY_PURCHASED,
            message="E-book already purchased",
        )
        self.ebook_id = ebook_id
