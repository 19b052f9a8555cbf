"""Domain error codes for the checkout module."""

from dataclasses import dataclass
from enum import Enum


class ErrorCode(Enum):
    """Domain error codes."""

    INVALID_INTENT = "INVALID_INTENT"
    CONFIGURATION_MISSING = "CONFIGURATION_MISSING"
    GATEWAY_UNAVAILABLE = "GATEWAY_UNAVAILABLE"
    GATEWAY_REJECTED = "GATEWAY_REJECTED"
    TRANSACTION_NOT_FOUND = "TRANSACTION_NOT_FOUND"
    RECONCILIATION_CONFLICT = "RECONCILIATION_CONFLICT"
    INVALID_WEBHOOK = "INVALID_WEBHOOK"


class IntentViolation(Enum):
    """Why a purchase intent was rejected."""

    INVALID_EMAIL = "INVALID_EMAIL"
    EMPTY_NAME = "EMPTY_NAME"
    EMPTY_CART = "EMPTY_CART"
    UNKNOWN_ITEM = "UNKNOWN_ITEM"
    ALREADY_OWNED = "ALREADY_OWNED"
    CURRENCY_MISMATCH = "CURRENCY_MISMATCH"


@dataclass(frozen=True)
class DomainError(Exception):
    """Base domain error with code and user-safe message."""

    code: ErrorCode
    message: str

    def __str__(self) -> str:
        return f"{self.code.value}: {self.message}"


class InvalidIntentError(DomainError):
    """Raised when a purchase intent fails validation."""

    _MESSAGES = {
        IntentViolation.INVALID_EMAIL: "A valid e-mail address is required",
        IntentViolation.EMPTY_NAME: "Customer name is required",
        IntentViolation.EMPTY_CART: "Select at least one e-book",
        IntentViolation.UNKNOWN_ITEM: "E-book not found",
        IntentViolation.ALREADY_OWNED: "E-book already purchased",
        IntentViolation.CURRENCY_MISMATCH: "E-book is not sold in the checkout currency",
    }

    def __init__(self, reason: IntentViolation, item_id=None) -> None:
        super().__init__(
            code=ErrorCode.INVALID_INTENT,
            message=self._MESSAGES[reason],
        )
        self.reason = reason
        self.item_id = item_id


class ConfigurationMissingError(DomainError):
    """Raised when gateway credentials or endpoints are not configured."""

    def __init__(self, setting: str) -> None:
        super().__init__(
            code=ErrorCode.CONFIGURATION_MISSING,
            message="Payment gateway is not configured",
        )
        self.setting = setting


class GatewayUnavailableError(DomainError):
    """Transport-level gateway failure. Safe to retry."""

    def __init__(self, detail: str = "") -> None:
        super().__init__(
            code=ErrorCode.GATEWAY_UNAVAILABLE,
            message="Payment gateway is temporarily unavailable",
        )
        self.detail = detail


class GatewayRejectedError(DomainError):
    """The gateway refused the request as sent."""

    def __init__(self, status_code: int, detail: str = "") -> None:
        super().__init__(
            code=ErrorCode.GATEWAY_REJECTED,
            message="Payment gateway rejected the checkout request",
        )
        self.status_code = status_code
        self.detail = detail


class TransactionNotFoundError(DomainError):
    """Raised when a transaction id is unknown."""

    def __init__(self, transaction_id: str) -> None:
        super().__init__(
            code=ErrorCode.TRANSACTION_NOT_FOUND,
            message="Transaction not found",
        )
        self.transaction_id = transaction_id


class ReconciliationConflictError(DomainError):
    """A terminal outcome contradicts the one already recorded."""

    def __init__(self, transaction_id: str, recorded, observed) -> None:
        super().__init__(
            code=ErrorCode.RECONCILIATION_CONFLICT,
            message="Transaction outcome conflicts with recorded outcome",
        )
        self.transaction_id = transaction_id
        self.recorded = recorded
        self.observed = observed


class InvalidWebhookError(DomainError):
    """Raised when a webhook notification cannot be trusted or parsed."""

    def __init__(self, reason: str) -> None:
        super().__init__(
            code=ErrorCode.INVALID_WEBHOOK,
            message="Webhook notification rejected",
        )
        self.reason = reason
