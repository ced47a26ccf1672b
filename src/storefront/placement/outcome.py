"""Order placement outcome: the closed set of codes and the result record."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

ORDER_CREATED = "ORDER_CREATED"


class OrderErrorCode(str, Enum):
    RATE_LIMITED = "RATE_LIMITED"
    SANITIZATION_FAILED = "SANITIZATION_FAILED"
    VALIDATION_FAILED = "VALIDATION_FAILED"
    BUSINESS_RULES_FAILED = "BUSINESS_RULES_FAILED"
    SAFETY_CHECK_FAILED = "SAFETY_CHECK_FAILED"
    APPLICATION_NOT_FOUND = "APPLICATION_NOT_FOUND"
    PLATFORM_NOT_FOUND = "PLATFORM_NOT_FOUND"
    PRICE_MISMATCH = "PRICE_MISMATCH"
    DUPLICATE_ORDER = "DUPLICATE_ORDER"
    INSERT_FAILED = "INSERT_FAILED"
    DATABASE_ERROR = "DATABASE_ERROR"
    UNKNOWN_ERROR = "UNKNOWN_ERROR"


CLIENT_INPUT_ERRORS = frozenset(
    {
        OrderErrorCode.RATE_LIMITED,
        OrderErrorCode.SANITIZATION_FAILED,
        OrderErrorCode.VALIDATION_FAILED,
        OrderErrorCode.BUSINESS_RULES_FAILED,
        OrderErrorCode.SAFETY_CHECK_FAILED,
    }
)

LOOKUP_ERRORS = frozenset(
    {
        OrderErrorCode.APPLICATION_NOT_FOUND,
        OrderErrorCode.PLATFORM_NOT_FOUND,
        OrderErrorCode.PRICE_MISMATCH,
        OrderErrorCode.DUPLICATE_ORDER,
    }
)

INFRASTRUCTURE_ERRORS = frozenset(
    {
        OrderErrorCode.INSERT_FAILED,
        OrderErrorCode.DATABASE_ERROR,
        OrderErrorCode.UNKNOWN_ERROR,
    }
)


@dataclass(frozen=True)
class OrderDetails:
    id: str
    status: str
    created_at: datetime
    product_name: str
    amount: int
    platform_name: str

    def as_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "status": self.status,
            "createdAt": self.created_at.isoformat(),
            "productName": self.product_name,
            "amount": self.amount,
            "platformName": self.platform_name,
        }


@dataclass(frozen=True)
class OrderResult:
    success: bool
    message: str
    code: str
    order_id: str | None = None
    order_details: OrderDetails | None = None
    errors: dict[str, str] = field(default_factory=dict)
    retry_after: int | None = None
    detail: str | None = None

    @property
    def error_code(self) -> OrderErrorCode | None:
        if self.success:
            return None
        return OrderErrorCode(self.code)

    def as_dict(self) -> dict[str, Any]:
        """Render the result the way the checkout page consumes it."""
        payload: dict[str, Any] = {
            "success": self.success,
            "message": self.message,
            "code": self.code,
        }
        if self.order_id is not None:
            payload["orderId"] = self.order_id
        if self.order_details is not None:
            payload["orderDetails"] = self.order_details.as_dict()
        if self.errors:
            payload["errors"] = dict(self.errors)
        if self.retry_after is not None:
            payload["retryAfter"] = self.retry_after
        if self.detail is not None:
            payload["detail"] = self.detail
        return payload
