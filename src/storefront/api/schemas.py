"""Pydantic request/response schemas for the Storefront API.

These are external contracts. Order submissions are deliberately loose:
field rules belong to the placement pipeline, which reports them with
localized messages.
"""

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Order placement
# ---------------------------------------------------------------------------
class PlaceOrderRequest(BaseModel):
    last_name: str | None = None
    first_name: str | None = None
    email: str | None = None
    phone: str | None = None
    platform_id: str | None = None
    account_name: str | None = None
    account_number: str | None = None
    product_id: str
    expected_fee: int | float | str | None = None

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "last_name": "Doe",
                    "first_name": "Jane",
                    "email": "jane@example.com",
                    "phone": "77123456",
                    "platform_id": "5f0c6c1e-8a52-4b8e-9d53-2f1f3e0b7a11",
                    "account_name": "Jane Doe",
                    "account_number": "AB12345",
                    "product_id": "0b8f2f6e-3c1d-4d2a-a0f4-6c5e9d7b8a21",
                    "expected_fee": 5000,
                }
            ]
        }
    }


class OrderDetailsSchema(BaseModel):
    id: str
    status: str
    createdAt: str
    productName: str
    amount: int
    platformName: str


class OrderResultResponse(BaseModel):
    success: bool
    message: str
    code: str
    orderId: str | None = None
    orderDetails: OrderDetailsSchema | None = None
    errors: dict[str, str] | None = None
    retryAfter: int | None = None
    detail: str | None = None


# ---------------------------------------------------------------------------
# Settlement
# ---------------------------------------------------------------------------
class UpdatePaymentStatusRequest(BaseModel):
    status: str = Field(description="unpaid, paid, failed or refunded")


class CancelOrderRequest(BaseModel):
    reason: str = Field(min_length=1, max_length=500)


class StatusResponse(BaseModel):
    status: str = "ok"


# ---------------------------------------------------------------------------
# Read side
# ---------------------------------------------------------------------------
class CustomerSchema(BaseModel):
    last_name: str
    first_name: str
    email: str
    phone: str


class OrderResponse(BaseModel):
    id: str
    customer: CustomerSchema
    platform_id: str
    payee_name: str
    payee_account_number: str
    product_id: str
    price: int
    payment_status: str
    created_at: str | None = None
    updated_at: str | None = None
    paid_at: str | None = None
    cancelled_at: str | None = None
    cancel_reason: str | None = None


class StatusTotals(BaseModel):
    count: int
    amount: int


class ProductOrderSummaryResponse(BaseModel):
    product_id: str
    order_count: int
    revenue: int
    by_status: dict[str, StatusTotals]


class OrderListResponse(BaseModel):
    orders: list[OrderResponse]
