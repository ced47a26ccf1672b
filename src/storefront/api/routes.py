"""FastAPI routes for the Storefront domain: order placement, settlement, order views."""

import structlog
from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from protean.utils.globals import current_domain

from storefront.api.schemas import (
    CancelOrderRequest,
    OrderListResponse,
    OrderResponse,
    OrderResultResponse,
    PlaceOrderRequest,
    ProductOrderSummaryResponse,
    StatusResponse,
    UpdatePaymentStatusRequest,
)
from storefront.cache import get_cache
from storefront.config import load_settings
from storefront.order.order import Order
from storefront.order.queries import order_view, product_order_summary, recent_orders
from storefront.order.status import CancelOrder, UpdatePaymentStatus
from storefront.placement import ORDER_CREATED, OrderErrorCode, OrderResult, RequestMeta, create_order
from storefront.placement.invalidation import invalidate_order_views
from storefront.placement.request import client_ip

logger = structlog.get_logger(__name__)

order_router = APIRouter(prefix="/orders", tags=["orders"])
product_orders_router = APIRouter(prefix="/products", tags=["products"])

_STATUS_CODES = {
    ORDER_CREATED: 201,
    OrderErrorCode.RATE_LIMITED: 429,
    OrderErrorCode.SANITIZATION_FAILED: 422,
    OrderErrorCode.VALIDATION_FAILED: 422,
    OrderErrorCode.BUSINESS_RULES_FAILED: 422,
    OrderErrorCode.SAFETY_CHECK_FAILED: 422,
    OrderErrorCode.APPLICATION_NOT_FOUND: 404,
    OrderErrorCode.PLATFORM_NOT_FOUND: 404,
    OrderErrorCode.PRICE_MISMATCH: 422,
    OrderErrorCode.DUPLICATE_ORDER: 409,
    OrderErrorCode.INSERT_FAILED: 500,
    OrderErrorCode.DATABASE_ERROR: 500,
    OrderErrorCode.UNKNOWN_ERROR: 500,
}


def _request_meta(request: Request) -> RequestMeta:
    peer = request.client.host if request.client else None
    return RequestMeta(
        ip=client_ip(peer, request.headers.get("x-forwarded-for"), load_settings().trusted_proxies),
        locale=request.headers.get("accept-language"),
        user_agent=request.headers.get("user-agent"),
    )


def _result_response(result: OrderResult) -> JSONResponse:
    headers = {}
    if result.retry_after is not None:
        headers["Retry-After"] = str(result.retry_after)
    return JSONResponse(status_code=_STATUS_CODES[result.code], content=result.as_dict(), headers=headers)


def _evict_order_views(product_id: str) -> None:
    try:
        invalidate_order_views(get_cache(), product_id)
    except Exception as exc:
        logger.warning("Cache invalidation failed", product_id=product_id, error=str(exc))


# --- Placement ---


@order_router.post("", status_code=201, response_model=OrderResultResponse)
async def place_order(body: PlaceOrderRequest, request: Request) -> JSONResponse:
    result = create_order(
        body,
        product_id=body.product_id,
        expected_fee=body.expected_fee,
        request_meta=_request_meta(request),
    )
    return _result_response(result)


@order_router.post("/form", status_code=201, response_model=OrderResultResponse)
async def place_order_from_form(request: Request) -> JSONResponse:
    """Checkout form submission. The application and its fee travel as hidden fields."""
    form = await request.form()
    result = create_order(
        form,
        product_id=form.get("applicationId"),
        expected_fee=form.get("applicationFee"),
        request_meta=_request_meta(request),
    )
    return _result_response(result)


# --- Order views ---


@order_router.get("", response_model=OrderListResponse)
async def list_orders() -> OrderListResponse:
    return OrderListResponse(orders=recent_orders())


@order_router.get("/{order_id}", response_model=OrderResponse)
async def get_order(order_id: str) -> OrderResponse:
    order = current_domain.repository_for(Order).get(order_id)
    return OrderResponse(**order_view(order))


@product_orders_router.get("/{product_id}/orders", response_model=ProductOrderSummaryResponse)
async def get_product_order_summary(product_id: str) -> ProductOrderSummaryResponse:
    return ProductOrderSummaryResponse(**product_order_summary(product_id))


# --- Settlement ---


@order_router.put("/{order_id}/payment-status", response_model=StatusResponse)
async def update_payment_status(order_id: str, body: UpdatePaymentStatusRequest) -> StatusResponse:
    command = UpdatePaymentStatus(order_id=order_id, status=body.status)
    product_id = current_domain.process(command, asynchronous=False)
    _evict_order_views(product_id)
    return StatusResponse()


@order_router.put("/{order_id}/cancel", response_model=StatusResponse)
async def cancel_order(order_id: str, body: CancelOrderRequest) -> StatusResponse:
    command = CancelOrder(order_id=order_id, reason=body.reason)
    product_id = current_domain.process(command, asynchronous=False)
    _evict_order_views(product_id)
    return StatusResponse()
