"""Read-side order views, served through the read cache.

Views are rebuilt from the Order repository on a cache miss. A broken cache
never breaks a read: cache errors are logged and the view is computed.
"""

import structlog
from protean.utils.globals import current_domain

from storefront.cache import ORDER_LIST_KEY, ORDERS_TAG, get_cache, product_orders_key
from storefront.cache.port import ReadCache
from storefront.order.order import Order, PaymentStatus

logger = structlog.get_logger(__name__)

RECENT_ORDERS_LIMIT = 50


def order_view(order: Order) -> dict:
    return {
        "id": str(order.id),
        "customer": {
            "last_name": order.customer.last_name,
            "first_name": order.customer.first_name,
            "email": order.customer.email,
            "phone": order.customer.phone,
        },
        "platform_id": str(order.platform_id),
        "payee_name": order.payee_name,
        "payee_account_number": order.payee_account_number,
        "product_id": str(order.product_id),
        "price": order.price,
        "payment_status": order.payment_status,
        "created_at": order.created_at.isoformat() if order.created_at else None,
        "updated_at": order.updated_at.isoformat() if order.updated_at else None,
        "paid_at": order.paid_at.isoformat() if order.paid_at else None,
        "cancelled_at": order.cancelled_at.isoformat() if order.cancelled_at else None,
        "cancel_reason": order.cancel_reason,
    }


def _cached(cache: ReadCache, key: str, build):
    try:
        cached = cache.get(ORDERS_TAG, key)
    except Exception as exc:
        logger.warning("Read cache unavailable", key=key, error=str(exc))
        return build()
    if cached is not None:
        return cached

    value = build()
    try:
        cache.set(ORDERS_TAG, key, value)
    except Exception as exc:
        logger.warning("Could not populate read cache", key=key, error=str(exc))
    return value


def _build_product_summary(product_id: str) -> dict:
    orders = current_domain.repository_for(Order)._dao.query.filter(product_id=product_id).limit(None).all().items

    by_status = {status.value: {"count": 0, "amount": 0} for status in PaymentStatus}
    for order in orders:
        bucket = by_status[order.payment_status]
        bucket["count"] += 1
        bucket["amount"] += order.price

    return {
        "product_id": product_id,
        "order_count": len(orders),
        "revenue": by_status[PaymentStatus.PAID.value]["amount"],
        "by_status": by_status,
    }


def product_order_summary(product_id: str, cache: ReadCache | None = None) -> dict:
    """Order count and amounts per payment status for one product."""
    product_id = str(product_id)
    return _cached(cache or get_cache(), product_orders_key(product_id), lambda: _build_product_summary(product_id))


def _build_recent_orders() -> list[dict]:
    orders = (
        current_domain.repository_for(Order)
        ._dao.query.order_by("-created_at")
        .limit(RECENT_ORDERS_LIMIT)
        .all()
        .items
    )
    return [order_view(order) for order in orders]


def recent_orders(cache: ReadCache | None = None) -> list[dict]:
    """The most recent orders across all products, newest first."""
    return _cached(cache or get_cache(), ORDER_LIST_KEY, _build_recent_orders)
