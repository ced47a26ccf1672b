"""Evict the read-side order views affected by a new or changed order."""

import structlog

from storefront.cache import ORDER_LIST_KEY, ORDERS_TAG, product_orders_key
from storefront.cache.port import ReadCache

logger = structlog.get_logger(__name__)


def invalidate_order_views(cache: ReadCache, product_id: str) -> int:
    """Evict the product's order views and the general order list. Errors propagate."""
    evicted = cache.invalidate(ORDERS_TAG, product_orders_key(product_id))
    evicted += cache.invalidate(ORDERS_TAG, ORDER_LIST_KEY)
    logger.debug("Order views invalidated", product_id=product_id, evicted=evicted)
    return evicted
