"""Storefront bounded context: catalogue references and order placement.

Holds the Product and PaymentPlatform aggregates the order pipeline reads,
and the Order aggregate it writes.
"""

from protean.domain import Domain

from storefront.utils.logging import configure_logging, get_logger

configure_logging()

logger = get_logger(__name__)

storefront = Domain(name="storefront")
