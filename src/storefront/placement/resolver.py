"""Resolve the product and payment platform an order refers to.

Both must exist and be active. A storage failure is never reported as
"not found": ``StorageError`` propagates to the caller.
"""

from dataclasses import dataclass
from decimal import Decimal

import structlog

from storefront.placement.outcome import OrderErrorCode
from storefront.storage.port import PlatformRecord, ProductRecord, StorageConnection

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class ResolvedEntities:
    product: ProductRecord
    platform: PlatformRecord


@dataclass(frozen=True)
class Resolution:
    entities: ResolvedEntities | None = None
    error: OrderErrorCode | None = None

    @property
    def resolved(self) -> bool:
        return self.error is None


def resolve_entities(connection: StorageConnection, product_id: str, platform_id: str) -> Resolution:
    product = connection.find_product(product_id)
    if product is None or not product.is_active:
        logger.warning(
            "Product unavailable for order",
            product_id=product_id,
            reason="missing" if product is None else "inactive",
        )
        return Resolution(error=OrderErrorCode.APPLICATION_NOT_FOUND)

    platform = connection.find_platform(platform_id)
    if platform is None or not platform.is_active:
        logger.warning(
            "Payment platform unavailable for order",
            platform_id=platform_id,
            reason="missing" if platform is None else "inactive",
        )
        return Resolution(error=OrderErrorCode.PLATFORM_NOT_FOUND)

    return Resolution(entities=ResolvedEntities(product=product, platform=platform))


def price_matches(expected_fee: Decimal, canonical_fee: Decimal, tolerance: Decimal) -> bool:
    return abs(Decimal(expected_fee) - Decimal(canonical_fee)) <= tolerance
