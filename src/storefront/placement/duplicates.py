"""Duplicate order detection.

An order is a duplicate when the same email already has a non-failed order
for the same product inside the cooldown window. Query failures propagate;
the pipeline decides to fail open.
"""

import math
from dataclasses import dataclass
from datetime import datetime, timedelta

from storefront.order.order import PaymentStatus
from storefront.storage.port import StorageConnection


@dataclass(frozen=True)
class DuplicateCheck:
    duplicate: bool
    retry_after: int | None = None
    blocking_order_id: str | None = None


def find_duplicate(
    connection: StorageConnection,
    email: str,
    product_id: str,
    now: datetime,
    window_seconds: int,
) -> DuplicateCheck:
    since = now - timedelta(seconds=window_seconds)
    blocking = [
        order
        for order in connection.recent_orders(product_id=product_id, email=email, since=since)
        if order.status != PaymentStatus.FAILED.value
    ]
    if not blocking:
        return DuplicateCheck(duplicate=False)

    # Retry becomes possible once the most recent blocking order ages out
    newest = max(blocking, key=lambda order: order.created_at)
    remaining = (newest.created_at + timedelta(seconds=window_seconds) - now).total_seconds()
    return DuplicateCheck(
        duplicate=True,
        retry_after=max(1, math.ceil(remaining)),
        blocking_order_id=newest.id,
    )
