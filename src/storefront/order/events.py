"""Domain events for the Order aggregate."""

from protean.fields import DateTime, Identifier, Integer, String

from storefront.domain import storefront


@storefront.event(part_of="Order")
class OrderPlaced:
    """A customer placed an order; settlement is still outstanding."""

    __version__ = 1

    order_id = Identifier(required=True)
    product_id = Identifier(required=True)
    platform_id = Identifier(required=True)
    email = String(required=True)
    price = Integer(required=True)
    placed_at = DateTime(required=True)


@storefront.event(part_of="Order")
class OrderPaymentStatusChanged:
    """Settlement progressed: the order was paid, failed, refunded or reopened."""

    __version__ = 1

    order_id = Identifier(required=True)
    product_id = Identifier(required=True)
    previous_status = String(required=True)
    new_status = String(required=True)
    changed_at = DateTime(required=True)


@storefront.event(part_of="Order")
class OrderCancelled:
    """The order was cancelled, with a reason."""

    __version__ = 1

    order_id = Identifier(required=True)
    product_id = Identifier(required=True)
    reason = String(required=True)
    resulting_status = String(required=True)
    cancelled_at = DateTime(required=True)
