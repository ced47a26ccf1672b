"""Insert a validated, resolved order on the open connection."""

from storefront.placement.schema import ValidatedOrder
from storefront.storage.port import CustomerTuple, InsertedOrder, NewOrder, StorageConnection


def build_new_order(order: ValidatedOrder) -> NewOrder:
    return NewOrder(
        customer=CustomerTuple(
            last_name=order.last_name,
            first_name=order.first_name,
            email=order.email,
            phone=order.phone,
        ),
        platform_id=order.platform_id,
        payee_name=order.account_name,
        payee_account_number=order.account_number,
        product_id=order.product_id,
        price=int(order.fee),
    )


def write_order(connection: StorageConnection, order: ValidatedOrder) -> InsertedOrder | None:
    """Returns None when storage reports nothing written."""
    inserted = connection.insert_order(build_new_order(order))
    if inserted is None or not inserted.id:
        return None
    return inserted
