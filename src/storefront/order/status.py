"""Order settlement commands and handler.

Settlement happens outside the storefront; the back office reports the
outcome through these commands. Both handlers return the product id so the
caller can evict the product's cached order views once the change is
committed.
"""

from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from storefront.domain import storefront
from storefront.order.order import Order, PaymentStatus


@storefront.command(part_of="Order")
class UpdatePaymentStatus:
    order_id = Identifier(required=True)
    status = String(required=True, choices=PaymentStatus)


@storefront.command(part_of="Order")
class CancelOrder:
    order_id = Identifier(required=True)
    reason = String(required=True, max_length=500)


@storefront.command_handler(part_of=Order)
class OrderSettlementHandler:
    @handle(UpdatePaymentStatus)
    def update_payment_status(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        order.change_payment_status(command.status)
        repo.add(order)
        return str(order.product_id)

    @handle(CancelOrder)
    def cancel_order(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        order.cancel(reason=command.reason)
        repo.add(order)
        return str(order.product_id)
