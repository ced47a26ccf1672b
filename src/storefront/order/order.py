"""Order aggregate: a purchase of one product, settled out of band.

Orders are created ``unpaid`` by the placement pipeline and are never
deleted. Settlement moves them through the payment status machine:

    UNPAID → PAID → REFUNDED
    UNPAID → FAILED → UNPAID (retry)

Cancellation is allowed while unpaid (the order ends FAILED) or once paid
(the order ends REFUNDED).
"""

from datetime import UTC, datetime
from enum import Enum

from protean.exceptions import ValidationError
from protean.fields import DateTime, Identifier, Integer, String, ValueObject

from storefront.domain import storefront
from storefront.order.events import OrderCancelled, OrderPaymentStatusChanged, OrderPlaced


class PaymentStatus(Enum):
    UNPAID = "unpaid"
    PAID = "paid"
    FAILED = "failed"
    REFUNDED = "refunded"


_VALID_TRANSITIONS = {
    PaymentStatus.UNPAID: {PaymentStatus.PAID, PaymentStatus.FAILED},
    PaymentStatus.PAID: {PaymentStatus.REFUNDED},
    PaymentStatus.FAILED: {PaymentStatus.UNPAID},
    PaymentStatus.REFUNDED: set(),  # Terminal
}

# Cancelling moves the order to the status that reflects what happened to the money
_CANCELLATION_OUTCOME = {
    PaymentStatus.UNPAID: PaymentStatus.FAILED,
    PaymentStatus.PAID: PaymentStatus.REFUNDED,
}


@storefront.value_object(part_of="Order")
class Customer:
    """Who placed the order, captured as submitted.

    Field order is significant: last name, first name, email, phone.
    """

    last_name = String(required=True, max_length=50)
    first_name = String(required=True, max_length=50)
    email = String(required=True, max_length=100)
    phone = String(required=True, max_length=20)

    def as_tuple(self):
        return (self.last_name, self.first_name, self.email, self.phone)


@storefront.aggregate
class Order:
    customer = ValueObject(Customer)
    platform_id = Identifier(required=True)
    payee_name = String(required=True, max_length=100)
    payee_account_number = String(required=True, max_length=100)
    product_id = Identifier(required=True)
    price = Integer(required=True, min_value=1)
    payment_status = String(choices=PaymentStatus, default=PaymentStatus.UNPAID.value)
    created_at = DateTime()
    updated_at = DateTime()
    paid_at = DateTime()
    cancelled_at = DateTime()
    cancel_reason = String(max_length=500)

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def place(
        cls,
        customer,
        platform_id,
        payee_name,
        payee_account_number,
        product_id,
        price,
    ):
        """Create an unpaid order.

        Args:
            customer: Dict with last_name, first_name, email, phone.
            platform_id: Payment platform the customer pays through.
            payee_name: Account holder name on that platform.
            payee_account_number: Account number on that platform.
            product_id: The product being bought.
            price: Amount due, in whole currency units.
        """
        now = datetime.now(UTC)
        order = cls(
            customer=Customer(**customer),
            platform_id=platform_id,
            payee_name=payee_name,
            payee_account_number=payee_account_number,
            product_id=product_id,
            price=price,
            payment_status=PaymentStatus.UNPAID.value,
            created_at=now,
            updated_at=now,
        )
        order.raise_(
            OrderPlaced(
                order_id=str(order.id),
                product_id=str(product_id),
                platform_id=str(platform_id),
                email=order.customer.email,
                price=price,
                placed_at=now,
            )
        )
        return order

    # -------------------------------------------------------------------
    # Settlement
    # -------------------------------------------------------------------
    def _assert_can_transition(self, target_status):
        current = PaymentStatus(self.payment_status)
        if target_status not in _VALID_TRANSITIONS[current]:
            raise ValidationError(
                {"payment_status": [f"Cannot transition from {current.value} to {target_status.value}"]}
            )

    def change_payment_status(self, new_status):
        """Record a settlement outcome reported by the back office."""
        target = PaymentStatus(new_status)
        self._assert_can_transition(target)

        previous = self.payment_status
        now = datetime.now(UTC)
        self.payment_status = target.value
        self.updated_at = now
        if target == PaymentStatus.PAID:
            self.paid_at = now

        self.raise_(
            OrderPaymentStatusChanged(
                order_id=str(self.id),
                product_id=str(self.product_id),
                previous_status=previous,
                new_status=target.value,
                changed_at=now,
            )
        )

    def mark_paid(self):
        self.change_payment_status(PaymentStatus.PAID)

    def mark_failed(self):
        self.change_payment_status(PaymentStatus.FAILED)

    def refund(self):
        self.change_payment_status(PaymentStatus.REFUNDED)

    def cancel(self, reason):
        current = PaymentStatus(self.payment_status)
        if current not in _CANCELLATION_OUTCOME:
            raise ValidationError({"payment_status": [f"Cannot cancel an order that is {current.value}"]})
        if not reason or not reason.strip():
            raise ValidationError({"cancel_reason": ["A cancellation reason is required"]})

        outcome = _CANCELLATION_OUTCOME[current]
        now = datetime.now(UTC)
        self.payment_status = outcome.value
        self.cancel_reason = reason.strip()
        self.cancelled_at = now
        self.updated_at = now

        self.raise_(
            OrderCancelled(
                order_id=str(self.id),
                product_id=str(self.product_id),
                reason=self.cancel_reason,
                resulting_status=outcome.value,
                cancelled_at=now,
            )
        )
