"""Product aggregate: an application or template offered for sale.

Managed by the back office; order placement only reads it to confirm the
product is still on sale and to fetch its canonical fee.
"""

from datetime import UTC, datetime

from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Float, String

from storefront.domain import storefront


@storefront.aggregate
class Product:
    name = String(required=True, max_length=255)
    fee = Float(required=True, min_value=0.0)
    is_active = Boolean(default=True)
    created_at = DateTime()
    updated_at = DateTime()

    @classmethod
    def register(cls, name, fee, is_active=True):
        now = datetime.now(UTC)
        return cls(name=name, fee=fee, is_active=is_active, created_at=now, updated_at=now)

    def deactivate(self):
        """Withdraw the product from sale; existing orders are unaffected."""
        if not self.is_active:
            raise ValidationError({"is_active": ["Product is already inactive"]})
        self.is_active = False
        self.updated_at = datetime.now(UTC)

    def activate(self):
        if self.is_active:
            raise ValidationError({"is_active": ["Product is already active"]})
        self.is_active = True
        self.updated_at = datetime.now(UTC)
