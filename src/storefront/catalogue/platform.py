"""PaymentPlatform aggregate: a mobile-money or bank platform customers pay through."""

from protean.fields import Boolean, String

from storefront.domain import storefront


@storefront.aggregate
class PaymentPlatform:
    name = String(required=True, max_length=100)
    is_active = Boolean(default=True)

    def deactivate(self):
        self.is_active = False
