import pytest
from protean import current_domain

from storefront.catalogue.platform import PaymentPlatform
from storefront.catalogue.product import Product


@pytest.fixture()
def catalogue():
    """An active product at 5000 and an active payment platform, persisted."""
    product = Product.register(name="Invoice Builder", fee=5000)
    platform = PaymentPlatform(name="Wave")
    current_domain.repository_for(Product).add(product)
    current_domain.repository_for(PaymentPlatform).add(platform)
    return {"product_id": str(product.id), "platform_id": str(platform.id)}


@pytest.fixture()
def form(checkout_form, catalogue):
    return {**checkout_form, "paymentMethod": catalogue["platform_id"]}
