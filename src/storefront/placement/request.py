"""Inbound order submission.

A submission arrives either as a form-encoded mapping (field names as the
checkout form posts them) or as a structured object. Both build the same
``OrderRequest``. The product and its fee come from the page the customer
ordered from, never from the form body.
"""

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

# Checkout form field -> OrderRequest attribute
FORM_FIELDS = {
    "lastName": "last_name",
    "firstName": "first_name",
    "email": "email",
    "phone": "phone",
    "paymentMethod": "platform_id",
    "accountName": "account_name",
    "accountNumber": "account_number",
}

# Names that only the checkout form uses; email and phone are shared with attributes
FORM_ONLY_FIELDS = frozenset(FORM_FIELDS) - frozenset(FORM_FIELDS.values())


def is_checkout_form(data: Any) -> bool:
    return isinstance(data, Mapping) and any(name in data for name in FORM_ONLY_FIELDS)


@dataclass(frozen=True)
class RequestMeta:
    """Per-request data used for rate limiting and message locale."""

    ip: str | None = None
    locale: str | None = None
    user_agent: str | None = None
    subject: str | None = None


@dataclass(frozen=True)
class OrderRequest:
    last_name: Any = None
    first_name: Any = None
    email: Any = None
    phone: Any = None
    platform_id: Any = None
    account_name: Any = None
    account_number: Any = None
    product_id: Any = None
    expected_fee: Any = None

    @classmethod
    def from_form(cls, form: Mapping[str, Any], product_id: Any, expected_fee: Any) -> "OrderRequest":
        values = {}
        for form_name, attribute in FORM_FIELDS.items():
            value = form.get(form_name)
            # Multi-value form fields keep the first value
            if isinstance(value, list | tuple):
                value = value[0] if value else None
            values[attribute] = value
        return cls(product_id=product_id, expected_fee=expected_fee, **values)

    @classmethod
    def from_object(cls, data: Any, product_id: Any, expected_fee: Any) -> "OrderRequest":
        """Build from a mapping or an object with attribute names, e.g. a pydantic model."""
        if isinstance(data, Mapping):
            lookup = data.get
        else:

            def lookup(name):
                return getattr(data, name, None)

        values = {attribute: lookup(attribute) for attribute in FORM_FIELDS.values()}
        return cls(product_id=product_id, expected_fee=expected_fee, **values)

    def as_dict(self) -> dict[str, Any]:
        return {name: getattr(self, name) for name in self.__dataclass_fields__}


def client_ip(peer: str | None, forwarded_for: str | None, trusted_proxies=()) -> str | None:
    """Address the rate limiter keys on.

    ``X-Forwarded-For`` is only read when the direct peer is a trusted proxy.
    The chain is walked from the right, skipping trusted hops, so a client
    cannot pick its own address by prepending entries.
    """
    if not forwarded_for or peer not in trusted_proxies:
        return peer
    hops = [hop.strip() for hop in forwarded_for.split(",") if hop.strip()]
    for hop in reversed(hops):
        if hop not in trusted_proxies:
            return hop
    return hops[0] if hops else peer
