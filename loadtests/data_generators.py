"""Faker-based data generators for Locust load test scenarios.

Each generator produces checkout payloads that pass the placement
pipeline's field and business rules, under the exact field names of the
API's Pydantic request schema.
"""

import os
import random
import string
import uuid

from faker import Faker

fake = Faker("fr_FR")

PRODUCT_ID = os.getenv("LOADTEST_PRODUCT_ID", "")
PLATFORM_ID = os.getenv("LOADTEST_PLATFORM_ID", "")
PRODUCT_FEE = int(os.getenv("LOADTEST_PRODUCT_FEE", "5000"))


def customer_name() -> tuple[str, str]:
    """Generate (first_name, last_name) with letters, spaces and at most one hyphen."""
    return fake.first_name()[:50], fake.last_name()[:50]


def unique_email() -> str:
    """Emails are unique per order so the duplicate cooldown never triggers."""
    return f"lt.{uuid.uuid4().hex[:12]}@{fake.free_email_domain()}"


def valid_phone() -> str:
    """Eight to twelve digits, optionally with a leading +."""
    digits = "".join(random.choices(string.digits, k=random.randint(8, 12)))
    return f"+{digits}" if random.random() < 0.5 else digits


def account_number() -> str:
    """Alternate letters and digits so no run of six sequential characters appears."""
    return "".join(
        random.choice(string.ascii_uppercase) if i % 2 == 0 else random.choice(string.digits) for i in range(10)
    )


def checkout_data(email: str | None = None) -> dict:
    """Generate a PlaceOrderRequest payload for the configured product."""
    first_name, last_name = customer_name()
    return {
        "last_name": last_name,
        "first_name": first_name,
        "email": email or unique_email(),
        "phone": valid_phone(),
        "platform_id": PLATFORM_ID,
        "account_name": f"{first_name} {last_name}",
        "account_number": account_number(),
        "product_id": PRODUCT_ID,
        "expected_fee": PRODUCT_FEE,
    }


def stale_checkout_data() -> dict:
    """A checkout whose fee no longer matches the product's."""
    payload = checkout_data()
    payload["expected_fee"] = PRODUCT_FEE - 1
    return payload
