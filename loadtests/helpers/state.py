"""Per-user state tracking for Locust load test scenarios.

Each Locust user instance keeps its own state; nothing is shared across users.
"""

from dataclasses import dataclass


@dataclass
class OrderState:
    """Tracks a single simulated customer's order."""

    email: str | None = None
    order_id: str | None = None
    current_status: str = "unpaid"
