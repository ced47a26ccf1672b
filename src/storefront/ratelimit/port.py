"""Rate limiter port (abstract interface).

Consulted once per submission before any other stage runs. The request
metadata carries the client address and, for order submissions, the
submitted email as ``subject``.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from storefront.placement.request import RequestMeta


class RateLimiter(ABC):
    """Abstract request-scoped gate."""

    @abstractmethod
    def check(self, route_key: str, request_meta: RequestMeta) -> bool:
        """Count the attempt and return True when the request must be blocked."""
        ...

    @abstractmethod
    def retry_after(self, route_key: str, request_meta: RequestMeta) -> int:
        """Seconds until a blocked caller may try again (0 when not blocked)."""
        ...

    def record_success(self, route_key: str, request_meta: RequestMeta) -> None:  # noqa: B027
        """Called after a successful submission. Adapters may stop counting it."""
