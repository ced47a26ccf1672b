"""Rate limiter factory.

Provides get_rate_limiter() / set_rate_limiter() to swap implementations.
The default is a SlidingWindowRateLimiter tuned for order submissions.
"""

from storefront.config import load_settings
from storefront.ratelimit.memory_adapter import SlidingWindowRateLimiter
from storefront.ratelimit.port import RateLimiter

ORDER_ROUTE_KEY = "order"

_current_rate_limiter: RateLimiter | None = None


def get_rate_limiter() -> RateLimiter:
    """Return the current rate limiter."""
    global _current_rate_limiter
    if _current_rate_limiter is None:
        settings = load_settings()
        _current_rate_limiter = SlidingWindowRateLimiter(
            max_attempts=settings.rate_limit_max_attempts,
            window_seconds=settings.rate_limit_window_seconds,
        )
    return _current_rate_limiter


def set_rate_limiter(rate_limiter: RateLimiter) -> None:
    """Override the active rate limiter (useful for tests)."""
    global _current_rate_limiter
    _current_rate_limiter = rate_limiter


def reset_rate_limiter() -> None:
    """Reset to default rate limiter."""
    global _current_rate_limiter
    _current_rate_limiter = None
