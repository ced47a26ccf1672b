"""Order placement settings, read from the environment."""

import os
from dataclasses import dataclass
from decimal import Decimal

from storefront.utils.logging import configured_environment

_DEVELOPMENT_ENVIRONMENTS = ("development", "dev", "local", "test")


def _get_int(name: str, fallback: int) -> int:
    raw_value = os.getenv(name)
    if not raw_value:
        return fallback
    try:
        return int(raw_value)
    except ValueError:
        raise RuntimeError(f"Environment variable {name} must be an integer, got {raw_value!r}") from None


def _get_list(name: str) -> tuple[str, ...]:
    return tuple(item.strip() for item in os.getenv(name, "").split(",") if item.strip())


def _get_decimal(name: str, fallback: str) -> Decimal:
    raw_value = os.getenv(name) or fallback
    try:
        return Decimal(raw_value)
    except ArithmeticError:
        raise RuntimeError(f"Environment variable {name} must be a decimal, got {raw_value!r}") from None


@dataclass(frozen=True)
class PlacementSettings:
    duplicate_window_seconds: int = 10 * 60
    price_tolerance: Decimal = Decimal("0.01")
    rate_limit_max_attempts: int = 3
    rate_limit_window_seconds: int = 5 * 60
    db_timeout_seconds: int = 5
    default_locale: str = "fr"
    cache_ttl_seconds: int = 5 * 60
    cache_max_entries: int = 1000
    # Error detail is only exposed when a development environment is named explicitly
    environment: str = "production"
    trusted_proxies: tuple[str, ...] = ()

    @property
    def is_development(self) -> bool:
        return self.environment in _DEVELOPMENT_ENVIRONMENTS

    @classmethod
    def from_env(cls) -> "PlacementSettings":
        return cls(
            duplicate_window_seconds=_get_int("ORDER_DUPLICATE_WINDOW_SECONDS", 10 * 60),
            price_tolerance=_get_decimal("ORDER_PRICE_TOLERANCE", "0.01"),
            rate_limit_max_attempts=_get_int("ORDER_RATE_LIMIT_MAX", 3),
            rate_limit_window_seconds=_get_int("ORDER_RATE_LIMIT_WINDOW_SECONDS", 5 * 60),
            db_timeout_seconds=_get_int("ORDER_DB_TIMEOUT_SECONDS", 5),
            default_locale=os.getenv("ORDER_DEFAULT_LOCALE", "fr"),
            cache_ttl_seconds=_get_int("ORDER_CACHE_TTL_SECONDS", 5 * 60),
            cache_max_entries=_get_int("ORDER_CACHE_MAX_ENTRIES", 1000),
            environment=configured_environment() or "production",
            trusted_proxies=_get_list("ORDER_TRUSTED_PROXIES"),
        )


def load_settings() -> PlacementSettings:
    """Read settings fresh from the environment."""
    return PlacementSettings.from_env()
