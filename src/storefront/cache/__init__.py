"""Read cache factory.

Provides get_cache() / set_cache() to swap implementations:
- MemoryReadCache by default, or RedisReadCache when ORDER_CACHE_REDIS_URL is set
- any ReadCache in tests
"""

import os

from storefront.cache.memory_adapter import MemoryReadCache
from storefront.cache.port import ReadCache
from storefront.config import load_settings

ORDERS_TAG = "orders"
ORDER_LIST_KEY = "list"

_current_cache: ReadCache | None = None


def product_orders_key(product_id: str) -> str:
    return f"product:{product_id}"


def _build_default_cache() -> ReadCache:
    settings = load_settings()
    redis_url = os.getenv("ORDER_CACHE_REDIS_URL")
    if redis_url:
        from storefront.cache.redis_adapter import RedisReadCache

        return RedisReadCache.from_url(redis_url, default_ttl=settings.cache_ttl_seconds)
    return MemoryReadCache(default_ttl=settings.cache_ttl_seconds, max_entries=settings.cache_max_entries)


def get_cache() -> ReadCache:
    """Return the current read cache."""
    global _current_cache
    if _current_cache is None:
        _current_cache = _build_default_cache()
    return _current_cache


def set_cache(cache: ReadCache) -> None:
    """Override the active read cache (useful for tests)."""
    global _current_cache
    _current_cache = cache


def reset_cache() -> None:
    """Reset to default cache."""
    global _current_cache
    _current_cache = None
