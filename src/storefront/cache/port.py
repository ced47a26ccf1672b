"""Read-side cache port (abstract interface).

Entries are addressed by a tag (the family of views, e.g. ``orders``) and a
key within that tag. Invalidating a tag without a key evicts the whole
family.
"""

from abc import ABC, abstractmethod
from typing import Any


class ReadCache(ABC):
    """Abstract key-value cache for read-side projections."""

    @abstractmethod
    def get(self, tag: str, key: str) -> Any | None:
        """Return the cached value, or None when absent or expired."""
        ...

    @abstractmethod
    def set(self, tag: str, key: str, value: Any, ttl: int | None = None) -> None:
        """Cache a JSON-serializable value for ``ttl`` seconds (adapter default when None)."""
        ...

    @abstractmethod
    def invalidate(self, tag: str, key: str | None = None) -> int:
        """Evict one entry, or every entry under ``tag``. Returns the number evicted."""
        ...
