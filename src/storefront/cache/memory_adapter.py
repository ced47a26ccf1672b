"""In-process read cache with TTL expiry and a size bound.

Least recently used entries are evicted once ``max_entries`` is reached.
One instance is shared per process through the cache factory; it is never
shared across instances of a multi-node deployment, so use the Redis adapter
there.
"""

import threading
import time
from collections import OrderedDict
from collections.abc import Callable
from typing import Any

from storefront.cache.port import ReadCache


class MemoryReadCache(ReadCache):
    def __init__(
        self,
        default_ttl: int = 300,
        max_entries: int = 1000,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if max_entries < 1:
            raise ValueError("max_entries must be at least 1")
        self.default_ttl = default_ttl
        self.max_entries = max_entries
        self._clock = clock
        self._entries: OrderedDict[tuple[str, str], tuple[Any, float]] = OrderedDict()
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def get(self, tag: str, key: str) -> Any | None:
        with self._lock:
            entry = self._entries.get((tag, key))
            if entry is None:
                return None
            value, expires_at = entry
            if expires_at <= self._clock():
                del self._entries[(tag, key)]
                return None
            self._entries.move_to_end((tag, key))
            return value

    def set(self, tag: str, key: str, value: Any, ttl: int | None = None) -> None:
        expires_at = self._clock() + (self.default_ttl if ttl is None else ttl)
        with self._lock:
            self._entries[(tag, key)] = (value, expires_at)
            self._entries.move_to_end((tag, key))
            while len(self._entries) > self.max_entries:
                self._entries.popitem(last=False)

    def invalidate(self, tag: str, key: str | None = None) -> int:
        with self._lock:
            if key is not None:
                return 1 if self._entries.pop((tag, key), None) is not None else 0

            doomed = [entry_key for entry_key in self._entries if entry_key[0] == tag]
            for entry_key in doomed:
                del self._entries[entry_key]
            return len(doomed)
