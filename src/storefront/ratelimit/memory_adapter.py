"""Sliding-window rate limiter kept in process memory.

Each key remembers the timestamps of its attempts inside the window. Keys
are bounded by ``max_keys``; the least recently seen key goes first. With
``skip_successful`` (the order preset) only failed attempts count, so a
customer who orders successfully is never locked out by their own orders.
"""

import hashlib
import math
import threading
import time
from collections import OrderedDict, deque
from collections.abc import Callable

from storefront.ratelimit.port import RateLimiter


def _fingerprint(value: str) -> str:
    return hashlib.sha256(value.encode("utf-8")).hexdigest()[:12]


class SlidingWindowRateLimiter(RateLimiter):
    def __init__(
        self,
        max_attempts: int = 3,
        window_seconds: int = 5 * 60,
        skip_successful: bool = True,
        max_keys: int = 10_000,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.max_attempts = max_attempts
        self.window_seconds = window_seconds
        self.skip_successful = skip_successful
        self.max_keys = max_keys
        self._clock = clock
        self._hits: OrderedDict[str, deque[float]] = OrderedDict()
        self._lock = threading.Lock()

    def key_for(self, route_key: str, request_meta) -> str:
        ip = getattr(request_meta, "ip", None) or "unknown"
        subject = getattr(request_meta, "subject", None)
        if subject:
            return f"{route_key}:subject:{_fingerprint(subject.strip().lower())}:ip:{ip}"
        return f"{route_key}:ip:{ip}"

    def _prune(self, hits: deque[float], now: float) -> None:
        while hits and hits[0] <= now - self.window_seconds:
            hits.popleft()

    def check(self, route_key: str, request_meta) -> bool:
        key = self.key_for(route_key, request_meta)
        now = self._clock()
        with self._lock:
            hits = self._hits.setdefault(key, deque())
            self._hits.move_to_end(key)
            self._prune(hits, now)
            if len(hits) >= self.max_attempts:
                return True
            hits.append(now)
            while len(self._hits) > self.max_keys:
                self._hits.popitem(last=False)
            return False

    def retry_after(self, route_key: str, request_meta) -> int:
        key = self.key_for(route_key, request_meta)
        now = self._clock()
        with self._lock:
            hits = self._hits.get(key)
            if not hits:
                return 0
            self._prune(hits, now)
            if len(hits) < self.max_attempts:
                return 0
            return max(1, math.ceil(hits[0] + self.window_seconds - now))

    def record_success(self, route_key: str, request_meta) -> None:
        if not self.skip_successful:
            return
        key = self.key_for(route_key, request_meta)
        with self._lock:
            hits = self._hits.get(key)
            if hits:
                hits.pop()
