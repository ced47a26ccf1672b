"""Redis-backed read cache for multi-instance deployments.

Values are stored as JSON under ``<prefix>:<tag>:<key>``; every tag keeps an
index set of its keys so a whole tag can be evicted without a KEYS scan.
The index lives at least as long as its longest-lived entry, and members
whose entry has expired are dropped when a read misses.
"""

import json
from typing import Any

import redis

from storefront.cache.port import ReadCache


class RedisReadCache(ReadCache):
    def __init__(self, client: "redis.Redis", prefix: str = "storefront", default_ttl: int = 300) -> None:
        self._client = client
        self.prefix = prefix
        self.default_ttl = default_ttl

    @classmethod
    def from_url(cls, url: str, **kwargs) -> "RedisReadCache":
        return cls(redis.Redis.from_url(url, decode_responses=True), **kwargs)

    def _name(self, tag: str, key: str) -> str:
        return f"{self.prefix}:{tag}:{key}"

    def _index(self, tag: str) -> str:
        return f"{self.prefix}:tag:{tag}"

    def get(self, tag: str, key: str) -> Any | None:
        name = self._name(tag, key)
        raw = self._client.get(name)
        if raw is None:
            self._client.srem(self._index(tag), name)
            return None
        return json.loads(raw)

    def set(self, tag: str, key: str, value: Any, ttl: int | None = None) -> None:
        name = self._name(tag, key)
        index = self._index(tag)
        ttl = self.default_ttl if ttl is None else ttl
        pipe = self._client.pipeline()
        pipe.set(name, json.dumps(value), ex=ttl)
        pipe.sadd(index, name)
        pipe.ttl(index)
        _, _, remaining = pipe.execute()
        # -1 means the index has no expiry yet
        if remaining < ttl:
            self._client.expire(index, ttl)

    def invalidate(self, tag: str, key: str | None = None) -> int:
        index = self._index(tag)
        if key is not None:
            name = self._name(tag, key)
            self._client.srem(index, name)
            return int(self._client.delete(name))

        names = list(self._client.smembers(index))
        evicted = int(self._client.delete(*names)) if names else 0
        self._client.delete(index)
        return evicted
