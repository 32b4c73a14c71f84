"""Key-value result caches (Redis-backed or process-local)."""

import json
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Protocol

import redis
import structlog

logger = structlog.get_logger()


class ResultCache(Protocol):
    """Minimal contract the engines rely on. Values are JSON-compatible."""

    def get(self, key: str) -> Any | None: ...

    def set(self, key: str, value: Any, ttl_seconds: int) -> None: ...

    def delete(self, key: str) -> None: ...


class RedisResultCache:
    """JSON values stored in Redis with SETEX.

    Args:
        client: Redis client (``decode_responses`` may be either setting).
        prefix: Namespace prepended to every key.
    """

    def __init__(self, client: redis.Redis, prefix: str = "life_leveling:"):
        self.client = client
        self.prefix = prefix

    @classmethod
    def from_url(cls, url: str, prefix: str = "life_leveling:") -> "RedisResultCache":
        return cls(redis.Redis.from_url(url, decode_responses=True), prefix=prefix)

    def _key(self, key: str) -> str:
        return f"{self.prefix}{key}"

    def get(self, key: str) -> Any | None:
        raw = self.client.get(self._key(key))
        if raw is None:
            return None
        return json.loads(raw)

    def set(self, key: str, value: Any, ttl_seconds: int) -> None:
        self.client.setex(self._key(key), ttl_seconds, json.dumps(value))

    def delete(self, key: str) -> None:
        self.client.delete(self._key(key))


@dataclass
class _Entry:
    payload: str
    expires_at: float


class InMemoryResultCache:
    """Process-local cache with per-entry expiry.

    Values are stored JSON-encoded so callers get a fresh copy on every read.
    Expired entries are swept on every write.
    """

    def __init__(self, prefix: str = "life_leveling:", clock: Callable[[], float] = time.monotonic):
        self.prefix = prefix
        self._clock = clock
        self._entries: dict[str, _Entry] = {}

    def get(self, key: str) -> Any | None:
        full_key = f"{self.prefix}{key}"
        entry = self._entries.get(full_key)
        if entry is None:
            return None
        if entry.expires_at <= self._clock():
            self._entries.pop(full_key, None)
            return None
        return json.loads(entry.payload)

    def set(self, key: str, value: Any, ttl_seconds: int) -> None:
        now = self._clock()
        self._sweep(now)
        self._entries[f"{self.prefix}{key}"] = _Entry(
            payload=json.dumps(value),
            expires_at=now + ttl_seconds,
        )

    def delete(self, key: str) -> None:
        self._entries.pop(f"{self.prefix}{key}", None)

    def _sweep(self, now: float) -> None:
        expired = [k for k, entry in self._entries.items() if entry.expires_at <= now]
        for k in expired:
            del self._entries[k]


def build_result_cache(redis_url: str | None, prefix: str) -> ResultCache:
    """Redis cache when a URL is configured, otherwise an in-process one."""
    if redis_url:
        logger.info("result_cache_configured", backend="redis")
        return RedisResultCache.from_url(redis_url, prefix=prefix)
    logger.info("result_cache_configured", backend="memory")
    return InMemoryResultCache(prefix=prefix)
