# src/forge_api/services/cache.py
"""Cache, short-lived lock and pub/sub backends.

``CACHE_BACKEND=redis`` uses a shared Redis server; ``memory`` keeps values
in-process and is what tests and single-worker development use.
"""

from __future__ import annotations

import json
import logging
import time
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from threading import Lock
from typing import Any

import redis
from redis.exceptions import LockError

from forge_api.core.settings import settings

logger = logging.getLogger(__name__)


class RedisCache:
    """Redis-backed cache. Values are stored as JSON."""

    def __init__(self, url: str | None = None) -> None:
        self._redis = redis.from_url(url or settings.redis_url)  # type: ignore[no-untyped-call]

    def get(self, key: str) -> Any:
        raw = self._redis.get(key)
        if raw is None:
            return None
        return json.loads(raw)

    def set(self, key: str, value: Any, ttl_seconds: int | None = None) -> None:
        self._redis.set(key, json.dumps(value), ex=ttl_seconds)

    def delete(self, key: str) -> None:
        self._redis.delete(key)

    def remember(self, key: str, ttl_seconds: int, factory: Callable[[], Any]) -> Any:
        """Return the cached value for ``key`` or compute, store and return it."""
        cached = self.get(key)
        if cached is not None:
            return cached
        value = factory()
        self.set(key, value, ttl_seconds)
        return value

    @contextmanager
    def lock(self, name: str, ttl_seconds: int) -> Iterator[bool]:
        """Try to take a non-blocking lock; yields whether it was acquired."""
        lock = self._redis.lock(f"lock:{name}", timeout=ttl_seconds, blocking=False)
        acquired = bool(lock.acquire())
        try:
            yield acquired
        finally:
            if acquired:
                try:
                    lock.release()
                except LockError:
                    logger.warning("Lock %s expired before it was released", name)

    def publish(self, channel: str, message: dict[str, Any]) -> None:
        self._redis.publish(channel, json.dumps(message))


class MemoryCache:
    """In-process cache with the same interface as :class:`RedisCache`."""

    def __init__(self) -> None:
        self._lock = Lock()
        self._values: dict[str, tuple[Any, float | None]] = {}
        self._locks: dict[str, float] = {}
        self.published: list[tuple[str, dict[str, Any]]] = []

    def get(self, key: str) -> Any:
        with self._lock:
            entry = self._values.get(key)
            if entry is None:
                return None
            value, expires = entry
            if expires is not None and expires <= time.monotonic():
                del self._values[key]
                return None
            return value

    def set(self, key: str, value: Any, ttl_seconds: int | None = None) -> None:
        expires = time.monotonic() + ttl_seconds if ttl_seconds else None
        with self._lock:
            self._values[key] = (value, expires)

    def delete(self, key: str) -> None:
        with self._lock:
            self._values.pop(key, None)

    def remember(self, key: str, ttl_seconds: int, factory: Callable[[], Any]) -> Any:
        cached = self.get(key)
        if cached is not None:
            return cached
        value = factory()
        self.set(key, value, ttl_seconds)
        return value

    @contextmanager
    def lock(self, name: str, ttl_seconds: int) -> Iterator[bool]:
        now = time.monotonic()
        with self._lock:
            held_until = self._locks.get(name)
            acquired = held_until is None or held_until <= now
            if acquired:
                self._locks[name] = now + ttl_seconds
        try:
            yield acquired
        finally:
            if acquired:
                with self._lock:
                    self._locks.pop(name, None)

    def publish(self, channel: str, message: dict[str, Any]) -> None:
        with self._lock:
            self.published.append((channel, message))

    def clear(self) -> None:
        with self._lock:
            self._values.clear()
            self._locks.clear()
            self.published.clear()


Cache = RedisCache | MemoryCache

_CACHE: Cache | None = None


def get_cache() -> Cache:
    """Return the process-wide cache backend selected by ``CACHE_BACKEND``."""
    global _CACHE
    if _CACHE is None:
        backend = settings.cache_backend.lower()
        if backend == "memory":
            _CACHE = MemoryCache()
        elif backend == "redis":
            _CACHE = RedisCache()
        else:
            raise ValueError(f"Unknown CACHE_BACKEND: {settings.cache_backend}")
        logger.info("Using %s cache backend", backend)
    return _CACHE
