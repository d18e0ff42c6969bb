# tests/services/test_cache.py
"""Tests for the cache backends."""

import pytest
import redis
from redis.exceptions import LockError

from forge_api.services.cache import MemoryCache, RedisCache, get_cache


def test_get_cache_is_a_singleton() -> None:
    assert get_cache() is get_cache()


def test_remember_computes_once() -> None:
    cache = MemoryCache()
    calls: list[int] = []

    def load() -> list[int]:
        calls.append(1)
        return [1, 2]

    assert cache.remember("ids", 60, load) == [1, 2]
    assert cache.remember("ids", 60, load) == [1, 2]
    assert len(calls) == 1

    cache.delete("ids")
    assert cache.get("ids") is None


def test_lock_is_exclusive_until_released() -> None:
    cache = MemoryCache()

    with cache.lock("peak", 5) as first:
        with cache.lock("peak", 5) as second:
            assert first is True
            assert second is False

    with cache.lock("peak", 5) as again:
        assert again is True


def test_expired_lock_can_be_taken() -> None:
    cache = MemoryCache()

    with cache.lock("peak", 0) as first:
        with cache.lock("peak", 5) as second:
            assert first is True
            assert second is True


class FakeRedisLock:
    def __init__(self, client: "FakeRedis", name: str, timeout: int, blocking: bool) -> None:
        self.client = client
        self.name = name
        self.timeout = timeout
        self.blocking = blocking

    def acquire(self) -> bool:
        if self.name in self.client.held:
            return False
        self.client.held.add(self.name)
        return True

    def release(self) -> None:
        if self.name not in self.client.held:
            raise LockError("Cannot release an unlocked lock")
        self.client.held.discard(self.name)


class FakeRedis:
    def __init__(self) -> None:
        self.held: set[str] = set()
        self.locks: list[FakeRedisLock] = []

    def lock(self, name: str, timeout: int, blocking: bool) -> FakeRedisLock:
        lock = FakeRedisLock(self, name, timeout, blocking)
        self.locks.append(lock)
        return lock


@pytest.fixture()
def fake_redis(monkeypatch) -> FakeRedis:
    client = FakeRedis()
    monkeypatch.setattr(redis, "from_url", lambda url: client)
    return client


def test_redis_lock_uses_the_client_lock(fake_redis) -> None:
    cache = RedisCache("redis://cache:6379")

    with cache.lock("peak", 5) as first:
        with cache.lock("peak", 5) as second:
            assert first is True
            assert second is False

    assert fake_redis.held == set()
    assert [(lock.name, lock.timeout, lock.blocking) for lock in fake_redis.locks] == [
        ("lock:peak", 5, False),
        ("lock:peak", 5, False),
    ]


def test_redis_lock_that_expired_is_not_an_error(fake_redis, caplog) -> None:
    cache = RedisCache("redis://cache:6379")

    with cache.lock("peak", 5) as acquired:
        assert acquired is True
        fake_redis.held.clear()

    assert "expired before it was released" in caplog.text
