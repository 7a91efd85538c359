"""Tests for the cache backends (InMemoryCache, RedisCache over a mocked client)."""

from collections.abc import AsyncIterator
from unittest.mock import AsyncMock, MagicMock

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import TimeoutError as RedisTimeoutError

from src.pay_cache.domain.cache import (
    PROVIDERS_ALL_KEY,
    provider_key,
    user_api_key_key,
    user_key,
    user_payment_methods_key,
)
from src.pay_cache.infrastructure.memory_cache import InMemoryCache
from src.pay_cache.infrastructure.redis_cache import RedisCache
from src.pay_common.enums import CacheStatus


class _Clock:
    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


class TestKeys:
    def test_key_namespace(self) -> None:
        assert provider_key("p1") == "provider:p1"
        assert PROVIDERS_ALL_KEY == "providers:all"
        assert user_key("u1") == "user:u1"
        assert user_api_key_key("pk_x") == "user:apikey:pk_x"
        assert user_payment_methods_key("u1") == "user:u1:payment-methods"

    def test_user_scoped_keys_share_prefix(self) -> None:
        assert user_payment_methods_key("u1").startswith(f"{user_key('u1')}:")


class TestInMemoryCache:
    async def test_miss_then_hit(self) -> None:
        cache = InMemoryCache()
        assert (await cache.get("k")).status is CacheStatus.MISS
        assert await cache.set("k", "v", 60) is CacheStatus.OK
        result = await cache.get("k")
        assert result.hit
        assert result.value == "v"

    async def test_entry_expires_after_ttl(self) -> None:
        clock = _Clock()
        cache = InMemoryCache(clock=clock)
        await cache.set("k", "v", 10)
        clock.now += 9.9
        assert (await cache.get("k")).hit
        clock.now += 0.2
        assert (await cache.get("k")).status is CacheStatus.MISS
        assert len(cache) == 0

    async def test_delete_many(self) -> None:
        cache = InMemoryCache()
        await cache.set("a", "1", 60)
        await cache.set("b", "2", 60)
        await cache.set("c", "3", 60)
        await cache.delete("a", "b", "missing")
        assert "a" not in cache
        assert "b" not in cache
        assert "c" in cache

    async def test_delete_by_prefix(self) -> None:
        cache = InMemoryCache()
        await cache.set("user:1", "x", 60)
        await cache.set("user:1:payment-methods", "[]", 60)
        await cache.set("user:10", "y", 60)
        await cache.delete_by_prefix("user:1:")
        assert "user:1" in cache
        assert "user:10" in cache
        assert "user:1:payment-methods" not in cache

    async def test_ping_ok(self) -> None:
        assert await InMemoryCache().ping() is CacheStatus.OK


def _redis_client() -> AsyncMock:
    client = AsyncMock()
    client.scan_iter = MagicMock()
    return client


async def _aiter(items: list[str]) -> AsyncIterator[str]:
    for item in items:
        yield item


class TestRedisCache:
    async def test_get_hit(self) -> None:
        client = _redis_client()
        client.get.return_value = '{"id": "1"}'
        result = await RedisCache(client).get("provider:1")
        assert result.status is CacheStatus.HIT
        assert result.value == '{"id": "1"}'

    async def test_get_miss(self) -> None:
        client = _redis_client()
        client.get.return_value = None
        assert (await RedisCache(client).get("provider:1")).status is CacheStatus.MISS

    async def test_set_passes_ttl(self) -> None:
        client = _redis_client()
        assert await RedisCache(client).set("k", "v", 600) is CacheStatus.OK
        client.set.assert_awaited_once_with("k", "v", ex=600)

    @pytest.mark.parametrize("error", [RedisConnectionError("down"), RedisTimeoutError("slow"), OSError("reset")])
    async def test_failures_degrade_instead_of_raising(self, error: Exception) -> None:
        client = _redis_client()
        client.get.side_effect = error
        client.set.side_effect = error
        client.delete.side_effect = error
        client.ping.side_effect = error
        cache = RedisCache(client)

        assert (await cache.get("k")).status is CacheStatus.DEGRADED
        assert await cache.set("k", "v", 60) is CacheStatus.DEGRADED
        assert await cache.delete("k") is CacheStatus.DEGRADED
        assert await cache.ping() is CacheStatus.DEGRADED

    async def test_delete_without_keys_is_noop(self) -> None:
        client = _redis_client()
        assert await RedisCache(client).delete() is CacheStatus.OK
        client.delete.assert_not_awaited()

    async def test_delete_by_prefix_scans_and_deletes(self) -> None:
        client = _redis_client()
        client.scan_iter.return_value = _aiter(["user:1:payment-methods", "user:1:other"])
        status = await RedisCache(client).delete_by_prefix("user:1:")
        assert status is CacheStatus.OK
        client.scan_iter.assert_called_once()
        assert client.scan_iter.call_args.kwargs["match"] == "user:1:*"
        client.delete.assert_awaited_once_with("user:1:payment-methods", "user:1:other")

    async def test_delete_by_prefix_with_no_matches(self) -> None:
        client = _redis_client()
        client.scan_iter.return_value = _aiter([])
        assert await RedisCache(client).delete_by_prefix("user:9:") is CacheStatus.OK
        client.delete.assert_not_awaited()

    async def test_close_releases_pool(self) -> None:
        client = _redis_client()
        await RedisCache(client).close()
        client.aclose.assert_awaited_once()
