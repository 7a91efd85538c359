"""Tests for the read-through helper."""

from dataclasses import dataclass
from datetime import UTC, datetime
from unittest.mock import AsyncMock

from pydantic import TypeAdapter

from src.pay_cache.application.read_through import read_through
from src.pay_cache.domain.cache import CacheResult
from src.pay_cache.infrastructure.memory_cache import InMemoryCache
from src.pay_common.enums import CacheStatus


@dataclass
class _Thing:
    id: str
    created_at: datetime


_ADAPTER = TypeAdapter(_Thing)
_THING = _Thing(id="t1", created_at=datetime(2026, 3, 1, 12, 0, tzinfo=UTC))


class TestReadThrough:
    async def test_miss_loads_and_populates(self) -> None:
        cache = InMemoryCache()
        loader = AsyncMock(return_value=_THING)

        result = await read_through(cache, "thing:t1", 60, _ADAPTER, loader)

        assert result == _THING
        loader.assert_awaited_once()
        assert "thing:t1" in cache

    async def test_hit_skips_loader_and_round_trips(self) -> None:
        cache = InMemoryCache()
        await read_through(cache, "thing:t1", 60, _ADAPTER, AsyncMock(return_value=_THING))
        loader = AsyncMock()

        result = await read_through(cache, "thing:t1", 60, _ADAPTER, loader)

        assert result == _THING
        assert result.created_at.tzinfo is not None
        loader.assert_not_awaited()

    async def test_absent_row_is_not_cached(self) -> None:
        cache = InMemoryCache()
        loader = AsyncMock(return_value=None)

        assert await read_through(cache, "thing:nope", 60, _ADAPTER, loader) is None
        assert "thing:nope" not in cache

        await read_through(cache, "thing:nope", 60, _ADAPTER, loader)
        assert loader.await_count == 2

    async def test_degraded_cache_falls_back_to_loader(self) -> None:
        cache = AsyncMock()
        cache.get.return_value = CacheResult(CacheStatus.DEGRADED)
        cache.set.return_value = CacheStatus.DEGRADED
        loader = AsyncMock(return_value=_THING)

        assert await read_through(cache, "thing:t1", 60, _ADAPTER, loader) == _THING
        loader.assert_awaited_once()

    async def test_undecodable_entry_is_dropped_and_reloaded(self) -> None:
        cache = InMemoryCache()
        await cache.set("thing:t1", '{"unexpected": true}', 60)
        loader = AsyncMock(return_value=_THING)

        assert await read_through(cache, "thing:t1", 60, _ADAPTER, loader) == _THING
        loader.assert_awaited_once()
        cached = await cache.get("thing:t1")
        assert _ADAPTER.validate_json(cached.value) == _THING
