"""InMemoryCache — process-local CacheProtocol implementation with TTL expiry.

Used when CACHE_BACKEND=memory (single-process local runs) and in unit tests.
Expired entries are dropped lazily on read.
"""

import time
from collections.abc import Callable

from src.pay_cache.domain.cache import CacheResult
from src.pay_common.enums import CacheStatus
from src.pay_common.metrics import cache_operations_total


class InMemoryCache:
    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._entries: dict[str, tuple[str, float]] = {}

    async def get(self, key: str) -> CacheResult:
        entry = self._entries.get(key)
        if entry is not None and entry[1] <= self._clock():
            del self._entries[key]
            entry = None
        status = CacheStatus.MISS if entry is None else CacheStatus.HIT
        cache_operations_total.labels("get", status.value).inc()
        return CacheResult(status, entry[0] if entry else None)

    async def set(self, key: str, value: str, ttl_seconds: int) -> CacheStatus:
        self._entries[key] = (value, self._clock() + ttl_seconds)
        cache_operations_total.labels("set", CacheStatus.OK.value).inc()
        return CacheStatus.OK

    async def delete(self, *keys: str) -> CacheStatus:
        for key in keys:
            self._entries.pop(key, None)
        cache_operations_total.labels("delete", CacheStatus.OK.value).inc()
        return CacheStatus.OK

    async def delete_by_prefix(self, prefix: str) -> CacheStatus:
        for key in [k for k in self._entries if k.startswith(prefix)]:
            del self._entries[key]
        cache_operations_total.labels("delete_by_prefix", CacheStatus.OK.value).inc()
        return CacheStatus.OK

    async def ping(self) -> CacheStatus:
        return CacheStatus.OK

    async def close(self) -> None:
        self._entries.clear()

    def __contains__(self, key: str) -> bool:
        entry = self._entries.get(key)
        return entry is not None and entry[1] > self._clock()

    def __len__(self) -> int:
        return len(self._entries)
