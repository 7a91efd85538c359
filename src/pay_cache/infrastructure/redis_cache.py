"""RedisCache — best-effort CacheProtocol implementation over redis.asyncio.

Every call is wrapped: RedisError / OSError are logged and reported as
CacheStatus.DEGRADED instead of propagating to the request.
Prefix invalidation uses SCAN (not KEYS) so it never blocks the server.
"""

import logging

import redis.asyncio as aioredis
from redis.exceptions import RedisError

from src.pay_cache.domain.cache import CacheResult
from src.pay_common.enums import CacheStatus
from src.pay_common.metrics import cache_operations_total

logger = logging.getLogger(__name__)

_SCAN_BATCH = 500


class RedisCache:
    def __init__(self, client: aioredis.Redis) -> None:
        self._client = client

    async def get(self, key: str) -> CacheResult:
        try:
            value = await self._client.get(key)
        except (RedisError, OSError) as exc:
            logger.error("Redis GET failed: key=%s error=%s", key, exc)
            return self._record("get", CacheResult(CacheStatus.DEGRADED))
        if value is None:
            return self._record("get", CacheResult(CacheStatus.MISS))
        logger.debug("Cache hit: key=%s", key)
        return self._record("get", CacheResult(CacheStatus.HIT, value))

    async def set(self, key: str, value: str, ttl_seconds: int) -> CacheStatus:
        try:
            await self._client.set(key, value, ex=ttl_seconds)
        except (RedisError, OSError) as exc:
            logger.error("Redis SET failed: key=%s error=%s", key, exc)
            return self._record_status("set", CacheStatus.DEGRADED)
        return self._record_status("set", CacheStatus.OK)

    async def delete(self, *keys: str) -> CacheStatus:
        if not keys:
            return CacheStatus.OK
        try:
            await self._client.delete(*keys)
        except (RedisError, OSError) as exc:
            logger.error("Redis DEL failed: keys=%s error=%s", keys, exc)
            return self._record_status("delete", CacheStatus.DEGRADED)
        return self._record_status("delete", CacheStatus.OK)

    async def delete_by_prefix(self, prefix: str) -> CacheStatus:
        try:
            batch: list[str] = []
            async for key in self._client.scan_iter(match=f"{prefix}*", count=_SCAN_BATCH):
                batch.append(key)
                if len(batch) >= _SCAN_BATCH:
                    await self._client.delete(*batch)
                    batch = []
            if batch:
                await self._client.delete(*batch)
        except (RedisError, OSError) as exc:
            logger.error("Redis prefix invalidation failed: prefix=%s error=%s", prefix, exc)
            return self._record_status("delete_by_prefix", CacheStatus.DEGRADED)
        return self._record_status("delete_by_prefix", CacheStatus.OK)

    async def ping(self) -> CacheStatus:
        try:
            await self._client.ping()
        except (RedisError, OSError) as exc:
            logger.warning("Redis PING failed: %s", exc)
            return CacheStatus.DEGRADED
        return CacheStatus.OK

    async def close(self) -> None:
        await self._client.aclose()

    @staticmethod
    def _record(operation: str, result: CacheResult) -> CacheResult:
        cache_operations_total.labels(operation, result.status.value).inc()
        return result

    @staticmethod
    def _record_status(operation: str, status: CacheStatus) -> CacheStatus:
        cache_operations_total.labels(operation, status.value).inc()
        return status
