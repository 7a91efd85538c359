"""Redis client factory — used for the look-aside entity cache only.

The pool is created by the composition root and handed to RedisCache;
nothing else talks to Redis directly.
"""

import redis.asyncio as aioredis

from config.settings import Settings


def create_redis(settings: Settings) -> aioredis.Redis:
    """Build a lazily-connecting Redis pool with short connect/socket timeouts."""
    return aioredis.from_url(
        settings.REDIS_URL,
        decode_responses=True,
        socket_connect_timeout=settings.CACHE_CONNECT_TIMEOUT_SECONDS,
        socket_timeout=settings.CACHE_SOCKET_TIMEOUT_SECONDS,
    )
