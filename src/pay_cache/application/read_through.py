"""Read-through helper shared by the entity services.

    hit      → decode and return the cached value
    miss     → call loader (store), populate the cache when a value came back
    degraded → same as miss; the store answers

Values are serialised with a pydantic TypeAdapter over the domain dataclass,
so datetimes and enums round-trip without hand-written mappers.
"""

import logging
from collections.abc import Awaitable, Callable
from typing import TypeVar

from pydantic import TypeAdapter, ValidationError

from src.pay_cache.domain.cache import CacheProtocol

logger = logging.getLogger(__name__)

T = TypeVar("T")


async def read_through(
    cache: CacheProtocol,
    key: str,
    ttl_seconds: int,
    adapter: TypeAdapter[T],
    loader: Callable[[], Awaitable[T | None]],
) -> T | None:
    cached = await cache.get(key)
    if cached.hit and cached.value is not None:
        try:
            return adapter.validate_json(cached.value)
        except ValidationError:
            # Stale shape from an older deploy; drop it and reload
            logger.warning("Discarding undecodable cache entry: key=%s", key)
            await cache.delete(key)

    value = await loader()
    # No negative caching: an absent row is never stored
    if value is not None:
        await cache.set(key, adapter.dump_json(value).decode(), ttl_seconds)
    return value
