"""Look-aside cache contract.

The cache is an optimisation, never a source of truth:
  - Reads: check cache → store on miss → populate cache when the row exists.
  - Writes: commit to the store first, then invalidate every key that could
    hold the entity (its own key AND any aggregate/list key).
  - No negative caching: "not found" is never stored.

Backends never raise on connectivity failures. They log the failure and
return CacheStatus.DEGRADED, which callers treat exactly like a miss.
"""

from dataclasses import dataclass
from typing import Protocol

from src.pay_common.enums import CacheStatus


@dataclass(frozen=True)
class CacheResult:
    status: CacheStatus
    value: str | None = None

    @property
    def hit(self) -> bool:
        return self.status is CacheStatus.HIT


class CacheProtocol(Protocol):
    async def get(self, key: str) -> CacheResult: ...

    async def set(self, key: str, value: str, ttl_seconds: int) -> CacheStatus: ...

    async def delete(self, *keys: str) -> CacheStatus: ...

    async def delete_by_prefix(self, prefix: str) -> CacheStatus: ...

    async def ping(self) -> CacheStatus: ...

    async def close(self) -> None: ...


# ---------------------------------------------------------------------------
# Key namespace
# ---------------------------------------------------------------------------

PROVIDERS_ALL_KEY = "providers:all"


def provider_key(provider_id: str) -> str:
    return f"provider:{provider_id}"


def user_key(user_id: str) -> str:
    return f"user:{user_id}"


def user_api_key_key(api_key: str) -> str:
    return f"user:apikey:{api_key}"


def user_payment_methods_key(user_id: str) -> str:
    return f"user:{user_id}:payment-methods"
