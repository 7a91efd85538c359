"""PaymentProviderService — provider CRUD behind the look-aside cache.

Cache keys:
  provider:<id>    single provider, read-through
  providers:all    active-provider list, read-through

Any write touching a provider invalidates BOTH keys: a single-entity update
must never leave a stale copy inside the aggregate list.
Paginated listings bypass the cache entirely.
"""

import logging

from pydantic import TypeAdapter
from sqlalchemy.ext.asyncio import AsyncSession

from src.pay_cache.application.read_through import read_through
from src.pay_cache.domain.cache import PROVIDERS_ALL_KEY, CacheProtocol, provider_key
from src.pay_common.errors import (
    ProviderInUseError,
    ProviderNameExistsError,
    ProviderNotFoundError,
)
from src.pay_common.pagination import Page, PageRequest
from src.pay_provider.application.schemas import (
    CreateProviderRequest,
    UpdateProviderRequest,
)
from src.pay_provider.domain.models import PaymentProvider
from src.pay_provider.domain.repository import PaymentProviderRepositoryProtocol

logger = logging.getLogger(__name__)

_PROVIDER_ADAPTER = TypeAdapter(PaymentProvider)
_PROVIDER_LIST_ADAPTER = TypeAdapter(list[PaymentProvider])


class PaymentProviderService:
    def __init__(
        self,
        repo: PaymentProviderRepositoryProtocol,
        cache: CacheProtocol,
        ttl_seconds: int = 1800,
    ) -> None:
        self._repo = repo
        self._cache = cache
        self._ttl = ttl_seconds

    async def list_providers(
        self, db: AsyncSession, page: PageRequest, active_only: bool = False
    ) -> Page[PaymentProvider]:
        return await self._repo.list_providers(db, page, active_only)

    async def get_provider(self, db: AsyncSession, provider_id: str) -> PaymentProvider:
        provider = await read_through(
            self._cache,
            provider_key(provider_id),
            self._ttl,
            _PROVIDER_ADAPTER,
            lambda: self._repo.get_by_id(db, provider_id),
        )
        if provider is None:
            raise ProviderNotFoundError(provider_id)
        return provider

    async def find_by_name(self, db: AsyncSession, name: str) -> PaymentProvider | None:
        return await self._repo.get_by_name(db, name.lower())

    async def list_active_providers(self, db: AsyncSession) -> list[PaymentProvider]:
        providers = await read_through(
            self._cache,
            PROVIDERS_ALL_KEY,
            self._ttl,
            _PROVIDER_LIST_ADAPTER,
            lambda: self._repo.list_active(db),
        )
        return [p for p in providers or [] if p.is_active]

    async def count_payment_methods(self, db: AsyncSession, provider_id: str) -> int:
        return await self._repo.count_payment_methods(db, provider_id)

    async def create_provider(
        self, db: AsyncSession, req: CreateProviderRequest
    ) -> PaymentProvider:
        if await self._repo.get_by_name(db, req.name) is not None:
            raise ProviderNameExistsError(req.name)

        provider = await self._repo.create(
            db, req.name, req.display_name, req.is_active, req.config
        )
        await db.commit()
        await self._invalidate(provider.id)
        logger.info("Payment provider created: id=%s name=%s", provider.id, provider.name)
        return provider

    async def update_provider(
        self, db: AsyncSession, provider_id: str, req: UpdateProviderRequest
    ) -> PaymentProvider:
        changes = {
            field: getattr(req, field)
            for field in req.model_fields_set
            if getattr(req, field) is not None
        }
        provider = await self._repo.update(db, provider_id, changes)
        if provider is None:
            raise ProviderNotFoundError(provider_id)
        await db.commit()
        await self._invalidate(provider_id)
        logger.info("Payment provider updated: id=%s fields=%s", provider_id, sorted(changes))
        return provider

    async def toggle_active(self, db: AsyncSession, provider_id: str) -> PaymentProvider:
        existing = await self._repo.get_by_id(db, provider_id)
        if existing is None:
            raise ProviderNotFoundError(provider_id)

        provider = await self._repo.update(
            db, provider_id, {"is_active": not existing.is_active}
        )
        if provider is None:
            raise ProviderNotFoundError(provider_id)
        await db.commit()
        await self._invalidate(provider_id)
        logger.info(
            "Payment provider %s: id=%s",
            "activated" if provider.is_active else "deactivated",
            provider_id,
        )
        return provider

    async def delete_provider(self, db: AsyncSession, provider_id: str) -> PaymentProvider:
        existing = await self._repo.get_by_id(db, provider_id)
        if existing is None:
            raise ProviderNotFoundError(provider_id)

        # The FK (ON DELETE RESTRICT) is the final backstop
        method_count = await self._repo.count_payment_methods(db, provider_id)
        if method_count > 0:
            raise ProviderInUseError(provider_id, method_count)

        provider = await self._repo.delete(db, provider_id)
        if provider is None:
            raise ProviderNotFoundError(provider_id)
        await db.commit()
        await self._invalidate(provider_id)
        logger.info("Payment provider deleted: id=%s name=%s", provider_id, provider.name)
        return provider

    async def _invalidate(self, provider_id: str) -> None:
        await self._cache.delete(provider_key(provider_id), PROVIDERS_ALL_KEY)
