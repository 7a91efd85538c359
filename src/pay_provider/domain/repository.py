"""Repository Protocol — dependency inversion for testability."""

from typing import Any, Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.pay_common.pagination import Page, PageRequest
from src.pay_provider.domain.models import PaymentProvider


class PaymentProviderRepositoryProtocol(Protocol):
    async def get_by_id(
        self, db: AsyncSession, provider_id: str
    ) -> PaymentProvider | None: ...

    async def get_by_name(self, db: AsyncSession, name: str) -> PaymentProvider | None: ...

    async def list_providers(
        self, db: AsyncSession, page: PageRequest, active_only: bool
    ) -> Page[PaymentProvider]: ...

    async def list_active(self, db: AsyncSession) -> list[PaymentProvider]: ...

    async def create(
        self,
        db: AsyncSession,
        name: str,
        display_name: str,
        is_active: bool,
        config: dict[str, Any],
    ) -> PaymentProvider: ...

    async def update(
        self, db: AsyncSession, provider_id: str, changes: dict[str, Any]
    ) -> PaymentProvider | None: ...

    async def delete(self, db: AsyncSession, provider_id: str) -> PaymentProvider | None: ...

    async def count_payment_methods(self, db: AsyncSession, provider_id: str) -> int: ...
