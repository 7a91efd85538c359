"""Repository Protocol — dependency inversion for testability.

Every lookup is scoped to the owning user: a method that exists but belongs
to someone else is indistinguishable from one that does not exist.
"""

from typing import Any, Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.pay_common.enums import PaymentMethodType
from src.pay_common.pagination import Page, PageRequest
from src.pay_method.domain.models import NewPaymentMethod, PaymentMethod


class PaymentMethodRepositoryProtocol(Protocol):
    async def get_for_user(
        self, db: AsyncSession, method_id: str, user_id: str
    ) -> PaymentMethod | None: ...

    async def get_by_provider_method_id(
        self, db: AsyncSession, provider_id: str, provider_method_id: str, user_id: str
    ) -> PaymentMethod | None: ...

    async def list_for_user(
        self,
        db: AsyncSession,
        user_id: str,
        page: PageRequest,
        method_type: PaymentMethodType | None = None,
        active_only: bool = False,
        provider_id: str | None = None,
    ) -> Page[PaymentMethod]: ...

    async def list_active_for_user(
        self, db: AsyncSession, user_id: str
    ) -> list[PaymentMethod]: ...

    async def create(self, db: AsyncSession, method: NewPaymentMethod) -> PaymentMethod: ...

    async def update(
        self, db: AsyncSession, method_id: str, changes: dict[str, Any]
    ) -> PaymentMethod | None: ...

    async def delete(self, db: AsyncSession, method_id: str) -> PaymentMethod | None: ...

    async def lock_owner(self, db: AsyncSession, user_id: str) -> bool:
        """SELECT ... FOR UPDATE on the owning user row. False if the user is gone."""
        ...

    async def clear_defaults(
        self, db: AsyncSession, user_id: str, except_method_id: str | None = None
    ) -> int: ...
