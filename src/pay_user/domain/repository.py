"""Repository Protocol — dependency inversion for testability.

Unit tests inject a fake that conforms to this Protocol.
Infrastructure layer provides the real implementation.
"""

from typing import Any, Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.pay_common.pagination import Page, PageRequest
from src.pay_user.domain.models import User


class UserRepositoryProtocol(Protocol):
    async def get_by_id(self, db: AsyncSession, user_id: str) -> User | None: ...

    async def get_by_phone(self, db: AsyncSession, phone: str) -> User | None: ...

    async def get_by_email(self, db: AsyncSession, email: str) -> User | None: ...

    async def get_by_api_key(self, db: AsyncSession, api_key: str) -> User | None: ...

    async def list_users(
        self, db: AsyncSession, page: PageRequest, search: str | None
    ) -> Page[User]: ...

    async def create(
        self, db: AsyncSession, name: str, phone: str, email: str | None
    ) -> User: ...

    async def update(
        self, db: AsyncSession, user_id: str, changes: dict[str, Any]
    ) -> User | None: ...

    async def delete(self, db: AsyncSession, user_id: str) -> User | None: ...
