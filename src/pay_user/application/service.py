"""UserService — registration, profile updates, deletion and API-key lookup.

Reads by id and by API key go through the look-aside cache. Mutations commit
on the injected AsyncSession and only then invalidate the cache, so the next
read (cache or store) observes the write.
"""

import logging

from pydantic import TypeAdapter
from sqlalchemy.ext.asyncio import AsyncSession

from src.pay_cache.application.read_through import read_through
from src.pay_cache.domain.cache import (
    CacheProtocol,
    user_api_key_key,
    user_key,
    user_payment_methods_key,
)
from src.pay_common.errors import (
    EmailExistsError,
    InvalidApiKeyError,
    PhoneExistsError,
    UserNotFoundError,
)
from src.pay_common.ids import generate_api_key
from src.pay_common.pagination import Page, PageRequest
from src.pay_user.application.schemas import CreateUserRequest, UpdateUserRequest
from src.pay_user.domain.models import User
from src.pay_user.domain.repository import UserRepositoryProtocol

logger = logging.getLogger(__name__)

_USER_ADAPTER = TypeAdapter(User)


class UserService:
    def __init__(
        self,
        repo: UserRepositoryProtocol,
        cache: CacheProtocol,
        ttl_seconds: int = 1800,
    ) -> None:
        self._repo = repo
        self._cache = cache
        self._ttl = ttl_seconds

    async def list_users(
        self, db: AsyncSession, page: PageRequest, search: str | None = None
    ) -> Page[User]:
        logger.info("Listing users: page=%d limit=%d search=%r", page.page, page.limit, search)
        return await self._repo.list_users(db, page, search)

    async def get_user(self, db: AsyncSession, user_id: str) -> User:
        user = await read_through(
            self._cache,
            user_key(user_id),
            self._ttl,
            _USER_ADAPTER,
            lambda: self._repo.get_by_id(db, user_id),
        )
        if user is None:
            raise UserNotFoundError(user_id)
        return user

    async def get_user_by_phone(self, db: AsyncSession, phone: str) -> User:
        user = await self._repo.get_by_phone(db, phone)
        if user is None:
            raise UserNotFoundError(phone)
        return user

    async def authenticate(self, db: AsyncSession, api_key: str) -> User:
        """Resolve the caller behind an X-API-Key header."""
        user = await read_through(
            self._cache,
            user_api_key_key(api_key),
            self._ttl,
            _USER_ADAPTER,
            lambda: self._repo.get_by_api_key(db, api_key),
        )
        if user is None:
            raise InvalidApiKeyError()
        return user

    async def create_user(self, db: AsyncSession, req: CreateUserRequest) -> User:
        # Exact-match checks; the unique indexes are the final guard
        if await self._repo.get_by_phone(db, req.phone) is not None:
            raise PhoneExistsError()
        if req.email and await self._repo.get_by_email(db, req.email) is not None:
            raise EmailExistsError()

        user = await self._repo.create(db, req.name, req.phone, req.email)
        await db.commit()
        logger.info("User created: id=%s", user.id)
        return user

    async def update_user(
        self, db: AsyncSession, user_id: str, req: UpdateUserRequest
    ) -> User:
        existing = await self._repo.get_by_id(db, user_id)
        if existing is None:
            raise UserNotFoundError(user_id)

        changes = {
            field: getattr(req, field)
            for field in req.model_fields_set
            if field in ("name", "phone", "email")
        }
        # A null name/phone means "not provided"; only email may be cleared
        changes = {k: v for k, v in changes.items() if v is not None or k == "email"}

        if changes.get("phone") and changes["phone"] != existing.phone:
            other = await self._repo.get_by_phone(db, changes["phone"])
            if other is not None and other.id != user_id:
                raise PhoneExistsError()
        if changes.get("email") and changes["email"] != existing.email:
            other = await self._repo.get_by_email(db, changes["email"])
            if other is not None and other.id != user_id:
                raise EmailExistsError()

        user = await self._repo.update(db, user_id, changes)
        if user is None:
            raise UserNotFoundError(user_id)
        await db.commit()
        await self._invalidate(existing)
        logger.info("User updated: id=%s fields=%s", user_id, sorted(changes))
        return user

    async def delete_user(self, db: AsyncSession, user_id: str) -> User:
        user = await self._repo.delete(db, user_id)
        if user is None:
            raise UserNotFoundError(user_id)
        await db.commit()
        await self._invalidate(user)
        # Anything else namespaced under the user (payment-method lists, ...)
        await self._cache.delete_by_prefix(f"{user_key(user.id)}:")
        logger.info("User deleted: id=%s", user_id)
        return user

    async def issue_api_key(self, db: AsyncSession, user_id: str) -> User:
        """Generate a fresh API key, replacing (and revoking) any previous one."""
        existing = await self._repo.get_by_id(db, user_id)
        if existing is None:
            raise UserNotFoundError(user_id)

        user = await self._repo.update(db, user_id, {"api_key": generate_api_key()})
        if user is None:
            raise UserNotFoundError(user_id)
        await db.commit()
        await self._invalidate(existing)
        logger.info("API key issued: user_id=%s", user_id)
        return user

    async def _invalidate(self, user: User) -> None:
        keys = [user_key(user.id), user_payment_methods_key(user.id)]
        if user.api_key:
            keys.append(user_api_key_key(user.api_key))
        await self._cache.delete(*keys)
