"""PaymentMethodService — a user's stored payment methods.

All operations are scoped to the authenticated caller. The active-method
list is cached per user at user:<id>:payment-methods; every mutation commits
first and then drops that key. Default-flag changes go through
DefaultMethodEnforcer.
"""

import logging

from pydantic import TypeAdapter
from sqlalchemy.ext.asyncio import AsyncSession

from src.pay_cache.application.read_through import read_through
from src.pay_cache.domain.cache import CacheProtocol, user_payment_methods_key
from src.pay_common.enums import PaymentMethodType
from src.pay_common.errors import (
    InvalidProviderError,
    NoDefaultPaymentMethodError,
    PaymentMethodExistsError,
    PaymentMethodNotFoundError,
    ProviderNotFoundError,
)
from src.pay_common.pagination import Page, PageRequest
from src.pay_method.application.default_enforcer import DefaultMethodEnforcer
from src.pay_method.application.schemas import (
    CreatePaymentMethodRequest,
    UpdatePaymentMethodRequest,
)
from src.pay_method.domain.models import NewPaymentMethod, PaymentMethod
from src.pay_method.domain.repository import PaymentMethodRepositoryProtocol
from src.pay_provider.application.service import PaymentProviderService

logger = logging.getLogger(__name__)

_METHOD_LIST_ADAPTER = TypeAdapter(list[PaymentMethod])


class PaymentMethodService:
    def __init__(
        self,
        repo: PaymentMethodRepositoryProtocol,
        providers: PaymentProviderService,
        cache: CacheProtocol,
        ttl_seconds: int = 600,
    ) -> None:
        self._repo = repo
        self._providers = providers
        self._cache = cache
        self._ttl = ttl_seconds
        self._enforcer = DefaultMethodEnforcer(repo)

    async def list_for_user(
        self,
        db: AsyncSession,
        user_id: str,
        page: PageRequest,
        method_type: PaymentMethodType | None = None,
        active_only: bool = False,
        provider_id: str | None = None,
    ) -> Page[PaymentMethod]:
        return await self._repo.list_for_user(
            db, user_id, page, method_type, active_only, provider_id
        )

    async def get_for_user(
        self, db: AsyncSession, method_id: str, user_id: str
    ) -> PaymentMethod:
        method = await self._repo.get_for_user(db, method_id, user_id)
        if method is None:
            raise PaymentMethodNotFoundError(method_id)
        return method

    async def list_active_for_user(
        self, db: AsyncSession, user_id: str
    ) -> list[PaymentMethod]:
        methods = await read_through(
            self._cache,
            user_payment_methods_key(user_id),
            self._ttl,
            _METHOD_LIST_ADAPTER,
            lambda: self._repo.list_active_for_user(db, user_id),
        )
        return methods or []

    async def get_default_for_user(self, db: AsyncSession, user_id: str) -> PaymentMethod:
        for method in await self.list_active_for_user(db, user_id):
            if method.is_default:
                return method
        raise NoDefaultPaymentMethodError()

    async def create(
        self, db: AsyncSession, user_id: str, req: CreatePaymentMethodRequest
    ) -> PaymentMethod:
        try:
            provider = await self._providers.get_provider(db, req.provider_id)
        except ProviderNotFoundError:
            raise InvalidProviderError(req.provider_id) from None
        if not provider.is_active:
            raise InvalidProviderError(req.provider_id)

        existing = await self._repo.get_by_provider_method_id(
            db, req.provider_id, req.provider_method_id, user_id
        )
        if existing is not None:
            raise PaymentMethodExistsError(req.provider_method_id)

        method = await self._enforcer.create_with_default_flag(
            db,
            NewPaymentMethod(
                user_id=user_id,
                provider_id=req.provider_id,
                provider_method_id=req.provider_method_id,
                type=req.type,
                is_default=req.is_default,
                last4=req.last4,
                expiry_month=req.expiry_month,
                expiry_year=req.expiry_year,
                brand=req.brand,
                metadata=req.metadata,
            ),
        )
        await db.commit()
        await self._invalidate(user_id)
        logger.info(
            "Payment method created: id=%s user_id=%s provider=%s default=%s",
            method.id,
            user_id,
            provider.name,
            method.is_default,
        )
        return method

    async def update(
        self,
        db: AsyncSession,
        method_id: str,
        user_id: str,
        req: UpdatePaymentMethodRequest,
    ) -> PaymentMethod:
        await self.get_for_user(db, method_id, user_id)

        changes = {
            field: getattr(req, field)
            for field in req.model_fields_set
            if getattr(req, field) is not None
        }
        method = await self._repo.update(db, method_id, changes)
        if method is None:
            raise PaymentMethodNotFoundError(method_id)
        await db.commit()
        await self._invalidate(user_id)
        logger.info("Payment method updated: id=%s fields=%s", method_id, sorted(changes))
        return method

    async def delete(self, db: AsyncSession, method_id: str, user_id: str) -> PaymentMethod:
        await self.get_for_user(db, method_id, user_id)

        method = await self._repo.delete(db, method_id)
        if method is None:
            raise PaymentMethodNotFoundError(method_id)
        await db.commit()
        await self._invalidate(user_id)
        logger.info("Payment method deleted: id=%s user_id=%s", method_id, user_id)
        return method

    async def set_default(
        self, db: AsyncSession, method_id: str, user_id: str
    ) -> PaymentMethod:
        method = await self._enforcer.promote_to_default(db, method_id, user_id)
        await db.commit()
        await self._invalidate(user_id)
        return method

    async def deactivate(
        self, db: AsyncSession, method_id: str, user_id: str
    ) -> PaymentMethod:
        await self.get_for_user(db, method_id, user_id)

        method = await self._enforcer.deactivate(db, method_id, user_id)
        await db.commit()
        await self._invalidate(user_id)
        logger.info("Payment method deactivated: id=%s user_id=%s", method_id, user_id)
        return method

    async def _invalidate(self, user_id: str) -> None:
        await self._cache.delete(user_payment_methods_key(user_id))
