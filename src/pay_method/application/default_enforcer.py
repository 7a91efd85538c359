"""DefaultMethodEnforcer — at most one default payment method per user.

Every default change (and deactivation) runs inside the caller's transaction:

  1. SELECT ... FOR UPDATE on the owning users row
  2. clear is_default on the user's other methods
  3. set is_default on the target (or insert it with the flag set)

Step 1 serialises concurrent promotions for the same user; the partial
unique index uq_payment_methods_one_default is the store-level backstop.
The caller commits.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from src.pay_common.errors import (
    PaymentMethodInactiveError,
    PaymentMethodNotFoundError,
    UserNotFoundError,
)
from src.pay_method.domain.models import NewPaymentMethod, PaymentMethod
from src.pay_method.domain.repository import PaymentMethodRepositoryProtocol

logger = logging.getLogger(__name__)


class DefaultMethodEnforcer:
    def __init__(self, repo: PaymentMethodRepositoryProtocol) -> None:
        self._repo = repo

    async def _lock(self, db: AsyncSession, user_id: str) -> None:
        if not await self._repo.lock_owner(db, user_id):
            raise UserNotFoundError(user_id)

    async def promote_to_default(
        self, db: AsyncSession, method_id: str, user_id: str
    ) -> PaymentMethod:
        await self._lock(db, user_id)

        # Re-read under the lock: a concurrent deactivate may have landed
        method = await self._repo.get_for_user(db, method_id, user_id)
        if method is None:
            raise PaymentMethodNotFoundError(method_id)
        if not method.is_active:
            raise PaymentMethodInactiveError(method_id)
        if method.is_default:
            return method

        cleared = await self._repo.clear_defaults(db, user_id, except_method_id=method_id)
        promoted = await self._repo.update(db, method_id, {"is_default": True})
        if promoted is None:
            raise PaymentMethodNotFoundError(method_id)
        logger.info(
            "Default payment method changed: user_id=%s method_id=%s demoted=%d",
            user_id,
            method_id,
            cleared,
        )
        return promoted

    async def create_with_default_flag(
        self, db: AsyncSession, method: NewPaymentMethod
    ) -> PaymentMethod:
        if not method.is_default:
            return await self._repo.create(db, method)

        await self._lock(db, method.user_id)
        await self._repo.clear_defaults(db, method.user_id)
        return await self._repo.create(db, method)

    async def deactivate(
        self, db: AsyncSession, method_id: str, user_id: str
    ) -> PaymentMethod:
        """Deactivate and drop the default flag; no other method is promoted.

        Takes the same owner lock as promotion, so a concurrent promote either
        finishes first or sees the method already inactive.
        """
        await self._lock(db, user_id)
        if await self._repo.get_for_user(db, method_id, user_id) is None:
            raise PaymentMethodNotFoundError(method_id)
        method = await self._repo.update(
            db, method_id, {"is_active": False, "is_default": False}
        )
        if method is None:
            raise PaymentMethodNotFoundError(method_id)
        return method
