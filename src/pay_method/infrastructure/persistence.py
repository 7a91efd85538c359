"""PaymentMethodRepository — concrete implementation of PaymentMethodRepositoryProtocol.

Mutations flush but never commit; PaymentMethodService owns the transaction
(and DefaultMethodEnforcer runs inside it).
"""

from typing import Any

from sqlalchemy import func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from src.pay_common.database import violated_constraint
from src.pay_common.enums import PaymentMethodType
from src.pay_common.errors import (
    InvalidProviderError,
    PaymentMethodExistsError,
    ValidationFailedError,
)
from src.pay_common.ids import parse_uuid
from src.pay_common.pagination import Page, PageRequest
from src.pay_method.domain.models import NewPaymentMethod, PaymentMethod
from src.pay_method.infrastructure.db_models import PaymentMethodModel
from src.pay_user.infrastructure.db_models import UserModel

# Domain field → ORM attribute, where they differ
_COLUMN_NAMES = {"metadata": "method_metadata"}

# Column CHECKs from alembic/versions/004_create_payment_methods.py that a
# request payload can trip
_PAYLOAD_CHECKS = {
    "ck_payment_methods_type",
    "ck_payment_methods_last4",
    "ck_payment_methods_expiry_month",
}


def _to_domain(row: PaymentMethodModel) -> PaymentMethod:
    return PaymentMethod(
        id=str(row.id),
        user_id=str(row.user_id),
        provider_id=str(row.provider_id),
        provider_method_id=row.provider_method_id,
        type=PaymentMethodType(row.type),
        is_active=row.is_active,
        is_default=row.is_default,
        last4=row.last4,
        expiry_month=row.expiry_month,
        expiry_year=row.expiry_year,
        brand=row.brand,
        metadata=dict(row.method_metadata or {}),
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


class PaymentMethodRepository:
    async def _get_model(self, db: AsyncSession, method_id: str) -> PaymentMethodModel | None:
        mid = parse_uuid(method_id)
        if mid is None:
            return None
        result = await db.execute(
            select(PaymentMethodModel).where(PaymentMethodModel.id == mid)
        )
        return result.scalar_one_or_none()

    async def _flush(
        self, db: AsyncSession, row: PaymentMethodModel
    ) -> PaymentMethod:
        try:
            await db.flush()
        except IntegrityError as exc:
            constraint = violated_constraint(exc)
            if constraint == "uq_payment_methods_provider_method_user":
                raise PaymentMethodExistsError(row.provider_method_id) from exc
            if constraint in _PAYLOAD_CHECKS:
                raise ValidationFailedError(f"Rejected by {constraint}") from exc
            if constraint == "fk_payment_methods_provider":
                raise InvalidProviderError(str(row.provider_id)) from exc
            raise
        await db.refresh(row)
        return _to_domain(row)

    async def get_for_user(
        self, db: AsyncSession, method_id: str, user_id: str
    ) -> PaymentMethod | None:
        mid, uid = parse_uuid(method_id), parse_uuid(user_id)
        if mid is None or uid is None:
            return None
        result = await db.execute(
            select(PaymentMethodModel).where(
                PaymentMethodModel.id == mid, PaymentMethodModel.user_id == uid
            )
        )
        row = result.scalar_one_or_none()
        return _to_domain(row) if row else None

    async def get_by_provider_method_id(
        self, db: AsyncSession, provider_id: str, provider_method_id: str, user_id: str
    ) -> PaymentMethod | None:
        pid, uid = parse_uuid(provider_id), parse_uuid(user_id)
        if pid is None or uid is None:
            return None
        result = await db.execute(
            select(PaymentMethodModel).where(
                PaymentMethodModel.provider_id == pid,
                PaymentMethodModel.provider_method_id == provider_method_id,
                PaymentMethodModel.user_id == uid,
            )
        )
        row = result.scalar_one_or_none()
        return _to_domain(row) if row else None

    async def list_for_user(
        self,
        db: AsyncSession,
        user_id: str,
        page: PageRequest,
        method_type: PaymentMethodType | None = None,
        active_only: bool = False,
        provider_id: str | None = None,
    ) -> Page[PaymentMethod]:
        uid = parse_uuid(user_id)
        if uid is None:
            return Page(items=[], total=0, page=page.page, limit=page.limit)

        filters = [PaymentMethodModel.user_id == uid]
        if method_type is not None:
            filters.append(PaymentMethodModel.type == method_type.value)
        if active_only:
            filters.append(PaymentMethodModel.is_active.is_(True))
        if provider_id is not None:
            pid = parse_uuid(provider_id)
            if pid is None:
                return Page(items=[], total=0, page=page.page, limit=page.limit)
            filters.append(PaymentMethodModel.provider_id == pid)

        total = await db.scalar(
            select(func.count()).select_from(PaymentMethodModel).where(*filters)
        )
        result = await db.execute(
            select(PaymentMethodModel)
            .where(*filters)
            .order_by(
                PaymentMethodModel.is_default.desc(),
                PaymentMethodModel.created_at.desc(),
                PaymentMethodModel.id.desc(),
            )
            .offset(page.offset)
            .limit(page.limit)
        )
        items = [_to_domain(row) for row in result.scalars().all()]
        return Page(items=items, total=total or 0, page=page.page, limit=page.limit)

    async def list_active_for_user(
        self, db: AsyncSession, user_id: str
    ) -> list[PaymentMethod]:
        uid = parse_uuid(user_id)
        if uid is None:
            return []
        result = await db.execute(
            select(PaymentMethodModel)
            .where(
                PaymentMethodModel.user_id == uid,
                PaymentMethodModel.is_active.is_(True),
            )
            .order_by(
                PaymentMethodModel.is_default.desc(),
                PaymentMethodModel.created_at.desc(),
            )
        )
        return [_to_domain(row) for row in result.scalars().all()]

    async def create(self, db: AsyncSession, method: NewPaymentMethod) -> PaymentMethod:
        row = PaymentMethodModel(
            user_id=parse_uuid(method.user_id),
            provider_id=parse_uuid(method.provider_id),
            provider_method_id=method.provider_method_id,
            type=method.type.value,
            last4=method.last4,
            expiry_month=method.expiry_month,
            expiry_year=method.expiry_year,
            brand=method.brand,
            is_active=True,
            is_default=method.is_default,
            method_metadata=method.metadata,
        )
        db.add(row)
        return await self._flush(db, row)

    async def update(
        self, db: AsyncSession, method_id: str, changes: dict[str, Any]
    ) -> PaymentMethod | None:
        row = await self._get_model(db, method_id)
        if row is None:
            return None
        for field, value in changes.items():
            if isinstance(value, PaymentMethodType):
                value = value.value
            setattr(row, _COLUMN_NAMES.get(field, field), value)
        return await self._flush(db, row)

    async def delete(self, db: AsyncSession, method_id: str) -> PaymentMethod | None:
        row = await self._get_model(db, method_id)
        if row is None:
            return None
        method = _to_domain(row)
        await db.delete(row)
        await db.flush()
        return method

    async def lock_owner(self, db: AsyncSession, user_id: str) -> bool:
        uid = parse_uuid(user_id)
        if uid is None:
            return False
        locked = await db.scalar(
            select(UserModel.id).where(UserModel.id == uid).with_for_update()
        )
        return locked is not None

    async def clear_defaults(
        self, db: AsyncSession, user_id: str, except_method_id: str | None = None
    ) -> int:
        filters = [
            PaymentMethodModel.user_id == parse_uuid(user_id),
            PaymentMethodModel.is_default.is_(True),
        ]
        if except_method_id is not None:
            filters.append(PaymentMethodModel.id != parse_uuid(except_method_id))
        result = await db.execute(
            update(PaymentMethodModel)
            .where(*filters)
            .values(is_default=False)
            .execution_options(synchronize_session="fetch")
        )
        return result.rowcount or 0
