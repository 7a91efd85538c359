"""PaymentProviderRepository — concrete implementation of PaymentProviderRepositoryProtocol.

Mutations flush but never commit; PaymentProviderService owns the commit.
"""

from typing import Any

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from src.pay_common.database import violated_constraint
from src.pay_common.errors import ProviderInUseError, ProviderNameExistsError
from src.pay_common.ids import parse_uuid
from src.pay_common.pagination import Page, PageRequest
from src.pay_method.infrastructure.db_models import PaymentMethodModel
from src.pay_provider.domain.models import PaymentProvider
from src.pay_provider.infrastructure.db_models import PaymentProviderModel


def _to_domain(row: PaymentProviderModel) -> PaymentProvider:
    return PaymentProvider(
        id=str(row.id),
        name=row.name,
        display_name=row.display_name,
        is_active=row.is_active,
        config=dict(row.config or {}),
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


class PaymentProviderRepository:
    async def _get_model(
        self, db: AsyncSession, provider_id: str
    ) -> PaymentProviderModel | None:
        pid = parse_uuid(provider_id)
        if pid is None:
            return None
        result = await db.execute(
            select(PaymentProviderModel).where(PaymentProviderModel.id == pid)
        )
        return result.scalar_one_or_none()

    async def get_by_id(self, db: AsyncSession, provider_id: str) -> PaymentProvider | None:
        row = await self._get_model(db, provider_id)
        return _to_domain(row) if row else None

    async def get_by_name(self, db: AsyncSession, name: str) -> PaymentProvider | None:
        result = await db.execute(
            select(PaymentProviderModel).where(PaymentProviderModel.name == name)
        )
        row = result.scalar_one_or_none()
        return _to_domain(row) if row else None

    async def list_providers(
        self, db: AsyncSession, page: PageRequest, active_only: bool
    ) -> Page[PaymentProvider]:
        filters = [PaymentProviderModel.is_active.is_(True)] if active_only else []
        total = await db.scalar(
            select(func.count()).select_from(PaymentProviderModel).where(*filters)
        )
        result = await db.execute(
            select(PaymentProviderModel)
            .where(*filters)
            .order_by(PaymentProviderModel.created_at.desc(), PaymentProviderModel.id.desc())
            .offset(page.offset)
            .limit(page.limit)
        )
        items = [_to_domain(row) for row in result.scalars().all()]
        return Page(items=items, total=total or 0, page=page.page, limit=page.limit)

    async def list_active(self, db: AsyncSession) -> list[PaymentProvider]:
        result = await db.execute(
            select(PaymentProviderModel)
            .where(PaymentProviderModel.is_active.is_(True))
            .order_by(PaymentProviderModel.name.asc())
        )
        return [_to_domain(row) for row in result.scalars().all()]

    async def create(
        self,
        db: AsyncSession,
        name: str,
        display_name: str,
        is_active: bool,
        config: dict[str, Any],
    ) -> PaymentProvider:
        row = PaymentProviderModel(
            name=name, display_name=display_name, is_active=is_active, config=config
        )
        db.add(row)
        try:
            await db.flush()
        except IntegrityError as exc:
            if violated_constraint(exc) == "uq_payment_providers_name":
                raise ProviderNameExistsError(name) from exc
            raise
        await db.refresh(row)
        return _to_domain(row)

    async def update(
        self, db: AsyncSession, provider_id: str, changes: dict[str, Any]
    ) -> PaymentProvider | None:
        row = await self._get_model(db, provider_id)
        if row is None:
            return None
        for field, value in changes.items():
            setattr(row, field, value)
        await db.flush()
        await db.refresh(row)
        return _to_domain(row)

    async def delete(self, db: AsyncSession, provider_id: str) -> PaymentProvider | None:
        row = await self._get_model(db, provider_id)
        if row is None:
            return None
        provider = _to_domain(row)
        await db.delete(row)
        try:
            await db.flush()
        except IntegrityError as exc:
            # A method was attached between the count check and the delete
            raise ProviderInUseError(provider_id, 1) from exc
        return provider

    async def count_payment_methods(self, db: AsyncSession, provider_id: str) -> int:
        pid = parse_uuid(provider_id)
        if pid is None:
            return 0
        count = await db.scalar(
            select(func.count())
            .select_from(PaymentMethodModel)
            .where(PaymentMethodModel.provider_id == pid)
        )
        return count or 0
