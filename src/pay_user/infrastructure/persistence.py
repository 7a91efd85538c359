"""UserRepository — concrete implementation of UserRepositoryProtocol.

ORM queries over UserModel. Mutations flush (and refresh server-side
timestamps) but never commit: the application service owns the commit so it
can invalidate the cache after the write is durable.
"""

from typing import Any

from sqlalchemy import func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from src.pay_common.database import violated_constraint
from src.pay_common.errors import EmailExistsError, PhoneExistsError
from src.pay_common.ids import parse_uuid
from src.pay_common.pagination import Page, PageRequest
from src.pay_user.domain.models import User
from src.pay_user.infrastructure.db_models import UserModel

# Unique constraints from alembic/versions/002_create_users.py
_CONSTRAINT_ERRORS = {
    "uq_users_phone": PhoneExistsError,
    "uq_users_email": EmailExistsError,
}


def _to_domain(row: UserModel) -> User:
    return User(
        id=str(row.id),
        name=row.name,
        phone=row.phone,
        email=row.email,
        api_key=row.api_key,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


class UserRepository:
    async def _get_model(self, db: AsyncSession, user_id: str) -> UserModel | None:
        uid = parse_uuid(user_id)
        if uid is None:
            return None
        result = await db.execute(select(UserModel).where(UserModel.id == uid))
        return result.scalar_one_or_none()

    async def _get_one_by(self, db: AsyncSession, column: Any, value: str) -> User | None:
        result = await db.execute(select(UserModel).where(column == value))
        row = result.scalar_one_or_none()
        return _to_domain(row) if row else None

    async def _flush(self, db: AsyncSession, row: UserModel) -> User:
        try:
            await db.flush()
        except IntegrityError as exc:
            error_cls = _CONSTRAINT_ERRORS.get(violated_constraint(exc) or "")
            if error_cls is None:
                raise
            raise error_cls() from exc
        await db.refresh(row)
        return _to_domain(row)

    async def get_by_id(self, db: AsyncSession, user_id: str) -> User | None:
        row = await self._get_model(db, user_id)
        return _to_domain(row) if row else None

    async def get_by_phone(self, db: AsyncSession, phone: str) -> User | None:
        return await self._get_one_by(db, UserModel.phone, phone)

    async def get_by_email(self, db: AsyncSession, email: str) -> User | None:
        return await self._get_one_by(db, UserModel.email, email)

    async def get_by_api_key(self, db: AsyncSession, api_key: str) -> User | None:
        return await self._get_one_by(db, UserModel.api_key, api_key)

    async def list_users(
        self, db: AsyncSession, page: PageRequest, search: str | None
    ) -> Page[User]:
        filters = []
        if search:
            filters.append(
                or_(
                    UserModel.name.icontains(search, autoescape=True),
                    UserModel.phone.contains(search, autoescape=True),
                    UserModel.email.icontains(search, autoescape=True),
                )
            )

        # Same predicate for the page and the count so pages == ceil(total / limit)
        total = await db.scalar(select(func.count()).select_from(UserModel).where(*filters))
        result = await db.execute(
            select(UserModel)
            .where(*filters)
            .order_by(UserModel.created_at.desc(), UserModel.id.desc())
            .offset(page.offset)
            .limit(page.limit)
        )
        items = [_to_domain(row) for row in result.scalars().all()]
        return Page(items=items, total=total or 0, page=page.page, limit=page.limit)

    async def create(
        self, db: AsyncSession, name: str, phone: str, email: str | None
    ) -> User:
        row = UserModel(name=name, phone=phone, email=email)
        db.add(row)
        return await self._flush(db, row)

    async def update(
        self, db: AsyncSession, user_id: str, changes: dict[str, Any]
    ) -> User | None:
        row = await self._get_model(db, user_id)
        if row is None:
            return None
        for field, value in changes.items():
            setattr(row, field, value)
        return await self._flush(db, row)

    async def delete(self, db: AsyncSession, user_id: str) -> User | None:
        row = await self._get_model(db, user_id)
        if row is None:
            return None
        user = _to_domain(row)
        await db.delete(row)
        await db.flush()
        return user
