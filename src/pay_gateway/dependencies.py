"""FastAPI dependencies over the composition root stored on app.state."""

from collections.abc import AsyncGenerator
from typing import Annotated

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.bootstrap import Container
from src.pay_method.application.service import PaymentMethodService
from src.pay_provider.application.registry import ProviderRegistry
from src.pay_provider.application.service import PaymentProviderService
from src.pay_user.application.service import UserService


def get_container(request: Request) -> Container:
    return request.app.state.container


ContainerDep = Annotated[Container, Depends(get_container)]


async def get_db_session(container: ContainerDep) -> AsyncGenerator[AsyncSession, None]:
    """Per-request AsyncSession; anything left uncommitted is rolled back on close."""
    async with container.session_factory() as session:
        yield session


def get_user_service(container: ContainerDep) -> UserService:
    return container.users


def get_provider_service(container: ContainerDep) -> PaymentProviderService:
    return container.providers


def get_payment_method_service(container: ContainerDep) -> PaymentMethodService:
    return container.payment_methods


def get_provider_registry(container: ContainerDep) -> ProviderRegistry:
    return container.registry


DbSession = Annotated[AsyncSession, Depends(get_db_session)]
UserServiceDep = Annotated[UserService, Depends(get_user_service)]
ProviderServiceDep = Annotated[PaymentProviderService, Depends(get_provider_service)]
PaymentMethodServiceDep = Annotated[
    PaymentMethodService, Depends(get_payment_method_service)
]
ProviderRegistryDep = Annotated[ProviderRegistry, Depends(get_provider_registry)]
