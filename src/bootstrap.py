"""Composition root.

build_container() wires settings → engine/session factory → cache backend →
repositories → services → provider registry. The FastAPI app keeps the
container on app.state; dependencies in src/pay_gateway/dependencies.py read
it from there.
"""

import logging
from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from config.settings import Settings
from src.pay_cache.domain.cache import CacheProtocol
from src.pay_cache.infrastructure.memory_cache import InMemoryCache
from src.pay_cache.infrastructure.redis_cache import RedisCache
from src.pay_common.database import create_engine, create_session_factory
from src.pay_common.redis_client import create_redis
from src.pay_method.application.service import PaymentMethodService
from src.pay_method.domain.repository import PaymentMethodRepositoryProtocol
from src.pay_method.infrastructure.persistence import PaymentMethodRepository
from src.pay_provider.application.registry import ProviderRegistry
from src.pay_provider.application.service import PaymentProviderService
from src.pay_provider.domain.repository import PaymentProviderRepositoryProtocol
from src.pay_provider.infrastructure.persistence import PaymentProviderRepository
from src.pay_user.application.service import UserService
from src.pay_user.domain.repository import UserRepositoryProtocol
from src.pay_user.infrastructure.persistence import UserRepository

logger = logging.getLogger(__name__)


@dataclass
class Container:
    settings: Settings
    engine: AsyncEngine | None
    session_factory: async_sessionmaker[AsyncSession]
    cache: CacheProtocol
    users: UserService
    providers: PaymentProviderService
    payment_methods: PaymentMethodService
    registry: ProviderRegistry

    async def close(self) -> None:
        await self.cache.close()
        if self.engine is not None:
            await self.engine.dispose()


def build_cache(settings: Settings) -> CacheProtocol:
    if settings.CACHE_BACKEND == "memory":
        logger.info("Using in-process cache backend")
        return InMemoryCache()
    if settings.CACHE_BACKEND != "redis":
        raise ValueError(f"Unknown CACHE_BACKEND: {settings.CACHE_BACKEND!r}")
    return RedisCache(create_redis(settings))


def build_services(
    settings: Settings,
    cache: CacheProtocol,
    user_repo: UserRepositoryProtocol | None = None,
    provider_repo: PaymentProviderRepositoryProtocol | None = None,
    method_repo: PaymentMethodRepositoryProtocol | None = None,
) -> tuple[UserService, PaymentProviderService, PaymentMethodService, ProviderRegistry]:
    """Services over the given repositories (ORM-backed ones by default)."""
    users = UserService(
        user_repo or UserRepository(), cache, settings.CACHE_TTL_USER_SECONDS
    )
    providers = PaymentProviderService(
        provider_repo or PaymentProviderRepository(),
        cache,
        settings.CACHE_TTL_PROVIDER_SECONDS,
    )
    payment_methods = PaymentMethodService(
        method_repo or PaymentMethodRepository(),
        providers,
        cache,
        settings.CACHE_TTL_PAYMENT_METHODS_SECONDS,
    )
    return users, providers, payment_methods, ProviderRegistry(providers)


def build_container(settings: Settings) -> Container:
    engine = create_engine(settings)
    cache = build_cache(settings)
    users, providers, payment_methods, registry = build_services(settings, cache)
    return Container(
        settings=settings,
        engine=engine,
        session_factory=create_session_factory(engine),
        cache=cache,
        users=users,
        providers=providers,
        payment_methods=payment_methods,
        registry=registry,
    )
