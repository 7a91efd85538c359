"""Shared test fixtures.

Unit-level fixtures wire the real services over in-memory fake repositories
(tests/unit/fakes.py) and the in-process cache; the database session is an
AsyncMock, so commit() calls can be asserted without PostgreSQL.
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from unittest.mock import AsyncMock

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from config.settings import Settings
from src.bootstrap import Container, build_services
from src.main import create_app
from src.pay_cache.infrastructure.memory_cache import InMemoryCache
from tests.unit.fakes import (
    FakePaymentMethodRepository,
    FakeProviderRepository,
    FakeUserRepository,
)


class FakeSessionFactory:
    """Callable like async_sessionmaker: `async with factory() as session`."""

    def __init__(self) -> None:
        self.sessions: list[AsyncMock] = []

    @asynccontextmanager
    async def __call__(self) -> AsyncIterator[AsyncMock]:
        session = AsyncMock()
        self.sessions.append(session)
        yield session


@pytest.fixture
def settings() -> Settings:
    return Settings(
        CACHE_BACKEND="memory",
        REQUEST_TIMEOUT_SECONDS=5.0,
        SLOW_REQUEST_SECONDS=1.0,
        LOG_LEVEL="WARNING",
    )


@pytest.fixture
def mock_db() -> AsyncMock:
    return AsyncMock()


@pytest.fixture
def cache() -> InMemoryCache:
    return InMemoryCache()


@pytest.fixture
def user_repo() -> FakeUserRepository:
    return FakeUserRepository()


@pytest.fixture
def method_repo(user_repo: FakeUserRepository) -> FakePaymentMethodRepository:
    return FakePaymentMethodRepository(users=user_repo)


@pytest.fixture
def provider_repo(method_repo: FakePaymentMethodRepository) -> FakeProviderRepository:
    repo = FakeProviderRepository()
    repo.methods = method_repo
    return repo


@pytest.fixture
def container(
    settings: Settings,
    cache: InMemoryCache,
    user_repo: FakeUserRepository,
    provider_repo: FakeProviderRepository,
    method_repo: FakePaymentMethodRepository,
) -> Container:
    users, providers, payment_methods, registry = build_services(
        settings, cache, user_repo, provider_repo, method_repo
    )
    return Container(
        settings=settings,
        engine=None,
        session_factory=FakeSessionFactory(),  # type: ignore[arg-type]
        cache=cache,
        users=users,
        providers=providers,
        payment_methods=payment_methods,
        registry=registry,
    )


@pytest.fixture
def app(settings: Settings, container: Container) -> FastAPI:
    return create_app(settings, container)


@pytest.fixture
async def client(app: FastAPI) -> AsyncIterator[AsyncClient]:
    """Async HTTP client for testing FastAPI endpoints."""
    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
