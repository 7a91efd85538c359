"""Unit tests for ProviderRegistry and the backend extension point."""

from typing import Any
from unittest.mock import AsyncMock

import pytest

from src.pay_cache.infrastructure.memory_cache import InMemoryCache
from src.pay_common.enums import PaymentMethodType
from src.pay_provider.application.registry import ProviderRegistry
from src.pay_provider.application.schemas import CreateProviderRequest
from src.pay_provider.application.service import PaymentProviderService
from src.pay_provider.domain.backend import (
    PaymentMethodData,
    PaymentProviderBackend,
    ProviderResult,
    StoredPaymentMethod,
)
from tests.unit.fakes import FakeProviderRepository


class _EchoBackend(PaymentProviderBackend):
    async def store(self, data: PaymentMethodData) -> ProviderResult[StoredPaymentMethod]:
        return ProviderResult(success=False, error="not supported")

    async def retrieve(self, provider_method_id: str) -> ProviderResult[StoredPaymentMethod]:
        return ProviderResult(success=False, error="not supported")

    async def delete(self, provider_method_id: str) -> ProviderResult[bool]:
        return ProviderResult(success=True, data=True)

    async def validate(self, data: PaymentMethodData) -> ProviderResult[bool]:
        return ProviderResult(success=True, data=data.last4 is not None)


class _EchoFactory:
    name = "stripe"

    def __init__(self, required_key: str = "apiKey") -> None:
        self.required_key = required_key
        self.created = 0

    def validate_config(self, config: dict[str, Any]) -> bool:
        return self.required_key in config

    def create(self, config: dict[str, Any]) -> PaymentProviderBackend:
        self.created += 1
        return _EchoBackend(self.name, config)


@pytest.fixture
def providers(provider_repo: FakeProviderRepository, cache: InMemoryCache) -> PaymentProviderService:
    return PaymentProviderService(provider_repo, cache)


@pytest.fixture
def registry(providers: PaymentProviderService) -> ProviderRegistry:
    return ProviderRegistry(providers)


async def _add_stripe(
    providers: PaymentProviderService, db: AsyncMock, config: dict[str, Any] | None = None
) -> None:
    await providers.create_provider(
        db,
        CreateProviderRequest(
            name="stripe", display_name="Stripe", config=config if config is not None else {"apiKey": "sk_test"}
        ),
    )


class TestBackend:
    async def test_abstract_backend_cannot_be_instantiated(self) -> None:
        with pytest.raises(TypeError):
            PaymentProviderBackend("x", {})  # type: ignore[abstract]

    async def test_config_is_copied_and_merged(self) -> None:
        backend = _EchoBackend("stripe", {"apiKey": "a"})
        backend.update_config({"webhookSecret": "w"})
        assert backend.config == {"apiKey": "a", "webhookSecret": "w"}
        backend.config["apiKey"] = "mutated"
        assert backend.config["apiKey"] == "a"

    async def test_validate(self) -> None:
        data = PaymentMethodData(type=PaymentMethodType.CREDIT_CARD, provider_method_id="pm_1", last4="4242")
        result = await _EchoBackend("stripe", {}).validate(data)
        assert result.success is True
        assert result.data is True


class TestProviderRegistry:
    async def test_builds_backend_lazily_and_reuses_it(
        self, registry: ProviderRegistry, providers: PaymentProviderService, mock_db: AsyncMock
    ) -> None:
        factory = _EchoFactory()
        registry.register_factory("Stripe", factory)
        await _add_stripe(providers, mock_db)

        assert registry.loaded_backends == []
        first = await registry.get_backend(mock_db, "stripe")
        second = await registry.get_backend(mock_db, "STRIPE")

        assert first is not None
        assert first is second
        assert first.config == {"apiKey": "sk_test"}
        assert factory.created == 1
        assert registry.registered_factories == ["stripe"]
        assert registry.loaded_backends == ["stripe"]

    async def test_no_factory(self, registry: ProviderRegistry, mock_db: AsyncMock) -> None:
        assert await registry.get_backend(mock_db, "stripe") is None

    async def test_unknown_or_inactive_provider(
        self,
        registry: ProviderRegistry,
        providers: PaymentProviderService,
        provider_repo: FakeProviderRepository,
        mock_db: AsyncMock,
    ) -> None:
        registry.register_factory("stripe", _EchoFactory())
        assert await registry.get_backend(mock_db, "stripe") is None

        await _add_stripe(providers, mock_db)
        stripe = await provider_repo.get_by_name(mock_db, "stripe")
        await providers.toggle_active(mock_db, stripe.id)
        assert await registry.get_backend(mock_db, "stripe") is None

    async def test_invalid_config(
        self, registry: ProviderRegistry, providers: PaymentProviderService, mock_db: AsyncMock
    ) -> None:
        registry.register_factory("stripe", _EchoFactory(required_key="secretKey"))
        await _add_stripe(providers, mock_db)
        assert await registry.get_backend(mock_db, "stripe") is None

    async def test_refresh_rebuilds_from_new_config(
        self,
        registry: ProviderRegistry,
        providers: PaymentProviderService,
        provider_repo: FakeProviderRepository,
        mock_db: AsyncMock,
    ) -> None:
        factory = _EchoFactory()
        registry.register_factory("stripe", factory)
        await _add_stripe(providers, mock_db)
        await registry.get_backend(mock_db, "stripe")

        stripe = await provider_repo.get_by_name(mock_db, "stripe")
        await provider_repo.update(mock_db, stripe.id, {"config": {"apiKey": "sk_live"}})
        registry.refresh("stripe")

        backend = await registry.get_backend(mock_db, "stripe")
        assert backend is not None
        assert backend.config == {"apiKey": "sk_live"}
        assert factory.created == 2

    async def test_all_active_backends(
        self, registry: ProviderRegistry, providers: PaymentProviderService, mock_db: AsyncMock
    ) -> None:
        registry.register_factory("stripe", _EchoFactory())
        await _add_stripe(providers, mock_db)
        await providers.create_provider(
            mock_db, CreateProviderRequest(name="paypal", display_name="PayPal")
        )

        backends = await registry.get_all_active_backends(mock_db)

        # paypal has no factory registered
        assert [b.name for b in backends] == ["stripe"]

        registry.refresh_all()
        assert registry.loaded_backends == []
