"""ProviderRegistry — provider name → backend instance.

Backends are built lazily on first lookup from the provider's stored config
and kept until refresh()/refresh_all(); the provider router refreshes an
entry whenever that provider is updated, toggled or deleted.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from src.pay_provider.application.service import PaymentProviderService
from src.pay_provider.domain.backend import (
    PaymentProviderBackend,
    PaymentProviderBackendFactory,
)

logger = logging.getLogger(__name__)


class ProviderRegistry:
    def __init__(self, providers: PaymentProviderService) -> None:
        self._providers = providers
        self._factories: dict[str, PaymentProviderBackendFactory] = {}
        self._backends: dict[str, PaymentProviderBackend] = {}

    def register_factory(self, name: str, factory: PaymentProviderBackendFactory) -> None:
        self._factories[name.lower()] = factory
        logger.info("Provider backend factory registered: %s", name.lower())

    @property
    def registered_factories(self) -> list[str]:
        return sorted(self._factories)

    @property
    def loaded_backends(self) -> list[str]:
        return sorted(self._backends)

    async def get_backend(self, db: AsyncSession, name: str) -> PaymentProviderBackend | None:
        """Return the backend for `name`, or None when it cannot be built.

        None covers: no factory registered, provider missing or inactive,
        and a stored config the factory rejects.
        """
        key = name.lower()
        backend = self._backends.get(key)
        if backend is not None:
            return backend

        factory = self._factories.get(key)
        if factory is None:
            logger.warning("No backend factory registered for provider: %s", key)
            return None

        provider = await self._providers.find_by_name(db, key)
        if provider is None or not provider.is_active:
            logger.warning("Provider %s not found or inactive", key)
            return None

        if not factory.validate_config(provider.config):
            logger.error("Invalid configuration for provider: %s", key)
            return None

        backend = factory.create(provider.config)
        self._backends[key] = backend
        return backend

    async def get_all_active_backends(self, db: AsyncSession) -> list[PaymentProviderBackend]:
        backends = []
        for provider in await self._providers.list_active_providers(db):
            backend = await self.get_backend(db, provider.name)
            if backend is not None:
                backends.append(backend)
        return backends

    def refresh(self, name: str) -> None:
        self._backends.pop(name.lower(), None)

    def refresh_all(self) -> None:
        self._backends.clear()
