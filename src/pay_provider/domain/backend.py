"""Provider backend extension point.

A backend talks to one external payment provider (Stripe, PayPal, ...). None
ship with this service; deployments register a factory per provider name and
ProviderRegistry builds backends from the provider's stored config.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Generic, Protocol, TypeVar

from src.pay_common.enums import PaymentMethodType

T = TypeVar("T")


@dataclass
class PaymentMethodData:
    type: PaymentMethodType
    provider_method_id: str
    last4: str | None = None
    expiry_month: int | None = None
    expiry_year: int | None = None
    brand: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)


@dataclass
class StoredPaymentMethod:
    provider_method_id: str
    type: PaymentMethodType
    is_active: bool
    is_default: bool
    created_at: datetime
    updated_at: datetime
    last4: str | None = None
    expiry_month: int | None = None
    expiry_year: int | None = None
    brand: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)


@dataclass
class ProviderResult(Generic[T]):
    success: bool
    data: T | None = None
    error: str | None = None
    provider_response: Any = None


class PaymentProviderBackend(ABC):
    def __init__(self, name: str, config: dict[str, Any]) -> None:
        self._name = name
        self._config = dict(config)

    @property
    def name(self) -> str:
        return self._name

    @property
    def config(self) -> dict[str, Any]:
        return dict(self._config)

    def update_config(self, changes: dict[str, Any]) -> None:
        self._config = {**self._config, **changes}

    @abstractmethod
    async def store(self, data: PaymentMethodData) -> ProviderResult[StoredPaymentMethod]: ...

    @abstractmethod
    async def retrieve(self, provider_method_id: str) -> ProviderResult[StoredPaymentMethod]: ...

    @abstractmethod
    async def delete(self, provider_method_id: str) -> ProviderResult[bool]: ...

    @abstractmethod
    async def validate(self, data: PaymentMethodData) -> ProviderResult[bool]: ...


class PaymentProviderBackendFactory(Protocol):
    name: str

    def validate_config(self, config: dict[str, Any]) -> bool: ...

    def create(self, config: dict[str, Any]) -> PaymentProviderBackend: ...
