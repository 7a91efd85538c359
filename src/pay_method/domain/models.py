"""Domain models for pay_method — pure dataclasses, no business logic."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from src.pay_common.enums import PaymentMethodType


@dataclass
class PaymentMethod:
    id: str
    user_id: str
    provider_id: str
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
class NewPaymentMethod:
    """Insert payload; ownership and provider are fixed at creation."""

    user_id: str
    provider_id: str
    provider_method_id: str
    type: PaymentMethodType
    is_default: bool = False
    last4: str | None = None
    expiry_month: int | None = None
    expiry_year: int | None = None
    brand: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)
