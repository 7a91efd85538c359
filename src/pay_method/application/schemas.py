"""Pydantic request/response schemas for pay_method."""

from datetime import datetime, timezone
from typing import Any

from pydantic import Field, field_validator

from src.pay_common.enums import PaymentMethodType
from src.pay_common.schemas import CamelModel
from src.pay_method.domain.models import PaymentMethod

# Mirrors ck_payment_methods_last4; expiry_year is a SMALLINT column
LAST4_PATTERN = r"^[0-9]{4}$"
MAX_EXPIRY_YEAR = 9999


def _not_expired(v: int | None) -> int | None:
    if v is not None and v < datetime.now(timezone.utc).year:
        raise ValueError("expiryYear must not be in the past")
    return v


class CreatePaymentMethodRequest(CamelModel):
    provider_id: str = Field(..., min_length=1)
    type: PaymentMethodType
    provider_method_id: str = Field(..., min_length=1, max_length=255)
    last4: str | None = Field(None, pattern=LAST4_PATTERN)
    expiry_month: int | None = Field(None, ge=1, le=12)
    expiry_year: int | None = Field(None, le=MAX_EXPIRY_YEAR)
    brand: str | None = Field(None, max_length=50)
    is_default: bool = False
    metadata: dict[str, Any] = Field(default_factory=dict)

    check_expiry_year = field_validator("expiry_year")(_not_expired)


class UpdatePaymentMethodRequest(CamelModel):
    """Owner and provider are fixed at creation; default/active have their own routes."""

    type: PaymentMethodType | None = None
    last4: str | None = Field(None, pattern=LAST4_PATTERN)
    expiry_month: int | None = Field(None, ge=1, le=12)
    expiry_year: int | None = Field(None, le=MAX_EXPIRY_YEAR)
    brand: str | None = Field(None, max_length=50)
    metadata: dict[str, Any] | None = None

    check_expiry_year = field_validator("expiry_year")(_not_expired)


class PaymentMethodResponse(CamelModel):
    id: str
    user_id: str
    provider_id: str
    provider_method_id: str
    type: PaymentMethodType
    last4: str | None
    expiry_month: int | None
    expiry_year: int | None
    brand: str | None
    is_active: bool
    is_default: bool
    metadata: dict[str, Any]
    created_at: str
    updated_at: str

    @classmethod
    def from_domain(cls, method: PaymentMethod) -> "PaymentMethodResponse":
        return cls(
            id=method.id,
            user_id=method.user_id,
            provider_id=method.provider_id,
            provider_method_id=method.provider_method_id,
            type=method.type,
            last4=method.last4,
            expiry_month=method.expiry_month,
            expiry_year=method.expiry_year,
            brand=method.brand,
            is_active=method.is_active,
            is_default=method.is_default,
            metadata=method.metadata,
            created_at=method.created_at.isoformat(),
            updated_at=method.updated_at.isoformat(),
        )
