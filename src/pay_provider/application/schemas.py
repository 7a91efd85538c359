"""Pydantic request/response schemas for pay_provider."""

import re
from typing import Any

from pydantic import Field, field_validator

from src.pay_common.schemas import CamelModel
from src.pay_provider.domain.models import PaymentProvider

_SLUG_PATTERN = r"^[a-z0-9][a-z0-9_-]*$"


class CreateProviderRequest(CamelModel):
    name: str = Field(..., min_length=2, max_length=50)
    display_name: str = Field(..., min_length=2, max_length=100)
    is_active: bool = True
    config: dict[str, Any] = Field(default_factory=dict)

    @field_validator("name", mode="before")
    @classmethod
    def normalise_name(cls, v: Any) -> Any:
        """Provider names are lowercase slugs: "Stripe " → "stripe"."""
        return v.strip().lower() if isinstance(v, str) else v

    @field_validator("name")
    @classmethod
    def name_is_slug(cls, v: str) -> str:
        if not re.fullmatch(_SLUG_PATTERN, v):
            raise ValueError("Provider name may only contain a-z, 0-9, '-' and '_'")
        return v


class UpdateProviderRequest(CamelModel):
    """`name` is immutable after creation and therefore not accepted here."""

    display_name: str | None = Field(None, min_length=2, max_length=100)
    is_active: bool | None = None
    config: dict[str, Any] | None = None


class ProviderResponse(CamelModel):
    id: str
    name: str
    display_name: str
    is_active: bool
    config: dict[str, Any]
    created_at: str
    updated_at: str

    @classmethod
    def from_domain(cls, provider: PaymentProvider) -> "ProviderResponse":
        return cls(
            id=provider.id,
            name=provider.name,
            display_name=provider.display_name,
            is_active=provider.is_active,
            config=provider.config,
            created_at=provider.created_at.isoformat(),
            updated_at=provider.updated_at.isoformat(),
        )
