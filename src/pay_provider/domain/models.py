"""Domain models for pay_provider — pure dataclasses, no business logic."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any


@dataclass
class PaymentProvider:
    id: str
    name: str
    display_name: str
    is_active: bool
    created_at: datetime
    updated_at: datetime
    # Provider-specific credentials/settings; shape is opaque to this service
    config: dict[str, Any] = field(default_factory=dict)
