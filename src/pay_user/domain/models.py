"""Domain models for pay_user — pure dataclasses, no business logic."""

from dataclasses import dataclass
from datetime import datetime


@dataclass
class User:
    id: str
    name: str
    phone: str
    email: str | None
    api_key: str | None
    created_at: datetime
    updated_at: datetime
