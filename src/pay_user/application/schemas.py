"""Pydantic request/response schemas for pay_user.

Wire names follow the existing client contract: `nama` (display name) and
`telp` (phone number); everything else is camelCase.
"""

from pydantic import EmailStr, Field

from src.pay_common.schemas import CamelModel
from src.pay_user.domain.models import User

# Indonesian mobile numbers: +62 / 62 / 0 prefix, then 9-13 digits
PHONE_PATTERN = r"^(\+62|62|0)[0-9]{9,13}$"


class CreateUserRequest(CamelModel):
    name: str = Field(..., alias="nama", min_length=2, max_length=100)
    phone: str = Field(..., alias="telp", pattern=PHONE_PATTERN)
    email: EmailStr | None = None


class UpdateUserRequest(CamelModel):
    """Partial update — only fields present in the body are applied.

    An explicit `"email": null` clears the email.
    """

    name: str | None = Field(None, alias="nama", min_length=2, max_length=100)
    phone: str | None = Field(None, alias="telp", pattern=PHONE_PATTERN)
    email: EmailStr | None = None


class UserResponse(CamelModel):
    id: str
    name: str = Field(..., alias="nama")
    phone: str = Field(..., alias="telp")
    email: str | None
    created_at: str
    updated_at: str

    @classmethod
    def from_domain(cls, user: User) -> "UserResponse":
        return cls(
            id=user.id,
            name=user.name,
            phone=user.phone,
            email=user.email,
            created_at=user.created_at.isoformat(),
            updated_at=user.updated_at.isoformat(),
        )


class ApiKeyResponse(CamelModel):
    """Returned once, when a key is issued. Never echoed by other endpoints."""

    user_id: str
    api_key: str
