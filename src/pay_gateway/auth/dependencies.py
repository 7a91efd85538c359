"""FastAPI dependency: get_current_user.

Usage in any protected router:
    from src.pay_gateway.auth.dependencies import CurrentUser

    @router.get("/protected")
    async def protected(user: CurrentUser):
        ...

The caller is identified by the X-API-Key header, resolved through
UserService.authenticate (cached at user:apikey:<key>).
"""

import logging
from typing import Annotated

from fastapi import Depends
from fastapi.security import APIKeyHeader

from src.pay_common.errors import ApiKeyRequiredError, InvalidApiKeyError
from src.pay_common.metrics import authentication_total
from src.pay_gateway.dependencies import DbSession, UserServiceDep
from src.pay_user.domain.models import User

logger = logging.getLogger(__name__)

API_KEY_HEADER = "X-API-Key"

# auto_error=False so a missing header goes through our envelope, not FastAPI's 403
api_key_scheme = APIKeyHeader(name=API_KEY_HEADER, auto_error=False)


async def get_current_user(
    db: DbSession,
    users: UserServiceDep,
    api_key: str | None = Depends(api_key_scheme),
) -> User:
    """Resolve X-API-Key to a User.

    Raises 401 (ApiKeyRequiredError) if the header is missing or blank,
    401 (InvalidApiKeyError) if no user holds the key.
    """
    if not api_key or not api_key.strip():
        authentication_total.labels("missing").inc()
        raise ApiKeyRequiredError()

    try:
        user = await users.authenticate(db, api_key.strip())
    except InvalidApiKeyError:
        authentication_total.labels("failure").inc()
        logger.warning("Rejected request with unknown API key")
        raise

    authentication_total.labels("success").inc()
    return user


CurrentUser = Annotated[User, Depends(get_current_user)]
