"""Identifier helpers.

Entity ids are UUIDv4 strings at every layer above persistence; the ORM
columns are native PostgreSQL UUIDs. API keys are opaque URL-safe tokens.
"""

import secrets
import uuid

API_KEY_PREFIX = "pk_"
_API_KEY_BYTES = 32


def new_id() -> str:
    return str(uuid.uuid4())


def parse_uuid(value: str) -> uuid.UUID | None:
    """Return the UUID for `value`, or None if it is not a well-formed UUID.

    Malformed ids from the path are treated as "no such row" rather than
    reaching the driver as a type error.
    """
    try:
        return uuid.UUID(str(value))
    except ValueError:
        return None


def generate_api_key() -> str:
    return f"{API_KEY_PREFIX}{secrets.token_urlsafe(_API_KEY_BYTES)}"
