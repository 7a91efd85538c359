"""Integration-test fixtures (require running PostgreSQL + Redis).

All integration tests share a single event loop so that the container's
SQLAlchemy async engine pool and Redis pool stay valid across the whole
session. The suite is skipped when PostgreSQL is unreachable.

Pre-condition: alembic upgrade head
"""

import random
from collections.abc import AsyncIterator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from config.settings import Settings
from src.bootstrap import build_container
from src.main import create_app


def unique_phone() -> str:
    """Random Indonesian mobile number, to avoid collisions across runs."""
    return "08" + "".join(random.choices("0123456789", k=10))


@pytest_asyncio.fixture(loop_scope="session", scope="session")
async def client() -> AsyncIterator[AsyncClient]:  # type: ignore[override]
    """Session-scoped async HTTP client over the real container."""
    settings = Settings()
    container = build_container(settings)
    try:
        async with container.session_factory() as session:
            await session.execute(text("SELECT 1"))
    except (SQLAlchemyError, OSError) as exc:
        await container.close()
        pytest.skip(f"PostgreSQL not reachable: {exc}")

    # ASGITransport does not run the lifespan, so attach the container up front
    app = create_app(settings, container)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    await container.close()


@pytest_asyncio.fixture(loop_scope="session", scope="session")
async def api_user(client: AsyncClient) -> dict[str, str]:
    """A fresh user with an issued API key: {"id", "apiKey"}."""
    resp = await client.post(
        "/api/v1/users", json={"nama": "Integration User", "telp": unique_phone()}
    )
    user_id = resp.json()["data"]["id"]
    key_resp = await client.post(f"/api/v1/users/{user_id}/api-key")
    return {"id": user_id, "apiKey": key_resp.json()["data"]["apiKey"]}


@pytest.fixture
def auth(api_user: dict[str, str]) -> dict[str, str]:
    return {"X-API-Key": api_user["apiKey"]}
