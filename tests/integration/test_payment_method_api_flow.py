"""Integration tests for providers + payment methods (requires running PG + Redis).

Exercises the one-default-per-user rule against the real row lock and the
partial unique index, including concurrent set-default requests.

Run: pytest tests/integration/test_payment_method_api_flow.py -v
Pre-condition: alembic upgrade head
"""

import asyncio
import uuid

import pytest
from httpx import AsyncClient

pytestmark = pytest.mark.asyncio(loop_scope="session")

PROVIDERS = "/api/v1/payment-providers"
METHODS = "/api/v1/payment-methods"


async def _provider(client: AsyncClient, auth: dict[str, str]) -> dict:
    name = f"it-{uuid.uuid4().hex[:10]}"
    resp = await client.post(
        PROVIDERS, json={"name": name, "displayName": "Integration Provider"}, headers=auth
    )
    assert resp.status_code == 201, resp.text
    return resp.json()["data"]


async def _method(
    client: AsyncClient, auth: dict[str, str], provider_id: str, is_default: bool = False
) -> dict:
    resp = await client.post(
        METHODS,
        json={
            "providerId": provider_id,
            "type": "DIGITAL_WALLET",
            "providerMethodId": f"pm_{uuid.uuid4().hex[:12]}",
            "isDefault": is_default,
        },
        headers=auth,
    )
    assert resp.status_code == 201, resp.text
    return resp.json()["data"]


async def _defaults(client: AsyncClient, auth: dict[str, str]) -> list[str]:
    resp = await client.get(METHODS, params={"limit": 100}, headers=auth)
    return [m["id"] for m in resp.json()["data"] if m["isDefault"]]


class TestProviders:
    async def test_seeded_providers_listed(self, client: AsyncClient, auth: dict[str, str]) -> None:
        resp = await client.get(f"{PROVIDERS}/active", headers=auth)
        names = {p["name"] for p in resp.json()["data"]}
        assert {"stripe", "paypal", "midtrans"} <= names

    async def test_duplicate_name(self, client: AsyncClient, auth: dict[str, str]) -> None:
        provider = await _provider(client, auth)
        resp = await client.post(
            PROVIDERS, json={"name": provider["name"], "displayName": "Again"}, headers=auth
        )
        assert resp.status_code == 409

    async def test_in_use_provider_cannot_be_deleted(
        self, client: AsyncClient, auth: dict[str, str]
    ) -> None:
        provider = await _provider(client, auth)
        await _method(client, auth, provider["id"])
        resp = await client.delete(f"{PROVIDERS}/{provider['id']}", headers=auth)
        assert resp.status_code == 409
        assert resp.json()["code"] == 2003

    async def test_unused_provider_is_deleted(self, client: AsyncClient, auth: dict[str, str]) -> None:
        provider = await _provider(client, auth)
        assert (await client.delete(f"{PROVIDERS}/{provider['id']}", headers=auth)).status_code == 200
        assert (await client.get(f"{PROVIDERS}/{provider['id']}", headers=auth)).status_code == 404

    async def test_inactive_provider_rejects_new_methods(
        self, client: AsyncClient, auth: dict[str, str]
    ) -> None:
        provider = await _provider(client, auth)
        await client.patch(f"{PROVIDERS}/{provider['id']}/toggle", headers=auth)
        resp = await client.post(
            METHODS,
            json={"providerId": provider["id"], "type": "OTHER", "providerMethodId": "pm_x"},
            headers=auth,
        )
        assert resp.status_code == 400
        assert resp.json()["code"] == 3003


class TestDefaultMethod:
    async def test_create_default_replaces_previous(
        self, client: AsyncClient, auth: dict[str, str]
    ) -> None:
        provider = await _provider(client, auth)
        await _method(client, auth, provider["id"], is_default=True)
        second = await _method(client, auth, provider["id"], is_default=True)

        assert await _defaults(client, auth) == [second["id"]]

    async def test_concurrent_set_default_leaves_one(
        self, client: AsyncClient, auth: dict[str, str]
    ) -> None:
        provider = await _provider(client, auth)
        methods = [await _method(client, auth, provider["id"]) for _ in range(5)]

        responses = await asyncio.gather(
            *(
                client.patch(f"{METHODS}/{m['id']}/set-default", headers=auth)
                for m in methods
            )
        )

        assert all(r.status_code == 200 for r in responses)
        defaults = await _defaults(client, auth)
        assert len(defaults) == 1
        assert defaults[0] in {m["id"] for m in methods}

        default = await client.get(f"{METHODS}/default", headers=auth)
        assert default.json()["data"]["id"] == defaults[0]

    async def test_deactivate_default(self, client: AsyncClient, auth: dict[str, str]) -> None:
        provider = await _provider(client, auth)
        method = await _method(client, auth, provider["id"], is_default=True)

        resp = await client.patch(f"{METHODS}/{method['id']}/deactivate", headers=auth)
        assert resp.json()["data"]["isDefault"] is False
        assert await _defaults(client, auth) == []

        active = await client.get(f"{METHODS}/active", headers=auth)
        assert method["id"] not in {m["id"] for m in active.json()["data"]}


class TestOwnership:
    async def test_other_users_method_is_404(self, client: AsyncClient, auth: dict[str, str]) -> None:
        provider = await _provider(client, auth)
        method = await _method(client, auth, provider["id"])

        other = {"X-API-Key": "test-api-key-2"}
        assert (await client.get(f"{METHODS}/{method['id']}", headers=other)).status_code == 404
        resp = await client.patch(f"{METHODS}/{method['id']}/set-default", headers=other)
        assert resp.status_code == 404
