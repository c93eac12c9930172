"""Idempotency-Key handling on wholesale purchases and payment proofs.

Redis is replaced by an in-memory double that honours SET NX, so these
cover the claim, the 409 on reuse and the release of keys from failed
calls.
"""

from __future__ import annotations

from unittest.mock import AsyncMock, patch

import pytest

from geodomain.api.deps import idempotent
from geodomain.domain.exceptions import DuplicateOperationError
from geodomain.infrastructure import redis_client

from test_routes import ADMIN, OTHER_SELLER, SELLER, _verified_domain


class InMemoryRedis:
    def __init__(self) -> None:
        self.store: dict[str, str] = {}

    async def set(self, key, value, ex=None, nx=False):
        if nx and key in self.store:
            return None
        self.store[key] = value
        return True

    async def delete(self, key):
        return 1 if self.store.pop(key, None) is not None else 0


@pytest.fixture
def fake_redis():
    fake = InMemoryRedis()
    with patch.object(redis_client, "_redis_client", fake):
        yield fake


async def _active_entry(client, name: str = "dallasplumbers.com") -> str:
    domain_id = await _verified_domain(client, name)
    resp = await client.post(
        "/api/v1/wholesale/domains", json={"domain_id": domain_id}, headers=SELLER
    )
    entry_id = resp.json()["id"]
    resp = await client.post(
        f"/api/v1/admin/wholesale/domains/{entry_id}/approve", json={}, headers=ADMIN
    )
    assert resp.status_code == 200, resp.text
    return entry_id


def _keyed(headers: dict[str, str], key: str) -> dict[str, str]:
    return {**headers, "Idempotency-Key": key}


class TestIdempotencyKeys:
    @pytest.mark.asyncio
    async def test_reused_key_is_409(self, client, fake_redis) -> None:
        entry_id = await _active_entry(client)
        url = f"/api/v1/wholesale/domains/{entry_id}/purchase"

        resp = await client.post(url, json={}, headers=_keyed(OTHER_SELLER, "buy-1"))
        assert resp.status_code == 201, resp.text
        assert fake_redis.store == {"idempotency:wholesale_purchase:buy-1": "seller-2"}

        resp = await client.post(url, json={}, headers=_keyed(OTHER_SELLER, "buy-1"))
        assert resp.status_code == 409
        assert resp.json()["error"] == "DUPLICATE_OPERATION"

    @pytest.mark.asyncio
    async def test_failed_call_releases_key(self, client, fake_redis) -> None:
        entry_id = await _active_entry(client)
        url = f"/api/v1/wholesale/domains/{entry_id}/purchase"

        resp = await client.post(url, json={}, headers=_keyed(SELLER, "buy-2"))
        assert resp.status_code == 403
        assert fake_redis.store == {}

        resp = await client.post(url, json={}, headers=_keyed(OTHER_SELLER, "buy-2"))
        assert resp.status_code == 201, resp.text

    @pytest.mark.asyncio
    async def test_keys_are_scoped_per_operation(self, client, fake_redis) -> None:
        fake_redis.store["idempotency:payment_proof:shared"] = "someone"
        entry_id = await _active_entry(client)

        resp = await client.post(
            f"/api/v1/wholesale/domains/{entry_id}/purchase",
            json={},
            headers=_keyed(OTHER_SELLER, "shared"),
        )
        assert resp.status_code == 201, resp.text

    @pytest.mark.asyncio
    async def test_guard_skipped_without_redis(self, client) -> None:
        assert not redis_client.redis_available()
        entry_id = await _active_entry(client)
        url = f"/api/v1/wholesale/domains/{entry_id}/purchase"

        resp = await client.post(url, json={}, headers=_keyed(OTHER_SELLER, "buy-3"))
        assert resp.status_code == 201, resp.text

        # Without Redis the repeat reaches the service and fails on the sold entry
        resp = await client.post(url, json={}, headers=_keyed(OTHER_SELLER, "buy-3"))
        assert resp.status_code == 404
        assert resp.json()["error"] == "NOT_FOUND"


class TestIdempotentGuard:
    @pytest.mark.asyncio
    async def test_failed_commit_releases_key(self, fake_redis) -> None:
        session = AsyncMock()
        session.commit.side_effect = RuntimeError("commit failed")

        with pytest.raises(RuntimeError, match="commit failed"):
            async with idempotent("payment_proof", "proof-1", "buyer-1", session):
                pass

        session.commit.assert_awaited_once()
        assert fake_redis.store == {}

    @pytest.mark.asyncio
    async def test_successful_commit_keeps_key(self, fake_redis) -> None:
        session = AsyncMock()

        async with idempotent("payment_proof", "proof-2", "buyer-1", session):
            pass

        session.commit.assert_awaited_once()
        assert fake_redis.store == {"idempotency:payment_proof:proof-2": "buyer-1"}
        with pytest.raises(DuplicateOperationError):
            async with idempotent("payment_proof", "proof-2", "buyer-1", session):
                pass

    @pytest.mark.asyncio
    async def test_no_key_means_no_claim(self, fake_redis) -> None:
        async with idempotent("payment_proof", None, "buyer-1"):
            pass
        assert fake_redis.store == {}
