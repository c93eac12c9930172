"""End-to-end tests through the REST API.

Each request gets its own session and commit, so these cover the
dependency wiring, response schemas and error mapping together.
"""

from __future__ import annotations

import pytest


def as_user(user_id: str, role: str = "BUYER") -> dict[str, str]:
    return {"X-User-Id": user_id, "X-User-Role": role}


SELLER = as_user("seller-1", "SELLER")
OTHER_SELLER = as_user("seller-2", "SELLER")
BUYER = as_user("buyer-1")
ADMIN = as_user("admin-1", "ADMIN")


async def _verified_domain(client, name: str = "example.com") -> str:
    resp = await client.post(
        "/api/v1/domains",
        json={"name": name, "price": "2500.00", "state": "TX", "city": "Austin"},
        headers=SELLER,
    )
    assert resp.status_code == 201, resp.text
    domain_id = resp.json()["id"]

    resp = await client.post(
        "/api/v1/verification/token",
        json={"domain_id": domain_id, "method": "DNS_TXT"},
        headers=SELLER,
    )
    token = resp.json()["token"]
    resp = await client.post(
        "/api/v1/verification/attempts",
        json={"domain_id": domain_id, "method": "DNS_TXT", "token": token},
        headers=SELLER,
    )
    assert resp.status_code == 201, resp.text
    attempt_id = resp.json()["id"]

    resp = await client.post(
        f"/api/v1/admin/verification-attempts/{attempt_id}/moderate",
        json={"action": "APPROVE"},
        headers=ADMIN,
    )
    assert resp.status_code == 200, resp.text
    return domain_id


class TestAuthAndErrors:
    @pytest.mark.asyncio
    async def test_missing_user_is_401(self, client) -> None:
        resp = await client.get("/api/v1/domains/mine")
        assert resp.status_code == 401
        assert resp.json() == {"error": "UNAUTHORIZED", "message": "Authentication required"}

    @pytest.mark.asyncio
    async def test_unknown_domain_is_404(self, client) -> None:
        resp = await client.get(
            "/api/v1/domains/00000000-0000-0000-0000-000000000000", headers=BUYER
        )
        assert resp.status_code == 404
        assert resp.json()["error"] == "NOT_FOUND"

    @pytest.mark.asyncio
    async def test_non_admin_is_403(self, client) -> None:
        resp = await client.get("/api/v1/admin/overview", headers=SELLER)
        assert resp.status_code == 403
        assert resp.json()["error"] == "FORBIDDEN"

    @pytest.mark.asyncio
    async def test_request_id_echoed(self, client) -> None:
        resp = await client.get("/api/v1/domains", headers={"X-Request-ID": "req-123"})
        assert resp.headers["X-Request-ID"] == "req-123"


class TestDomainFlow:
    @pytest.mark.asyncio
    async def test_verification_scenario(self, client) -> None:
        domain_id = await _verified_domain(client)

        resp = await client.get(f"/api/v1/domains/{domain_id}", headers=SELLER)
        assert resp.json()["status"] == "VERIFIED"

        resp = await client.get(f"/api/v1/domains/{domain_id}/events", headers=SELLER)
        assert [e["event_type"] for e in resp.json()] == [
            "DOMAIN_CREATED",
            "DOMAIN_SUBMITTED",
            "VERIFICATION_APPROVED",
        ]

    @pytest.mark.asyncio
    async def test_second_attempt_conflicts(self, client) -> None:
        resp = await client.post("/api/v1/domains", json={"name": "example.com"}, headers=SELLER)
        domain_id = resp.json()["id"]
        resp = await client.post(
            "/api/v1/verification/token",
            json={"domain_id": domain_id, "method": "DNS_TXT"},
            headers=SELLER,
        )
        body = {"domain_id": domain_id, "method": "DNS_TXT", "token": resp.json()["token"]}
        first = await client.post("/api/v1/verification/attempts", json=body, headers=SELLER)
        second = await client.post("/api/v1/verification/attempts", json=body, headers=SELLER)
        assert first.status_code == 201
        assert second.status_code == 409
        assert second.json()["error"] == "CONFLICT"

    @pytest.mark.asyncio
    async def test_failed_request_rolls_back(self, client) -> None:
        domain_id = await _verified_domain(client)
        resp = await client.post(f"/api/v1/domains/{domain_id}/submit", headers=SELLER)
        assert resp.status_code == 409
        assert resp.json()["error"] == "INVALID_STATE"

        resp = await client.get(f"/api/v1/domains/{domain_id}", headers=SELLER)
        assert resp.json()["status"] == "VERIFIED"

    @pytest.mark.asyncio
    async def test_browse_filters_published_listings(self, client) -> None:
        for name in ("austinhomes.com", "austinroofing.com"):
            domain_id = await _verified_domain(client, name)
            resp = await client.post(f"/api/v1/domains/{domain_id}/publish", headers=SELLER)
            assert resp.status_code == 200, resp.text
        await _verified_domain(client, "austinplumbing.com")

        resp = await client.get(
            "/api/v1/domains", params={"q": "austin", "state": "TX", "price_max": "3000"}
        )
        assert resp.status_code == 200
        assert sorted(d["name"] for d in resp.json()) == ["austinhomes.com", "austinroofing.com"]

        resp = await client.get("/api/v1/domains", params={"q": "roof"})
        assert [d["name"] for d in resp.json()] == ["austinroofing.com"]

    @pytest.mark.asyncio
    async def test_browse_rejects_unknown_sort(self, client) -> None:
        resp = await client.get("/api/v1/domains", params={"sort_by": "name"})
        assert resp.status_code == 422


class TestDealFlow:
    @pytest.mark.asyncio
    async def test_skipping_payment_is_409(self, client) -> None:
        domain_id = await _verified_domain(client)
        await client.post(f"/api/v1/domains/{domain_id}/publish", headers=SELLER)

        resp = await client.post(
            "/api/v1/inquiries",
            json={
                "domain_id": domain_id,
                "buyer_name": "Jane Buyer",
                "buyer_email": "jane@example.com",
                "message": "Interested",
            },
            headers=BUYER,
        )
        inquiry_id = resp.json()["id"]
        resp = await client.post(
            f"/api/v1/admin/inquiries/{inquiry_id}/moderate",
            json={"action": "APPROVE"},
            headers=ADMIN,
        )
        assert resp.json()["status"] == "APPROVED"

        resp = await client.post(
            "/api/v1/deals",
            json={"inquiry_id": inquiry_id, "agreed_price": "2000.00", "payment_method": "PAYPAL"},
            headers=SELLER,
        )
        assert resp.status_code == 201, resp.text
        deal_id = resp.json()["id"]

        resp = await client.post(
            f"/api/v1/deals/{deal_id}/status", json={"status": "AGREED"}, headers=BUYER
        )
        assert resp.json()["status"] == "AGREED"

        resp = await client.post(
            f"/api/v1/deals/{deal_id}/status",
            json={"status": "TRANSFER_INITIATED"},
            headers=ADMIN,
        )
        assert resp.status_code == 409
        assert resp.json()["error"] == "INVALID_TRANSITION"

        resp = await client.get(f"/api/v1/deals/{deal_id}/status", headers=BUYER)
        body = resp.json()
        assert body["status"] == "AGREED"
        assert set(body["allowed_events"]) == {"request_payment", "dispute"}


class TestWholesaleFlow:
    @pytest.mark.asyncio
    async def test_self_purchase_is_forbidden(self, client) -> None:
        domain_id = await _verified_domain(client, "dallasplumbers.com")
        resp = await client.post(
            "/api/v1/wholesale/domains", json={"domain_id": domain_id}, headers=SELLER
        )
        entry_id = resp.json()["id"]
        await client.post(
            f"/api/v1/admin/wholesale/domains/{entry_id}/approve", json={}, headers=ADMIN
        )

        resp = await client.get("/api/v1/wholesale/domains")
        listing = resp.json()
        assert [(e["domain_name"], e["price"]) for e in listing] == [
            ("dallasplumbers.com", "299.00")
        ]

        resp = await client.post(
            f"/api/v1/wholesale/domains/{entry_id}/purchase", json={}, headers=SELLER
        )
        assert resp.status_code == 403
        assert resp.json()["error"] == "FORBIDDEN"

        resp = await client.post(
            f"/api/v1/wholesale/domains/{entry_id}/purchase", json={}, headers=OTHER_SELLER
        )
        assert resp.status_code == 201, resp.text
        assert resp.json()["seller_payout"] == "274.00"
