"""Tests for WholesaleService: pricing config, pool management and purchases."""

from __future__ import annotations

from decimal import Decimal

import pytest

from geodomain.domain.enums import DomainStatus, WholesaleDomainStatus, WholesaleSaleStatus
from geodomain.domain.exceptions import (
    ConflictError,
    ForbiddenError,
    NotFoundError,
    ServiceUnavailableError,
    ValidationError,
)
from geodomain.services import DomainService, WholesaleService


class TestConfig:
    @pytest.mark.asyncio
    async def test_default_config_created_on_first_read(self, session) -> None:
        config = await WholesaleService(session).get_config()
        assert config.price == Decimal("299.00")
        assert config.commission_amount == Decimal("25.00")
        assert config.is_active is True

    @pytest.mark.asyncio
    async def test_update_appends_new_row(self, session, admin) -> None:
        svc = WholesaleService(session)
        original = await svc.get_config()
        updated = await svc.update_config(admin, price=Decimal("349.00"))
        assert updated.id != original.id
        assert updated.commission_amount == Decimal("25.00")
        assert (await svc.get_config()).price == Decimal("349.00")

    @pytest.mark.asyncio
    async def test_commission_below_price(self, session, admin) -> None:
        with pytest.raises(ValidationError):
            await WholesaleService(session).update_config(
                admin, price=Decimal("50.00"), commission_amount=Decimal("50.00")
            )

    @pytest.mark.asyncio
    async def test_price_range(self, session, admin) -> None:
        with pytest.raises(ValidationError):
            await WholesaleService(session).update_config(admin, price=Decimal("20000"))

    @pytest.mark.asyncio
    async def test_admin_only(self, session, seller) -> None:
        with pytest.raises(ForbiddenError):
            await WholesaleService(session).update_config(seller, price=Decimal("100"))


class TestPool:
    @pytest.mark.asyncio
    async def test_add_then_approve(self, session, seller, admin, market) -> None:
        domain = await market.verified_domain()
        svc = WholesaleService(session)
        entry = await svc.add_domain(seller, domain.id, notes="Quick sale")
        assert entry.status == WholesaleDomainStatus.PENDING_APPROVAL
        assert await svc.list_active_domains() == []

        await svc.approve_domain(admin, entry.id)
        listed = await svc.list_active_domains()
        assert [(e.id, d.name) for e, d in listed] == [(entry.id, domain.name)]

    @pytest.mark.asyncio
    async def test_unverified_domain_not_eligible(self, session, seller, market) -> None:
        domain = await market.draft_domain()
        with pytest.raises(NotFoundError):
            await WholesaleService(session).add_domain(seller, domain.id)

    @pytest.mark.asyncio
    async def test_cannot_list_twice(self, session, seller, market) -> None:
        domain = await market.verified_domain()
        svc = WholesaleService(session)
        await svc.add_domain(seller, domain.id)
        with pytest.raises(ConflictError):
            await svc.add_domain(seller, domain.id)

    @pytest.mark.asyncio
    async def test_owner_removes_entry(self, session, seller, market) -> None:
        entry = await market.active_wholesale_domain()
        removed = await WholesaleService(session).remove_domain(seller, entry.id)
        assert removed.status == WholesaleDomainStatus.REMOVED

    @pytest.mark.asyncio
    async def test_search_filters(self, session, market) -> None:
        await market.active_wholesale_domain("dallasplumbers.com")
        await market.active_wholesale_domain("houstonroofers.com")
        svc = WholesaleService(session)
        hits = await svc.list_active_domains(search="roof")
        assert [d.name for _, d in hits] == ["houstonroofers.com"]


class TestPurchase:
    @pytest.mark.asyncio
    async def test_purchase_splits_price(self, session, seller, buyer, market) -> None:
        entry = await market.active_wholesale_domain()
        sale = await WholesaleService(session).purchase_domain(buyer, entry.id)

        assert sale.price == Decimal("299.00")
        assert sale.commission_amount == Decimal("25.00")
        assert sale.seller_payout == Decimal("274.00")
        assert sale.seller_id == seller.user_id
        assert sale.status == WholesaleSaleStatus.PENDING
        assert entry.status == WholesaleDomainStatus.SOLD
        assert entry.sold_to == buyer.user_id
        domain = await DomainService(session).get_domain(seller, entry.domain_id)
        assert domain.status == DomainStatus.SOLD

    @pytest.mark.asyncio
    async def test_owner_cannot_buy_own_domain(self, session, seller, market) -> None:
        entry = await market.active_wholesale_domain()
        with pytest.raises(ForbiddenError) as exc_info:
            await WholesaleService(session).purchase_domain(seller, entry.id)
        assert exc_info.value.code == "FORBIDDEN"
        assert entry.status == WholesaleDomainStatus.ACTIVE

    @pytest.mark.asyncio
    async def test_sold_domain_unavailable(self, session, buyer, other_seller, market) -> None:
        entry = await market.active_wholesale_domain()
        svc = WholesaleService(session)
        await svc.purchase_domain(buyer, entry.id)
        with pytest.raises(NotFoundError):
            await svc.purchase_domain(other_seller, entry.id)

    @pytest.mark.asyncio
    async def test_disabled_marketplace(self, session, buyer, admin, market) -> None:
        entry = await market.active_wholesale_domain()
        svc = WholesaleService(session)
        await svc.update_config(admin, is_active=False)
        with pytest.raises(ServiceUnavailableError) as exc_info:
            await svc.purchase_domain(buyer, entry.id)
        assert exc_info.value.code == "SERVICE_UNAVAILABLE"

    @pytest.mark.asyncio
    async def test_payout_and_stats(self, session, buyer, admin, market) -> None:
        entry = await market.active_wholesale_domain()
        svc = WholesaleService(session)
        sale = await svc.purchase_domain(buyer, entry.id)

        paid = await svc.mark_sale_paid(admin, sale.id)
        assert paid.status == WholesaleSaleStatus.PAID
        assert paid.paid_at is not None

        stats = await svc.get_stats(admin)
        assert stats["sold_domains"] == 1
        assert stats["paid_sales"] == 1
        assert stats["total_revenue"] == Decimal("299.00")
        assert stats["total_commission"] == Decimal("25.00")
        assert [s.id for s in await svc.list_my_purchases(buyer)] == [sale.id]
