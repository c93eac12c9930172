"""Tests for NotificationService and DashboardService."""

from __future__ import annotations

import uuid

import pytest

from geodomain.domain.enums import DealStatus
from geodomain.domain.exceptions import ForbiddenError, NotFoundError
from geodomain.services import DashboardService, NotificationService


class TestNotifications:
    @pytest.mark.asyncio
    async def test_mark_read(self, session, seller, market) -> None:
        await market.verified_domain()
        svc = NotificationService(session)
        assert await svc.unread_count(seller) == 1

        notification = (await svc.list_for_user(seller))[0]
        await svc.mark_read(seller, notification.id)

        assert await svc.unread_count(seller) == 0
        assert await svc.list_for_user(seller, unread_only=True) == []

    @pytest.mark.asyncio
    async def test_cannot_read_someone_elses(self, session, seller, buyer, market) -> None:
        await market.verified_domain()
        svc = NotificationService(session)
        notification = (await svc.list_for_user(seller))[0]
        with pytest.raises(NotFoundError):
            await svc.mark_read(buyer, notification.id)

    @pytest.mark.asyncio
    async def test_unknown_id(self, session, buyer) -> None:
        with pytest.raises(NotFoundError):
            await NotificationService(session).mark_read(buyer, uuid.uuid4())

    @pytest.mark.asyncio
    async def test_mark_all_read(self, session, seller, market) -> None:
        domain = await market.published_domain()
        await market.approved_inquiry(domain)
        svc = NotificationService(session)
        assert await svc.mark_all_read(seller) == 2
        assert await svc.unread_count(seller) == 0


class TestSellerStats:
    @pytest.mark.asyncio
    async def test_counts_from_real_rows(self, session, seller, market) -> None:
        await market.draft_domain(name="wacohomes.com")
        await market.deal(DealStatus.COMPLETED)

        stats = await DashboardService(session).seller_stats(seller)

        assert stats["total_domains"] == 2
        assert stats["total_inquiries"] == 1
        assert stats["total_deals"] == 1
        assert stats["completed_deals"] == 1
        assert stats["conversion_rate"] == 100.0

    @pytest.mark.asyncio
    async def test_empty_seller(self, session, other_seller) -> None:
        stats = await DashboardService(session).seller_stats(other_seller)
        assert stats["conversion_rate"] == 0.0


class TestAdminOverview:
    @pytest.mark.asyncio
    async def test_queue_sizes(self, session, admin, market) -> None:
        domain = await market.published_domain()
        await market.pending_inquiry(domain)
        await market.pending_attempt(await market.draft_domain(name="wacohomes.com"))

        overview = await DashboardService(session).admin_overview(admin)

        assert overview["pending_inquiries"] == 1
        assert overview["pending_verifications"] == 1
        assert overview["pending_payments"] == 0
        assert overview["active_deals"] == 0

    @pytest.mark.asyncio
    async def test_admin_only(self, session, seller) -> None:
        with pytest.raises(ForbiddenError):
            await DashboardService(session).admin_overview(seller)
