"""Tests for DealService: creation from inquiries and the deal transition table."""

from __future__ import annotations

from decimal import Decimal

import pytest

from geodomain.domain.enums import (
    DealStatus,
    DomainStatus,
    EventType,
    InquiryStatus,
    PaymentMethod,
    WholesaleDomainStatus,
)
from geodomain.domain.exceptions import (
    ConflictError,
    ForbiddenError,
    InvalidStateError,
    InvalidTransitionError,
    NotFoundError,
)
from geodomain.services import DealService, DomainService, InquiryService, WholesaleService


class TestCreateDeal:
    @pytest.mark.asyncio
    async def test_converts_approved_inquiry(self, session, seller, buyer, market) -> None:
        domain = await market.published_domain()
        inquiry = await market.approved_inquiry(domain)

        deal = await DealService(session).create_deal(
            seller,
            inquiry_id=inquiry.id,
            agreed_price=Decimal("2000.00"),
            payment_method=PaymentMethod.PAYPAL,
            currency="usd",
        )

        assert deal.status == DealStatus.NEGOTIATING
        assert deal.buyer_id == buyer.user_id
        assert deal.currency == "USD"
        refreshed = await InquiryService(session).get_inquiry(seller, inquiry.id)
        assert refreshed.status == InquiryStatus.CONVERTED_TO_DEAL

    @pytest.mark.asyncio
    async def test_one_deal_per_inquiry(self, session, seller, market) -> None:
        domain = await market.published_domain()
        inquiry = await market.approved_inquiry(domain)
        svc = DealService(session)
        await svc.create_deal(seller, inquiry.id, Decimal("100"), PaymentMethod.OTHER)
        with pytest.raises(ConflictError):
            await svc.create_deal(seller, inquiry.id, Decimal("100"), PaymentMethod.OTHER)

    @pytest.mark.asyncio
    async def test_requires_approved_inquiry(self, session, seller, market) -> None:
        domain = await market.published_domain()
        inquiry = await market.pending_inquiry(domain)
        with pytest.raises(InvalidStateError):
            await DealService(session).create_deal(
                seller, inquiry.id, Decimal("100"), PaymentMethod.OTHER
            )

    @pytest.mark.asyncio
    async def test_buyer_cannot_create(self, session, buyer, market) -> None:
        domain = await market.published_domain()
        inquiry = await market.approved_inquiry(domain)
        with pytest.raises(ForbiddenError):
            await DealService(session).create_deal(
                buyer, inquiry.id, Decimal("100"), PaymentMethod.OTHER
            )


class TestUpdateStatus:
    @pytest.mark.asyncio
    async def test_happy_path_stamps_dates(self, session, admin, market) -> None:
        deal = await market.deal(DealStatus.TRANSFER_INITIATED)
        assert deal.agreed_date is not None
        assert deal.payment_pending_date is not None
        assert deal.payment_confirmed_date is not None
        assert deal.transfer_initiated_date is not None
        assert deal.completed_date is None

        completed = await DealService(session).update_status(
            admin, deal.id, DealStatus.COMPLETED
        )
        assert completed.status == DealStatus.COMPLETED
        assert completed.completed_date is not None

    @pytest.mark.asyncio
    async def test_completion_marks_domain_sold(self, session, seller, market) -> None:
        deal = await market.deal(DealStatus.COMPLETED)
        domain = await DomainService(session).get_domain(seller, deal.domain_id)
        assert domain.status == DomainStatus.SOLD

    @pytest.mark.asyncio
    async def test_skipping_payment_is_rejected(self, session, admin, market) -> None:
        deal = await market.deal(DealStatus.AGREED)
        with pytest.raises(InvalidTransitionError):
            await DealService(session).update_status(
                admin, deal.id, DealStatus.TRANSFER_INITIATED
            )
        assert deal.status == DealStatus.AGREED
        assert deal.transfer_initiated_date is None

    @pytest.mark.parametrize("terminal", [DealStatus.COMPLETED, DealStatus.DISPUTED])
    @pytest.mark.asyncio
    async def test_terminal_deals_never_move(self, session, admin, market, terminal) -> None:
        deal = await market.deal(terminal)
        svc = DealService(session)
        for target in DealStatus:
            with pytest.raises(InvalidTransitionError):
                await svc.update_status(admin, deal.id, target)
        assert deal.status == terminal

    @pytest.mark.asyncio
    async def test_participants_may_agree(self, session, buyer, market) -> None:
        deal = await market.deal()
        result = await DealService(session).update_status(buyer, deal.id, DealStatus.AGREED)
        assert result.status == DealStatus.AGREED

    @pytest.mark.asyncio
    async def test_participants_cannot_confirm_payment(self, session, seller, market) -> None:
        deal = await market.deal(DealStatus.PAYMENT_PENDING)
        with pytest.raises(ForbiddenError):
            await DealService(session).update_status(
                seller, deal.id, DealStatus.PAYMENT_CONFIRMED
            )

    @pytest.mark.asyncio
    async def test_dispute_records_reason(self, session, seller, market) -> None:
        deal = await market.deal(DealStatus.PAYMENT_PENDING)
        result = await DealService(session).update_status(
            seller, deal.id, DealStatus.DISPUTED, reason=" Buyer stopped responding "
        )
        assert result.status == DealStatus.DISPUTED
        assert result.dispute_reason == "Buyer stopped responding"
        assert result.disputed_date is not None

    @pytest.mark.asyncio
    async def test_outsider_sees_nothing(self, session, other_seller, market) -> None:
        deal = await market.deal()
        with pytest.raises(NotFoundError):
            await DealService(session).update_status(other_seller, deal.id, DealStatus.AGREED)


class TestReads:
    @pytest.mark.asyncio
    async def test_history_records_each_transition(self, session, buyer, market) -> None:
        deal = await market.deal(DealStatus.PAYMENT_PENDING)
        events = await DealService(session).get_history(buyer, deal.id)
        assert [e.event_type for e in events] == [
            EventType.DEAL_CREATED,
            EventType.DEAL_STATUS_CHANGED,
            EventType.DEAL_STATUS_CHANGED,
        ]
        assert [e.new_status for e in events] == ["NEGOTIATING", "AGREED", "PAYMENT_PENDING"]

    @pytest.mark.asyncio
    async def test_status_lists_allowed_events(self, session, buyer, market) -> None:
        deal = await market.deal(DealStatus.AGREED)
        status = await DealService(session).get_deal_status(buyer, deal.id)
        assert set(status["allowed_events"]) == {"request_payment", "dispute"}

    @pytest.mark.asyncio
    async def test_my_deals_for_both_sides(self, session, buyer, seller, market) -> None:
        deal = await market.deal()
        svc = DealService(session)
        assert [d.id for d in await svc.get_my_deals(buyer)] == [deal.id]
        assert [d.id for d in await svc.get_my_deals(seller)] == [deal.id]

    @pytest.mark.asyncio
    async def test_active_deals_exclude_terminal(self, session, admin, market) -> None:
        deal = await market.deal(DealStatus.COMPLETED)
        assert deal not in await DealService(session).get_active_deals(admin)


class TestDealAndWholesaleSales:
    """A domain in the wholesale pool can also be sold through a deal; only one sale may win."""

    async def _deal_on_wholesale_domain(self, session, seller, market):
        entry = await market.active_wholesale_domain()
        domain = await DomainService(session).get_domain(seller, entry.domain_id)
        inquiry = await market.approved_inquiry(domain)
        deal = await DealService(session).create_deal(
            seller, inquiry.id, Decimal("1500.00"), PaymentMethod.ESCROW_COM
        )
        return entry, deal

    @pytest.mark.asyncio
    async def test_completed_deal_withdraws_wholesale_entry(
        self, session, seller, other_seller, admin, market
    ) -> None:
        entry, deal = await self._deal_on_wholesale_domain(session, seller, market)
        svc = DealService(session)
        for step in (
            DealStatus.AGREED,
            DealStatus.PAYMENT_PENDING,
            DealStatus.PAYMENT_CONFIRMED,
            DealStatus.TRANSFER_INITIATED,
            DealStatus.COMPLETED,
        ):
            await svc.update_status(admin, deal.id, step)

        assert entry.status == WholesaleDomainStatus.REMOVED
        assert await WholesaleService(session).list_active_domains() == []
        with pytest.raises(NotFoundError, match="no longer available"):
            await WholesaleService(session).purchase_domain(other_seller, entry.id)

    @pytest.mark.asyncio
    async def test_wholesale_sale_blocks_open_deal(
        self, session, seller, buyer, other_seller, admin, market
    ) -> None:
        entry, deal = await self._deal_on_wholesale_domain(session, seller, market)
        svc = DealService(session)
        await svc.update_status(admin, deal.id, DealStatus.AGREED)

        await WholesaleService(session).purchase_domain(other_seller, entry.id)

        with pytest.raises(InvalidStateError, match="already been sold"):
            await svc.update_status(admin, deal.id, DealStatus.PAYMENT_PENDING)
        assert deal.status == DealStatus.AGREED

        disputed = await svc.update_status(buyer, deal.id, DealStatus.DISPUTED, reason="sold")
        assert disputed.status == DealStatus.DISPUTED
