"""Tests for PaymentService: proof upload and admin verification."""

from __future__ import annotations

from decimal import Decimal

import pytest

from geodomain.domain.enums import DealStatus, PaymentAction, PaymentMethod, PaymentStatus
from geodomain.domain.exceptions import (
    ConflictError,
    ForbiddenError,
    InvalidStateError,
    ValidationError,
)
from geodomain.services import PaymentService


async def _upload(session, ctx, deal, amount: str = "2000.00"):
    return await PaymentService(session).upload_proof(
        ctx,
        deal_id=deal.id,
        proof_url="https://files.example.com/receipt.pdf",
        payment_method=PaymentMethod.WIRE_TRANSFER,
        amount=Decimal(amount),
        transaction_id="WIRE-42",
    )


class TestUploadProof:
    @pytest.mark.asyncio
    async def test_buyer_uploads_pending_payment(self, session, buyer, market) -> None:
        deal = await market.deal(DealStatus.PAYMENT_PENDING)
        payment = await _upload(session, buyer, deal)
        assert payment.status == PaymentStatus.PENDING
        assert payment.external_reference == "WIRE-42"

    @pytest.mark.asyncio
    async def test_only_buyer_uploads(self, session, seller, market) -> None:
        deal = await market.deal(DealStatus.PAYMENT_PENDING)
        with pytest.raises(ForbiddenError):
            await _upload(session, seller, deal)

    @pytest.mark.asyncio
    async def test_deal_must_await_payment(self, session, buyer, market) -> None:
        deal = await market.deal(DealStatus.AGREED)
        with pytest.raises(InvalidStateError):
            await _upload(session, buyer, deal)

    @pytest.mark.asyncio
    async def test_one_pending_proof_at_a_time(self, session, buyer, market) -> None:
        deal = await market.deal(DealStatus.PAYMENT_PENDING)
        await _upload(session, buyer, deal)
        with pytest.raises(ConflictError):
            await _upload(session, buyer, deal)

    @pytest.mark.asyncio
    async def test_amount_must_be_positive(self, session, buyer, market) -> None:
        deal = await market.deal(DealStatus.PAYMENT_PENDING)
        with pytest.raises(ValidationError):
            await _upload(session, buyer, deal, amount="0")


class TestVerifyPayment:
    @pytest.mark.asyncio
    async def test_approve_confirms_deal(self, session, buyer, admin, market) -> None:
        deal = await market.deal(DealStatus.PAYMENT_PENDING)
        payment = await _upload(session, buyer, deal)

        result = await PaymentService(session).verify_payment(
            admin, payment.id, PaymentAction.APPROVE, admin_notes="Wire received"
        )

        assert result.status == PaymentStatus.CONFIRMED
        assert result.verified_by == admin.user_id
        assert deal.status == DealStatus.PAYMENT_CONFIRMED
        assert deal.payment_confirmed_date is not None

    @pytest.mark.asyncio
    async def test_reject_fails_payment_only(self, session, buyer, admin, market) -> None:
        deal = await market.deal(DealStatus.PAYMENT_PENDING)
        payment = await _upload(session, buyer, deal)
        svc = PaymentService(session)

        result = await svc.verify_payment(
            admin, payment.id, PaymentAction.REJECT, rejection_reason="Amount mismatch"
        )

        assert result.status == PaymentStatus.FAILED
        assert deal.status == DealStatus.PAYMENT_PENDING
        # A fresh proof can be uploaded after a failure
        retry = await _upload(session, buyer, deal)
        status = await svc.get_payment_status(buyer, deal.id)
        assert {p.id for p in status["payments"]} == {payment.id, retry.id}

    @pytest.mark.asyncio
    async def test_resolved_payment_is_final(self, session, buyer, admin, market) -> None:
        deal = await market.deal(DealStatus.PAYMENT_PENDING)
        payment = await _upload(session, buyer, deal)
        svc = PaymentService(session)
        await svc.verify_payment(admin, payment.id, PaymentAction.APPROVE)
        with pytest.raises(InvalidStateError):
            await svc.verify_payment(admin, payment.id, PaymentAction.APPROVE)

    @pytest.mark.asyncio
    async def test_admin_only(self, session, buyer, market) -> None:
        deal = await market.deal(DealStatus.PAYMENT_PENDING)
        payment = await _upload(session, buyer, deal)
        with pytest.raises(ForbiddenError):
            await PaymentService(session).verify_payment(buyer, payment.id, PaymentAction.APPROVE)

    @pytest.mark.asyncio
    async def test_pending_queue(self, session, buyer, admin, market) -> None:
        deal = await market.deal(DealStatus.PAYMENT_PENDING)
        payment = await _upload(session, buyer, deal)
        queue = await PaymentService(session).get_pending_payments(admin)
        assert [p.id for p in queue] == [payment.id]
