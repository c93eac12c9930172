"""Payment Service - manual payment verification for deals.

The buyer pays outside the platform and uploads a proof. An admin checks it
and confirms or fails the payment. Confirmation moves the deal to
PAYMENT_CONFIRMED through the deal state machine.
"""

from __future__ import annotations

from datetime import UTC, datetime
from decimal import Decimal
from typing import TYPE_CHECKING

from geodomain.domain.enums import (
    DealStatus,
    EntityType,
    EventType,
    NotificationType,
    PaymentAction,
    PaymentMethod,
    PaymentStatus,
)
from geodomain.domain.exceptions import (
    ConflictError,
    ForbiddenError,
    InvalidStateError,
    NotFoundError,
    ValidationError,
)
from geodomain.domain.state_machine import PaymentStateMachine, fire_transition
from geodomain.infrastructure.database.orm_models import Payment
from geodomain.infrastructure.database.repositories import (
    AuditEventRepository,
    DealRepository,
    PaymentRepository,
)
from geodomain.logging_config import get_logger
from geodomain.services._helpers import page_limit, require_text
from geodomain.services.deal_service import DealService
from geodomain.services.notification_service import NotificationService

if TYPE_CHECKING:
    import uuid

    from sqlalchemy.ext.asyncio import AsyncSession

    from geodomain.domain.context import RequestContext

logger = get_logger(__name__)


class PaymentService:
    """Handles payment proofs and their admin verification."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session
        self._payment_repo = PaymentRepository(session)
        self._deal_repo = DealRepository(session)
        self._event_repo = AuditEventRepository(session)
        self._deals = DealService(session)
        self._notifications = NotificationService(session)

    async def upload_proof(
        self,
        ctx: RequestContext,
        deal_id: uuid.UUID,
        proof_url: str,
        payment_method: PaymentMethod,
        amount: Decimal,
        currency: str = "USD",
        transaction_id: str | None = None,
        notes: str | None = None,
    ) -> Payment:
        """Record a PENDING payment for a PAYMENT_PENDING deal. Buyer only."""
        deal = await self._deals.get_deal(ctx, deal_id)
        if deal.buyer_id != ctx.user_id:
            raise ForbiddenError("Only the buyer can upload payment proof")
        if deal.status != DealStatus.PAYMENT_PENDING:
            raise InvalidStateError(
                "Deal", deal.status, "Payment proof can only be uploaded while payment is pending"
            )
        if await self._payment_repo.get_pending_for_deal(deal.id) is not None:
            raise ConflictError("A payment for this deal is already awaiting verification")
        if Decimal(amount) <= 0:
            raise ValidationError("Payment amount must be greater than zero")

        payment = await self._payment_repo.create(
            Payment(
                deal_id=deal.id,
                payment_method=PaymentMethod(payment_method).value,
                amount=Decimal(amount),
                currency=currency.upper(),
                proof_url=require_text(proof_url, "A proof URL is required"),
                external_reference=transaction_id,
                notes=notes,
                status=PaymentStatus.PENDING.value,
            )
        )
        await self._event_repo.record(
            entity_type=EntityType.PAYMENT,
            entity_id=payment.id,
            event_type=EventType.PAYMENT_PROOF_UPLOADED,
            old_status=None,
            new_status=PaymentStatus.PENDING,
            actor=ctx.user_id,
            metadata={"deal_id": str(deal.id), "amount": str(payment.amount)},
        )
        logger.info(
            "payment.proof_uploaded",
            payment_id=str(payment.id),
            deal_id=str(deal.id),
            amount=str(payment.amount),
        )
        return payment

    async def verify_payment(
        self,
        ctx: RequestContext,
        payment_id: uuid.UUID,
        action: PaymentAction,
        admin_notes: str | None = None,
        rejection_reason: str | None = None,
    ) -> Payment:
        """APPROVE -> payment CONFIRMED, deal PAYMENT_CONFIRMED. REJECT -> payment FAILED."""
        ctx.require_admin()
        action = PaymentAction(action)
        payment = await self._payment_repo.get_by_id(payment_id)
        if payment is None:
            raise NotFoundError("Payment", str(payment_id))
        if payment.status != PaymentStatus.PENDING:
            raise InvalidStateError(
                "Payment", payment.status, "Payment has already been verified"
            )
        deal = await self._deal_repo.get_by_id(payment.deal_id)
        if deal is None:
            raise NotFoundError("Deal", str(payment.deal_id))

        fields: dict = {
            "admin_notes": admin_notes,
            "verified_by": ctx.user_id,
            "verification_date": datetime.now(UTC),
        }
        if action == PaymentAction.APPROVE:
            event_name, event_type = "confirm", EventType.PAYMENT_CONFIRMED
        else:
            fields["rejection_reason"] = require_text(
                rejection_reason, "A rejection reason is required"
            )
            event_name, event_type = "fail", EventType.PAYMENT_FAILED

        old_status = payment.status
        new_status = fire_transition(PaymentStateMachine, old_status, event_name)
        if action == PaymentAction.APPROVE:
            # Deal transition first so an illegal deal state leaves the payment untouched
            await self._deals.apply_transition(
                deal, DealStatus.PAYMENT_CONFIRMED, actor=ctx.user_id
            )
        await self._payment_repo.set_status(payment, new_status, **fields)

        await self._event_repo.record(
            entity_type=EntityType.PAYMENT,
            entity_id=payment.id,
            event_type=event_type,
            old_status=old_status,
            new_status=new_status,
            actor=ctx.user_id,
            metadata={"deal_id": str(deal.id)},
        )

        if action == PaymentAction.APPROVE:
            await self._notifications.notify(
                deal.buyer_id,
                NotificationType.PAYMENT_CONFIRMED,
                "Payment confirmed",
                "Your payment has been verified. The domain transfer will begin shortly.",
                entity_id=deal.id,
            )
        else:
            await self._notifications.notify(
                deal.buyer_id,
                NotificationType.PAYMENT_FAILED,
                "Payment could not be verified",
                payment.rejection_reason or "",
                entity_id=deal.id,
            )

        logger.info(
            "payment.verified",
            payment_id=str(payment.id),
            deal_id=str(deal.id),
            result=new_status,
        )
        return payment

    async def get_payment_status(self, ctx: RequestContext, deal_id: uuid.UUID) -> dict:
        deal = await self._deals.get_deal(ctx, deal_id)
        payments = await self._payment_repo.list_for_deal(deal.id)
        return {
            "deal_id": deal.id,
            "deal_status": deal.status,
            "latest_payment": payments[0] if payments else None,
            "payments": payments,
        }

    async def get_pending_payments(
        self, ctx: RequestContext, limit: int | None = None, offset: int = 0
    ) -> list[Payment]:
        ctx.require_admin()
        return await self._payment_repo.list_by_status(
            PaymentStatus.PENDING.value, limit=page_limit(limit), offset=offset
        )
