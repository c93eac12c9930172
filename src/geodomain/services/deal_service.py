"""Deal Service - negotiated sales from approved inquiry to completed transfer.

Every status change goes through `next_deal_status`, the total transition
function over DealStatus pairs. Admins may perform any legal transition;
buyer and seller may only agree or raise a dispute.
"""

from __future__ import annotations

from datetime import UTC, datetime
from decimal import Decimal
from typing import TYPE_CHECKING

from geodomain.domain.enums import (
    DealStatus,
    DomainStatus,
    EntityType,
    EventType,
    InquiryStatus,
    NotificationType,
    PaymentMethod,
)
from geodomain.domain.exceptions import (
    ConflictError,
    ForbiddenError,
    InvalidStateError,
    NotFoundError,
    ValidationError,
)
from geodomain.domain.state_machine import (
    DealStateMachine,
    InquiryStateMachine,
    fire_transition,
    next_deal_status,
)
from geodomain.infrastructure.database.orm_models import Deal
from geodomain.infrastructure.database.repositories import (
    AuditEventRepository,
    DealRepository,
    DomainRepository,
    InquiryRepository,
)
from geodomain.logging_config import get_logger
from geodomain.services._helpers import page_limit
from geodomain.services.domain_service import DomainService
from geodomain.services.notification_service import NotificationService
from geodomain.services.wholesale_service import WholesaleService

if TYPE_CHECKING:
    import uuid

    from sqlalchemy.ext.asyncio import AsyncSession

    from geodomain.domain.context import RequestContext

logger = get_logger(__name__)

# Timestamp column written when a deal enters each status.
STATUS_DATE_FIELDS: dict[DealStatus, str] = {
    DealStatus.AGREED: "agreed_date",
    DealStatus.PAYMENT_PENDING: "payment_pending_date",
    DealStatus.PAYMENT_CONFIRMED: "payment_confirmed_date",
    DealStatus.TRANSFER_INITIATED: "transfer_initiated_date",
    DealStatus.COMPLETED: "completed_date",
    DealStatus.DISPUTED: "disputed_date",
}
PARTICIPANT_TARGETS = frozenset({DealStatus.AGREED, DealStatus.DISPUTED})
TERMINAL_STATUSES = frozenset({DealStatus.COMPLETED, DealStatus.DISPUTED})
ACTIVE_STATUSES = tuple(s.value for s in DealStatus if s not in TERMINAL_STATUSES)


class DealService:
    """Manages the deal lifecycle."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session
        self._deal_repo = DealRepository(session)
        self._inquiry_repo = InquiryRepository(session)
        self._domain_repo = DomainRepository(session)
        self._event_repo = AuditEventRepository(session)
        self._domains = DomainService(session)
        self._notifications = NotificationService(session)
        self._wholesale = WholesaleService(session)

    # ------------------------------------------------------------------
    # Deal Creation
    # ------------------------------------------------------------------

    async def create_deal(
        self,
        ctx: RequestContext,
        inquiry_id: uuid.UUID,
        agreed_price: Decimal,
        payment_method: PaymentMethod,
        currency: str = "USD",
        payment_instructions: str | None = None,
        timeline: str | None = None,
        terms: str | None = None,
    ) -> Deal:
        """Create a NEGOTIATING deal and convert its APPROVED inquiry."""
        inquiry = await self._inquiry_repo.get_by_id(inquiry_id)
        if inquiry is None:
            raise NotFoundError("Inquiry", str(inquiry_id))
        if not ctx.is_admin:
            if inquiry.seller_id != ctx.user_id and inquiry.buyer_id != ctx.user_id:
                raise NotFoundError("Inquiry", str(inquiry_id))
            if inquiry.seller_id != ctx.user_id:
                raise ForbiddenError("Only the seller or an admin can create a deal")

        if await self._deal_repo.get_by_inquiry(inquiry.id) is not None:
            raise ConflictError("A deal already exists for this inquiry")
        if inquiry.status != InquiryStatus.APPROVED:
            raise InvalidStateError(
                "Inquiry", inquiry.status, "Deals can only be created from APPROVED inquiries"
            )
        if Decimal(agreed_price) <= 0:
            raise ValidationError("Agreed price must be greater than zero")

        deal = await self._deal_repo.create(
            Deal(
                inquiry_id=inquiry.id,
                domain_id=inquiry.domain_id,
                buyer_id=inquiry.buyer_id,
                seller_id=inquiry.seller_id,
                agreed_price=Decimal(agreed_price),
                currency=currency.upper(),
                payment_method=PaymentMethod(payment_method).value,
                payment_instructions=payment_instructions,
                timeline=timeline,
                terms=terms,
                status=DealStatus.NEGOTIATING.value,
            )
        )

        old_inquiry_status = inquiry.status
        new_inquiry_status = fire_transition(InquiryStateMachine, old_inquiry_status, "convert")
        await self._inquiry_repo.set_status(inquiry, new_inquiry_status)

        await self._event_repo.record(
            entity_type=EntityType.INQUIRY,
            entity_id=inquiry.id,
            event_type=EventType.INQUIRY_CONVERTED,
            old_status=old_inquiry_status,
            new_status=new_inquiry_status,
            actor=ctx.user_id,
            metadata={"deal_id": str(deal.id)},
        )
        await self._event_repo.record(
            entity_type=EntityType.DEAL,
            entity_id=deal.id,
            event_type=EventType.DEAL_CREATED,
            old_status=None,
            new_status=DealStatus.NEGOTIATING,
            actor=ctx.user_id,
            metadata={"inquiry_id": str(inquiry.id), "agreed_price": str(deal.agreed_price)},
        )
        await self._notify_parties(deal, exclude=ctx.user_id, message="A deal has been created.")

        logger.info(
            "deal.created",
            deal_id=str(deal.id),
            inquiry_id=str(inquiry.id),
            agreed_price=str(deal.agreed_price),
        )
        return deal

    # ------------------------------------------------------------------
    # Status changes
    # ------------------------------------------------------------------

    async def update_status(
        self,
        ctx: RequestContext,
        deal_id: uuid.UUID,
        new_status: DealStatus,
        admin_notes: str | None = None,
        reason: str | None = None,
    ) -> Deal:
        """Move a deal to new_status if (current, new_status) is in the transition table."""
        target = DealStatus(new_status)
        deal = await self._get_visible_deal(ctx, deal_id)
        if not ctx.is_admin and target not in PARTICIPANT_TARGETS:
            raise ForbiddenError("Only an admin can move a deal to " + target.value)

        fields: dict = {}
        if admin_notes is not None and ctx.is_admin:
            fields["admin_notes"] = admin_notes
        if target == DealStatus.DISPUTED and reason:
            fields["dispute_reason"] = reason.strip()
        return await self.apply_transition(deal, target, actor=ctx.user_id, **fields)

    async def apply_transition(
        self, deal: Deal, target: DealStatus, actor: str, **fields: object
    ) -> Deal:
        """Validate (current, target), stamp the status date, persist, audit and notify.

        Raises InvalidTransitionError for pairs outside the transition table
        and InvalidStateError when the domain was already sold elsewhere; only
        a dispute may still be raised then.
        """
        old_status = deal.status
        new_status = next_deal_status(old_status, target)
        if new_status != DealStatus.DISPUTED:
            await self._ensure_domain_unsold(deal)
        fields[STATUS_DATE_FIELDS[new_status]] = datetime.now(UTC)
        await self._deal_repo.set_status(deal, new_status, **fields)

        await self._event_repo.record(
            entity_type=EntityType.DEAL,
            entity_id=deal.id,
            event_type=EventType.DEAL_STATUS_CHANGED,
            old_status=old_status,
            new_status=new_status,
            actor=actor,
            metadata={"dispute_reason": deal.dispute_reason} if deal.dispute_reason else None,
        )

        if new_status == DealStatus.COMPLETED:
            await self._mark_domain_sold(deal, actor)

        await self._notify_parties(
            deal,
            exclude=actor,
            message=f"Deal status changed from {old_status} to {new_status.value}.",
        )
        logger.info(
            "deal.status_changed",
            deal_id=str(deal.id),
            old_status=old_status,
            new_status=new_status.value,
            actor=actor,
        )
        return deal

    # ------------------------------------------------------------------
    # Read helpers
    # ------------------------------------------------------------------

    async def get_deal(self, ctx: RequestContext, deal_id: uuid.UUID) -> Deal:
        return await self._get_visible_deal(ctx, deal_id)

    async def get_deal_status(self, ctx: RequestContext, deal_id: uuid.UUID) -> dict:
        deal = await self._get_visible_deal(ctx, deal_id)
        sm = DealStateMachine(current_status=deal.status)
        return {
            "deal_id": deal.id,
            "status": deal.status,
            "allowed_events": sm.get_allowed_events(),
        }

    async def get_history(self, ctx: RequestContext, deal_id: uuid.UUID) -> list:
        deal = await self._get_visible_deal(ctx, deal_id)
        return await self._event_repo.get_for_entity(EntityType.DEAL, deal.id)

    async def get_my_deals(
        self,
        ctx: RequestContext,
        status: DealStatus | None = None,
        limit: int | None = None,
        offset: int = 0,
    ) -> list[Deal]:
        """Deals where the caller is the buyer or the seller."""
        return await self._deal_repo.list_for_participant(
            ctx.user_id,
            status=str(status) if status else None,
            limit=page_limit(limit),
            offset=offset,
        )

    async def get_active_deals(
        self,
        ctx: RequestContext,
        status: DealStatus | None = None,
        limit: int | None = None,
        offset: int = 0,
    ) -> list[Deal]:
        """Admin view of non-terminal deals (or of one specific status)."""
        ctx.require_admin()
        statuses = (str(status),) if status else ACTIVE_STATUSES
        return await self._deal_repo.list_by_statuses(
            statuses, limit=page_limit(limit), offset=offset
        )

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    async def _get_visible_deal(self, ctx: RequestContext, deal_id: uuid.UUID) -> Deal:
        deal = await self._deal_repo.get_by_id(deal_id)
        if deal is None:
            raise NotFoundError("Deal", str(deal_id))
        if not ctx.is_admin and ctx.user_id not in (deal.buyer_id, deal.seller_id):
            raise NotFoundError("Deal", str(deal_id))
        return deal

    async def _ensure_domain_unsold(self, deal: Deal) -> None:
        domain = await self._domain_repo.get_by_id(deal.domain_id)
        if domain is not None and domain.status == DomainStatus.SOLD:
            raise InvalidStateError("Domain", domain.status, "Domain has already been sold")

    async def _mark_domain_sold(self, deal: Deal, actor: str) -> None:
        """SOLD is terminal, so the domain leaves the wholesale pool with it."""
        domain = await self._domain_repo.get_by_id(deal.domain_id)
        if domain is None:
            raise NotFoundError("Domain", str(deal.domain_id))
        await self._domains.apply_transition(
            domain, "mark_sold", actor=actor, metadata={"deal_id": str(deal.id)}
        )
        await self._wholesale.withdraw_for_sold_domain(domain.id, actor)

    async def _notify_parties(self, deal: Deal, exclude: str, message: str) -> None:
        for user_id in (deal.buyer_id, deal.seller_id):
            if user_id != exclude:
                await self._notifications.notify(
                    user_id,
                    NotificationType.DEAL_UPDATED,
                    "Deal updated",
                    message,
                    entity_id=deal.id,
                )
