"""Inquiry Service - buyer inquiries and their moderation.

An inquiry is invisible to the seller until an admin approves it. The seller
is notified on approval, never on creation.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING

from geodomain.domain.enums import (
    DomainStatus,
    EntityType,
    EventType,
    InquiryAction,
    InquiryStatus,
    NotificationType,
)
from geodomain.domain.exceptions import (
    ForbiddenError,
    InvalidStateError,
    NotFoundError,
    ValidationError,
)
from geodomain.domain.state_machine import InquiryStateMachine, fire_transition
from geodomain.infrastructure.database.orm_models import Inquiry
from geodomain.infrastructure.database.repositories import (
    AuditEventRepository,
    DomainRepository,
    InquiryRepository,
)
from geodomain.logging_config import get_logger
from geodomain.services._helpers import page_limit, require_text
from geodomain.services.notification_service import NotificationService

if TYPE_CHECKING:
    import uuid

    from sqlalchemy.ext.asyncio import AsyncSession

    from geodomain.domain.context import RequestContext

logger = get_logger(__name__)

INQUIRABLE_DOMAIN_STATUSES = frozenset({DomainStatus.VERIFIED, DomainStatus.PUBLISHED})
SELLER_VISIBLE_STATUSES = (InquiryStatus.APPROVED.value, InquiryStatus.CONVERTED_TO_DEAL.value)


class InquiryService:
    """Manages buyer inquiries and the admin moderation queue."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session
        self._inquiry_repo = InquiryRepository(session)
        self._domain_repo = DomainRepository(session)
        self._event_repo = AuditEventRepository(session)
        self._notifications = NotificationService(session)

    # ------------------------------------------------------------------
    # Buyer side
    # ------------------------------------------------------------------

    async def create_inquiry(
        self,
        ctx: RequestContext,
        domain_id: uuid.UUID,
        buyer_name: str,
        buyer_email: str,
        message: str | None = None,
        buyer_phone: str | None = None,
        buyer_company: str | None = None,
        budget_range: str | None = None,
        intended_use: str | None = None,
        timeline: str | None = None,
    ) -> Inquiry:
        """Create a PENDING_REVIEW inquiry on a VERIFIED or PUBLISHED domain."""
        domain = await self._domain_repo.get_by_id(domain_id)
        if domain is None or domain.status not in INQUIRABLE_DOMAIN_STATUSES:
            raise NotFoundError("Domain", str(domain_id))
        if domain.owner_id == ctx.user_id:
            raise ForbiddenError("You cannot send an inquiry for your own domain")

        inquiry = await self._inquiry_repo.create(
            Inquiry(
                domain_id=domain.id,
                buyer_id=ctx.user_id,
                seller_id=domain.owner_id,
                buyer_name=require_text(buyer_name, "Buyer name is required"),
                buyer_email=require_text(buyer_email, "Buyer email is required"),
                buyer_phone=buyer_phone,
                buyer_company=buyer_company,
                budget_range=budget_range,
                intended_use=intended_use,
                timeline=timeline,
                message=message,
                status=InquiryStatus.PENDING_REVIEW.value,
            )
        )
        await self._event_repo.record(
            entity_type=EntityType.INQUIRY,
            entity_id=inquiry.id,
            event_type=EventType.INQUIRY_CREATED,
            old_status=None,
            new_status=InquiryStatus.PENDING_REVIEW,
            actor=ctx.user_id,
            metadata={"domain_id": str(domain.id)},
        )
        logger.info("inquiry.created", inquiry_id=str(inquiry.id), domain_id=str(domain.id))
        return inquiry

    async def resubmit_inquiry(
        self,
        ctx: RequestContext,
        inquiry_id: uuid.UUID,
        message: str | None = None,
        budget_range: str | None = None,
        intended_use: str | None = None,
        timeline: str | None = None,
    ) -> Inquiry:
        """CHANGES_REQUESTED -> PENDING_REVIEW after the buyer edits the inquiry."""
        inquiry = await self._get_inquiry_or_raise(inquiry_id)
        if inquiry.buyer_id != ctx.user_id:
            raise NotFoundError("Inquiry", str(inquiry_id))

        old_status = inquiry.status
        new_status = fire_transition(InquiryStateMachine, old_status, "resubmit")

        for field_name, value in (
            ("message", message),
            ("budget_range", budget_range),
            ("intended_use", intended_use),
            ("timeline", timeline),
        ):
            if value is not None:
                setattr(inquiry, field_name, value)
        await self._inquiry_repo.set_status(inquiry, new_status, requested_changes=None)

        await self._event_repo.record(
            entity_type=EntityType.INQUIRY,
            entity_id=inquiry.id,
            event_type=EventType.INQUIRY_RESUBMITTED,
            old_status=old_status,
            new_status=new_status,
            actor=ctx.user_id,
        )
        logger.info("inquiry.resubmitted", inquiry_id=str(inquiry.id))
        return inquiry

    async def get_my_inquiries(
        self, ctx: RequestContext, limit: int | None = None, offset: int = 0
    ) -> list[Inquiry]:
        return await self._inquiry_repo.list_for_buyer(
            ctx.user_id, limit=page_limit(limit), offset=offset
        )

    # ------------------------------------------------------------------
    # Seller side
    # ------------------------------------------------------------------

    async def get_seller_inquiries(
        self, ctx: RequestContext, limit: int | None = None, offset: int = 0
    ) -> list[Inquiry]:
        """Approved (or converted) inquiries on the caller's domains."""
        return await self._inquiry_repo.list_for_seller(
            ctx.user_id, SELLER_VISIBLE_STATUSES, limit=page_limit(limit), offset=offset
        )

    async def get_inquiry(self, ctx: RequestContext, inquiry_id: uuid.UUID) -> Inquiry:
        inquiry = await self._get_inquiry_or_raise(inquiry_id)
        if ctx.is_admin or inquiry.buyer_id == ctx.user_id:
            return inquiry
        if inquiry.seller_id == ctx.user_id and inquiry.status in SELLER_VISIBLE_STATUSES:
            return inquiry
        raise NotFoundError("Inquiry", str(inquiry_id))

    # ------------------------------------------------------------------
    # Admin moderation
    # ------------------------------------------------------------------

    async def get_pending_inquiries(
        self, ctx: RequestContext, limit: int | None = None, offset: int = 0
    ) -> list[Inquiry]:
        ctx.require_admin()
        return await self._inquiry_repo.list_by_status(
            InquiryStatus.PENDING_REVIEW.value, limit=page_limit(limit), offset=offset
        )

    async def moderate_inquiry(
        self,
        ctx: RequestContext,
        inquiry_id: uuid.UUID,
        action: InquiryAction,
        admin_notes: str | None = None,
        rejection_reason: str | None = None,
        requested_changes: list[str] | None = None,
    ) -> Inquiry:
        """Approve, reject or send back a PENDING_REVIEW inquiry.

        REQUEST_CHANGES moves the inquiry to CHANGES_REQUESTED and never
        approves it.
        """
        ctx.require_admin()
        action = InquiryAction(action)
        inquiry = await self._get_inquiry_or_raise(inquiry_id)
        if inquiry.status != InquiryStatus.PENDING_REVIEW:
            raise InvalidStateError(
                "Inquiry", inquiry.status, "Only PENDING_REVIEW inquiries can be moderated"
            )

        fields: dict = {
            "admin_notes": admin_notes,
            "moderated_by": ctx.user_id,
            "moderated_at": datetime.now(UTC),
        }
        if action == InquiryAction.APPROVE:
            event_name, event_type = "approve", EventType.INQUIRY_APPROVED
        elif action == InquiryAction.REJECT:
            fields["rejection_reason"] = require_text(
                rejection_reason, "A rejection reason is required"
            )
            event_name, event_type = "reject", EventType.INQUIRY_REJECTED
        else:
            changes = [c.strip() for c in (requested_changes or []) if c and c.strip()]
            if not changes:
                raise ValidationError("At least one requested change is required")
            fields["requested_changes"] = changes
            event_name, event_type = "request_changes", EventType.INQUIRY_CHANGES_REQUESTED

        old_status = inquiry.status
        new_status = fire_transition(InquiryStateMachine, old_status, event_name)
        await self._inquiry_repo.set_status(inquiry, new_status, **fields)

        await self._event_repo.record(
            entity_type=EntityType.INQUIRY,
            entity_id=inquiry.id,
            event_type=event_type,
            old_status=old_status,
            new_status=new_status,
            actor=ctx.user_id,
            metadata={"action": action.value},
        )

        if action == InquiryAction.APPROVE:
            await self._notifications.notify(
                inquiry.seller_id,
                NotificationType.INQUIRY_RECEIVED,
                "New inquiry received",
                f"{inquiry.buyer_name} is interested in your domain.",
                entity_id=inquiry.id,
            )
        elif action == InquiryAction.REQUEST_CHANGES:
            await self._notifications.notify(
                inquiry.buyer_id,
                NotificationType.INQUIRY_CHANGES_REQUESTED,
                "Changes requested on your inquiry",
                "; ".join(inquiry.requested_changes or []),
                entity_id=inquiry.id,
            )

        logger.info(
            "inquiry.moderated",
            inquiry_id=str(inquiry.id),
            action=action.value,
            new_status=new_status,
        )
        return inquiry

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    async def _get_inquiry_or_raise(self, inquiry_id: uuid.UUID) -> Inquiry:
        inquiry = await self._inquiry_repo.get_by_id(inquiry_id)
        if inquiry is None:
            raise NotFoundError("Inquiry", str(inquiry_id))
        return inquiry
