"""Dashboard Service - seller and admin counters computed from real rows."""

from __future__ import annotations

from typing import TYPE_CHECKING

from geodomain.domain.enums import (
    DealStatus,
    InquiryStatus,
    MessageStatus,
    PaymentStatus,
    WholesaleDomainStatus,
)
from geodomain.infrastructure.database.repositories import (
    DealRepository,
    DomainRepository,
    InquiryRepository,
    MessageRepository,
    PaymentRepository,
    VerificationAttemptRepository,
    WholesaleDomainRepository,
)
from geodomain.services.deal_service import ACTIVE_STATUSES
from geodomain.services.inquiry_service import SELLER_VISIBLE_STATUSES

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from geodomain.domain.context import RequestContext


class DashboardService:
    def __init__(self, session: AsyncSession) -> None:
        self._domain_repo = DomainRepository(session)
        self._inquiry_repo = InquiryRepository(session)
        self._message_repo = MessageRepository(session)
        self._deal_repo = DealRepository(session)
        self._payment_repo = PaymentRepository(session)
        self._attempt_repo = VerificationAttemptRepository(session)
        self._wholesale_repo = WholesaleDomainRepository(session)

    async def seller_stats(self, ctx: RequestContext) -> dict:
        """Counts for the caller as a seller. Conversion rate is completed deals per inquiry."""
        total_inquiries = await self._inquiry_repo.count_for_seller(
            ctx.user_id, SELLER_VISIBLE_STATUSES
        )
        completed = await self._deal_repo.count_for_seller(
            ctx.user_id, DealStatus.COMPLETED.value
        )
        conversion_rate = (
            round(completed / total_inquiries * 100, 1) if total_inquiries else 0.0
        )
        return {
            "total_domains": await self._domain_repo.count_by_owner(ctx.user_id),
            "total_inquiries": total_inquiries,
            "total_deals": await self._deal_repo.count_for_seller(ctx.user_id),
            "completed_deals": completed,
            "conversion_rate": conversion_rate,
        }

    async def admin_overview(self, ctx: RequestContext) -> dict:
        """Sizes of every admin work queue."""
        ctx.require_admin()
        return {
            "pending_inquiries": await self._inquiry_repo.count_by_status(
                InquiryStatus.PENDING_REVIEW.value
            ),
            "pending_messages": await self._message_repo.count_by_status(
                MessageStatus.PENDING.value
            ),
            "pending_verifications": await self._attempt_repo.count_unresolved(),
            "pending_payments": await self._payment_repo.count_by_status(
                PaymentStatus.PENDING.value
            ),
            "pending_wholesale_approvals": await self._wholesale_repo.count_by_status(
                WholesaleDomainStatus.PENDING_APPROVAL.value
            ),
            "active_deals": await self._deal_repo.count_by_statuses(ACTIVE_STATUSES),
        }
