"""Admin REST API routes: moderation queues, deal control and wholesale administration.

Every service call here checks the caller's role; non-admins get 403.
"""

import uuid

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from geodomain.api.deps import get_db_session, get_request_context
from geodomain.api.routes.wholesale import to_listing
from geodomain.domain.context import RequestContext
from geodomain.domain.enums import DealStatus
from geodomain.schemas.dashboard import AdminOverviewResponse
from geodomain.schemas.deals import DealResponse, PaymentResponse, VerifyPaymentRequest
from geodomain.schemas.inquiries import (
    AdminMessageResponse,
    InquiryResponse,
    ModerateInquiryRequest,
    ModerateMessageRequest,
)
from geodomain.schemas.verification import (
    ModerateAttemptRequest,
    PendingAttemptResponse,
    VerificationAttemptResponse,
)
from geodomain.schemas.wholesale import (
    UpdateWholesaleConfigRequest,
    WholesaleConfigResponse,
    WholesaleDomainResponse,
    WholesaleListingResponse,
    WholesaleNotesRequest,
    WholesaleSaleResponse,
    WholesaleStatsResponse,
)
from geodomain.services import (
    DashboardService,
    DealService,
    InquiryService,
    MessageService,
    PaymentService,
    VerificationService,
    WholesaleService,
)

router = APIRouter(prefix="/api/v1/admin", tags=["Admin"])


@router.get("/overview", response_model=AdminOverviewResponse, summary="Work queue sizes")
async def get_overview(
    ctx: RequestContext = Depends(get_request_context),
    session: AsyncSession = Depends(get_db_session),
) -> AdminOverviewResponse:
    return AdminOverviewResponse(**await DashboardService(session).admin_overview(ctx))


# ---------------------------------------------------------------------------
# Verification
# ---------------------------------------------------------------------------


@router.get(
    "/verification-attempts/pending",
    response_model=list[PendingAttemptResponse],
    summary="Unresolved verification attempts",
)
async def list_pending_attempts(
    limit: int | None = Query(default=None, ge=1, le=100),
    offset: int = Query(default=0, ge=0),
    ctx: RequestContext = Depends(get_request_context),
    session: AsyncSession = Depends(get_db_session),
) -> list[PendingAttemptResponse]:
    queue = await VerificationService(session).get_pending_attempts(
        ctx, limit=limit, offset=offset
    )
    return [
        PendingAttemptResponse(
            **VerificationAttemptResponse.model_validate(attempt).model_dump(),
            domain_name=domain.name,
        )
        for attempt, domain in queue
    ]


@router.post(
    "/verification-attempts/{attempt_id}/moderate",
    response_model=VerificationAttemptResponse,
    summary="Approve or reject a verification attempt",
)
async def moderate_attempt(
    attempt_id: uuid.UUID,
    request: ModerateAttemptRequest,
    ctx: RequestContext = Depends(get_request_context),
    session: AsyncSession = Depends(get_db_session),
) -> VerificationAttemptResponse:
    attempt = await VerificationService(session).moderate_verification_attempt(
        ctx,
        attempt_id,
        request.action,
        notes=request.notes,
        rejection_reason=request.rejection_reason,
    )
    return VerificationAttemptResponse.model_validate(attempt)


# ---------------------------------------------------------------------------
# Inquiries & messages
# ---------------------------------------------------------------------------


@router.get(
    "/inquiries/pending",
    response_model=list[InquiryResponse],
    summary="Inquiries awaiting review",
)
async def list_pending_inquiries(
    limit: int | None = Query(default=None, ge=1, le=100),
    offset: int = Query(default=0, ge=0),
    ctx: RequestContext = Depends(get_request_context),
    session: AsyncSession = Depends(get_db_session),
) -> list[InquiryResponse]:
    inquiries = await InquiryService(session).get_pending_inquiries(
        ctx, limit=limit, offset=offset
    )
    return [InquiryResponse.model_validate(i) for i in inquiries]


@router.post(
    "/inquiries/{inquiry_id}/moderate",
    response_model=InquiryResponse,
    summary="Moderate an inquiry",
)
async def moderate_inquiry(
    inquiry_id: uuid.UUID,
    request: ModerateInquiryRequest,
    ctx: RequestContext = Depends(get_request_context),
    session: AsyncSession = Depends(get_db_session),
) -> InquiryResponse:
    inquiry = await InquiryService(session).moderate_inquiry(
        ctx, inquiry_id, **request.model_dump()
    )
    return InquiryResponse.model_validate(inquiry)


@router.get(
    "/messages/pending",
    response_model=list[AdminMessageResponse],
    summary="Messages awaiting moderation",
)
async def list_pending_messages(
    limit: int | None = Query(default=None, ge=1, le=100),
    offset: int = Query(default=0, ge=0),
    ctx: RequestContext = Depends(get_request_context),
    session: AsyncSession = Depends(get_db_session),
) -> list[AdminMessageResponse]:
    messages = await MessageService(session).get_pending_messages(
        ctx, limit=limit, offset=offset
    )
    return [AdminMessageResponse.model_validate(m) for m in messages]


@router.post(
    "/messages/{message_id}/moderate",
    response_model=AdminMessageResponse,
    summary="Approve, reject or edit a message",
)
async def moderate_message(
    message_id: uuid.UUID,
    request: ModerateMessageRequest,
    ctx: RequestContext = Depends(get_request_context),
    session: AsyncSession = Depends(get_db_session),
) -> AdminMessageResponse:
    message = await MessageService(session).moderate_message(
        ctx, message_id, **request.model_dump()
    )
    return AdminMessageResponse.model_validate(message)


# ---------------------------------------------------------------------------
# Deals & payments
# ---------------------------------------------------------------------------


@router.get("/deals/active", response_model=list[DealResponse], summary="Open deals")
async def list_active_deals(
    status: DealStatus | None = None,
    limit: int | None = Query(default=None, ge=1, le=100),
    offset: int = Query(default=0, ge=0),
    ctx: RequestContext = Depends(get_request_context),
    session: AsyncSession = Depends(get_db_session),
) -> list[DealResponse]:
    deals = await DealService(session).get_active_deals(
        ctx, status=status, limit=limit, offset=offset
    )
    return [DealResponse.model_validate(d) for d in deals]


@router.get(
    "/payments/pending",
    response_model=list[PaymentResponse],
    summary="Payments awaiting verification",
)
async def list_pending_payments(
    limit: int | None = Query(default=None, ge=1, le=100),
    offset: int = Query(default=0, ge=0),
    ctx: RequestContext = Depends(get_request_context),
    session: AsyncSession = Depends(get_db_session),
) -> list[PaymentResponse]:
    payments = await PaymentService(session).get_pending_payments(
        ctx, limit=limit, offset=offset
    )
    return [PaymentResponse.model_validate(p) for p in payments]


@router.post(
    "/payments/{payment_id}/verify",
    response_model=PaymentResponse,
    summary="Confirm or fail a payment",
)
async def verify_payment(
    payment_id: uuid.UUID,
    request: VerifyPaymentRequest,
    ctx: RequestContext = Depends(get_request_context),
    session: AsyncSession = Depends(get_db_session),
) -> PaymentResponse:
    payment = await PaymentService(session).verify_payment(
        ctx, payment_id, **request.model_dump()
    )
    return PaymentResponse.model_validate(payment)


# ---------------------------------------------------------------------------
# Wholesale
# ---------------------------------------------------------------------------


@router.put(
    "/wholesale/config",
    response_model=WholesaleConfigResponse,
    summary="Change wholesale pricing",
)
async def update_wholesale_config(
    request: UpdateWholesaleConfigRequest,
    ctx: RequestContext = Depends(get_request_context),
    session: AsyncSession = Depends(get_db_session),
) -> WholesaleConfigResponse:
    config = await WholesaleService(session).update_config(ctx, **request.model_dump())
    return WholesaleConfigResponse.model_validate(config)


@router.get(
    "/wholesale/domains/pending",
    response_model=list[WholesaleListingResponse],
    summary="Wholesale entries awaiting approval",
)
async def list_pending_wholesale_domains(
    limit: int | None = Query(default=None, ge=1, le=100),
    offset: int = Query(default=0, ge=0),
    ctx: RequestContext = Depends(get_request_context),
    session: AsyncSession = Depends(get_db_session),
) -> list[WholesaleListingResponse]:
    svc = WholesaleService(session)
    rows = await svc.list_pending_domains(ctx, limit=limit, offset=offset)
    config = await svc.get_config()
    return [to_listing(entry, domain, config.price) for entry, domain in rows]


@router.post(
    "/wholesale/domains/{wholesale_domain_id}/approve",
    response_model=WholesaleDomainResponse,
    summary="Approve a wholesale entry",
)
async def approve_wholesale_domain(
    wholesale_domain_id: uuid.UUID,
    request: WholesaleNotesRequest,
    ctx: RequestContext = Depends(get_request_context),
    session: AsyncSession = Depends(get_db_session),
) -> WholesaleDomainResponse:
    entry = await WholesaleService(session).approve_domain(
        ctx, wholesale_domain_id, request.notes
    )
    return WholesaleDomainResponse.model_validate(entry)


@router.post(
    "/wholesale/domains/{wholesale_domain_id}/remove",
    response_model=WholesaleDomainResponse,
    summary="Remove a wholesale entry",
)
async def remove_wholesale_domain(
    wholesale_domain_id: uuid.UUID,
    request: WholesaleNotesRequest,
    ctx: RequestContext = Depends(get_request_context),
    session: AsyncSession = Depends(get_db_session),
) -> WholesaleDomainResponse:
    ctx.require_admin()
    entry = await WholesaleService(session).remove_domain(
        ctx, wholesale_domain_id, request.notes
    )
    return WholesaleDomainResponse.model_validate(entry)


@router.post(
    "/wholesale/sales/{sale_id}/mark-paid",
    response_model=WholesaleSaleResponse,
    summary="Record the seller payout",
)
async def mark_sale_paid(
    sale_id: uuid.UUID,
    ctx: RequestContext = Depends(get_request_context),
    session: AsyncSession = Depends(get_db_session),
) -> WholesaleSaleResponse:
    sale = await WholesaleService(session).mark_sale_paid(ctx, sale_id)
    return WholesaleSaleResponse.model_validate(sale)


@router.get(
    "/wholesale/stats",
    response_model=WholesaleStatsResponse,
    summary="Wholesale sales and revenue",
)
async def get_wholesale_stats(
    ctx: RequestContext = Depends(get_request_context),
    session: AsyncSession = Depends(get_db_session),
) -> WholesaleStatsResponse:
    return WholesaleStatsResponse(**await WholesaleService(session).get_stats(ctx))
