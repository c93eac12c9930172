"""Deal REST API routes.

Routes:
    POST /api/v1/deals               - Create a deal from an APPROVED inquiry
    GET  /api/v1/deals/mine          - Deals where I am buyer or seller
    GET  /api/v1/deals/{id}          - Deal details
    GET  /api/v1/deals/{id}/status   - Status + allowed next events
    POST /api/v1/deals/{id}/status   - Transition the deal
    GET  /api/v1/deals/{id}/events   - Audit trail
"""

import uuid

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from geodomain.api.deps import get_db_session, get_request_context
from geodomain.domain.context import RequestContext
from geodomain.domain.enums import DealStatus
from geodomain.schemas.common import AuditEventResponse, StatusResponse
from geodomain.schemas.deals import CreateDealRequest, DealResponse, UpdateDealStatusRequest
from geodomain.services.deal_service import DealService

router = APIRouter(prefix="/api/v1/deals", tags=["Deals"])


@router.post("", response_model=DealResponse, status_code=201, summary="Create a deal")
async def create_deal(
    request: CreateDealRequest,
    ctx: RequestContext = Depends(get_request_context),
    session: AsyncSession = Depends(get_db_session),
) -> DealResponse:
    deal = await DealService(session).create_deal(ctx, **request.model_dump())
    return DealResponse.model_validate(deal)


@router.get("/mine", response_model=list[DealResponse], summary="My deals")
async def list_my_deals(
    status: DealStatus | None = None,
    limit: int | None = Query(default=None, ge=1, le=100),
    offset: int = Query(default=0, ge=0),
    ctx: RequestContext = Depends(get_request_context),
    session: AsyncSession = Depends(get_db_session),
) -> list[DealResponse]:
    deals = await DealService(session).get_my_deals(
        ctx, status=status, limit=limit, offset=offset
    )
    return [DealResponse.model_validate(d) for d in deals]


@router.get("/{deal_id}", response_model=DealResponse, summary="Get a deal")
async def get_deal(
    deal_id: uuid.UUID,
    ctx: RequestContext = Depends(get_request_context),
    session: AsyncSession = Depends(get_db_session),
) -> DealResponse:
    return DealResponse.model_validate(await DealService(session).get_deal(ctx, deal_id))


@router.get("/{deal_id}/status", response_model=StatusResponse, summary="Deal status check")
async def get_deal_status(
    deal_id: uuid.UUID,
    ctx: RequestContext = Depends(get_request_context),
    session: AsyncSession = Depends(get_db_session),
) -> StatusResponse:
    status = await DealService(session).get_deal_status(ctx, deal_id)
    return StatusResponse(status=status["status"], allowed_events=status["allowed_events"])


@router.post("/{deal_id}/status", response_model=DealResponse, summary="Change deal status")
async def update_deal_status(
    deal_id: uuid.UUID,
    request: UpdateDealStatusRequest,
    ctx: RequestContext = Depends(get_request_context),
    session: AsyncSession = Depends(get_db_session),
) -> DealResponse:
    """Buyers and sellers may only agree or dispute; admins drive the rest."""
    deal = await DealService(session).update_status(
        ctx,
        deal_id,
        request.status,
        admin_notes=request.admin_notes,
        reason=request.reason,
    )
    return DealResponse.model_validate(deal)


@router.get(
    "/{deal_id}/events",
    response_model=list[AuditEventResponse],
    summary="Deal audit trail",
)
async def get_deal_events(
    deal_id: uuid.UUID,
    ctx: RequestContext = Depends(get_request_context),
    session: AsyncSession = Depends(get_db_session),
) -> list[AuditEventResponse]:
    events = await DealService(session).get_history(ctx, deal_id)
    return [AuditEventResponse.model_validate(e) for e in events]
