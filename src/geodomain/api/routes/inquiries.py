"""Inquiry REST API routes.

Routes:
    POST /api/v1/inquiries                 - Buyer sends an inquiry (PENDING_REVIEW)
    GET  /api/v1/inquiries/mine            - Buyer's inquiries
    GET  /api/v1/inquiries/received        - Seller's approved inquiries
    GET  /api/v1/inquiries/{id}            - Inquiry details
    POST /api/v1/inquiries/{id}/resubmit   - CHANGES_REQUESTED -> PENDING_REVIEW
"""

import uuid

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from geodomain.api.deps import get_db_session, get_request_context
from geodomain.domain.context import RequestContext
from geodomain.schemas.inquiries import (
    CreateInquiryRequest,
    InquiryResponse,
    ResubmitInquiryRequest,
)
from geodomain.services.inquiry_service import InquiryService

router = APIRouter(prefix="/api/v1/inquiries", tags=["Inquiries"])


@router.post("", response_model=InquiryResponse, status_code=201, summary="Send an inquiry")
async def create_inquiry(
    request: CreateInquiryRequest,
    ctx: RequestContext = Depends(get_request_context),
    session: AsyncSession = Depends(get_db_session),
) -> InquiryResponse:
    inquiry = await InquiryService(session).create_inquiry(ctx, **request.model_dump())
    return InquiryResponse.model_validate(inquiry)


@router.get("/mine", response_model=list[InquiryResponse], summary="My sent inquiries")
async def list_my_inquiries(
    limit: int | None = Query(default=None, ge=1, le=100),
    offset: int = Query(default=0, ge=0),
    ctx: RequestContext = Depends(get_request_context),
    session: AsyncSession = Depends(get_db_session),
) -> list[InquiryResponse]:
    inquiries = await InquiryService(session).get_my_inquiries(ctx, limit=limit, offset=offset)
    return [InquiryResponse.model_validate(i) for i in inquiries]


@router.get("/received", response_model=list[InquiryResponse], summary="Inquiries on my domains")
async def list_received_inquiries(
    limit: int | None = Query(default=None, ge=1, le=100),
    offset: int = Query(default=0, ge=0),
    ctx: RequestContext = Depends(get_request_context),
    session: AsyncSession = Depends(get_db_session),
) -> list[InquiryResponse]:
    inquiries = await InquiryService(session).get_seller_inquiries(
        ctx, limit=limit, offset=offset
    )
    return [InquiryResponse.model_validate(i) for i in inquiries]


@router.get("/{inquiry_id}", response_model=InquiryResponse, summary="Get an inquiry")
async def get_inquiry(
    inquiry_id: uuid.UUID,
    ctx: RequestContext = Depends(get_request_context),
    session: AsyncSession = Depends(get_db_session),
) -> InquiryResponse:
    inquiry = await InquiryService(session).get_inquiry(ctx, inquiry_id)
    return InquiryResponse.model_validate(inquiry)


@router.post(
    "/{inquiry_id}/resubmit",
    response_model=InquiryResponse,
    summary="Resubmit after requested changes",
)
async def resubmit_inquiry(
    inquiry_id: uuid.UUID,
    request: ResubmitInquiryRequest,
    ctx: RequestContext = Depends(get_request_context),
    session: AsyncSession = Depends(get_db_session),
) -> InquiryResponse:
    inquiry = await InquiryService(session).resubmit_inquiry(
        ctx, inquiry_id, **request.model_dump()
    )
    return InquiryResponse.model_validate(inquiry)
