"""Payment REST API routes.

Routes:
    POST /api/v1/payments/proof            - Buyer uploads payment proof (Idempotency-Key aware)
    GET  /api/v1/payments/deal/{deal_id}   - Payment status for a deal
"""

import uuid

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from geodomain.api.deps import (
    get_db_session,
    get_idempotency_key,
    get_request_context,
    idempotent,
)
from geodomain.domain.context import RequestContext
from geodomain.schemas.deals import PaymentResponse, PaymentStatusResponse, UploadProofRequest
from geodomain.services.payment_service import PaymentService

router = APIRouter(prefix="/api/v1/payments", tags=["Payments"])


@router.post(
    "/proof",
    response_model=PaymentResponse,
    status_code=201,
    summary="Upload payment proof",
)
async def upload_proof(
    request: UploadProofRequest,
    ctx: RequestContext = Depends(get_request_context),
    idempotency_key: str | None = Depends(get_idempotency_key),
    session: AsyncSession = Depends(get_db_session),
) -> PaymentResponse:
    async with idempotent("payment_proof", idempotency_key, ctx.user_id, session):
        payment = await PaymentService(session).upload_proof(ctx, **request.model_dump())
    return PaymentResponse.model_validate(payment)


@router.get(
    "/deal/{deal_id}",
    response_model=PaymentStatusResponse,
    summary="Payment status for a deal",
)
async def get_payment_status(
    deal_id: uuid.UUID,
    ctx: RequestContext = Depends(get_request_context),
    session: AsyncSession = Depends(get_db_session),
) -> PaymentStatusResponse:
    status = await PaymentService(session).get_payment_status(ctx, deal_id)
    latest = status["latest_payment"]
    return PaymentStatusResponse(
        deal_id=status["deal_id"],
        deal_status=status["deal_status"],
        latest_payment=PaymentResponse.model_validate(latest) if latest else None,
        payments=[PaymentResponse.model_validate(p) for p in status["payments"]],
    )
