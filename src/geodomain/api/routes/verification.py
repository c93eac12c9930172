"""Domain verification REST API routes (seller side).

Routes:
    POST /api/v1/verification/token                - Issue or reuse a token + instructions
    POST /api/v1/verification/attempts            - Submit an ownership proof
    GET  /api/v1/verification/domains/{id}/attempts - Attempt history
"""

import uuid

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from geodomain.api.deps import get_db_session, get_request_context
from geodomain.domain.context import RequestContext
from geodomain.schemas.verification import (
    GenerateTokenRequest,
    SubmitAttemptRequest,
    VerificationAttemptResponse,
    VerificationInstructionsResponse,
)
from geodomain.services.verification_service import VerificationService

router = APIRouter(prefix="/api/v1/verification", tags=["Verification"])


@router.post(
    "/token",
    response_model=VerificationInstructionsResponse,
    summary="Get a verification token",
)
async def generate_token(
    request: GenerateTokenRequest,
    ctx: RequestContext = Depends(get_request_context),
    session: AsyncSession = Depends(get_db_session),
) -> VerificationInstructionsResponse:
    instructions = await VerificationService(session).generate_verification_token(
        ctx, request.domain_id, request.method
    )
    return VerificationInstructionsResponse(**instructions)


@router.post(
    "/attempts",
    response_model=VerificationAttemptResponse,
    status_code=201,
    summary="Submit a verification attempt",
)
async def submit_attempt(
    request: SubmitAttemptRequest,
    ctx: RequestContext = Depends(get_request_context),
    session: AsyncSession = Depends(get_db_session),
) -> VerificationAttemptResponse:
    attempt = await VerificationService(session).submit_verification_attempt(
        ctx,
        domain_id=request.domain_id,
        method=request.method,
        token=request.token,
        file_url=request.file_url,
    )
    return VerificationAttemptResponse.model_validate(attempt)


@router.get(
    "/domains/{domain_id}/attempts",
    response_model=list[VerificationAttemptResponse],
    summary="Verification attempt history",
)
async def list_attempts(
    domain_id: uuid.UUID,
    ctx: RequestContext = Depends(get_request_context),
    session: AsyncSession = Depends(get_db_session),
) -> list[VerificationAttemptResponse]:
    attempts = await VerificationService(session).get_attempts(ctx, domain_id)
    return [VerificationAttemptResponse.model_validate(a) for a in attempts]
