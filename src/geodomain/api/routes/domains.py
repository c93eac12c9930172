"""Domain listing REST API routes.

Routes:
    POST   /api/v1/domains                          - Create a DRAFT listing
    GET    /api/v1/domains                          - Browse published listings (search, filters, sort)
    GET    /api/v1/domains/mine                     - Caller's listings
    GET    /api/v1/domains/{id}                     - Listing details
    PATCH  /api/v1/domains/{id}                     - Edit a DRAFT listing
    DELETE /api/v1/domains/{id}                     - Delete a DRAFT/REJECTED listing
    POST   /api/v1/domains/{id}/submit              - DRAFT -> PENDING_VERIFICATION
    POST   /api/v1/domains/{id}/resubmit            - REJECTED -> DRAFT
    POST   /api/v1/domains/{id}/publish|pause|resume
    GET    /api/v1/domains/{id}/verification-status - Token, pending attempt, next steps
    GET    /api/v1/domains/{id}/events              - Audit trail
"""

import uuid
from decimal import Decimal
from typing import Literal

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.ext.asyncio import AsyncSession

from geodomain.api.deps import get_db_session, get_request_context
from geodomain.domain.context import RequestContext
from geodomain.domain.enums import DomainStatus, PriceType
from geodomain.schemas.common import AuditEventResponse
from geodomain.schemas.domains import CreateDomainRequest, DomainResponse, UpdateDomainRequest
from geodomain.schemas.verification import (
    VerificationAttemptResponse,
    VerificationStatusResponse,
)
from geodomain.services.domain_service import DomainService

router = APIRouter(prefix="/api/v1/domains", tags=["Domains"])


@router.post("", response_model=DomainResponse, status_code=201, summary="Create a listing")
async def create_domain(
    request: CreateDomainRequest,
    ctx: RequestContext = Depends(get_request_context),
    session: AsyncSession = Depends(get_db_session),
) -> DomainResponse:
    domain = await DomainService(session).create_domain(ctx, **request.model_dump())
    return DomainResponse.model_validate(domain)


@router.get("", response_model=list[DomainResponse], summary="Browse published listings")
async def list_published_domains(
    q: str | None = Query(default=None, max_length=100),
    state: str | None = None,
    city: str | None = None,
    category: str | None = None,
    price_min: Decimal | None = Query(default=None, ge=0),
    price_max: Decimal | None = Query(default=None, ge=0),
    price_type: PriceType | None = None,
    sort_by: Literal["price", "date"] = "date",
    sort_order: Literal["asc", "desc"] = "desc",
    limit: int | None = Query(default=None, ge=1, le=100),
    offset: int = Query(default=0, ge=0),
    session: AsyncSession = Depends(get_db_session),
) -> list[DomainResponse]:
    domains = await DomainService(session).list_published_domains(
        query=q,
        state=state,
        city=city,
        category=category,
        price_min=price_min,
        price_max=price_max,
        price_type=price_type,
        sort_by=sort_by,
        sort_order=sort_order,
        limit=limit,
        offset=offset,
    )
    return [DomainResponse.model_validate(d) for d in domains]


@router.get("/mine", response_model=list[DomainResponse], summary="List my domains")
async def list_my_domains(
    status: DomainStatus | None = None,
    limit: int | None = Query(default=None, ge=1, le=100),
    offset: int = Query(default=0, ge=0),
    ctx: RequestContext = Depends(get_request_context),
    session: AsyncSession = Depends(get_db_session),
) -> list[DomainResponse]:
    domains = await DomainService(session).list_my_domains(
        ctx, status=status, limit=limit, offset=offset
    )
    return [DomainResponse.model_validate(d) for d in domains]


@router.get("/{domain_id}", response_model=DomainResponse, summary="Get a domain")
async def get_domain(
    domain_id: uuid.UUID,
    ctx: RequestContext = Depends(get_request_context),
    session: AsyncSession = Depends(get_db_session),
) -> DomainResponse:
    return DomainResponse.model_validate(await DomainService(session).get_domain(ctx, domain_id))


@router.patch("/{domain_id}", response_model=DomainResponse, summary="Edit a DRAFT domain")
async def update_domain(
    domain_id: uuid.UUID,
    request: UpdateDomainRequest,
    ctx: RequestContext = Depends(get_request_context),
    session: AsyncSession = Depends(get_db_session),
) -> DomainResponse:
    domain = await DomainService(session).update_domain(
        ctx, domain_id, **request.model_dump(exclude_unset=True)
    )
    return DomainResponse.model_validate(domain)


@router.delete("/{domain_id}", status_code=204, summary="Delete a DRAFT or REJECTED domain")
async def delete_domain(
    domain_id: uuid.UUID,
    ctx: RequestContext = Depends(get_request_context),
    session: AsyncSession = Depends(get_db_session),
) -> Response:
    await DomainService(session).delete_domain(ctx, domain_id)
    return Response(status_code=204)


# ---------------------------------------------------------------------------
# Lifecycle
# ---------------------------------------------------------------------------


@router.post(
    "/{domain_id}/submit",
    response_model=DomainResponse,
    summary="Submit for verification",
)
async def submit_for_verification(
    domain_id: uuid.UUID,
    ctx: RequestContext = Depends(get_request_context),
    session: AsyncSession = Depends(get_db_session),
) -> DomainResponse:
    """DRAFT -> PENDING_VERIFICATION."""
    domain = await DomainService(session).submit_for_verification(ctx, domain_id)
    return DomainResponse.model_validate(domain)


@router.post("/{domain_id}/resubmit", response_model=DomainResponse, summary="Back to DRAFT")
async def resubmit_domain(
    domain_id: uuid.UUID,
    ctx: RequestContext = Depends(get_request_context),
    session: AsyncSession = Depends(get_db_session),
) -> DomainResponse:
    """REJECTED -> DRAFT."""
    return DomainResponse.model_validate(await DomainService(session).resubmit(ctx, domain_id))


@router.post("/{domain_id}/publish", response_model=DomainResponse, summary="Publish")
async def publish_domain(
    domain_id: uuid.UUID,
    ctx: RequestContext = Depends(get_request_context),
    session: AsyncSession = Depends(get_db_session),
) -> DomainResponse:
    return DomainResponse.model_validate(await DomainService(session).publish(ctx, domain_id))


@router.post("/{domain_id}/pause", response_model=DomainResponse, summary="Pause a listing")
async def pause_domain(
    domain_id: uuid.UUID,
    ctx: RequestContext = Depends(get_request_context),
    session: AsyncSession = Depends(get_db_session),
) -> DomainResponse:
    return DomainResponse.model_validate(await DomainService(session).pause(ctx, domain_id))


@router.post("/{domain_id}/resume", response_model=DomainResponse, summary="Resume a listing")
async def resume_domain(
    domain_id: uuid.UUID,
    ctx: RequestContext = Depends(get_request_context),
    session: AsyncSession = Depends(get_db_session),
) -> DomainResponse:
    return DomainResponse.model_validate(await DomainService(session).resume(ctx, domain_id))


@router.get(
    "/{domain_id}/verification-status",
    response_model=VerificationStatusResponse,
    summary="Verification status",
)
async def get_verification_status(
    domain_id: uuid.UUID,
    ctx: RequestContext = Depends(get_request_context),
    session: AsyncSession = Depends(get_db_session),
) -> VerificationStatusResponse:
    status = await DomainService(session).get_verification_status(ctx, domain_id)
    pending = status.pop("pending_attempt")
    return VerificationStatusResponse(
        **status,
        pending_attempt=VerificationAttemptResponse.model_validate(pending) if pending else None,
    )


@router.get(
    "/{domain_id}/events",
    response_model=list[AuditEventResponse],
    summary="Domain audit trail",
)
async def get_domain_events(
    domain_id: uuid.UUID,
    ctx: RequestContext = Depends(get_request_context),
    session: AsyncSession = Depends(get_db_session),
) -> list[AuditEventResponse]:
    events = await DomainService(session).get_history(ctx, domain_id)
    return [AuditEventResponse.model_validate(e) for e in events]
