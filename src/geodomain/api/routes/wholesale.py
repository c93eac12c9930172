"""Wholesale marketplace REST API routes.

Routes:
    GET  /api/v1/wholesale/config                 - Current price and commission
    GET  /api/v1/wholesale/domains                - Browse ACTIVE wholesale domains
    GET  /api/v1/wholesale/domains/mine           - My wholesale entries
    POST /api/v1/wholesale/domains                - Offer a verified domain for wholesale
    POST /api/v1/wholesale/domains/{id}/remove    - Pull an entry from the pool
    POST /api/v1/wholesale/domains/{id}/purchase  - Buy at the platform price (Idempotency-Key aware)
    GET  /api/v1/wholesale/purchases/mine         - My wholesale purchases
"""

import uuid
from decimal import Decimal

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from geodomain.api.deps import (
    get_db_session,
    get_idempotency_key,
    get_request_context,
    idempotent,
)
from geodomain.domain.context import RequestContext
from geodomain.domain.enums import WholesaleDomainStatus
from geodomain.infrastructure.database.orm_models import Domain, WholesaleDomain
from geodomain.schemas.wholesale import (
    AddWholesaleDomainRequest,
    PurchaseRequest,
    WholesaleConfigResponse,
    WholesaleDomainResponse,
    WholesaleListingResponse,
    WholesaleNotesRequest,
    WholesaleSaleResponse,
)
from geodomain.services.wholesale_service import WholesaleService

router = APIRouter(prefix="/api/v1/wholesale", tags=["Wholesale"])


def to_listing(entry: WholesaleDomain, domain: Domain, price: Decimal) -> WholesaleListingResponse:
    """Flatten a (wholesale entry, domain) pair into a listing row."""
    return WholesaleListingResponse(
        id=entry.id,
        domain_id=domain.id,
        domain_name=domain.name,
        category=domain.category,
        geographic_scope=domain.geographic_scope,
        state=domain.state,
        city=domain.city,
        status=entry.status,
        price=price,
        added_at=entry.added_at,
    )


@router.get("/config", response_model=WholesaleConfigResponse, summary="Wholesale pricing")
async def get_config(
    session: AsyncSession = Depends(get_db_session),
) -> WholesaleConfigResponse:
    return WholesaleConfigResponse.model_validate(await WholesaleService(session).get_config())


@router.get(
    "/domains",
    response_model=list[WholesaleListingResponse],
    summary="Browse wholesale domains",
)
async def list_active_domains(
    geographic_scope: str | None = None,
    state: str | None = None,
    category: str | None = None,
    search: str | None = Query(default=None, max_length=253),
    limit: int | None = Query(default=None, ge=1, le=100),
    offset: int = Query(default=0, ge=0),
    session: AsyncSession = Depends(get_db_session),
) -> list[WholesaleListingResponse]:
    svc = WholesaleService(session)
    config = await svc.get_config()
    rows = await svc.list_active_domains(
        geographic_scope=geographic_scope,
        state=state,
        category=category,
        search=search,
        limit=limit,
        offset=offset,
    )
    return [to_listing(entry, domain, config.price) for entry, domain in rows]


@router.get(
    "/domains/mine",
    response_model=list[WholesaleListingResponse],
    summary="My wholesale domains",
)
async def list_my_wholesale_domains(
    status: WholesaleDomainStatus | None = None,
    ctx: RequestContext = Depends(get_request_context),
    session: AsyncSession = Depends(get_db_session),
) -> list[WholesaleListingResponse]:
    svc = WholesaleService(session)
    config = await svc.get_config()
    rows = await svc.list_my_wholesale_domains(ctx, status=status)
    return [to_listing(entry, domain, config.price) for entry, domain in rows]


@router.post(
    "/domains",
    response_model=WholesaleDomainResponse,
    status_code=201,
    summary="Offer a domain for wholesale",
)
async def add_domain(
    request: AddWholesaleDomainRequest,
    ctx: RequestContext = Depends(get_request_context),
    session: AsyncSession = Depends(get_db_session),
) -> WholesaleDomainResponse:
    entry = await WholesaleService(session).add_domain(ctx, request.domain_id, request.notes)
    return WholesaleDomainResponse.model_validate(entry)


@router.post(
    "/domains/{wholesale_domain_id}/remove",
    response_model=WholesaleDomainResponse,
    summary="Remove a domain from the pool",
)
async def remove_domain(
    wholesale_domain_id: uuid.UUID,
    request: WholesaleNotesRequest,
    ctx: RequestContext = Depends(get_request_context),
    session: AsyncSession = Depends(get_db_session),
) -> WholesaleDomainResponse:
    entry = await WholesaleService(session).remove_domain(
        ctx, wholesale_domain_id, request.notes
    )
    return WholesaleDomainResponse.model_validate(entry)


@router.post(
    "/domains/{wholesale_domain_id}/purchase",
    response_model=WholesaleSaleResponse,
    status_code=201,
    summary="Purchase a wholesale domain",
)
async def purchase_domain(
    wholesale_domain_id: uuid.UUID,
    request: PurchaseRequest,
    ctx: RequestContext = Depends(get_request_context),
    idempotency_key: str | None = Depends(get_idempotency_key),
    session: AsyncSession = Depends(get_db_session),
) -> WholesaleSaleResponse:
    async with idempotent("wholesale_purchase", idempotency_key, ctx.user_id, session):
        sale = await WholesaleService(session).purchase_domain(
            ctx, wholesale_domain_id, request.payment_method
        )
    return WholesaleSaleResponse.model_validate(sale)


@router.get(
    "/purchases/mine",
    response_model=list[WholesaleSaleResponse],
    summary="My wholesale purchases",
)
async def list_my_purchases(
    ctx: RequestContext = Depends(get_request_context),
    session: AsyncSession = Depends(get_db_session),
) -> list[WholesaleSaleResponse]:
    sales = await WholesaleService(session).list_my_purchases(ctx)
    return [WholesaleSaleResponse.model_validate(s) for s in sales]
