"""Notification and dashboard REST API routes.

Routes:
    GET  /api/v1/notifications                - My notifications (newest first)
    GET  /api/v1/notifications/unread-count   - Unread badge count
    POST /api/v1/notifications/{id}/read      - Mark one as read
    POST /api/v1/notifications/read-all       - Mark all as read
    GET  /api/v1/dashboard/seller             - Seller counters
"""

import uuid

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from geodomain.api.deps import get_db_session, get_request_context
from geodomain.domain.context import RequestContext
from geodomain.schemas.dashboard import NotificationResponse, SellerStatsResponse
from geodomain.services import DashboardService, NotificationService

router = APIRouter(prefix="/api/v1", tags=["Notifications"])


@router.get(
    "/notifications",
    response_model=list[NotificationResponse],
    summary="My notifications",
)
async def list_notifications(
    unread_only: bool = False,
    limit: int | None = Query(default=None, ge=1, le=100),
    offset: int = Query(default=0, ge=0),
    ctx: RequestContext = Depends(get_request_context),
    session: AsyncSession = Depends(get_db_session),
) -> list[NotificationResponse]:
    notifications = await NotificationService(session).list_for_user(
        ctx, unread_only=unread_only, limit=limit, offset=offset
    )
    return [NotificationResponse.model_validate(n) for n in notifications]


@router.get("/notifications/unread-count", summary="Unread notification count")
async def unread_count(
    ctx: RequestContext = Depends(get_request_context),
    session: AsyncSession = Depends(get_db_session),
) -> dict[str, int]:
    return {"unread": await NotificationService(session).unread_count(ctx)}


@router.post("/notifications/read-all", summary="Mark all notifications as read")
async def mark_all_read(
    ctx: RequestContext = Depends(get_request_context),
    session: AsyncSession = Depends(get_db_session),
) -> dict[str, int]:
    return {"updated": await NotificationService(session).mark_all_read(ctx)}


@router.post(
    "/notifications/{notification_id}/read",
    response_model=NotificationResponse,
    summary="Mark a notification as read",
)
async def mark_read(
    notification_id: uuid.UUID,
    ctx: RequestContext = Depends(get_request_context),
    session: AsyncSession = Depends(get_db_session),
) -> NotificationResponse:
    notification = await NotificationService(session).mark_read(ctx, notification_id)
    return NotificationResponse.model_validate(notification)


@router.get(
    "/dashboard/seller",
    response_model=SellerStatsResponse,
    tags=["Dashboard"],
    summary="Seller dashboard counters",
)
async def seller_dashboard(
    ctx: RequestContext = Depends(get_request_context),
    session: AsyncSession = Depends(get_db_session),
) -> SellerStatsResponse:
    return SellerStatsResponse(**await DashboardService(session).seller_stats(ctx))
