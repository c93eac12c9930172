"""Notification Service - in-app notifications for marketplace participants."""

from __future__ import annotations

from typing import TYPE_CHECKING

from geodomain.domain.exceptions import NotFoundError
from geodomain.infrastructure.database.orm_models import Notification
from geodomain.infrastructure.database.repositories import NotificationRepository
from geodomain.logging_config import get_logger
from geodomain.services._helpers import page_limit

if TYPE_CHECKING:
    import uuid

    from sqlalchemy.ext.asyncio import AsyncSession

    from geodomain.domain.context import RequestContext
    from geodomain.domain.enums import NotificationType

logger = get_logger(__name__)


class NotificationService:
    """Stores notifications; delivery channels (email, push) live outside this service."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session
        self._repo = NotificationRepository(session)

    async def notify(
        self,
        user_id: str,
        notification_type: NotificationType,
        title: str,
        message: str,
        entity_id: uuid.UUID | str | None = None,
    ) -> Notification:
        notification = await self._repo.create(
            Notification(
                user_id=user_id,
                type=str(notification_type),
                title=title,
                message=message,
                entity_id=str(entity_id) if entity_id is not None else None,
            )
        )
        logger.info(
            "notification.created",
            user_id=user_id,
            type=str(notification_type),
            entity_id=notification.entity_id,
        )
        return notification

    async def list_for_user(
        self,
        ctx: RequestContext,
        unread_only: bool = False,
        limit: int | None = None,
        offset: int = 0,
    ) -> list[Notification]:
        return await self._repo.list_for_user(
            ctx.user_id, unread_only=unread_only, limit=page_limit(limit), offset=offset
        )

    async def unread_count(self, ctx: RequestContext) -> int:
        return await self._repo.count_unread(ctx.user_id)

    async def mark_read(self, ctx: RequestContext, notification_id: uuid.UUID) -> Notification:
        notification = await self._repo.get_by_id(notification_id)
        if notification is None or notification.user_id != ctx.user_id:
            raise NotFoundError("Notification", str(notification_id))
        notification.is_read = True
        return await self._repo.save(notification)

    async def mark_all_read(self, ctx: RequestContext) -> int:
        unread = await self._repo.list_for_user(ctx.user_id, unread_only=True)
        for notification in unread:
            notification.is_read = True
        await self._session.flush()
        return len(unread)
