"""Message Service - moderated messaging between buyer and seller.

Every message starts PENDING and is delivered only after an admin approves
(or edits) it. Messages containing contact details are flagged for the
moderator but never blocked automatically.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING

from geodomain.config import get_settings
from geodomain.domain.contact_detection import detect_contact_info
from geodomain.domain.enums import (
    EntityType,
    EventType,
    InquiryStatus,
    MessageAction,
    MessageStatus,
    NotificationType,
)
from geodomain.domain.exceptions import InvalidStateError, NotFoundError
from geodomain.domain.state_machine import MessageStateMachine, fire_transition
from geodomain.infrastructure.database.orm_models import Inquiry, Message
from geodomain.infrastructure.database.repositories import (
    AuditEventRepository,
    InquiryRepository,
    MessageRepository,
)
from geodomain.logging_config import get_logger
from geodomain.services._helpers import page_limit, require_text
from geodomain.services.notification_service import NotificationService

if TYPE_CHECKING:
    import uuid

    from sqlalchemy.ext.asyncio import AsyncSession

    from geodomain.domain.context import RequestContext

logger = get_logger(__name__)

MESSAGING_INQUIRY_STATUSES = frozenset(
    {InquiryStatus.APPROVED, InquiryStatus.CONVERTED_TO_DEAL}
)


class MessageService:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session
        self._message_repo = MessageRepository(session)
        self._inquiry_repo = InquiryRepository(session)
        self._event_repo = AuditEventRepository(session)
        self._notifications = NotificationService(session)

    async def send_message(
        self, ctx: RequestContext, inquiry_id: uuid.UUID, content: str
    ) -> Message:
        """Queue a message from one inquiry participant to the other."""
        inquiry = await self._get_participant_inquiry(ctx, inquiry_id)
        if inquiry.status not in MESSAGING_INQUIRY_STATUSES:
            raise InvalidStateError(
                "Inquiry", inquiry.status, "Messaging opens once the inquiry is approved"
            )
        content = require_text(content, "Message content cannot be empty")
        receiver_id = inquiry.seller_id if ctx.user_id == inquiry.buyer_id else inquiry.buyer_id

        flagged, flagged_reason = False, None
        if get_settings().message_contact_detection_enabled:
            detection = detect_contact_info(content)
            flagged, flagged_reason = detection.has_contact_info, detection.flagged_reason

        message = await self._message_repo.create(
            Message(
                inquiry_id=inquiry.id,
                sender_id=ctx.user_id,
                receiver_id=receiver_id,
                content=content,
                status=MessageStatus.PENDING.value,
                flagged=flagged,
                flagged_reason=flagged_reason,
            )
        )
        await self._event_repo.record(
            entity_type=EntityType.MESSAGE,
            entity_id=message.id,
            event_type=EventType.MESSAGE_SENT,
            old_status=None,
            new_status=MessageStatus.PENDING,
            actor=ctx.user_id,
            metadata={"inquiry_id": str(inquiry.id), "flagged": flagged},
        )
        logger.info(
            "message.sent",
            message_id=str(message.id),
            inquiry_id=str(inquiry.id),
            flagged=flagged,
        )
        return message

    async def list_inquiry_messages(
        self, ctx: RequestContext, inquiry_id: uuid.UUID
    ) -> list[Message]:
        """Admins see everything; participants see approved messages plus their own."""
        if ctx.is_admin:
            if await self._inquiry_repo.get_by_id(inquiry_id) is None:
                raise NotFoundError("Inquiry", str(inquiry_id))
            return await self._message_repo.list_for_inquiry(inquiry_id)

        inquiry = await self._get_participant_inquiry(ctx, inquiry_id)
        messages = await self._message_repo.list_for_inquiry(inquiry.id)
        return [
            m
            for m in messages
            if m.status == MessageStatus.APPROVED or m.sender_id == ctx.user_id
        ]

    # ------------------------------------------------------------------
    # Admin moderation
    # ------------------------------------------------------------------

    async def get_pending_messages(
        self, ctx: RequestContext, limit: int | None = None, offset: int = 0
    ) -> list[Message]:
        ctx.require_admin()
        return await self._message_repo.list_by_status(
            MessageStatus.PENDING.value, limit=page_limit(limit), offset=offset
        )

    async def moderate_message(
        self,
        ctx: RequestContext,
        message_id: uuid.UUID,
        action: MessageAction,
        edited_content: str | None = None,
        admin_notes: str | None = None,
        rejection_reason: str | None = None,
    ) -> Message:
        """APPROVE, REJECT (reason required) or EDIT (content required) a PENDING message."""
        ctx.require_admin()
        action = MessageAction(action)
        message = await self._message_repo.get_by_id(message_id)
        if message is None:
            raise NotFoundError("Message", str(message_id))
        if message.status != MessageStatus.PENDING:
            raise InvalidStateError(
                "Message", message.status, "Only PENDING messages can be moderated"
            )

        fields: dict = {
            "admin_notes": admin_notes,
            "moderated_by": ctx.user_id,
            "moderated_at": datetime.now(UTC),
        }
        if action == MessageAction.APPROVE:
            event_name, event_type = "approve", EventType.MESSAGE_APPROVED
        elif action == MessageAction.REJECT:
            fields["rejection_reason"] = require_text(
                rejection_reason, "A rejection reason is required"
            )
            event_name, event_type = "reject", EventType.MESSAGE_REJECTED
        else:
            fields["content"] = require_text(edited_content, "Edited content is required")
            fields["original_content"] = message.content
            event_name, event_type = "approve", EventType.MESSAGE_EDITED

        old_status = message.status
        new_status = fire_transition(MessageStateMachine, old_status, event_name)
        await self._message_repo.set_status(message, new_status, **fields)

        await self._event_repo.record(
            entity_type=EntityType.MESSAGE,
            entity_id=message.id,
            event_type=event_type,
            old_status=old_status,
            new_status=new_status,
            actor=ctx.user_id,
            metadata={"action": action.value},
        )

        if new_status == MessageStatus.APPROVED:
            await self._notifications.notify(
                message.receiver_id,
                NotificationType.MESSAGE_RECEIVED,
                "New message",
                "You have a new message on one of your inquiries.",
                entity_id=message.inquiry_id,
            )

        logger.info("message.moderated", message_id=str(message.id), action=action.value)
        return message

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    async def _get_participant_inquiry(
        self, ctx: RequestContext, inquiry_id: uuid.UUID
    ) -> Inquiry:
        inquiry = await self._inquiry_repo.get_by_id(inquiry_id)
        if inquiry is None or ctx.user_id not in (inquiry.buyer_id, inquiry.seller_id):
            raise NotFoundError("Inquiry", str(inquiry_id))
        return inquiry
