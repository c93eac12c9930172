"""Message REST API routes.

Routes:
    POST /api/v1/messages                        - Queue a message for moderation
    GET  /api/v1/messages/inquiry/{inquiry_id}   - Conversation on an inquiry
"""

import uuid

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from geodomain.api.deps import get_db_session, get_request_context
from geodomain.domain.context import RequestContext
from geodomain.schemas.inquiries import MessageResponse, SendMessageRequest
from geodomain.services.message_service import MessageService

router = APIRouter(prefix="/api/v1/messages", tags=["Messages"])


@router.post("", response_model=MessageResponse, status_code=201, summary="Send a message")
async def send_message(
    request: SendMessageRequest,
    ctx: RequestContext = Depends(get_request_context),
    session: AsyncSession = Depends(get_db_session),
) -> MessageResponse:
    message = await MessageService(session).send_message(
        ctx, request.inquiry_id, request.content
    )
    return MessageResponse.model_validate(message)


@router.get(
    "/inquiry/{inquiry_id}",
    response_model=list[MessageResponse],
    summary="Messages on an inquiry",
)
async def list_inquiry_messages(
    inquiry_id: uuid.UUID,
    ctx: RequestContext = Depends(get_request_context),
    session: AsyncSession = Depends(get_db_session),
) -> list[MessageResponse]:
    messages = await MessageService(session).list_inquiry_messages(ctx, inquiry_id)
    return [MessageResponse.model_validate(m) for m in messages]
