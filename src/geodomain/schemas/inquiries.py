"""Pydantic schemas for inquiries and moderated messages."""

from __future__ import annotations

import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from geodomain.domain.enums import InquiryAction, InquiryStatus, MessageAction, MessageStatus


class CreateInquiryRequest(BaseModel):
    domain_id: uuid.UUID
    buyer_name: str = Field(..., min_length=1, max_length=128)
    buyer_email: str = Field(..., min_length=3, max_length=254, pattern=r"^[^@\s]+@[^@\s]+$")
    buyer_phone: str | None = Field(default=None, max_length=32)
    buyer_company: str | None = Field(default=None, max_length=128)
    budget_range: str | None = Field(default=None, max_length=64)
    intended_use: str | None = Field(default=None, max_length=5000)
    timeline: str | None = Field(default=None, max_length=64)
    message: str | None = Field(default=None, max_length=5000)


class ResubmitInquiryRequest(BaseModel):
    message: str | None = Field(default=None, max_length=5000)
    budget_range: str | None = Field(default=None, max_length=64)
    intended_use: str | None = Field(default=None, max_length=5000)
    timeline: str | None = Field(default=None, max_length=64)


class ModerateInquiryRequest(BaseModel):
    action: InquiryAction
    admin_notes: str | None = Field(default=None, max_length=2000)
    rejection_reason: str | None = Field(default=None, max_length=2000)
    requested_changes: list[str] | None = None


class InquiryResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    domain_id: uuid.UUID
    buyer_id: str
    seller_id: str
    buyer_name: str
    buyer_email: str
    buyer_phone: str | None
    buyer_company: str | None
    budget_range: str | None
    intended_use: str | None
    timeline: str | None
    message: str | None
    status: InquiryStatus
    admin_notes: str | None
    rejection_reason: str | None
    requested_changes: list[str] | None
    moderated_at: datetime | None
    created_at: datetime


class SendMessageRequest(BaseModel):
    inquiry_id: uuid.UUID
    content: str = Field(..., min_length=1, max_length=10_000)


class ModerateMessageRequest(BaseModel):
    action: MessageAction
    edited_content: str | None = Field(default=None, max_length=10_000)
    admin_notes: str | None = Field(default=None, max_length=2000)
    rejection_reason: str | None = Field(default=None, max_length=2000)


class MessageResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    inquiry_id: uuid.UUID
    sender_id: str
    receiver_id: str
    content: str
    status: MessageStatus
    flagged: bool
    flagged_reason: str | None
    rejection_reason: str | None
    created_at: datetime


class AdminMessageResponse(MessageResponse):
    """Moderator view: includes the pre-edit text and notes."""

    original_content: str | None
    admin_notes: str | None
    moderated_by: str | None
    moderated_at: datetime | None
