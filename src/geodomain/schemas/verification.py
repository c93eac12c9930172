"""Pydantic schemas for domain ownership verification."""

from __future__ import annotations

import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from geodomain.domain.enums import VerificationAction, VerificationMethod


class GenerateTokenRequest(BaseModel):
    domain_id: uuid.UUID
    method: VerificationMethod


class VerificationInstructionsResponse(BaseModel):
    """Token plus the steps for publishing it (fields depend on the method)."""

    method: VerificationMethod
    token: str
    steps: list[str]
    record_type: str | None = None
    record_name: str | None = None
    record_value: str | None = None
    ttl: int | None = None
    file_name: str | None = None
    file_content: str | None = None
    file_url: str | None = None


class SubmitAttemptRequest(BaseModel):
    domain_id: uuid.UUID
    method: VerificationMethod
    token: str = Field(..., min_length=1, max_length=128)
    file_url: str | None = Field(
        default=None,
        max_length=2048,
        description="Where the verification file is served (required for FILE_UPLOAD)",
    )


class ModerateAttemptRequest(BaseModel):
    action: VerificationAction
    notes: str | None = Field(default=None, max_length=2000)
    rejection_reason: str | None = Field(default=None, max_length=2000)


class VerificationAttemptResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    domain_id: uuid.UUID
    method: VerificationMethod
    token: str
    file_url: str | None
    submitted_by: str
    moderation_result: str | None
    admin_notes: str | None
    rejection_reason: str | None
    moderated_by: str | None
    moderated_at: datetime | None
    created_at: datetime


class PendingAttemptResponse(VerificationAttemptResponse):
    domain_name: str


class VerificationStatusResponse(BaseModel):
    domain_id: uuid.UUID
    domain_name: str
    status: str
    verification_token: str | None
    verification_method: str | None
    rejection_reason: str | None
    pending_attempt: VerificationAttemptResponse | None
    can_submit_attempt: bool
    allowed_events: list[str]
