"""Schemas shared across the API: errors, pagination, audit events, health."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class ErrorResponse(BaseModel):
    """Body of every error response produced by ErrorHandlerMiddleware."""

    error: str = Field(description="Machine-readable error code, e.g. NOT_FOUND")
    message: str


class Pagination(BaseModel):
    limit: int | None = Field(default=None, ge=1, le=100)
    offset: int = Field(default=0, ge=0)


class AuditEventResponse(BaseModel):
    """Response schema for an audit event."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    entity_type: str
    entity_id: str
    event_type: str
    old_status: str | None
    new_status: str | None
    actor: str
    metadata: dict | None = Field(default=None, validation_alias="metadata_json")
    created_at: datetime


class StatusResponse(BaseModel):
    """Lightweight status check with the events that can fire next."""

    status: str
    allowed_events: list[str] = Field(
        description="State machine events that can fire from the current status"
    )


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = "ok"
    version: str = "0.1.0"
    database: str = "unknown"
    redis: str = "unknown"
