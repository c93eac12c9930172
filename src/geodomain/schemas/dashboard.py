"""Pydantic schemas for notifications and dashboards."""

from __future__ import annotations

import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict


class NotificationResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    type: str
    title: str
    message: str
    entity_id: str | None
    is_read: bool
    created_at: datetime


class SellerStatsResponse(BaseModel):
    total_domains: int
    total_inquiries: int
    total_deals: int
    completed_deals: int
    conversion_rate: float


class AdminOverviewResponse(BaseModel):
    pending_inquiries: int
    pending_messages: int
    pending_verifications: int
    pending_payments: int
    pending_wholesale_approvals: int
    active_deals: int
