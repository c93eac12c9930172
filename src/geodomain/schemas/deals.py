"""Pydantic schemas for deals and payments."""

from __future__ import annotations

import uuid
from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

from geodomain.domain.enums import DealStatus, PaymentAction, PaymentMethod, PaymentStatus


class CreateDealRequest(BaseModel):
    inquiry_id: uuid.UUID
    agreed_price: Decimal = Field(..., gt=0, decimal_places=2)
    currency: str = Field(default="USD", min_length=3, max_length=3)
    payment_method: PaymentMethod
    payment_instructions: str | None = Field(default=None, max_length=5000)
    timeline: str | None = Field(default=None, max_length=128)
    terms: str | None = Field(default=None, max_length=10_000)


class UpdateDealStatusRequest(BaseModel):
    status: DealStatus
    admin_notes: str | None = Field(default=None, max_length=2000)
    reason: str | None = Field(
        default=None, max_length=2000, description="Dispute reason when moving to DISPUTED"
    )


class DealResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    inquiry_id: uuid.UUID
    domain_id: uuid.UUID
    buyer_id: str
    seller_id: str
    agreed_price: Decimal
    currency: str
    payment_method: PaymentMethod
    payment_instructions: str | None
    timeline: str | None
    terms: str | None
    status: DealStatus
    admin_notes: str | None
    dispute_reason: str | None
    agreed_date: datetime | None
    payment_pending_date: datetime | None
    payment_confirmed_date: datetime | None
    transfer_initiated_date: datetime | None
    completed_date: datetime | None
    disputed_date: datetime | None
    created_at: datetime
    updated_at: datetime


class UploadProofRequest(BaseModel):
    deal_id: uuid.UUID
    proof_url: str = Field(..., min_length=1, max_length=2048)
    payment_method: PaymentMethod
    amount: Decimal = Field(..., gt=0, decimal_places=2)
    currency: str = Field(default="USD", min_length=3, max_length=3)
    transaction_id: str | None = Field(default=None, max_length=128)
    notes: str | None = Field(default=None, max_length=2000)


class VerifyPaymentRequest(BaseModel):
    action: PaymentAction
    admin_notes: str | None = Field(default=None, max_length=2000)
    rejection_reason: str | None = Field(default=None, max_length=2000)


class PaymentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    deal_id: uuid.UUID
    payment_method: PaymentMethod
    amount: Decimal
    currency: str
    proof_url: str
    external_reference: str | None
    status: PaymentStatus
    admin_notes: str | None
    rejection_reason: str | None
    verified_by: str | None
    verification_date: datetime | None
    created_at: datetime


class PaymentStatusResponse(BaseModel):
    deal_id: uuid.UUID
    deal_status: DealStatus
    latest_payment: PaymentResponse | None
    payments: list[PaymentResponse]
