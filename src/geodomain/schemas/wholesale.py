"""Pydantic schemas for the wholesale marketplace."""

from __future__ import annotations

import uuid
from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

from geodomain.domain.enums import PaymentMethod, WholesaleDomainStatus, WholesaleSaleStatus


class WholesaleConfigResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    price: Decimal
    commission_amount: Decimal
    is_active: bool
    updated_by: str | None
    created_at: datetime


class UpdateWholesaleConfigRequest(BaseModel):
    price: Decimal | None = Field(default=None, gt=0, decimal_places=2)
    commission_amount: Decimal | None = Field(default=None, ge=0, decimal_places=2)
    is_active: bool | None = None


class AddWholesaleDomainRequest(BaseModel):
    domain_id: uuid.UUID
    notes: str | None = Field(default=None, max_length=2000)


class WholesaleNotesRequest(BaseModel):
    notes: str | None = Field(default=None, max_length=2000)


class PurchaseRequest(BaseModel):
    payment_method: PaymentMethod | None = None


class WholesaleDomainResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    domain_id: uuid.UUID
    added_by: str
    status: WholesaleDomainStatus
    notes: str | None
    added_at: datetime
    approved_at: datetime | None
    sold_at: datetime | None
    sold_to: str | None


class WholesaleListingResponse(BaseModel):
    """A wholesale entry joined with its domain and the current platform price."""

    id: uuid.UUID
    domain_id: uuid.UUID
    domain_name: str
    category: str | None
    geographic_scope: str
    state: str | None
    city: str | None
    status: WholesaleDomainStatus
    price: Decimal
    added_at: datetime


class WholesaleSaleResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    wholesale_domain_id: uuid.UUID
    buyer_id: str
    seller_id: str
    price: Decimal
    commission_amount: Decimal
    seller_payout: Decimal
    payment_method: str | None
    status: WholesaleSaleStatus
    created_at: datetime
    paid_at: datetime | None


class WholesaleStatsResponse(BaseModel):
    active_domains: int
    pending_approval: int
    sold_domains: int
    total_sales: int
    paid_sales: int
    total_revenue: Decimal
    total_commission: Decimal
