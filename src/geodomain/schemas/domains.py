"""Pydantic schemas for domain listings."""

from __future__ import annotations

import uuid
from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

from geodomain.domain.enums import DomainStatus, GeographicScope, PriceType


class CreateDomainRequest(BaseModel):
    """Request body for listing a new domain (created as DRAFT)."""

    name: str = Field(
        ...,
        min_length=3,
        max_length=253,
        description="Fully qualified domain name",
        examples=["austinplumbers.com"],
    )
    price: Decimal | None = Field(default=None, ge=0, decimal_places=2)
    price_type: PriceType = PriceType.FIXED
    category: str | None = Field(default=None, max_length=64)
    description: str | None = Field(default=None, max_length=5000)
    geographic_scope: GeographicScope = GeographicScope.CITY
    state: str | None = Field(default=None, max_length=64)
    city: str | None = Field(default=None, max_length=128)


class UpdateDomainRequest(BaseModel):
    """Partial update of a DRAFT domain. Omitted fields are left unchanged."""

    name: str | None = Field(default=None, min_length=3, max_length=253)
    price: Decimal | None = Field(default=None, ge=0, decimal_places=2)
    price_type: PriceType | None = None
    category: str | None = Field(default=None, max_length=64)
    description: str | None = Field(default=None, max_length=5000)
    geographic_scope: GeographicScope | None = None
    state: str | None = Field(default=None, max_length=64)
    city: str | None = Field(default=None, max_length=128)


class DomainResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    name: str
    description: str | None
    price: Decimal | None
    price_type: str
    category: str | None
    geographic_scope: str
    state: str | None
    city: str | None
    owner_id: str
    status: DomainStatus
    verification_method: str | None
    rejection_reason: str | None
    submitted_at: datetime | None
    verified_at: datetime | None
    published_at: datetime | None
    created_at: datetime
    updated_at: datetime
