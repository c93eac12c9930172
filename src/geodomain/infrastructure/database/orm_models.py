"""SQLAlchemy 2.0 ORM models for the GeoDomain marketplace.

Tables:
    1. domains                - Listed domain names and their verification state.
    2. verification_attempts  - Seller-submitted ownership proofs awaiting review.
    3. inquiries              - Buyer inquiries, moderated before the seller sees them.
    4. messages               - Moderated buyer/seller messages on an inquiry.
    5. deals                  - Negotiated sales created from an approved inquiry.
    6. payments               - Uploaded payment proofs for a deal.
    7. wholesale_config       - Fixed wholesale price/commission (newest row wins).
    8. wholesale_domains      - Domains placed into the wholesale pool.
    9. wholesale_sales        - Wholesale purchases.
   10. notifications          - In-app notifications.
   11. audit_events           - Append-only log of every status transition.

Design decisions:
    - UUIDs as primary keys (no sequential leakage), except the two append-only
      tables which need a strict insertion order.
    - Decimal for money (no floating point rounding errors).
    - JSON columns (JSONB on PostgreSQL) for free-form lists and metadata.
    - CHECK constraint on every status column to reject unknown values at DB level.
    - No ORM relationships: foreign keys are plain columns and repositories query
      explicitly, so nothing lazy-loads under an async session.
"""

from __future__ import annotations

import uuid
from datetime import UTC, datetime
from decimal import Decimal  # noqa: TC003 - needed at runtime by SQLAlchemy Mapped[]

from sqlalchemy import (
    JSON,
    BigInteger,
    Boolean,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    Uuid,
    event,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from geodomain.domain.enums import (
    DealStatus,
    DomainStatus,
    InquiryStatus,
    MessageStatus,
    PaymentStatus,
    WholesaleDomainStatus,
    WholesaleSaleStatus,
)

JSONType = JSON().with_variant(JSONB(), "postgresql")
SerialPK = BigInteger().with_variant(Integer(), "sqlite")


class Base(DeclarativeBase):
    """Base class for all ORM models."""

    pass


def _utcnow() -> datetime:
    return datetime.now(UTC)


def _status_check(column: str, enum_cls: type, name: str) -> CheckConstraint:
    values = ", ".join(f"'{member.value}'" for member in enum_cls)
    return CheckConstraint(f"{column} IN ({values})", name=name)


# ---------------------------------------------------------------------------
# Helper: auto-set updated_at on flush
# ---------------------------------------------------------------------------
def _set_updated_at(mapper, connection, target):  # noqa: ANN001
    """SQLAlchemy event listener that updates `updated_at` before flush."""
    if hasattr(target, "updated_at"):
        target.updated_at = _utcnow()


# ---------------------------------------------------------------------------
# 1. domains
# ---------------------------------------------------------------------------
class Domain(Base):
    """A domain name listed by a seller."""

    __tablename__ = "domains"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    # --- Listing ---
    name: Mapped[str] = mapped_column(
        String(253), nullable=False, unique=True, comment="Lower-cased domain name"
    )
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    price: Mapped[Decimal | None] = mapped_column(Numeric(12, 2), nullable=True)
    price_type: Mapped[str] = mapped_column(String(20), nullable=False, default="FIXED")
    category: Mapped[str | None] = mapped_column(String(64), nullable=True)
    geographic_scope: Mapped[str] = mapped_column(
        String(20), nullable=False, default="CITY"
    )
    state: Mapped[str | None] = mapped_column(String(64), nullable=True)
    city: Mapped[str | None] = mapped_column(String(128), nullable=True)

    # --- Ownership & status ---
    owner_id: Mapped[str] = mapped_column(String(64), nullable=False)
    status: Mapped[str] = mapped_column(
        String(32),
        nullable=False,
        default=DomainStatus.DRAFT.value,
        comment="Current lifecycle state (guarded by DomainStateMachine)",
    )

    # --- Verification ---
    verification_token: Mapped[str | None] = mapped_column(String(128), nullable=True)
    verification_method: Mapped[str | None] = mapped_column(String(20), nullable=True)
    rejection_reason: Mapped[str | None] = mapped_column(Text, nullable=True)

    # --- Timestamps ---
    submitted_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    verified_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    published_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow
    )

    __table_args__ = (
        _status_check("status", DomainStatus, "ck_domain_valid_status"),
        CheckConstraint("price IS NULL OR price >= 0", name="ck_domain_price_non_negative"),
        Index("idx_domain_owner", "owner_id"),
        Index("idx_domain_status", "status"),
    )

    def __repr__(self) -> str:
        return f"<Domain id={self.id} name={self.name} status={self.status}>"


# ---------------------------------------------------------------------------
# 2. verification_attempts
# ---------------------------------------------------------------------------
class VerificationAttempt(Base):
    """One ownership proof. Unresolved while moderation_result is NULL."""

    __tablename__ = "verification_attempts"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    domain_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("domains.id", ondelete="CASCADE"), nullable=False
    )
    method: Mapped[str] = mapped_column(String(20), nullable=False)
    token: Mapped[str] = mapped_column(String(128), nullable=False)
    file_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    submitted_by: Mapped[str] = mapped_column(String(64), nullable=False)

    # --- Moderation (NULL until an admin decides) ---
    moderation_result: Mapped[str | None] = mapped_column(String(20), nullable=True)
    admin_notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    rejection_reason: Mapped[str | None] = mapped_column(Text, nullable=True)
    moderated_by: Mapped[str | None] = mapped_column(String(64), nullable=True)
    moderated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow
    )

    __table_args__ = (
        CheckConstraint(
            "moderation_result IS NULL OR moderation_result IN ('APPROVED', 'REJECTED')",
            name="ck_attempt_valid_result",
        ),
        Index("idx_attempt_domain", "domain_id"),
        Index("idx_attempt_result", "moderation_result"),
    )

    def __repr__(self) -> str:
        return (
            f"<VerificationAttempt id={self.id} domain={self.domain_id} "
            f"result={self.moderation_result}>"
        )


# ---------------------------------------------------------------------------
# 3. inquiries
# ---------------------------------------------------------------------------
class Inquiry(Base):
    """A buyer's interest in a domain. Moderated before the seller sees it."""

    __tablename__ = "inquiries"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    domain_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("domains.id", ondelete="CASCADE"), nullable=False
    )
    buyer_id: Mapped[str] = mapped_column(String(64), nullable=False)
    seller_id: Mapped[str] = mapped_column(String(64), nullable=False)

    # --- Buyer details ---
    buyer_name: Mapped[str] = mapped_column(String(128), nullable=False)
    buyer_email: Mapped[str] = mapped_column(String(254), nullable=False)
    buyer_phone: Mapped[str | None] = mapped_column(String(32), nullable=True)
    buyer_company: Mapped[str | None] = mapped_column(String(128), nullable=True)
    budget_range: Mapped[str | None] = mapped_column(String(64), nullable=True)
    intended_use: Mapped[str | None] = mapped_column(Text, nullable=True)
    timeline: Mapped[str | None] = mapped_column(String(64), nullable=True)
    message: Mapped[str | None] = mapped_column(Text, nullable=True)

    # --- Moderation ---
    status: Mapped[str] = mapped_column(
        String(32), nullable=False, default=InquiryStatus.PENDING_REVIEW.value
    )
    admin_notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    rejection_reason: Mapped[str | None] = mapped_column(Text, nullable=True)
    requested_changes: Mapped[list | None] = mapped_column(JSONType, nullable=True)
    moderated_by: Mapped[str | None] = mapped_column(String(64), nullable=True)
    moderated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow
    )

    __table_args__ = (
        _status_check("status", InquiryStatus, "ck_inquiry_valid_status"),
        Index("idx_inquiry_domain", "domain_id"),
        Index("idx_inquiry_buyer", "buyer_id"),
        Index("idx_inquiry_seller", "seller_id"),
        Index("idx_inquiry_status", "status"),
    )

    def __repr__(self) -> str:
        return f"<Inquiry id={self.id} domain={self.domain_id} status={self.status}>"


# ---------------------------------------------------------------------------
# 4. messages
# ---------------------------------------------------------------------------
class Message(Base):
    __tablename__ = "messages"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    inquiry_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("inquiries.id", ondelete="CASCADE"), nullable=False
    )
    sender_id: Mapped[str] = mapped_column(String(64), nullable=False)
    receiver_id: Mapped[str] = mapped_column(String(64), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    original_content: Mapped[str | None] = mapped_column(
        Text, nullable=True, comment="Sender's text before an admin edit"
    )

    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=MessageStatus.PENDING.value
    )
    flagged: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    flagged_reason: Mapped[str | None] = mapped_column(String(128), nullable=True)
    admin_notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    rejection_reason: Mapped[str | None] = mapped_column(Text, nullable=True)
    moderated_by: Mapped[str | None] = mapped_column(String(64), nullable=True)
    moderated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow
    )

    __table_args__ = (
        _status_check("status", MessageStatus, "ck_message_valid_status"),
        Index("idx_message_inquiry", "inquiry_id"),
        Index("idx_message_status", "status"),
    )

    def __repr__(self) -> str:
        return f"<Message id={self.id} inquiry={self.inquiry_id} status={self.status}>"


# ---------------------------------------------------------------------------
# 5. deals
# ---------------------------------------------------------------------------
class Deal(Base):
    """A negotiated sale. At most one per inquiry."""

    __tablename__ = "deals"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    inquiry_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("inquiries.id", ondelete="CASCADE"), nullable=False, unique=True
    )
    domain_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("domains.id", ondelete="CASCADE"), nullable=False
    )
    buyer_id: Mapped[str] = mapped_column(String(64), nullable=False)
    seller_id: Mapped[str] = mapped_column(String(64), nullable=False)

    # --- Terms ---
    agreed_price: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    currency: Mapped[str] = mapped_column(String(3), nullable=False, default="USD")
    payment_method: Mapped[str] = mapped_column(String(20), nullable=False)
    payment_instructions: Mapped[str | None] = mapped_column(Text, nullable=True)
    timeline: Mapped[str | None] = mapped_column(String(128), nullable=True)
    terms: Mapped[str | None] = mapped_column(Text, nullable=True)

    status: Mapped[str] = mapped_column(
        String(32),
        nullable=False,
        default=DealStatus.NEGOTIATING.value,
        comment="Current lifecycle state (guarded by DealStateMachine)",
    )
    admin_notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    dispute_reason: Mapped[str | None] = mapped_column(Text, nullable=True)

    # --- Per-state timestamps ---
    agreed_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    payment_pending_date: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    payment_confirmed_date: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    transfer_initiated_date: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    completed_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    disputed_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow
    )

    __table_args__ = (
        _status_check("status", DealStatus, "ck_deal_valid_status"),
        CheckConstraint("agreed_price > 0", name="ck_deal_positive_price"),
        Index("idx_deal_buyer", "buyer_id"),
        Index("idx_deal_seller", "seller_id"),
        Index("idx_deal_status", "status"),
    )

    def __repr__(self) -> str:
        return f"<Deal id={self.id} status={self.status} price={self.agreed_price}>"


# ---------------------------------------------------------------------------
# 6. payments
# ---------------------------------------------------------------------------
class Payment(Base):
    __tablename__ = "payments"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    deal_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("deals.id", ondelete="CASCADE"), nullable=False
    )
    payment_method: Mapped[str] = mapped_column(String(20), nullable=False)
    amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    currency: Mapped[str] = mapped_column(String(3), nullable=False, default="USD")
    proof_url: Mapped[str] = mapped_column(Text, nullable=False)
    external_reference: Mapped[str | None] = mapped_column(String(128), nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=PaymentStatus.PENDING.value
    )
    admin_notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    rejection_reason: Mapped[str | None] = mapped_column(Text, nullable=True)
    verified_by: Mapped[str | None] = mapped_column(String(64), nullable=True)
    verification_date: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow
    )

    __table_args__ = (
        _status_check("status", PaymentStatus, "ck_payment_valid_status"),
        CheckConstraint("amount > 0", name="ck_payment_positive_amount"),
        Index("idx_payment_deal", "deal_id"),
        Index("idx_payment_status", "status"),
    )

    def __repr__(self) -> str:
        return f"<Payment id={self.id} deal={self.deal_id} status={self.status}>"


# ---------------------------------------------------------------------------
# 7. wholesale_config (append-only, newest row is active)
# ---------------------------------------------------------------------------
class WholesaleConfig(Base):
    __tablename__ = "wholesale_config"

    id: Mapped[int] = mapped_column(SerialPK, primary_key=True, autoincrement=True)
    price: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    commission_amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    updated_by: Mapped[str | None] = mapped_column(String(64), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow
    )

    __table_args__ = (
        CheckConstraint("price > 0", name="ck_wholesale_config_positive_price"),
        CheckConstraint(
            "commission_amount >= 0 AND commission_amount < price",
            name="ck_wholesale_config_commission_bounds",
        ),
    )

    def __repr__(self) -> str:
        return (
            f"<WholesaleConfig id={self.id} price={self.price} "
            f"commission={self.commission_amount} active={self.is_active}>"
        )


# ---------------------------------------------------------------------------
# 8. wholesale_domains
# ---------------------------------------------------------------------------
class WholesaleDomain(Base):
    __tablename__ = "wholesale_domains"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    domain_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("domains.id", ondelete="CASCADE"), nullable=False
    )
    added_by: Mapped[str] = mapped_column(String(64), nullable=False)
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=WholesaleDomainStatus.PENDING_APPROVAL.value
    )
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    added_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow
    )
    approved_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    sold_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    sold_to: Mapped[str | None] = mapped_column(String(64), nullable=True)

    __table_args__ = (
        _status_check("status", WholesaleDomainStatus, "ck_wholesale_domain_valid_status"),
        Index("idx_wholesale_domain_domain", "domain_id"),
        Index("idx_wholesale_domain_status", "status"),
    )

    def __repr__(self) -> str:
        return f"<WholesaleDomain id={self.id} domain={self.domain_id} status={self.status}>"


# ---------------------------------------------------------------------------
# 9. wholesale_sales
# ---------------------------------------------------------------------------
class WholesaleSale(Base):
    __tablename__ = "wholesale_sales"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    wholesale_domain_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("wholesale_domains.id", ondelete="CASCADE"), nullable=False
    )
    buyer_id: Mapped[str] = mapped_column(String(64), nullable=False)
    seller_id: Mapped[str] = mapped_column(String(64), nullable=False)
    price: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    commission_amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    seller_payout: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    payment_method: Mapped[str | None] = mapped_column(String(20), nullable=True)
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=WholesaleSaleStatus.PENDING.value
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow
    )
    paid_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    __table_args__ = (
        _status_check("status", WholesaleSaleStatus, "ck_wholesale_sale_valid_status"),
        CheckConstraint(
            "seller_payout = price - commission_amount", name="ck_wholesale_sale_payout"
        ),
        Index("idx_wholesale_sale_buyer", "buyer_id"),
        Index("idx_wholesale_sale_seller", "seller_id"),
        Index("idx_wholesale_sale_status", "status"),
    )

    def __repr__(self) -> str:
        return f"<WholesaleSale id={self.id} price={self.price} status={self.status}>"


# ---------------------------------------------------------------------------
# 10. notifications
# ---------------------------------------------------------------------------
class Notification(Base):
    __tablename__ = "notifications"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False)
    type: Mapped[str] = mapped_column(String(40), nullable=False)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    message: Mapped[str] = mapped_column(Text, nullable=False)
    entity_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    is_read: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow
    )

    __table_args__ = (
        Index("idx_notification_user", "user_id"),
        Index("idx_notification_user_unread", "user_id", "is_read"),
    )

    def __repr__(self) -> str:
        return f"<Notification id={self.id} user={self.user_id} type={self.type}>"


# ---------------------------------------------------------------------------
# 11. audit_events (Append-Only Audit Log)
# ---------------------------------------------------------------------------
class AuditEvent(Base):
    """Immutable audit record of a status transition on any entity.

    This table is APPEND-ONLY. No UPDATE or DELETE operations are permitted
    at the application level. Every row represents a single atomic event.
    """

    __tablename__ = "audit_events"

    id: Mapped[int] = mapped_column(SerialPK, primary_key=True, autoincrement=True)

    entity_type: Mapped[str] = mapped_column(
        String(32), nullable=False, comment="EntityType enum value (e.g., DOMAIN, DEAL)"
    )
    entity_id: Mapped[str] = mapped_column(String(64), nullable=False)
    event_type: Mapped[str] = mapped_column(
        String(40),
        nullable=False,
        comment="EventType enum value (e.g., DOMAIN_SUBMITTED, DEAL_STATUS_CHANGED)",
    )
    old_status: Mapped[str | None] = mapped_column(
        String(32), nullable=True, comment="Status before this event (null for creation)"
    )
    new_status: Mapped[str | None] = mapped_column(String(32), nullable=True)
    actor: Mapped[str] = mapped_column(
        String(64), nullable=False, default="SYSTEM", comment="User id or SYSTEM"
    )
    metadata_json: Mapped[dict | None] = mapped_column(
        "metadata", JSONType, nullable=True, default=None
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow
    )

    __table_args__ = (
        Index("idx_audit_entity", "entity_type", "entity_id"),
        Index("idx_audit_event_type", "event_type"),
        Index("idx_audit_created_at", "created_at"),
    )

    def __repr__(self) -> str:
        return (
            f"<AuditEvent id={self.id} {self.entity_type}:{self.entity_id} "
            f"type={self.event_type} {self.old_status}->{self.new_status}>"
        )


# ---------------------------------------------------------------------------
# Register the auto-update listener for updated_at
# ---------------------------------------------------------------------------
for _model in (Domain, Inquiry, Deal):
    event.listen(_model, "before_update", _set_updated_at)
