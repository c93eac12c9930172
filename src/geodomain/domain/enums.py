"""Domain enumerations for the GeoDomain marketplace.

These enums define the canonical states, actions and roles used throughout
the system. They are framework-agnostic (no SQLAlchemy, no FastAPI imports).
"""

import enum


class UserRole(enum.StrEnum):
    """Roles supplied by the upstream session provider."""

    BUYER = "BUYER"
    SELLER = "SELLER"
    ADMIN = "ADMIN"
    SUPER_ADMIN = "SUPER_ADMIN"


# ---------------------------------------------------------------------------
# Domain listings
# ---------------------------------------------------------------------------


class DomainStatus(enum.StrEnum):
    """Lifecycle states of a listed domain.

    Transitions are enforced by DomainStateMachine.
    See domain/state_machine.py for the transition table.
    """

    DRAFT = "DRAFT"
    PENDING_VERIFICATION = "PENDING_VERIFICATION"
    VERIFIED = "VERIFIED"
    REJECTED = "REJECTED"
    PUBLISHED = "PUBLISHED"
    PAUSED = "PAUSED"
    SOLD = "SOLD"


class PriceType(enum.StrEnum):
    FIXED = "FIXED"
    NEGOTIABLE = "NEGOTIABLE"
    MAKE_OFFER = "MAKE_OFFER"


class GeographicScope(enum.StrEnum):
    NATIONAL = "NATIONAL"
    STATE = "STATE"
    CITY = "CITY"


# ---------------------------------------------------------------------------
# Verification
# ---------------------------------------------------------------------------


class VerificationMethod(enum.StrEnum):
    """How a seller proves ownership of a domain."""

    DNS_TXT = "DNS_TXT"
    FILE_UPLOAD = "FILE_UPLOAD"


class ModerationResult(enum.StrEnum):
    """Outcome recorded on a resolved verification attempt."""

    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


class VerificationAction(enum.StrEnum):
    APPROVE = "APPROVE"
    REJECT = "REJECT"


# ---------------------------------------------------------------------------
# Inquiries and messages
# ---------------------------------------------------------------------------


class InquiryStatus(enum.StrEnum):
    """Moderation states of a buyer inquiry.

    Only APPROVED (and later CONVERTED_TO_DEAL) inquiries are visible to the seller.
    """

    PENDING_REVIEW = "PENDING_REVIEW"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"
    CHANGES_REQUESTED = "CHANGES_REQUESTED"
    CONVERTED_TO_DEAL = "CONVERTED_TO_DEAL"


class InquiryAction(enum.StrEnum):
    APPROVE = "APPROVE"
    REJECT = "REJECT"
    REQUEST_CHANGES = "REQUEST_CHANGES"


class MessageStatus(enum.StrEnum):
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


class MessageAction(enum.StrEnum):
    APPROVE = "APPROVE"
    REJECT = "REJECT"
    EDIT = "EDIT"


# ---------------------------------------------------------------------------
# Deals and payments
# ---------------------------------------------------------------------------


class DealStatus(enum.StrEnum):
    """Lifecycle states of a negotiated deal.

    State transitions are enforced by DealStateMachine. COMPLETED and
    DISPUTED are terminal.
    """

    NEGOTIATING = "NEGOTIATING"
    AGREED = "AGREED"
    PAYMENT_PENDING = "PAYMENT_PENDING"
    PAYMENT_CONFIRMED = "PAYMENT_CONFIRMED"
    TRANSFER_INITIATED = "TRANSFER_INITIATED"
    COMPLETED = "COMPLETED"
    DISPUTED = "DISPUTED"


class PaymentMethod(enum.StrEnum):
    ESCROW_COM = "ESCROW_COM"
    PAYPAL = "PAYPAL"
    WIRE_TRANSFER = "WIRE_TRANSFER"
    CRYPTO = "CRYPTO"
    OTHER = "OTHER"


class PaymentStatus(enum.StrEnum):
    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    FAILED = "FAILED"


class PaymentAction(enum.StrEnum):
    APPROVE = "APPROVE"
    REJECT = "REJECT"


# ---------------------------------------------------------------------------
# Wholesale marketplace
# ---------------------------------------------------------------------------


class WholesaleDomainStatus(enum.StrEnum):
    PENDING_APPROVAL = "PENDING_APPROVAL"
    ACTIVE = "ACTIVE"
    SOLD = "SOLD"
    REMOVED = "REMOVED"


class WholesaleSaleStatus(enum.StrEnum):
    PENDING = "PENDING"
    PAID = "PAID"


# ---------------------------------------------------------------------------
# Audit trail
# ---------------------------------------------------------------------------


class EntityType(enum.StrEnum):
    """Kinds of records that appear in the audit_events table."""

    DOMAIN = "DOMAIN"
    VERIFICATION_ATTEMPT = "VERIFICATION_ATTEMPT"
    INQUIRY = "INQUIRY"
    MESSAGE = "MESSAGE"
    DEAL = "DEAL"
    PAYMENT = "PAYMENT"
    WHOLESALE_DOMAIN = "WHOLESALE_DOMAIN"
    WHOLESALE_SALE = "WHOLESALE_SALE"
    WHOLESALE_CONFIG = "WHOLESALE_CONFIG"


class EventType(enum.StrEnum):
    """Types of audit events recorded in the audit_events table.

    Every status transition MUST produce exactly one event.
    """

    # Domain lifecycle
    DOMAIN_CREATED = "DOMAIN_CREATED"
    DOMAIN_SUBMITTED = "DOMAIN_SUBMITTED"
    DOMAIN_RESUBMITTED = "DOMAIN_RESUBMITTED"
    DOMAIN_PUBLISHED = "DOMAIN_PUBLISHED"
    DOMAIN_PAUSED = "DOMAIN_PAUSED"
    DOMAIN_RESUMED = "DOMAIN_RESUMED"
    DOMAIN_SOLD = "DOMAIN_SOLD"

    # Verification
    VERIFICATION_SUBMITTED = "VERIFICATION_SUBMITTED"
    VERIFICATION_APPROVED = "VERIFICATION_APPROVED"
    VERIFICATION_REJECTED = "VERIFICATION_REJECTED"

    # Inquiry moderation
    INQUIRY_CREATED = "INQUIRY_CREATED"
    INQUIRY_APPROVED = "INQUIRY_APPROVED"
    INQUIRY_REJECTED = "INQUIRY_REJECTED"
    INQUIRY_CHANGES_REQUESTED = "INQUIRY_CHANGES_REQUESTED"
    INQUIRY_RESUBMITTED = "INQUIRY_RESUBMITTED"
    INQUIRY_CONVERTED = "INQUIRY_CONVERTED"

    # Message moderation
    MESSAGE_SENT = "MESSAGE_SENT"
    MESSAGE_APPROVED = "MESSAGE_APPROVED"
    MESSAGE_EDITED = "MESSAGE_EDITED"
    MESSAGE_REJECTED = "MESSAGE_REJECTED"

    # Deals and payments
    DEAL_CREATED = "DEAL_CREATED"
    DEAL_STATUS_CHANGED = "DEAL_STATUS_CHANGED"
    PAYMENT_PROOF_UPLOADED = "PAYMENT_PROOF_UPLOADED"
    PAYMENT_CONFIRMED = "PAYMENT_CONFIRMED"
    PAYMENT_FAILED = "PAYMENT_FAILED"

    # Wholesale
    WHOLESALE_LISTED = "WHOLESALE_LISTED"
    WHOLESALE_APPROVED = "WHOLESALE_APPROVED"
    WHOLESALE_REMOVED = "WHOLESALE_REMOVED"
    WHOLESALE_PURCHASED = "WHOLESALE_PURCHASED"
    WHOLESALE_SALE_PAID = "WHOLESALE_SALE_PAID"
    WHOLESALE_CONFIG_UPDATED = "WHOLESALE_CONFIG_UPDATED"


class NotificationType(enum.StrEnum):
    VERIFICATION_APPROVED = "VERIFICATION_APPROVED"
    VERIFICATION_REJECTED = "VERIFICATION_REJECTED"
    INQUIRY_RECEIVED = "INQUIRY_RECEIVED"
    INQUIRY_CHANGES_REQUESTED = "INQUIRY_CHANGES_REQUESTED"
    MESSAGE_RECEIVED = "MESSAGE_RECEIVED"
    DEAL_UPDATED = "DEAL_UPDATED"
    PAYMENT_CONFIRMED = "PAYMENT_CONFIRMED"
    PAYMENT_FAILED = "PAYMENT_FAILED"
    WHOLESALE_SOLD = "WHOLESALE_SOLD"
