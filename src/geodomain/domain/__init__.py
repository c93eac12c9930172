"""Domain layer - pure business logic with zero framework dependencies."""

from geodomain.domain.context import RequestContext
from geodomain.domain.enums import (
    DealStatus,
    DomainStatus,
    EventType,
    InquiryStatus,
    MessageStatus,
    PaymentStatus,
    UserRole,
    VerificationMethod,
    WholesaleDomainStatus,
)
from geodomain.domain.exceptions import (
    ConflictError,
    ForbiddenError,
    GeoDomainError,
    InvalidStateError,
    InvalidTransitionError,
    NotFoundError,
    ServiceUnavailableError,
    ValidationError,
)
from geodomain.domain.state_machine import (
    DealStateMachine,
    DomainStateMachine,
    fire_transition,
    next_deal_status,
)

__all__ = [
    "RequestContext",
    "DealStatus",
    "DomainStatus",
    "EventType",
    "InquiryStatus",
    "MessageStatus",
    "PaymentStatus",
    "UserRole",
    "VerificationMethod",
    "WholesaleDomainStatus",
    "ConflictError",
    "ForbiddenError",
    "GeoDomainError",
    "InvalidStateError",
    "InvalidTransitionError",
    "NotFoundError",
    "ServiceUnavailableError",
    "ValidationError",
    "DealStateMachine",
    "DomainStateMachine",
    "fire_transition",
    "next_deal_status",
]
