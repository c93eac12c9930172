"""Database infrastructure - engine, ORM models, and repositories."""

from geodomain.infrastructure.database.engine import (
    close_db,
    get_async_session,
    get_session_factory,
    init_db,
)
from geodomain.infrastructure.database.orm_models import (
    AuditEvent,
    Base,
    Deal,
    Domain,
    Inquiry,
    Message,
    Notification,
    Payment,
    VerificationAttempt,
    WholesaleConfig,
    WholesaleDomain,
    WholesaleSale,
)
from geodomain.infrastructure.database.repositories import (
    AuditEventRepository,
    DealRepository,
    DomainRepository,
    InquiryRepository,
    MessageRepository,
    NotificationRepository,
    PaymentRepository,
    VerificationAttemptRepository,
    WholesaleConfigRepository,
    WholesaleDomainRepository,
    WholesaleSaleRepository,
)

__all__ = [
    "Base",
    "AuditEvent",
    "Deal",
    "Domain",
    "Inquiry",
    "Message",
    "Notification",
    "Payment",
    "VerificationAttempt",
    "WholesaleConfig",
    "WholesaleDomain",
    "WholesaleSale",
    "AuditEventRepository",
    "DealRepository",
    "DomainRepository",
    "InquiryRepository",
    "MessageRepository",
    "NotificationRepository",
    "PaymentRepository",
    "VerificationAttemptRepository",
    "WholesaleConfigRepository",
    "WholesaleDomainRepository",
    "WholesaleSaleRepository",
    "get_async_session",
    "get_session_factory",
    "init_db",
    "close_db",
]
