"""Application services - use case orchestration."""

from geodomain.services.dashboard_service import DashboardService
from geodomain.services.deal_service import DealService
from geodomain.services.domain_service import DomainService
from geodomain.services.inquiry_service import InquiryService
from geodomain.services.message_service import MessageService
from geodomain.services.notification_service import NotificationService
from geodomain.services.payment_service import PaymentService
from geodomain.services.verification_service import VerificationService
from geodomain.services.wholesale_service import WholesaleService

__all__ = [
    "DashboardService",
    "DealService",
    "DomainService",
    "InquiryService",
    "MessageService",
    "NotificationService",
    "PaymentService",
    "VerificationService",
    "WholesaleService",
]
