"""Pydantic API schemas."""

from geodomain.schemas.common import (
    AuditEventResponse,
    ErrorResponse,
    HealthResponse,
    StatusResponse,
)
from geodomain.schemas.dashboard import (
    AdminOverviewResponse,
    NotificationResponse,
    SellerStatsResponse,
)
from geodomain.schemas.deals import (
    CreateDealRequest,
    DealResponse,
    PaymentResponse,
    PaymentStatusResponse,
    UpdateDealStatusRequest,
    UploadProofRequest,
    VerifyPaymentRequest,
)
from geodomain.schemas.domains import CreateDomainRequest, DomainResponse, UpdateDomainRequest
from geodomain.schemas.inquiries import (
    AdminMessageResponse,
    CreateInquiryRequest,
    InquiryResponse,
    MessageResponse,
    ModerateInquiryRequest,
    ModerateMessageRequest,
    ResubmitInquiryRequest,
    SendMessageRequest,
)
from geodomain.schemas.verification import (
    GenerateTokenRequest,
    ModerateAttemptRequest,
    PendingAttemptResponse,
    SubmitAttemptRequest,
    VerificationAttemptResponse,
    VerificationInstructionsResponse,
    VerificationStatusResponse,
)
from geodomain.schemas.wholesale import (
    AddWholesaleDomainRequest,
    PurchaseRequest,
    UpdateWholesaleConfigRequest,
    WholesaleConfigResponse,
    WholesaleDomainResponse,
    WholesaleListingResponse,
    WholesaleNotesRequest,
    WholesaleSaleResponse,
    WholesaleStatsResponse,
)

__all__ = [
    "AuditEventResponse",
    "ErrorResponse",
    "HealthResponse",
    "StatusResponse",
    "AdminOverviewResponse",
    "NotificationResponse",
    "SellerStatsResponse",
    "CreateDealRequest",
    "DealResponse",
    "PaymentResponse",
    "PaymentStatusResponse",
    "UpdateDealStatusRequest",
    "UploadProofRequest",
    "VerifyPaymentRequest",
    "CreateDomainRequest",
    "DomainResponse",
    "UpdateDomainRequest",
    "AdminMessageResponse",
    "CreateInquiryRequest",
    "InquiryResponse",
    "MessageResponse",
    "ModerateInquiryRequest",
    "ModerateMessageRequest",
    "ResubmitInquiryRequest",
    "SendMessageRequest",
    "GenerateTokenRequest",
    "ModerateAttemptRequest",
    "PendingAttemptResponse",
    "SubmitAttemptRequest",
    "VerificationAttemptResponse",
    "VerificationInstructionsResponse",
    "VerificationStatusResponse",
    "AddWholesaleDomainRequest",
    "PurchaseRequest",
    "UpdateWholesaleConfigRequest",
    "WholesaleConfigResponse",
    "WholesaleDomainResponse",
    "WholesaleListingResponse",
    "WholesaleNotesRequest",
    "WholesaleSaleResponse",
    "WholesaleStatsResponse",
]
