"""Tests for domain enumerations."""

from __future__ import annotations

from geodomain.domain.enums import (
    DealStatus,
    DomainStatus,
    EventType,
    InquiryStatus,
    UserRole,
    WholesaleDomainStatus,
)


class TestDomainStatus:
    def test_all_statuses_exist(self) -> None:
        expected = {
            "DRAFT", "PENDING_VERIFICATION", "VERIFIED", "REJECTED",
            "PUBLISHED", "PAUSED", "SOLD",
        }
        assert {s.value for s in DomainStatus} == expected

    def test_status_is_str_enum(self) -> None:
        assert isinstance(DomainStatus.DRAFT, str)
        assert DomainStatus.DRAFT == "DRAFT"


class TestDealStatus:
    def test_all_statuses_exist(self) -> None:
        expected = {
            "NEGOTIATING", "AGREED", "PAYMENT_PENDING", "PAYMENT_CONFIRMED",
            "TRANSFER_INITIATED", "COMPLETED", "DISPUTED",
        }
        assert {s.value for s in DealStatus} == expected


class TestModerationStatuses:
    def test_inquiry_statuses(self) -> None:
        assert InquiryStatus.CHANGES_REQUESTED == "CHANGES_REQUESTED"
        assert InquiryStatus.CONVERTED_TO_DEAL in set(InquiryStatus)

    def test_wholesale_statuses(self) -> None:
        assert {s.value for s in WholesaleDomainStatus} == {
            "PENDING_APPROVAL", "ACTIVE", "SOLD", "REMOVED",
        }


class TestEventType:
    def test_event_type_count(self) -> None:
        # 7 domain + 3 verification + 6 inquiry + 4 message + 5 deal/payment + 6 wholesale
        assert len(EventType) == 31

    def test_event_type_is_str_enum(self) -> None:
        assert isinstance(EventType.DEAL_STATUS_CHANGED, str)


class TestUserRole:
    def test_roles(self) -> None:
        assert {r.value for r in UserRole} == {"BUYER", "SELLER", "ADMIN", "SUPER_ADMIN"}
