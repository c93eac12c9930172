"""Tests for the contact-detail redaction log processor."""

from geodomain.logging_config import redact_contact_details


class TestRedactContactDetails:
    def test_masks_buyer_contact_fields(self) -> None:
        event = {"event": "inquiry.created", "buyer_email": "jane@example.com", "buyer_phone": "5125550100"}
        out = redact_contact_details(None, "info", event)
        assert out["buyer_email"] == "j***"
        assert out["buyer_phone"] == "5***"

    def test_leaves_other_fields_alone(self) -> None:
        event = {"event": "deal.created", "deal_id": "abc", "agreed_price": "2000.00"}
        assert redact_contact_details(None, "info", dict(event)) == event

    def test_empty_values_untouched(self) -> None:
        out = redact_contact_details(None, "info", {"event": "x", "email": None})
        assert out["email"] is None
