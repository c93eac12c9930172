"""Tests for contact information detection in messages."""

from __future__ import annotations

import pytest

from geodomain.domain.contact_detection import detect_contact_info


class TestDetectContactInfo:
    def test_clean_message(self) -> None:
        result = detect_contact_info("Would you accept 1800 for the domain?")
        assert result.has_contact_info is False
        assert result.flagged_reason is None
        assert result.warnings == []

    @pytest.mark.parametrize(
        ("content", "kind", "reason"),
        [
            ("Write me at jane.doe@example.com", "email", "Email address detected"),
            ("Call 512-555-0199 tonight", "phone", "Phone number detected"),
            ("Call 5125550199 tonight", "phone", "Phone number detected"),
            ("Details at https://example.org/offer", "url", "URL detected"),
            ("DM me @janedoe_tx", "social", "Social media handle detected"),
        ],
    )
    def test_single_kind(self, content: str, kind: str, reason: str) -> None:
        result = detect_contact_info(content)
        assert result.detected_types == [kind]
        assert result.flagged_reason == reason

    def test_email_is_not_also_a_handle(self) -> None:
        result = detect_contact_info("jane@example.com")
        assert "social" not in result.detected_types

    def test_email_takes_precedence(self) -> None:
        result = detect_contact_info("Visit https://x.io or mail bob@x.io, cell 512.555.0199")
        assert result.detected_types == ["email", "phone", "url"]
        assert result.flagged_reason == "Email address detected"
        assert len(result.warnings) == 3
        assert result.warnings[1] == "Phone number detected: 512.555.0199"
