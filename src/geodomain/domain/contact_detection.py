"""Contact information detection for message moderation.

Detection never blocks a message; it only flags it so the admin reviewing
the moderation queue sees why it may need editing.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field

_EMAIL_RE = re.compile(r"\b[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}\b")
_PHONE_RE = re.compile(r"\b\d{3}[-.]?\d{3}[-.]?\d{4}\b")
_URL_RE = re.compile(r"https?://\S+")
_SOCIAL_RE = re.compile(r"(?<![A-Za-z0-9._%+-])@[A-Za-z0-9_]+")

# Order is the precedence used for the flagged reason.
_DETECTORS: tuple[tuple[str, re.Pattern[str], str], ...] = (
    ("email", _EMAIL_RE, "Email address detected"),
    ("phone", _PHONE_RE, "Phone number detected"),
    ("url", _URL_RE, "URL detected"),
    ("social", _SOCIAL_RE, "Social media handle detected"),
)


@dataclass(frozen=True)
class ContactInfoDetection:
    detected_types: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def has_contact_info(self) -> bool:
        return bool(self.detected_types)

    @property
    def flagged_reason(self) -> str | None:
        if not self.detected_types:
            return None
        for kind, _, reason in _DETECTORS:
            if kind in self.detected_types:
                return reason
        return "Contact information detected"


def detect_contact_info(content: str) -> ContactInfoDetection:
    """Scan message content for emails, phone numbers, URLs and social handles."""
    detected: list[str] = []
    warnings: list[str] = []
    for kind, pattern, reason in _DETECTORS:
        match = pattern.search(content)
        if match:
            detected.append(kind)
            warnings.append(f"{reason}: {match.group(0)}")
    return ContactInfoDetection(detected_types=detected, warnings=warnings)
