"""Small guards shared by the workflow services."""

from __future__ import annotations

from geodomain.config import get_settings
from geodomain.domain.exceptions import ValidationError


def require_text(value: str | None, message: str) -> str:
    """Return the stripped value or raise ValidationError when it is blank."""
    if value is None or not value.strip():
        raise ValidationError(message)
    return value.strip()


def page_limit(limit: int | None) -> int:
    """Clamp a requested page size to [1, max_page_size]."""
    settings = get_settings()
    if limit is None:
        return settings.default_page_size
    return max(1, min(limit, settings.max_page_size))
