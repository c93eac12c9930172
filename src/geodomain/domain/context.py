"""Per-call request context.

Every service operation receives the authenticated caller explicitly instead
of reading ambient session state.
"""

from __future__ import annotations

from dataclasses import dataclass

from geodomain.domain.enums import UserRole
from geodomain.domain.exceptions import ForbiddenError

ADMIN_ROLES = frozenset({UserRole.ADMIN, UserRole.SUPER_ADMIN})


@dataclass(frozen=True)
class RequestContext:
    """The authenticated caller of an operation.

    Attributes:
        user_id: Opaque user id issued by the session provider.
        role: The caller's role.
    """

    user_id: str
    role: UserRole = UserRole.BUYER

    @property
    def is_admin(self) -> bool:
        return self.role in ADMIN_ROLES

    def require_admin(self) -> None:
        """Raise ForbiddenError unless the caller is ADMIN or SUPER_ADMIN."""
        if not self.is_admin:
            raise ForbiddenError("Admin access required")
