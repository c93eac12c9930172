"""Verification Service - domain ownership proofs and their admin review.

Flow:
    1. Seller requests a token for a method (DNS TXT record or hosted file).
    2. Seller publishes the token and submits an attempt.
    3. An admin checks the record by hand and approves or rejects.

Nothing here resolves DNS or fetches files. The admin decision is the
verification.
"""

from __future__ import annotations

import secrets
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from geodomain.config import get_settings
from geodomain.domain.enums import (
    DomainStatus,
    EntityType,
    EventType,
    ModerationResult,
    NotificationType,
    VerificationAction,
    VerificationMethod,
)
from geodomain.domain.exceptions import (
    ConflictError,
    InvalidStateError,
    NotFoundError,
    ValidationError,
)
from geodomain.infrastructure.database.orm_models import Domain, VerificationAttempt
from geodomain.infrastructure.database.repositories import (
    AuditEventRepository,
    DomainRepository,
    VerificationAttemptRepository,
)
from geodomain.logging_config import get_logger
from geodomain.services._helpers import page_limit, require_text
from geodomain.services.domain_service import DomainService
from geodomain.services.notification_service import NotificationService

if TYPE_CHECKING:
    import uuid

    from sqlalchemy.ext.asyncio import AsyncSession

    from geodomain.domain.context import RequestContext

logger = get_logger(__name__)

TOKEN_ISSUABLE_STATUSES = frozenset({DomainStatus.DRAFT, DomainStatus.PENDING_VERIFICATION})


def build_instructions(domain_name: str, method: VerificationMethod, token: str) -> dict:
    """Method-specific instructions shown to the seller alongside the token."""
    settings = get_settings()
    record_value = f"{settings.verification_record_prefix}={token}"
    if method == VerificationMethod.DNS_TXT:
        return {
            "method": method.value,
            "token": token,
            "record_type": "TXT",
            "record_name": "@",
            "record_value": record_value,
            "ttl": 3600,
            "steps": [
                "Log in to your domain registrar or DNS provider",
                f"Add a TXT record for {domain_name} with name '@'",
                f"Set the value to: {record_value}",
                "Wait for DNS propagation, then submit the verification attempt",
            ],
        }
    file_name = settings.verification_file_name
    return {
        "method": method.value,
        "token": token,
        "file_name": file_name,
        "file_content": record_value,
        "file_url": f"https://{domain_name}/{file_name}",
        "steps": [
            f"Create a file named {file_name}",
            f"Put exactly this content in it: {record_value}",
            f"Upload it so it is served at https://{domain_name}/{file_name}",
            "Submit the verification attempt with the file URL",
        ],
    }


class VerificationService:
    """Issues verification tokens and runs the admin review of ownership proofs."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session
        self._domain_repo = DomainRepository(session)
        self._attempt_repo = VerificationAttemptRepository(session)
        self._event_repo = AuditEventRepository(session)
        self._domains = DomainService(session)
        self._notifications = NotificationService(session)

    # ------------------------------------------------------------------
    # Seller side
    # ------------------------------------------------------------------

    async def generate_verification_token(
        self,
        ctx: RequestContext,
        domain_id: uuid.UUID,
        method: VerificationMethod,
    ) -> dict:
        """Return a token and instructions for proving ownership.

        Idempotent per outstanding attempt: a pending attempt's token is
        returned as-is, and a token already issued for the same method is
        reused. Switching method issues a fresh token.
        """
        method = VerificationMethod(method)
        domain = await self._domains.get_owned_domain(ctx, domain_id)
        if domain.status not in TOKEN_ISSUABLE_STATUSES:
            raise InvalidStateError(
                "Domain",
                domain.status,
                "Verification tokens can only be issued for DRAFT or PENDING_VERIFICATION domains",
            )

        pending = await self._attempt_repo.get_unresolved_for_domain(domain.id)
        if pending is not None:
            return build_instructions(domain.name, VerificationMethod(pending.method), pending.token)

        if domain.verification_token and domain.verification_method == method:
            return build_instructions(domain.name, method, domain.verification_token)

        domain.verification_token = secrets.token_hex(get_settings().verification_token_bytes)
        domain.verification_method = method.value
        await self._domain_repo.save(domain)

        logger.info("verification.token_issued", domain_id=str(domain.id), method=method.value)
        return build_instructions(domain.name, method, domain.verification_token)

    async def submit_verification_attempt(
        self,
        ctx: RequestContext,
        domain_id: uuid.UUID,
        method: VerificationMethod,
        token: str,
        file_url: str | None = None,
    ) -> VerificationAttempt:
        """Record the seller's claim that the token is published.

        A DRAFT domain is moved to PENDING_VERIFICATION on the way.
        """
        method = VerificationMethod(method)
        domain = await self._domains.get_owned_domain(ctx, domain_id)

        if await self._attempt_repo.get_unresolved_for_domain(domain.id) is not None:
            raise ConflictError("A verification attempt is already pending for this domain")
        if domain.status not in TOKEN_ISSUABLE_STATUSES:
            raise InvalidStateError(
                "Domain",
                domain.status,
                "Only DRAFT or PENDING_VERIFICATION domains accept verification attempts",
            )
        if (
            domain.verification_token is None
            or domain.verification_method != method
            or not secrets.compare_digest(domain.verification_token, token.strip())
        ):
            raise ValidationError("Verification token does not match the issued token")
        if method == VerificationMethod.FILE_UPLOAD:
            file_url = require_text(file_url, "file_url is required for FILE_UPLOAD verification")

        if domain.status == DomainStatus.DRAFT:
            await self._domains.submit(domain, actor=ctx.user_id)

        attempt = await self._attempt_repo.create(
            VerificationAttempt(
                domain_id=domain.id,
                method=method.value,
                token=domain.verification_token,
                file_url=file_url,
                submitted_by=ctx.user_id,
            )
        )
        await self._event_repo.record(
            entity_type=EntityType.VERIFICATION_ATTEMPT,
            entity_id=attempt.id,
            event_type=EventType.VERIFICATION_SUBMITTED,
            old_status=None,
            new_status=None,
            actor=ctx.user_id,
            metadata={"domain_id": str(domain.id), "method": method.value},
        )
        logger.info(
            "verification.attempt_submitted",
            domain_id=str(domain.id),
            attempt_id=str(attempt.id),
            method=method.value,
        )
        return attempt

    async def get_attempts(
        self, ctx: RequestContext, domain_id: uuid.UUID
    ) -> list[VerificationAttempt]:
        domain = await self._domains.get_owned_domain(ctx, domain_id, allow_admin=True)
        return await self._attempt_repo.list_for_domain(domain.id)

    # ------------------------------------------------------------------
    # Admin side
    # ------------------------------------------------------------------

    async def get_pending_attempts(
        self, ctx: RequestContext, limit: int | None = None, offset: int = 0
    ) -> list[tuple[VerificationAttempt, Domain]]:
        """Oldest-first review queue of unresolved attempts with their domains."""
        ctx.require_admin()
        attempts = await self._attempt_repo.list_unresolved(limit=page_limit(limit), offset=offset)
        queue = []
        for attempt in attempts:
            domain = await self._domain_repo.get_by_id(attempt.domain_id)
            if domain is not None:
                queue.append((attempt, domain))
        return queue

    async def moderate_verification_attempt(
        self,
        ctx: RequestContext,
        attempt_id: uuid.UUID,
        action: VerificationAction,
        notes: str | None = None,
        rejection_reason: str | None = None,
    ) -> VerificationAttempt:
        """APPROVE -> domain VERIFIED. REJECT (reason required) -> domain REJECTED."""
        ctx.require_admin()
        action = VerificationAction(action)

        attempt = await self._attempt_repo.get_by_id(attempt_id)
        if attempt is None:
            raise NotFoundError("VerificationAttempt", str(attempt_id))
        if attempt.moderation_result is not None:
            raise InvalidStateError(
                "VerificationAttempt",
                attempt.moderation_result,
                "Verification attempt has already been moderated",
            )
        domain = await self._domain_repo.get_by_id(attempt.domain_id)
        if domain is None:
            raise NotFoundError("Domain", str(attempt.domain_id))

        now = datetime.now(UTC)
        if action == VerificationAction.APPROVE:
            await self._domains.apply_transition(
                domain,
                "approve",
                actor=ctx.user_id,
                metadata={"attempt_id": str(attempt.id)},
                verified_at=now,
                rejection_reason=None,
            )
            result = ModerationResult.APPROVED
            event_type = EventType.VERIFICATION_APPROVED
            await self._notifications.notify(
                domain.owner_id,
                NotificationType.VERIFICATION_APPROVED,
                "Domain verified",
                f"{domain.name} has been verified and can now be published.",
                entity_id=domain.id,
            )
        else:
            reason = require_text(rejection_reason, "A rejection reason is required")
            await self._domains.apply_transition(
                domain,
                "reject",
                actor=ctx.user_id,
                metadata={"attempt_id": str(attempt.id), "reason": reason},
                rejection_reason=reason,
            )
            attempt.rejection_reason = reason
            result = ModerationResult.REJECTED
            event_type = EventType.VERIFICATION_REJECTED
            await self._notifications.notify(
                domain.owner_id,
                NotificationType.VERIFICATION_REJECTED,
                "Domain verification rejected",
                f"Verification of {domain.name} was rejected: {reason}",
                entity_id=domain.id,
            )

        attempt.moderation_result = result.value
        attempt.admin_notes = notes
        attempt.moderated_by = ctx.user_id
        attempt.moderated_at = now
        await self._attempt_repo.save(attempt)

        await self._event_repo.record(
            entity_type=EntityType.VERIFICATION_ATTEMPT,
            entity_id=attempt.id,
            event_type=event_type,
            old_status=None,
            new_status=result,
            actor=ctx.user_id,
            metadata={"domain_id": str(domain.id)},
        )
        logger.info(
            "verification.moderated",
            attempt_id=str(attempt.id),
            domain_id=str(domain.id),
            result=result.value,
        )
        return attempt
