"""Tests for VerificationService: tokens, attempts and admin moderation."""

from __future__ import annotations

import pytest

from geodomain.domain.enums import (
    DomainStatus,
    ModerationResult,
    VerificationAction,
    VerificationMethod,
)
from geodomain.domain.exceptions import (
    ConflictError,
    ForbiddenError,
    InvalidStateError,
    NotFoundError,
    ValidationError,
)
from geodomain.services import DomainService, NotificationService, VerificationService


class TestGenerateToken:
    @pytest.mark.asyncio
    async def test_dns_instructions(self, session, seller, market) -> None:
        domain = await market.draft_domain(name="example.com")
        instructions = await VerificationService(session).generate_verification_token(
            seller, domain.id, VerificationMethod.DNS_TXT
        )
        assert instructions["record_type"] == "TXT"
        assert instructions["record_name"] == "@"
        assert instructions["record_value"].endswith("=" + instructions["token"])
        assert len(instructions["token"]) == 64

    @pytest.mark.asyncio
    async def test_file_instructions(self, session, seller, market) -> None:
        domain = await market.draft_domain(name="example.com")
        instructions = await VerificationService(session).generate_verification_token(
            seller, domain.id, VerificationMethod.FILE_UPLOAD
        )
        assert instructions["file_url"].startswith("https://example.com/")
        assert instructions["token"] in instructions["file_content"]

    @pytest.mark.asyncio
    async def test_same_method_reuses_token(self, session, seller, market) -> None:
        domain = await market.draft_domain()
        svc = VerificationService(session)
        first = await svc.generate_verification_token(seller, domain.id, VerificationMethod.DNS_TXT)
        second = await svc.generate_verification_token(seller, domain.id, VerificationMethod.DNS_TXT)
        assert first["token"] == second["token"]

    @pytest.mark.asyncio
    async def test_switching_method_issues_new_token(self, session, seller, market) -> None:
        domain = await market.draft_domain()
        svc = VerificationService(session)
        dns = await svc.generate_verification_token(seller, domain.id, VerificationMethod.DNS_TXT)
        upload = await svc.generate_verification_token(
            seller, domain.id, VerificationMethod.FILE_UPLOAD
        )
        assert dns["token"] != upload["token"]

    @pytest.mark.asyncio
    async def test_pending_attempt_token_is_returned(self, session, seller, market) -> None:
        domain = await market.draft_domain()
        attempt = await market.pending_attempt(domain)
        instructions = await VerificationService(session).generate_verification_token(
            seller, domain.id, VerificationMethod.FILE_UPLOAD
        )
        assert instructions["token"] == attempt.token
        assert instructions["method"] == VerificationMethod.DNS_TXT


class TestSubmitAttempt:
    @pytest.mark.asyncio
    async def test_draft_domain_is_submitted(self, session, market) -> None:
        domain = await market.draft_domain()
        attempt = await market.pending_attempt(domain)
        assert attempt.moderation_result is None
        assert domain.status == DomainStatus.PENDING_VERIFICATION

    @pytest.mark.asyncio
    async def test_second_attempt_conflicts(self, session, seller, market) -> None:
        domain = await market.draft_domain()
        attempt = await market.pending_attempt(domain)
        with pytest.raises(ConflictError) as exc_info:
            await VerificationService(session).submit_verification_attempt(
                seller, domain.id, VerificationMethod.DNS_TXT, attempt.token
            )
        assert exc_info.value.code == "CONFLICT"

    @pytest.mark.asyncio
    async def test_wrong_token_is_rejected(self, session, seller, market) -> None:
        domain = await market.draft_domain()
        svc = VerificationService(session)
        await svc.generate_verification_token(seller, domain.id, VerificationMethod.DNS_TXT)
        with pytest.raises(ValidationError):
            await svc.submit_verification_attempt(
                seller, domain.id, VerificationMethod.DNS_TXT, "not-the-token"
            )
        assert domain.status == DomainStatus.DRAFT

    @pytest.mark.asyncio
    async def test_file_upload_requires_url(self, session, seller, market) -> None:
        domain = await market.draft_domain()
        svc = VerificationService(session)
        instructions = await svc.generate_verification_token(
            seller, domain.id, VerificationMethod.FILE_UPLOAD
        )
        with pytest.raises(ValidationError):
            await svc.submit_verification_attempt(
                seller, domain.id, VerificationMethod.FILE_UPLOAD, instructions["token"]
            )

    @pytest.mark.asyncio
    async def test_verified_domain_cannot_submit(self, session, seller, market) -> None:
        domain = await market.verified_domain()
        with pytest.raises(InvalidStateError):
            await VerificationService(session).submit_verification_attempt(
                seller, domain.id, VerificationMethod.DNS_TXT, domain.verification_token
            )

    @pytest.mark.asyncio
    async def test_not_owner(self, session, other_seller, market) -> None:
        domain = await market.draft_domain()
        with pytest.raises(NotFoundError):
            await VerificationService(session).submit_verification_attempt(
                other_seller, domain.id, VerificationMethod.DNS_TXT, "x"
            )


class TestModeration:
    @pytest.mark.asyncio
    async def test_approve_verifies_example_com(self, session, seller, admin, market) -> None:
        domain = await market.draft_domain(name="example.com")
        attempt = await market.pending_attempt(domain, VerificationMethod.DNS_TXT)

        resolved = await VerificationService(session).moderate_verification_attempt(
            admin, attempt.id, VerificationAction.APPROVE, notes="TXT record present"
        )

        assert domain.status == DomainStatus.VERIFIED
        assert domain.verified_at is not None
        assert resolved.moderation_result == ModerationResult.APPROVED
        assert resolved.moderated_by == admin.user_id
        notifications = await NotificationService(session).list_for_user(seller)
        assert notifications[0].type == "VERIFICATION_APPROVED"

    @pytest.mark.asyncio
    async def test_reject_records_reason(self, session, seller, admin, market) -> None:
        domain = await market.draft_domain()
        attempt = await market.pending_attempt(domain)
        svc = VerificationService(session)

        await svc.moderate_verification_attempt(
            admin, attempt.id, VerificationAction.REJECT, rejection_reason="No TXT record"
        )

        assert domain.status == DomainStatus.REJECTED
        assert domain.rejection_reason == "No TXT record"
        assert attempt.moderation_result == ModerationResult.REJECTED

        # Resubmission returns the listing to DRAFT and allows a new attempt
        await DomainService(session).resubmit(seller, domain.id)
        assert domain.status == DomainStatus.DRAFT
        second = await market.pending_attempt(domain)
        assert second.id != attempt.id

    @pytest.mark.asyncio
    async def test_reject_requires_reason(self, session, admin, market) -> None:
        domain = await market.draft_domain()
        attempt = await market.pending_attempt(domain)
        with pytest.raises(ValidationError):
            await VerificationService(session).moderate_verification_attempt(
                admin, attempt.id, VerificationAction.REJECT
            )
        assert domain.status == DomainStatus.PENDING_VERIFICATION

    @pytest.mark.asyncio
    async def test_resolved_attempt_is_immutable(self, session, admin, market) -> None:
        domain = await market.draft_domain()
        attempt = await market.pending_attempt(domain)
        svc = VerificationService(session)
        await svc.moderate_verification_attempt(admin, attempt.id, VerificationAction.APPROVE)
        with pytest.raises(InvalidStateError):
            await svc.moderate_verification_attempt(
                admin, attempt.id, VerificationAction.REJECT, rejection_reason="late"
            )

    @pytest.mark.asyncio
    async def test_admin_only(self, session, seller, market) -> None:
        domain = await market.draft_domain()
        attempt = await market.pending_attempt(domain)
        with pytest.raises(ForbiddenError):
            await VerificationService(session).moderate_verification_attempt(
                seller, attempt.id, VerificationAction.APPROVE
            )

    @pytest.mark.asyncio
    async def test_pending_queue(self, session, admin, market) -> None:
        first = await market.draft_domain(name="austinhomes.com")
        second = await market.draft_domain(name="dallashomes.com")
        await market.pending_attempt(first)
        await market.pending_attempt(second)
        queue = await VerificationService(session).get_pending_attempts(admin)
        assert {domain.name for _, domain in queue} == {"austinhomes.com", "dallashomes.com"}
