"""Domain Service - seller listings and the domain lifecycle.

Coordinates:
    - DomainStateMachine (transition guard)
    - DomainRepository / InquiryRepository (data access)
    - AuditEventRepository (audit trail)

VerificationService and WholesaleService drive domain transitions through
`apply_transition` so every status change is guarded and logged the same way.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

from geodomain.domain.enums import (
    DomainStatus,
    EntityType,
    EventType,
    GeographicScope,
    PriceType,
)
from geodomain.domain.exceptions import (
    ConflictError,
    InvalidStateError,
    NotFoundError,
    ValidationError,
)
from geodomain.domain.state_machine import DomainStateMachine, fire_transition
from geodomain.infrastructure.database.orm_models import Domain
from geodomain.infrastructure.database.repositories import (
    AuditEventRepository,
    DomainRepository,
    InquiryRepository,
    VerificationAttemptRepository,
)
from geodomain.logging_config import get_logger
from geodomain.services._helpers import page_limit

if TYPE_CHECKING:
    import uuid
    from decimal import Decimal

    from sqlalchemy.ext.asyncio import AsyncSession

    from geodomain.domain.context import RequestContext

logger = get_logger(__name__)

# Statuses in which a domain is visible to anyone, not only its owner.
PUBLIC_STATUSES = frozenset(
    {DomainStatus.VERIFIED, DomainStatus.PUBLISHED, DomainStatus.SOLD}
)
DELETABLE_STATUSES = frozenset({DomainStatus.DRAFT, DomainStatus.REJECTED})
EDITABLE_FIELDS = frozenset(
    {
        "name",
        "description",
        "price",
        "price_type",
        "category",
        "geographic_scope",
        "state",
        "city",
    }
)
_REQUIRED_FIELDS = frozenset({"name", "price_type", "geographic_scope"})

_EVENT_FOR_TRANSITION: dict[str, EventType] = {
    "submit": EventType.DOMAIN_SUBMITTED,
    "approve": EventType.VERIFICATION_APPROVED,
    "reject": EventType.VERIFICATION_REJECTED,
    "resubmit": EventType.DOMAIN_RESUBMITTED,
    "publish": EventType.DOMAIN_PUBLISHED,
    "pause": EventType.DOMAIN_PAUSED,
    "resume": EventType.DOMAIN_RESUMED,
    "mark_sold": EventType.DOMAIN_SOLD,
}


def normalize_domain_name(name: str) -> str:
    normalized = name.strip().lower().rstrip(".")
    if not normalized or "." not in normalized or " " in normalized:
        raise ValidationError(f"Invalid domain name: {name!r}")
    return normalized


class DomainService:
    """Manages seller domain listings."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session
        self._domain_repo = DomainRepository(session)
        self._inquiry_repo = InquiryRepository(session)
        self._attempt_repo = VerificationAttemptRepository(session)
        self._event_repo = AuditEventRepository(session)

    # ------------------------------------------------------------------
    # Listing CRUD
    # ------------------------------------------------------------------

    async def create_domain(
        self,
        ctx: RequestContext,
        name: str,
        price: Decimal | None = None,
        category: str | None = None,
        description: str | None = None,
        price_type: PriceType = PriceType.FIXED,
        geographic_scope: GeographicScope = GeographicScope.CITY,
        state: str | None = None,
        city: str | None = None,
    ) -> Domain:
        """Create a DRAFT domain owned by the caller."""
        normalized = normalize_domain_name(name)
        if await self._domain_repo.get_by_name(normalized) is not None:
            raise ConflictError(f"Domain {normalized} is already listed")
        if price is not None and price < 0:
            raise ValidationError("Price cannot be negative")

        domain = await self._domain_repo.create(
            Domain(
                name=normalized,
                description=description,
                price=price,
                price_type=str(price_type),
                category=category,
                geographic_scope=str(geographic_scope),
                state=state,
                city=city,
                owner_id=ctx.user_id,
                status=DomainStatus.DRAFT.value,
            )
        )
        await self._event_repo.record(
            entity_type=EntityType.DOMAIN,
            entity_id=domain.id,
            event_type=EventType.DOMAIN_CREATED,
            old_status=None,
            new_status=DomainStatus.DRAFT,
            actor=ctx.user_id,
            metadata={"name": normalized},
        )
        logger.info("domain.created", domain_id=str(domain.id), name=normalized)
        return domain

    async def update_domain(
        self, ctx: RequestContext, domain_id: uuid.UUID, **fields: Any
    ) -> Domain:
        """Edit listing fields. Only DRAFT domains can be edited."""
        domain = await self.get_owned_domain(ctx, domain_id)
        if domain.status != DomainStatus.DRAFT:
            raise InvalidStateError(
                "Domain", domain.status, "Only DRAFT domains can be edited"
            )

        unknown = set(fields) - EDITABLE_FIELDS
        if unknown:
            raise ValidationError(f"Fields cannot be edited: {', '.join(sorted(unknown))}")

        if fields.get("name") is not None:
            normalized = normalize_domain_name(fields["name"])
            existing = await self._domain_repo.get_by_name(normalized)
            if existing is not None and existing.id != domain.id:
                raise ConflictError(f"Domain {normalized} is already listed")
            fields["name"] = normalized
        if fields.get("price") is not None and fields["price"] < 0:
            raise ValidationError("Price cannot be negative")

        for field_name, value in fields.items():
            # name, price_type and geographic_scope are NOT NULL
            if value is None and field_name in _REQUIRED_FIELDS:
                continue
            setattr(domain, field_name, value)
        await self._domain_repo.save(domain)

        logger.info("domain.updated", domain_id=str(domain.id), fields=sorted(fields))
        return domain

    async def get_domain(self, ctx: RequestContext, domain_id: uuid.UUID) -> Domain:
        """Owners and admins see any status; everyone else only public listings."""
        domain = await self._domain_repo.get_by_id(domain_id)
        if domain is None:
            raise NotFoundError("Domain", str(domain_id))
        if domain.owner_id == ctx.user_id or ctx.is_admin:
            return domain
        if domain.status not in PUBLIC_STATUSES:
            raise NotFoundError("Domain", str(domain_id))
        return domain

    async def list_my_domains(
        self,
        ctx: RequestContext,
        status: DomainStatus | None = None,
        limit: int | None = None,
        offset: int = 0,
    ) -> list[Domain]:
        return await self._domain_repo.list_by_owner(
            ctx.user_id,
            status=str(status) if status else None,
            limit=page_limit(limit),
            offset=offset,
        )

    async def list_published_domains(
        self,
        query: str | None = None,
        state: str | None = None,
        city: str | None = None,
        category: str | None = None,
        price_min: Decimal | None = None,
        price_max: Decimal | None = None,
        price_type: PriceType | None = None,
        sort_by: str = "date",
        sort_order: str = "desc",
        limit: int | None = None,
        offset: int = 0,
    ) -> list[Domain]:
        """Public browse over PUBLISHED listings, newest first unless sorted by price."""
        if price_min is not None and price_max is not None and price_min > price_max:
            raise ValidationError("price_min cannot exceed price_max")
        if sort_by not in ("price", "date") or sort_order not in ("asc", "desc"):
            raise ValidationError(f"Unsupported sort: {sort_by} {sort_order}")
        return await self._domain_repo.search(
            [DomainStatus.PUBLISHED.value],
            query=query,
            state=state,
            city=city,
            category=category,
            price_min=price_min,
            price_max=price_max,
            price_type=str(price_type) if price_type else None,
            sort_by=sort_by,
            sort_order=sort_order,
            limit=page_limit(limit),
            offset=offset,
        )

    async def delete_domain(self, ctx: RequestContext, domain_id: uuid.UUID) -> None:
        """Hard-delete a DRAFT/REJECTED domain that never received an inquiry."""
        domain = await self.get_owned_domain(ctx, domain_id)
        if domain.status not in DELETABLE_STATUSES:
            raise ConflictError(f"Domain in status {domain.status} cannot be deleted")
        if await self._inquiry_repo.exists_for_domain(domain.id):
            raise ConflictError("Domain has inquiries and cannot be deleted")
        await self._domain_repo.delete(domain)
        logger.info("domain.deleted", domain_id=str(domain_id))

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def submit_for_verification(self, ctx: RequestContext, domain_id: uuid.UUID) -> Domain:
        """DRAFT -> PENDING_VERIFICATION. Any other status fails with INVALID_STATE."""
        domain = await self.get_owned_domain(ctx, domain_id)
        return await self.submit(domain, actor=ctx.user_id)

    async def submit(self, domain: Domain, actor: str) -> Domain:
        if domain.status != DomainStatus.DRAFT:
            raise InvalidStateError(
                "Domain",
                domain.status,
                "Only DRAFT domains can be submitted for verification",
            )
        return await self.apply_transition(
            domain, "submit", actor=actor, submitted_at=datetime.now(UTC)
        )

    async def resubmit(self, ctx: RequestContext, domain_id: uuid.UUID) -> Domain:
        """REJECTED -> DRAFT so the seller can fix the listing and try again."""
        domain = await self.get_owned_domain(ctx, domain_id)
        return await self.apply_transition(
            domain, "resubmit", actor=ctx.user_id, rejection_reason=None
        )

    async def publish(self, ctx: RequestContext, domain_id: uuid.UUID) -> Domain:
        domain = await self.get_owned_domain(ctx, domain_id, allow_admin=True)
        return await self.apply_transition(
            domain, "publish", actor=ctx.user_id, published_at=datetime.now(UTC)
        )

    async def pause(self, ctx: RequestContext, domain_id: uuid.UUID) -> Domain:
        domain = await self.get_owned_domain(ctx, domain_id, allow_admin=True)
        return await self.apply_transition(domain, "pause", actor=ctx.user_id)

    async def resume(self, ctx: RequestContext, domain_id: uuid.UUID) -> Domain:
        domain = await self.get_owned_domain(ctx, domain_id, allow_admin=True)
        return await self.apply_transition(domain, "resume", actor=ctx.user_id)

    async def get_verification_status(self, ctx: RequestContext, domain_id: uuid.UUID) -> dict:
        """Status, issued token and pending attempt for the seller's verification page."""
        domain = await self.get_owned_domain(ctx, domain_id, allow_admin=True)
        pending = await self._attempt_repo.get_unresolved_for_domain(domain.id)
        sm = DomainStateMachine(current_status=domain.status)
        return {
            "domain_id": domain.id,
            "domain_name": domain.name,
            "status": domain.status,
            "verification_token": domain.verification_token,
            "verification_method": domain.verification_method,
            "rejection_reason": domain.rejection_reason,
            "pending_attempt": pending,
            "can_submit_attempt": pending is None
            and domain.status in (DomainStatus.DRAFT, DomainStatus.PENDING_VERIFICATION),
            "allowed_events": sm.get_allowed_events(),
        }

    async def get_history(self, ctx: RequestContext, domain_id: uuid.UUID) -> list:
        domain = await self.get_owned_domain(ctx, domain_id, allow_admin=True)
        return await self._event_repo.get_for_entity(EntityType.DOMAIN, domain.id)

    # ------------------------------------------------------------------
    # Shared helpers (used by other services)
    # ------------------------------------------------------------------

    async def get_owned_domain(
        self, ctx: RequestContext, domain_id: uuid.UUID, allow_admin: bool = False
    ) -> Domain:
        """Fetch a domain the caller owns. Another seller's domain looks missing."""
        domain = await self._domain_repo.get_by_id(domain_id)
        if domain is None:
            raise NotFoundError("Domain", str(domain_id))
        if domain.owner_id != ctx.user_id and not (allow_admin and ctx.is_admin):
            raise NotFoundError("Domain", str(domain_id))
        return domain

    async def apply_transition(
        self,
        domain: Domain,
        event_name: str,
        actor: str,
        metadata: dict | None = None,
        **fields: Any,
    ) -> Domain:
        """Fire a DomainStateMachine event, persist the new status and audit it.

        Raises InvalidTransitionError if the event is illegal from the current status.
        """
        old_status = domain.status
        new_status = fire_transition(DomainStateMachine, old_status, event_name)
        await self._domain_repo.set_status(domain, new_status, **fields)

        await self._event_repo.record(
            entity_type=EntityType.DOMAIN,
            entity_id=domain.id,
            event_type=_EVENT_FOR_TRANSITION[event_name],
            old_status=old_status,
            new_status=new_status,
            actor=actor,
            metadata=metadata,
        )
        logger.info(
            f"domain.{event_name}",
            domain_id=str(domain.id),
            old_status=old_status,
            new_status=new_status,
        )
        return domain
