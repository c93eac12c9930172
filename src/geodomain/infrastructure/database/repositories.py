"""Repository classes for database access.

Repositories encapsulate all SQL queries and provide a clean interface
to the service layer. They accept an AsyncSession and never manage
their own transactions (that's the caller's responsibility).
"""

from __future__ import annotations

from decimal import Decimal
from typing import TYPE_CHECKING, Any, Generic, TypeVar

from sqlalchemy import func, or_, select

from geodomain.infrastructure.database.orm_models import (
    AuditEvent,
    Base,
    Deal,
    Domain,
    Inquiry,
    Message,
    Notification,
    Payment,
    VerificationAttempt,
    WholesaleConfig,
    WholesaleDomain,
    WholesaleSale,
)

if TYPE_CHECKING:
    import uuid
    from collections.abc import Iterable

    from sqlalchemy import Select
    from sqlalchemy.ext.asyncio import AsyncSession

    from geodomain.domain.enums import EntityType, EventType

ModelT = TypeVar("ModelT", bound=Base)


class _Repository(Generic[ModelT]):
    """Shared create / lookup / status helpers. Subclasses set `model`."""

    model: type[ModelT]

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(self, obj: ModelT) -> ModelT:
        self._session.add(obj)
        await self._session.flush()
        return obj

    async def get_by_id(self, obj_id: Any) -> ModelT | None:
        return await self._session.get(self.model, obj_id)

    async def set_status(self, obj: ModelT, new_status: str, **fields: Any) -> ModelT:
        """Write a new status (call AFTER state machine validation) plus related fields."""
        obj.status = str(new_status)
        for name, value in fields.items():
            setattr(obj, name, value)
        await self._session.flush()
        return obj

    async def save(self, obj: ModelT) -> ModelT:
        await self._session.flush()
        return obj

    async def _all(self, stmt: Select) -> list[ModelT]:
        result = await self._session.execute(stmt)
        return list(result.scalars().all())

    async def _count(self, *criteria: Any) -> int:
        stmt = select(func.count()).select_from(self.model)
        if criteria:
            stmt = stmt.where(*criteria)
        return int((await self._session.execute(stmt)).scalar_one())


def _page(stmt: Select, limit: int | None, offset: int) -> Select:
    if limit is not None:
        stmt = stmt.limit(limit)
    return stmt.offset(offset)


DOMAIN_SORT_COLUMNS = {"price": Domain.price, "date": Domain.created_at}


# ---------------------------------------------------------------------------
# Domains & verification
# ---------------------------------------------------------------------------
class DomainRepository(_Repository[Domain]):
    """Data access for listed domains."""

    model = Domain

    async def get_by_name(self, name: str) -> Domain | None:
        result = await self._session.execute(select(Domain).where(Domain.name == name))
        return result.scalar_one_or_none()

    async def list_by_owner(
        self,
        owner_id: str,
        status: str | None = None,
        limit: int | None = None,
        offset: int = 0,
    ) -> list[Domain]:
        stmt = select(Domain).where(Domain.owner_id == owner_id)
        if status is not None:
            stmt = stmt.where(Domain.status == status)
        stmt = stmt.order_by(Domain.created_at.desc())
        return await self._all(_page(stmt, limit, offset))

    async def search(
        self,
        statuses: Iterable[str],
        query: str | None = None,
        state: str | None = None,
        city: str | None = None,
        category: str | None = None,
        price_min: Decimal | None = None,
        price_max: Decimal | None = None,
        price_type: str | None = None,
        sort_by: str = "date",
        sort_order: str = "desc",
        limit: int | None = None,
        offset: int = 0,
    ) -> list[Domain]:
        """Filtered browse over listings in the given statuses."""
        stmt = select(Domain).where(Domain.status.in_(list(statuses)))
        if query:
            pattern = f"%{query.strip()}%"
            stmt = stmt.where(
                or_(
                    Domain.name.ilike(pattern),
                    Domain.description.ilike(pattern),
                    Domain.category.ilike(pattern),
                    Domain.state.ilike(pattern),
                    Domain.city.ilike(pattern),
                )
            )
        if state is not None:
            stmt = stmt.where(Domain.state == state)
        if city:
            stmt = stmt.where(Domain.city.ilike(f"%{city.strip()}%"))
        if category is not None:
            stmt = stmt.where(Domain.category == category)
        if price_min is not None:
            stmt = stmt.where(Domain.price >= price_min)
        if price_max is not None:
            stmt = stmt.where(Domain.price <= price_max)
        if price_type is not None:
            stmt = stmt.where(Domain.price_type == price_type)

        column = DOMAIN_SORT_COLUMNS[sort_by]
        stmt = stmt.order_by(column.asc() if sort_order == "asc" else column.desc(), Domain.id)
        return await self._all(_page(stmt, limit, offset))

    async def count_by_owner(self, owner_id: str) -> int:
        return await self._count(Domain.owner_id == owner_id)

    async def delete(self, domain: Domain) -> None:
        await self._session.delete(domain)
        await self._session.flush()


class VerificationAttemptRepository(_Repository[VerificationAttempt]):
    """Data access for verification attempts."""

    model = VerificationAttempt

    async def get_unresolved_for_domain(self, domain_id: uuid.UUID) -> VerificationAttempt | None:
        """Return the attempt still awaiting moderation, if any (at most one exists)."""
        result = await self._session.execute(
            select(VerificationAttempt)
            .where(
                VerificationAttempt.domain_id == domain_id,
                VerificationAttempt.moderation_result.is_(None),
            )
            .order_by(VerificationAttempt.created_at.desc())
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def list_for_domain(self, domain_id: uuid.UUID) -> list[VerificationAttempt]:
        return await self._all(
            select(VerificationAttempt)
            .where(VerificationAttempt.domain_id == domain_id)
            .order_by(VerificationAttempt.created_at.desc())
        )

    async def list_unresolved(
        self, limit: int | None = None, offset: int = 0
    ) -> list[VerificationAttempt]:
        stmt = (
            select(VerificationAttempt)
            .where(VerificationAttempt.moderation_result.is_(None))
            .order_by(VerificationAttempt.created_at.asc())
        )
        return await self._all(_page(stmt, limit, offset))

    async def count_unresolved(self) -> int:
        return await self._count(VerificationAttempt.moderation_result.is_(None))


# ---------------------------------------------------------------------------
# Inquiries & messages
# ---------------------------------------------------------------------------
class InquiryRepository(_Repository[Inquiry]):
    model = Inquiry

    async def exists_for_domain(self, domain_id: uuid.UUID) -> bool:
        return await self._count(Inquiry.domain_id == domain_id) > 0

    async def list_by_status(
        self, status: str, limit: int | None = None, offset: int = 0
    ) -> list[Inquiry]:
        stmt = (
            select(Inquiry).where(Inquiry.status == status).order_by(Inquiry.created_at.asc())
        )
        return await self._all(_page(stmt, limit, offset))

    async def list_for_seller(
        self,
        seller_id: str,
        statuses: Iterable[str],
        limit: int | None = None,
        offset: int = 0,
    ) -> list[Inquiry]:
        stmt = (
            select(Inquiry)
            .where(Inquiry.seller_id == seller_id, Inquiry.status.in_(list(statuses)))
            .order_by(Inquiry.created_at.desc())
        )
        return await self._all(_page(stmt, limit, offset))

    async def list_for_buyer(
        self, buyer_id: str, limit: int | None = None, offset: int = 0
    ) -> list[Inquiry]:
        stmt = (
            select(Inquiry).where(Inquiry.buyer_id == buyer_id).order_by(Inquiry.created_at.desc())
        )
        return await self._all(_page(stmt, limit, offset))

    async def count_by_status(self, status: str) -> int:
        return await self._count(Inquiry.status == status)

    async def count_for_seller(self, seller_id: str, statuses: Iterable[str]) -> int:
        return await self._count(
            Inquiry.seller_id == seller_id, Inquiry.status.in_(list(statuses))
        )


class MessageRepository(_Repository[Message]):
    model = Message

    async def list_for_inquiry(self, inquiry_id: uuid.UUID) -> list[Message]:
        return await self._all(
            select(Message)
            .where(Message.inquiry_id == inquiry_id)
            .order_by(Message.created_at.asc())
        )

    async def list_by_status(
        self, status: str, limit: int | None = None, offset: int = 0
    ) -> list[Message]:
        stmt = (
            select(Message).where(Message.status == status).order_by(Message.created_at.asc())
        )
        return await self._all(_page(stmt, limit, offset))

    async def count_by_status(self, status: str) -> int:
        return await self._count(Message.status == status)


# ---------------------------------------------------------------------------
# Deals & payments
# ---------------------------------------------------------------------------
class DealRepository(_Repository[Deal]):
    model = Deal

    async def get_by_inquiry(self, inquiry_id: uuid.UUID) -> Deal | None:
        result = await self._session.execute(select(Deal).where(Deal.inquiry_id == inquiry_id))
        return result.scalar_one_or_none()

    async def list_for_participant(
        self,
        user_id: str,
        status: str | None = None,
        limit: int | None = None,
        offset: int = 0,
    ) -> list[Deal]:
        stmt = select(Deal).where((Deal.buyer_id == user_id) | (Deal.seller_id == user_id))
        if status is not None:
            stmt = stmt.where(Deal.status == status)
        stmt = stmt.order_by(Deal.created_at.desc())
        return await self._all(_page(stmt, limit, offset))

    async def list_by_statuses(
        self, statuses: Iterable[str], limit: int | None = None, offset: int = 0
    ) -> list[Deal]:
        stmt = (
            select(Deal)
            .where(Deal.status.in_(list(statuses)))
            .order_by(Deal.updated_at.desc())
        )
        return await self._all(_page(stmt, limit, offset))

    async def count_for_seller(self, seller_id: str, status: str | None = None) -> int:
        criteria = [Deal.seller_id == seller_id]
        if status is not None:
            criteria.append(Deal.status == status)
        return await self._count(*criteria)

    async def count_by_statuses(self, statuses: Iterable[str]) -> int:
        return await self._count(Deal.status.in_(list(statuses)))


class PaymentRepository(_Repository[Payment]):
    model = Payment

    async def list_for_deal(self, deal_id: uuid.UUID) -> list[Payment]:
        return await self._all(
            select(Payment).where(Payment.deal_id == deal_id).order_by(Payment.created_at.desc())
        )

    async def get_pending_for_deal(self, deal_id: uuid.UUID) -> Payment | None:
        result = await self._session.execute(
            select(Payment)
            .where(Payment.deal_id == deal_id, Payment.status == "PENDING")
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def list_by_status(
        self, status: str, limit: int | None = None, offset: int = 0
    ) -> list[Payment]:
        stmt = (
            select(Payment).where(Payment.status == status).order_by(Payment.created_at.asc())
        )
        return await self._all(_page(stmt, limit, offset))

    async def count_by_status(self, status: str) -> int:
        return await self._count(Payment.status == status)


# ---------------------------------------------------------------------------
# Wholesale
# ---------------------------------------------------------------------------
class WholesaleConfigRepository(_Repository[WholesaleConfig]):
    """Config rows are appended; the newest row is the active configuration."""

    model = WholesaleConfig

    async def get_latest(self) -> WholesaleConfig | None:
        result = await self._session.execute(
            select(WholesaleConfig).order_by(WholesaleConfig.id.desc()).limit(1)
        )
        return result.scalar_one_or_none()


class WholesaleDomainRepository(_Repository[WholesaleDomain]):
    model = WholesaleDomain

    async def get_open_for_domain(self, domain_id: uuid.UUID) -> WholesaleDomain | None:
        """Return the PENDING_APPROVAL or ACTIVE entry for a domain, if any."""
        result = await self._session.execute(
            select(WholesaleDomain)
            .where(
                WholesaleDomain.domain_id == domain_id,
                WholesaleDomain.status.in_(["PENDING_APPROVAL", "ACTIVE"]),
            )
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def list_with_domains(
        self,
        status: str | None = None,
        owner_id: str | None = None,
        geographic_scope: str | None = None,
        state: str | None = None,
        category: str | None = None,
        search: str | None = None,
        limit: int | None = None,
        offset: int = 0,
    ) -> list[tuple[WholesaleDomain, Domain]]:
        stmt = select(WholesaleDomain, Domain).join(Domain, Domain.id == WholesaleDomain.domain_id)
        if status is not None:
            stmt = stmt.where(WholesaleDomain.status == status)
        if owner_id is not None:
            stmt = stmt.where(Domain.owner_id == owner_id)
        if geographic_scope is not None:
            stmt = stmt.where(Domain.geographic_scope == geographic_scope)
        if state is not None:
            stmt = stmt.where(Domain.state == state)
        if category is not None:
            stmt = stmt.where(Domain.category == category)
        if search:
            stmt = stmt.where(Domain.name.contains(search.lower()))
        stmt = stmt.order_by(WholesaleDomain.added_at.desc())
        result = await self._session.execute(_page(stmt, limit, offset))
        return [(row[0], row[1]) for row in result.all()]

    async def count_by_status(self, status: str) -> int:
        return await self._count(WholesaleDomain.status == status)


class WholesaleSaleRepository(_Repository[WholesaleSale]):
    model = WholesaleSale

    async def list_for_buyer(self, buyer_id: str) -> list[WholesaleSale]:
        return await self._all(
            select(WholesaleSale)
            .where(WholesaleSale.buyer_id == buyer_id)
            .order_by(WholesaleSale.created_at.desc())
        )

    async def count_by_status(self, status: str | None = None) -> int:
        if status is None:
            return await self._count()
        return await self._count(WholesaleSale.status == status)

    async def totals_for_status(self, status: str) -> tuple[Decimal, Decimal]:
        """Return (sum of price, sum of commission) for sales in a status."""
        result = await self._session.execute(
            select(
                func.coalesce(func.sum(WholesaleSale.price), 0),
                func.coalesce(func.sum(WholesaleSale.commission_amount), 0),
            ).where(WholesaleSale.status == status)
        )
        revenue, commission = result.one()
        return Decimal(str(revenue)), Decimal(str(commission))


# ---------------------------------------------------------------------------
# Notifications
# ---------------------------------------------------------------------------
class NotificationRepository(_Repository[Notification]):
    model = Notification

    async def list_for_user(
        self,
        user_id: str,
        unread_only: bool = False,
        limit: int | None = None,
        offset: int = 0,
    ) -> list[Notification]:
        stmt = select(Notification).where(Notification.user_id == user_id)
        if unread_only:
            stmt = stmt.where(Notification.is_read.is_(False))
        stmt = stmt.order_by(Notification.created_at.desc())
        return await self._all(_page(stmt, limit, offset))

    async def count_unread(self, user_id: str) -> int:
        return await self._count(
            Notification.user_id == user_id, Notification.is_read.is_(False)
        )


# ---------------------------------------------------------------------------
# Audit log
# ---------------------------------------------------------------------------
class AuditEventRepository:
    """Data access for the append-only audit event log."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def record(
        self,
        entity_type: EntityType,
        entity_id: Any,
        event_type: EventType,
        old_status: str | None,
        new_status: str | None,
        actor: str = "SYSTEM",
        metadata: dict | None = None,
    ) -> AuditEvent:
        """Append a new audit event. This is the ONLY write operation allowed."""
        evt = AuditEvent(
            entity_type=str(entity_type),
            entity_id=str(entity_id),
            event_type=str(event_type),
            old_status=str(old_status) if old_status else None,
            new_status=str(new_status) if new_status else None,
            actor=actor,
            metadata_json=metadata,
        )
        self._session.add(evt)
        await self._session.flush()
        return evt

    async def get_for_entity(self, entity_type: EntityType, entity_id: Any) -> list[AuditEvent]:
        """Fetch all events for an entity in insertion order."""
        result = await self._session.execute(
            select(AuditEvent)
            .where(
                AuditEvent.entity_type == str(entity_type),
                AuditEvent.entity_id == str(entity_id),
            )
            .order_by(AuditEvent.id.asc())
        )
        return list(result.scalars().all())
