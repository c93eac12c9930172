"""Wholesale Service - fixed-price marketplace for verified domains.

Sellers place verified domains into a pool sold at a single platform price.
The platform keeps a fixed commission; the seller receives the rest.

Pricing lives in wholesale_config. Updates append a row, so the history of
price changes is preserved and the newest row is always the one in force.
"""

from __future__ import annotations

from datetime import UTC, datetime
from decimal import Decimal
from typing import TYPE_CHECKING

from geodomain.config import get_settings
from geodomain.domain.enums import (
    DomainStatus,
    EntityType,
    EventType,
    NotificationType,
    PaymentMethod,
    WholesaleDomainStatus,
    WholesaleSaleStatus,
)
from geodomain.domain.exceptions import (
    ConflictError,
    ForbiddenError,
    NotFoundError,
    ServiceUnavailableError,
    ValidationError,
)
from geodomain.domain.state_machine import (
    WholesaleDomainStateMachine,
    WholesaleSaleStateMachine,
    fire_transition,
)
from geodomain.infrastructure.database.orm_models import (
    Domain,
    WholesaleConfig,
    WholesaleDomain,
    WholesaleSale,
)
from geodomain.infrastructure.database.repositories import (
    AuditEventRepository,
    DomainRepository,
    WholesaleConfigRepository,
    WholesaleDomainRepository,
    WholesaleSaleRepository,
)
from geodomain.logging_config import get_logger
from geodomain.services._helpers import page_limit
from geodomain.services.domain_service import DomainService
from geodomain.services.notification_service import NotificationService

if TYPE_CHECKING:
    import uuid

    from sqlalchemy.ext.asyncio import AsyncSession

    from geodomain.domain.context import RequestContext

logger = get_logger(__name__)

ELIGIBLE_DOMAIN_STATUSES = frozenset({DomainStatus.VERIFIED, DomainStatus.PUBLISHED})


class WholesaleService:
    """Manages the wholesale pool, its pricing and its sales."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session
        self._config_repo = WholesaleConfigRepository(session)
        self._wholesale_repo = WholesaleDomainRepository(session)
        self._sale_repo = WholesaleSaleRepository(session)
        self._domain_repo = DomainRepository(session)
        self._event_repo = AuditEventRepository(session)
        self._domains = DomainService(session)
        self._notifications = NotificationService(session)

    # ------------------------------------------------------------------
    # Configuration
    # ------------------------------------------------------------------

    async def get_config(self) -> WholesaleConfig:
        """Return the active configuration, creating the default row on first read."""
        config = await self._config_repo.get_latest()
        if config is None:
            settings = get_settings()
            config = await self._config_repo.create(
                WholesaleConfig(
                    price=settings.wholesale_default_price,
                    commission_amount=settings.wholesale_default_commission,
                    is_active=True,
                    updated_by="SYSTEM",
                )
            )
            logger.info("wholesale.config_initialized", price=str(config.price))
        return config

    async def update_config(
        self,
        ctx: RequestContext,
        price: Decimal | None = None,
        commission_amount: Decimal | None = None,
        is_active: bool | None = None,
    ) -> WholesaleConfig:
        """Append a new configuration row. Omitted fields keep their current value."""
        ctx.require_admin()
        settings = get_settings()
        current = await self.get_config()

        new_price = Decimal(price) if price is not None else Decimal(current.price)
        new_commission = (
            Decimal(commission_amount)
            if commission_amount is not None
            else Decimal(current.commission_amount)
        )
        if not settings.wholesale_min_price <= new_price <= settings.wholesale_max_price:
            raise ValidationError(
                f"Price must be between {settings.wholesale_min_price} "
                f"and {settings.wholesale_max_price}"
            )
        if new_commission < 0:
            raise ValidationError("Commission cannot be negative")
        if new_commission >= new_price:
            raise ValidationError("Commission must be less than the price")

        config = await self._config_repo.create(
            WholesaleConfig(
                price=new_price,
                commission_amount=new_commission,
                is_active=current.is_active if is_active is None else is_active,
                updated_by=ctx.user_id,
            )
        )
        await self._event_repo.record(
            entity_type=EntityType.WHOLESALE_CONFIG,
            entity_id=config.id,
            event_type=EventType.WHOLESALE_CONFIG_UPDATED,
            old_status=None,
            new_status=None,
            actor=ctx.user_id,
            metadata={
                "price": str(new_price),
                "commission_amount": str(new_commission),
                "is_active": config.is_active,
            },
        )
        logger.info(
            "wholesale.config_updated",
            price=str(new_price),
            commission=str(new_commission),
            is_active=config.is_active,
        )
        return config

    # ------------------------------------------------------------------
    # Pool management
    # ------------------------------------------------------------------

    async def add_domain(
        self, ctx: RequestContext, domain_id: uuid.UUID, notes: str | None = None
    ) -> WholesaleDomain:
        """Submit an owned VERIFIED/PUBLISHED domain for wholesale approval."""
        domain = await self._domain_repo.get_by_id(domain_id)
        if (
            domain is None
            or domain.owner_id != ctx.user_id
            or domain.status not in ELIGIBLE_DOMAIN_STATUSES
        ):
            raise NotFoundError(
                "Domain",
                str(domain_id),
                "Domain not found or not eligible for the wholesale marketplace",
            )
        if await self._wholesale_repo.get_open_for_domain(domain.id) is not None:
            raise ConflictError("Domain is already in the wholesale marketplace")

        entry = await self._wholesale_repo.create(
            WholesaleDomain(
                domain_id=domain.id,
                added_by=ctx.user_id,
                status=WholesaleDomainStatus.PENDING_APPROVAL.value,
                notes=notes,
            )
        )
        await self._record(entry.id, EventType.WHOLESALE_LISTED, None,
                           WholesaleDomainStatus.PENDING_APPROVAL, ctx.user_id,
                           {"domain_id": str(domain.id)})
        logger.info("wholesale.listed", wholesale_domain_id=str(entry.id), domain=domain.name)
        return entry

    async def approve_domain(
        self, ctx: RequestContext, wholesale_domain_id: uuid.UUID, notes: str | None = None
    ) -> WholesaleDomain:
        ctx.require_admin()
        entry = await self._get_entry_or_raise(wholesale_domain_id)
        old_status = entry.status
        new_status = fire_transition(WholesaleDomainStateMachine, old_status, "approve")
        fields: dict = {"approved_at": datetime.now(UTC)}
        if notes is not None:
            fields["notes"] = notes
        await self._wholesale_repo.set_status(entry, new_status, **fields)

        await self._record(entry.id, EventType.WHOLESALE_APPROVED, old_status, new_status,
                           ctx.user_id)
        logger.info("wholesale.approved", wholesale_domain_id=str(entry.id))
        return entry

    async def remove_domain(
        self, ctx: RequestContext, wholesale_domain_id: uuid.UUID, notes: str | None = None
    ) -> WholesaleDomain:
        """Owner or admin pulls a PENDING_APPROVAL/ACTIVE entry from the pool."""
        entry = await self._get_entry_or_raise(wholesale_domain_id)
        domain = await self._domain_repo.get_by_id(entry.domain_id)
        if not ctx.is_admin and (domain is None or domain.owner_id != ctx.user_id):
            raise NotFoundError("WholesaleDomain", str(wholesale_domain_id))

        old_status = entry.status
        new_status = fire_transition(WholesaleDomainStateMachine, old_status, "remove")
        fields: dict = {}
        if notes is not None:
            fields["notes"] = notes
        await self._wholesale_repo.set_status(entry, new_status, **fields)

        await self._record(entry.id, EventType.WHOLESALE_REMOVED, old_status, new_status,
                           ctx.user_id)
        logger.info("wholesale.removed", wholesale_domain_id=str(entry.id))
        return entry

    async def withdraw_for_sold_domain(self, domain_id: uuid.UUID, actor: str) -> None:
        """Pull any open wholesale entry once the domain has been sold elsewhere."""
        entry = await self._wholesale_repo.get_open_for_domain(domain_id)
        if entry is None:
            return
        old_status = entry.status
        new_status = fire_transition(WholesaleDomainStateMachine, old_status, "remove")
        await self._wholesale_repo.set_status(entry, new_status, notes="Domain sold through a deal")
        await self._record(entry.id, EventType.WHOLESALE_REMOVED, old_status, new_status, actor,
                           {"reason": "domain_sold"})
        logger.info("wholesale.withdrawn", wholesale_domain_id=str(entry.id), domain_id=str(domain_id))

    # ------------------------------------------------------------------
    # Purchasing
    # ------------------------------------------------------------------

    async def purchase_domain(
        self,
        ctx: RequestContext,
        wholesale_domain_id: uuid.UUID,
        payment_method: PaymentMethod | None = None,
    ) -> WholesaleSale:
        """Buy an ACTIVE wholesale domain at the configured price.

        Check order: availability (NOT_FOUND), self-purchase (FORBIDDEN),
        marketplace switched off (SERVICE_UNAVAILABLE).
        """
        entry = await self._wholesale_repo.get_by_id(wholesale_domain_id)
        if entry is None or entry.status != WholesaleDomainStatus.ACTIVE:
            raise NotFoundError(
                "WholesaleDomain",
                str(wholesale_domain_id),
                "Domain not found or no longer available",
            )
        domain = await self._domain_repo.get_by_id(entry.domain_id)
        if domain is None:
            raise NotFoundError("Domain", str(entry.domain_id))
        if domain.status == DomainStatus.SOLD:
            raise NotFoundError(
                "WholesaleDomain",
                str(wholesale_domain_id),
                "Domain not found or no longer available",
            )
        if domain.owner_id == ctx.user_id:
            raise ForbiddenError("You cannot purchase your own domain")

        config = await self.get_config()
        if not config.is_active:
            raise ServiceUnavailableError("Wholesale marketplace is currently unavailable")

        price = Decimal(config.price)
        commission = Decimal(config.commission_amount)
        sale = await self._sale_repo.create(
            WholesaleSale(
                wholesale_domain_id=entry.id,
                buyer_id=ctx.user_id,
                seller_id=domain.owner_id,
                price=price,
                commission_amount=commission,
                seller_payout=price - commission,
                payment_method=PaymentMethod(payment_method).value if payment_method else None,
                status=WholesaleSaleStatus.PENDING.value,
            )
        )

        old_status = entry.status
        new_status = fire_transition(WholesaleDomainStateMachine, old_status, "sell")
        await self._wholesale_repo.set_status(
            entry, new_status, sold_at=datetime.now(UTC), sold_to=ctx.user_id
        )
        await self._domains.apply_transition(
            domain, "mark_sold", actor=ctx.user_id, metadata={"wholesale_sale_id": str(sale.id)}
        )

        await self._record(entry.id, EventType.WHOLESALE_PURCHASED, old_status, new_status,
                           ctx.user_id, {"sale_id": str(sale.id), "price": str(price)})
        await self._notifications.notify(
            domain.owner_id,
            NotificationType.WHOLESALE_SOLD,
            "Wholesale domain sold",
            f"{domain.name} sold for {price}. Your payout is {price - commission}.",
            entity_id=sale.id,
        )
        logger.info(
            "wholesale.purchased",
            sale_id=str(sale.id),
            domain=domain.name,
            price=str(price),
            buyer=ctx.user_id,
        )
        return sale

    async def mark_sale_paid(self, ctx: RequestContext, sale_id: uuid.UUID) -> WholesaleSale:
        ctx.require_admin()
        sale = await self._sale_repo.get_by_id(sale_id)
        if sale is None:
            raise NotFoundError("WholesaleSale", str(sale_id))
        old_status = sale.status
        new_status = fire_transition(WholesaleSaleStateMachine, old_status, "mark_paid")
        await self._sale_repo.set_status(sale, new_status, paid_at=datetime.now(UTC))

        await self._event_repo.record(
            entity_type=EntityType.WHOLESALE_SALE,
            entity_id=sale.id,
            event_type=EventType.WHOLESALE_SALE_PAID,
            old_status=old_status,
            new_status=new_status,
            actor=ctx.user_id,
        )
        logger.info("wholesale.sale_paid", sale_id=str(sale.id))
        return sale

    # ------------------------------------------------------------------
    # Listings & stats
    # ------------------------------------------------------------------

    async def list_active_domains(
        self,
        geographic_scope: str | None = None,
        state: str | None = None,
        category: str | None = None,
        search: str | None = None,
        limit: int | None = None,
        offset: int = 0,
    ) -> list[tuple[WholesaleDomain, Domain]]:
        return await self._wholesale_repo.list_with_domains(
            status=WholesaleDomainStatus.ACTIVE.value,
            geographic_scope=geographic_scope,
            state=state,
            category=category,
            search=search,
            limit=page_limit(limit),
            offset=offset,
        )

    async def list_my_wholesale_domains(
        self, ctx: RequestContext, status: WholesaleDomainStatus | None = None
    ) -> list[tuple[WholesaleDomain, Domain]]:
        return await self._wholesale_repo.list_with_domains(
            status=str(status) if status else None, owner_id=ctx.user_id
        )

    async def list_pending_domains(
        self, ctx: RequestContext, limit: int | None = None, offset: int = 0
    ) -> list[tuple[WholesaleDomain, Domain]]:
        ctx.require_admin()
        return await self._wholesale_repo.list_with_domains(
            status=WholesaleDomainStatus.PENDING_APPROVAL.value,
            limit=page_limit(limit),
            offset=offset,
        )

    async def list_my_purchases(self, ctx: RequestContext) -> list[WholesaleSale]:
        return await self._sale_repo.list_for_buyer(ctx.user_id)

    async def get_stats(self, ctx: RequestContext) -> dict:
        """Admin counters: pool sizes, sales, and revenue/commission from PAID sales."""
        ctx.require_admin()
        revenue, commission = await self._sale_repo.totals_for_status(
            WholesaleSaleStatus.PAID.value
        )
        return {
            "active_domains": await self._wholesale_repo.count_by_status(
                WholesaleDomainStatus.ACTIVE.value
            ),
            "pending_approval": await self._wholesale_repo.count_by_status(
                WholesaleDomainStatus.PENDING_APPROVAL.value
            ),
            "sold_domains": await self._wholesale_repo.count_by_status(
                WholesaleDomainStatus.SOLD.value
            ),
            "total_sales": await self._sale_repo.count_by_status(),
            "paid_sales": await self._sale_repo.count_by_status(WholesaleSaleStatus.PAID.value),
            "total_revenue": revenue,
            "total_commission": commission,
        }

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    async def _get_entry_or_raise(self, wholesale_domain_id: uuid.UUID) -> WholesaleDomain:
        entry = await self._wholesale_repo.get_by_id(wholesale_domain_id)
        if entry is None:
            raise NotFoundError("WholesaleDomain", str(wholesale_domain_id))
        return entry

    async def _record(
        self,
        entry_id: uuid.UUID,
        event_type: EventType,
        old_status: str | None,
        new_status: str,
        actor: str,
        metadata: dict | None = None,
    ) -> None:
        await self._event_repo.record(
            entity_type=EntityType.WHOLESALE_DOMAIN,
            entity_id=entry_id,
            event_type=event_type,
            old_status=old_status,
            new_status=new_status,
            actor=actor,
            metadata=metadata,
        )
