"""Shared test fixtures for the GeoDomain test suite.

Provides:
    - An in-memory SQLite database per test (aiosqlite + StaticPool)
    - Caller contexts for a seller, a second seller, a buyer and an admin
    - A `market` builder that walks records through their lifecycles
"""

from __future__ import annotations

from decimal import Decimal
from typing import TYPE_CHECKING

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from geodomain.domain.context import RequestContext
from geodomain.domain.enums import (
    DealStatus,
    InquiryAction,
    PaymentMethod,
    UserRole,
    VerificationAction,
    VerificationMethod,
)
from geodomain.infrastructure.database.orm_models import Base
from geodomain.services import (
    DealService,
    DomainService,
    InquiryService,
    VerificationService,
    WholesaleService,
)

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from geodomain.infrastructure.database.orm_models import (
        Deal,
        Domain,
        Inquiry,
        WholesaleDomain,
    )

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


# ---------------------------------------------------------------------------
# Database Fixtures
# ---------------------------------------------------------------------------


@pytest_asyncio.fixture
async def engine():
    engine = create_async_engine(
        TEST_DATABASE_URL,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def session_factory(engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(bind=engine, expire_on_commit=False, autoflush=False)


@pytest_asyncio.fixture
async def session(session_factory) -> AsyncIterator[AsyncSession]:
    async with session_factory() as session:
        yield session


# ---------------------------------------------------------------------------
# Caller Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def seller() -> RequestContext:
    return RequestContext(user_id="seller-1", role=UserRole.SELLER)


@pytest.fixture
def other_seller() -> RequestContext:
    return RequestContext(user_id="seller-2", role=UserRole.SELLER)


@pytest.fixture
def buyer() -> RequestContext:
    return RequestContext(user_id="buyer-1", role=UserRole.BUYER)


@pytest.fixture
def admin() -> RequestContext:
    return RequestContext(user_id="admin-1", role=UserRole.ADMIN)


# ---------------------------------------------------------------------------
# Lifecycle Builder
# ---------------------------------------------------------------------------


class MarketBuilder:
    """Drives records into a given state through the real services."""

    def __init__(
        self,
        session: AsyncSession,
        seller: RequestContext,
        buyer: RequestContext,
        admin: RequestContext,
    ) -> None:
        self.session = session
        self.seller = seller
        self.buyer = buyer
        self.admin = admin

    async def draft_domain(self, name: str = "austinhomes.com", **fields) -> Domain:
        fields.setdefault("price", Decimal("2500.00"))
        fields.setdefault("category", "Real Estate")
        fields.setdefault("state", "TX")
        fields.setdefault("city", "Austin")
        return await DomainService(self.session).create_domain(self.seller, name=name, **fields)

    async def pending_attempt(self, domain: Domain, method=VerificationMethod.DNS_TXT):
        svc = VerificationService(self.session)
        instructions = await svc.generate_verification_token(self.seller, domain.id, method)
        return await svc.submit_verification_attempt(
            self.seller,
            domain_id=domain.id,
            method=method,
            token=instructions["token"],
            file_url=instructions.get("file_url"),
        )

    async def verified_domain(self, name: str = "austinhomes.com", **fields) -> Domain:
        domain = await self.draft_domain(name, **fields)
        attempt = await self.pending_attempt(domain)
        await VerificationService(self.session).moderate_verification_attempt(
            self.admin, attempt.id, VerificationAction.APPROVE
        )
        return domain

    async def published_domain(self, name: str = "austinhomes.com", **fields) -> Domain:
        domain = await self.verified_domain(name, **fields)
        return await DomainService(self.session).publish(self.seller, domain.id)

    async def pending_inquiry(self, domain: Domain) -> Inquiry:
        return await InquiryService(self.session).create_inquiry(
            self.buyer,
            domain_id=domain.id,
            buyer_name="Jane Buyer",
            buyer_email="jane@example.com",
            budget_range="$1,000 - $5,000",
            message="Is the price negotiable?",
        )

    async def approved_inquiry(self, domain: Domain) -> Inquiry:
        inquiry = await self.pending_inquiry(domain)
        return await InquiryService(self.session).moderate_inquiry(
            self.admin, inquiry.id, InquiryAction.APPROVE
        )

    async def deal(self, status: DealStatus = DealStatus.NEGOTIATING) -> Deal:
        """A deal on a fresh published domain, advanced along the happy path to status."""
        domain = await self.published_domain()
        inquiry = await self.approved_inquiry(domain)
        svc = DealService(self.session)
        deal = await svc.create_deal(
            self.seller,
            inquiry_id=inquiry.id,
            agreed_price=Decimal("2000.00"),
            payment_method=PaymentMethod.ESCROW_COM,
        )
        path = [
            DealStatus.AGREED,
            DealStatus.PAYMENT_PENDING,
            DealStatus.PAYMENT_CONFIRMED,
            DealStatus.TRANSFER_INITIATED,
            DealStatus.COMPLETED,
        ]
        if status == DealStatus.DISPUTED:
            return await svc.update_status(self.buyer, deal.id, DealStatus.DISPUTED, reason="test")
        for step in path:
            if deal.status == status:
                break
            deal = await svc.update_status(self.admin, deal.id, step)
        return deal

    async def active_wholesale_domain(self, name: str = "dallasplumbers.com") -> WholesaleDomain:
        domain = await self.verified_domain(name)
        svc = WholesaleService(self.session)
        entry = await svc.add_domain(self.seller, domain.id)
        return await svc.approve_domain(self.admin, entry.id)


@pytest.fixture
def market(session, seller, buyer, admin) -> MarketBuilder:
    return MarketBuilder(session, seller, buyer, admin)
