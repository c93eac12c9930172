#!/usr/bin/env python3
"""GeoDomain Marketplace - End-to-End Simulation.

Walks seller, buyer and admin bots through three scenarios using the real
services against a real database:

    Scenario 1: Domain Verification
        - Seller lists example.com and requests a DNS TXT token
        - Seller submits the attempt -> domain PENDING_VERIFICATION
        - Admin approves -> domain VERIFIED, seller notified

    Scenario 2: Deal Lifecycle
        - Buyer inquires on a published domain, admin approves the inquiry
        - Seller opens a deal, admin moves it to AGREED
        - Jumping straight to TRANSFER_INITIATED is rejected
        - Buyer uploads payment proof, admin verifies it
        - Deal proceeds to COMPLETED and the domain is marked SOLD

    Scenario 3: Wholesale Marketplace
        - Seller lists a verified domain in the wholesale catalog
        - Seller tries to buy their own listing -> FORBIDDEN
        - Another seller buys it at the flat price, payout = price - commission

Usage:
    # Option A: With Docker (PostgreSQL + Redis):
    docker compose up -d
    uv run python simulation.py

    # Option B: Without Docker (SQLite in-memory):
    uv run python simulation.py --sqlite

    # Run a specific scenario:
    uv run python simulation.py --sqlite --scenario 2
"""

from __future__ import annotations

import argparse
import asyncio
import uuid
from dataclasses import dataclass
from decimal import Decimal
from typing import Any

# ---------------------------------------------------------------------------
# Configure structured logging BEFORE importing app modules
# ---------------------------------------------------------------------------
from geodomain.logging_config import get_logger, setup_logging

setup_logging(log_level="INFO", json_logs=False)
logger = get_logger("simulation")

from geodomain.domain.context import RequestContext  # noqa: E402
from geodomain.domain.enums import (  # noqa: E402
    DealStatus,
    EntityType,
    InquiryAction,
    PaymentAction,
    PaymentMethod,
    UserRole,
    VerificationAction,
    VerificationMethod,
)
from geodomain.domain.exceptions import ForbiddenError, InvalidTransitionError  # noqa: E402
from geodomain.infrastructure.database.repositories import AuditEventRepository  # noqa: E402
from geodomain.services import (  # noqa: E402
    DealService,
    DomainService,
    InquiryService,
    NotificationService,
    PaymentService,
    VerificationService,
    WholesaleService,
)

# Module-level state
_sqlite_engine = None
_sqlite_session_factory = None


# ---------------------------------------------------------------------------
# Database lifecycle helpers
# ---------------------------------------------------------------------------
async def init_database(use_sqlite: bool = False):
    """Initialize database engine and create tables."""
    global _sqlite_engine, _sqlite_session_factory

    if use_sqlite:
        from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

        from geodomain.infrastructure.database.orm_models import Base

        _sqlite_engine = create_async_engine("sqlite+aiosqlite:///:memory:", echo=False)
        _sqlite_session_factory = async_sessionmaker(
            bind=_sqlite_engine,
            class_=AsyncSession,
            expire_on_commit=False,
            autoflush=False,
        )
        async with _sqlite_engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("database.sqlite_initialized")
    else:
        from geodomain.infrastructure.database.engine import init_db
        await init_db()


async def get_session():
    """Get a fresh database session."""
    if _sqlite_session_factory is not None:
        return _sqlite_session_factory()

    from geodomain.infrastructure.database.engine import get_session_factory
    return get_session_factory()()


async def shutdown_database():
    """Close database connections."""
    global _sqlite_engine, _sqlite_session_factory

    if _sqlite_engine is not None:
        await _sqlite_engine.dispose()
        _sqlite_engine = None
        _sqlite_session_factory = None
    else:
        from geodomain.infrastructure.database.engine import close_db
        await close_db()


def _unique(prefix: str) -> str:
    """Domain names are unique; suffix them so scenarios can rerun on PostgreSQL."""
    return f"{prefix}-{uuid.uuid4().hex[:6]}.com"


# ---------------------------------------------------------------------------
# Bot Agents
# ---------------------------------------------------------------------------
@dataclass
class SellerBot:
    """Simulated seller who lists, verifies and sells domains."""

    user_id: str = "seller-alice"

    @property
    def ctx(self) -> RequestContext:
        return RequestContext(user_id=self.user_id, role=UserRole.SELLER)

    async def list_domain(self, session: Any, name: str, price: Decimal, **fields) -> uuid.UUID:
        domain = await DomainService(session).create_domain(
            self.ctx, name=name, price=price, **fields
        )
        await session.commit()
        logger.info("🟢 SELLER: Domain listed", domain=domain.name, status=domain.status)
        return domain.id

    async def verify_ownership(
        self, session: Any, domain_id: uuid.UUID, method: VerificationMethod
    ) -> uuid.UUID:
        """Request a token, then submit it as proof of ownership."""
        svc = VerificationService(session)
        instructions = await svc.generate_verification_token(self.ctx, domain_id, method)
        for step in instructions["steps"]:
            print(f"  📋 {step}")
        attempt = await svc.submit_verification_attempt(
            self.ctx,
            domain_id=domain_id,
            method=method,
            token=instructions["token"],
            file_url=instructions.get("file_url"),
        )
        await session.commit()
        logger.info("🟢 SELLER: Verification submitted", attempt_id=str(attempt.id))
        return attempt.id

    async def publish(self, session: Any, domain_id: uuid.UUID) -> None:
        domain = await DomainService(session).publish(self.ctx, domain_id)
        await session.commit()
        logger.info("🟢 SELLER: Domain published", domain=domain.name)

    async def open_deal(self, session: Any, inquiry_id: uuid.UUID, price: Decimal) -> uuid.UUID:
        deal = await DealService(session).create_deal(
            self.ctx,
            inquiry_id=inquiry_id,
            agreed_price=price,
            payment_method=PaymentMethod.ESCROW_COM,
        )
        await session.commit()
        logger.info("🟢 SELLER: Deal opened", deal_id=str(deal.id), price=str(price))
        return deal.id

    async def list_wholesale(self, session: Any, domain_id: uuid.UUID) -> uuid.UUID:
        entry = await WholesaleService(session).add_domain(self.ctx, domain_id)
        await session.commit()
        logger.info("🟢 SELLER: Wholesale listing submitted", entry_id=str(entry.id))
        return entry.id

    async def buy_wholesale(self, session: Any, entry_id: uuid.UUID):
        sale = await WholesaleService(session).purchase_domain(
            self.ctx, entry_id, PaymentMethod.PAYPAL
        )
        await session.commit()
        logger.info("🟢 SELLER: Wholesale purchase", sale_id=str(sale.id))
        return sale

    async def inbox(self, session: Any) -> list[str]:
        notes = await NotificationService(session).list_for_user(self.ctx)
        return [n.title for n in notes]


@dataclass
class BuyerBot:
    """Simulated buyer who inquires on listings and pays for deals."""

    user_id: str = "buyer-bob"

    @property
    def ctx(self) -> RequestContext:
        return RequestContext(user_id=self.user_id, role=UserRole.BUYER)

    async def inquire(self, session: Any, domain_id: uuid.UUID) -> uuid.UUID:
        inquiry = await InquiryService(session).create_inquiry(
            self.ctx,
            domain_id=domain_id,
            buyer_name="Bob Buyer",
            buyer_email="bob@example.com",
            budget_range="$1,000 - $5,000",
            message="Would you take an offer for this domain?",
        )
        await session.commit()
        logger.info("🔵 BUYER: Inquiry sent", inquiry_id=str(inquiry.id))
        return inquiry.id

    async def upload_proof(self, session: Any, deal_id: uuid.UUID, amount: Decimal) -> uuid.UUID:
        payment = await PaymentService(session).upload_proof(
            self.ctx,
            deal_id=deal_id,
            proof_url="https://files.example.com/receipts/escrow-1.pdf",
            payment_method=PaymentMethod.ESCROW_COM,
            amount=amount,
            transaction_id="ESC-100200",
        )
        await session.commit()
        logger.info("🔵 BUYER: Payment proof uploaded", payment_id=str(payment.id))
        return payment.id


@dataclass
class AdminBot:
    """Simulated marketplace moderator."""

    user_id: str = "admin-carol"

    @property
    def ctx(self) -> RequestContext:
        return RequestContext(user_id=self.user_id, role=UserRole.ADMIN)

    async def approve_verification(self, session: Any, attempt_id: uuid.UUID) -> None:
        await VerificationService(session).moderate_verification_attempt(
            self.ctx, attempt_id, VerificationAction.APPROVE, notes="TXT record found"
        )
        await session.commit()
        logger.info("🟣 ADMIN: Verification approved", attempt_id=str(attempt_id))

    async def approve_inquiry(self, session: Any, inquiry_id: uuid.UUID) -> None:
        await InquiryService(session).moderate_inquiry(
            self.ctx, inquiry_id, InquiryAction.APPROVE
        )
        await session.commit()
        logger.info("🟣 ADMIN: Inquiry approved", inquiry_id=str(inquiry_id))

    async def move_deal(self, session: Any, deal_id: uuid.UUID, target: DealStatus) -> str:
        deal = await DealService(session).update_status(self.ctx, deal_id, target)
        await session.commit()
        logger.info("🟣 ADMIN: Deal moved", deal_id=str(deal_id), status=deal.status)
        return deal.status

    async def verify_payment(self, session: Any, payment_id: uuid.UUID) -> None:
        await PaymentService(session).verify_payment(
            self.ctx, payment_id, PaymentAction.APPROVE, admin_notes="Funds received"
        )
        await session.commit()
        logger.info("🟣 ADMIN: Payment verified", payment_id=str(payment_id))

    async def approve_wholesale(self, session: Any, entry_id: uuid.UUID) -> None:
        await WholesaleService(session).approve_domain(self.ctx, entry_id)
        await session.commit()
        logger.info("🟣 ADMIN: Wholesale listing approved", entry_id=str(entry_id))


# ---------------------------------------------------------------------------
# Pretty Printing
# ---------------------------------------------------------------------------
def banner(text: str) -> None:
    width = 70
    print("\n" + "=" * width)
    print(f"  {text}")
    print("=" * width + "\n")


def section(text: str) -> None:
    print(f"\n--- {text} ---\n")


async def print_audit_trail(session: Any, entity_type: EntityType, entity_id: Any) -> None:
    """Print every recorded transition for one entity."""
    events = await AuditEventRepository(session).get_for_entity(entity_type, entity_id)
    print(f"\n  📜 Audit Trail ({entity_type}):")
    for i, evt in enumerate(events, 1):
        old = evt.old_status or "-"
        print(f"    {i}. [{evt.event_type}] {old} -> {evt.new_status} (by {evt.actor})")
    print()


async def _published_domain(session: Any, seller: SellerBot, admin: AdminBot, name: str):
    domain_id = await seller.list_domain(
        session, name, Decimal("3500.00"), category="Home Services", state="TX", city="Austin"
    )
    attempt_id = await seller.verify_ownership(session, domain_id, VerificationMethod.DNS_TXT)
    await admin.approve_verification(session, attempt_id)
    await seller.publish(session, domain_id)
    return domain_id


# ===========================================================================
# Scenario 1: Domain Verification
# ===========================================================================
async def scenario_1_verification() -> None:
    banner("SCENARIO 1: Domain Verification (DNS TXT)")
    seller, admin = SellerBot(), AdminBot()

    session = await get_session()
    async with session:
        section("Seller lists the domain")
        domain_id = await seller.list_domain(
            session, "example.com", Decimal("1200.00"), category="Legal", state="CA"
        )

        section("Seller proves ownership")
        attempt_id = await seller.verify_ownership(session, domain_id, VerificationMethod.DNS_TXT)
        status = await DomainService(session).get_verification_status(seller.ctx, domain_id)
        print(f"  ⏳ Domain status: {status['status']}")

        section("Admin reviews the attempt")
        await admin.approve_verification(session, attempt_id)

        section("Final Status")
        domain = await DomainService(session).get_domain(seller.ctx, domain_id)
        print(f"\n  ✅ Domain {domain.name} is {domain.status}")
        print(f"  📬 Seller notifications: {await seller.inbox(session)}")
        await print_audit_trail(session, EntityType.DOMAIN, domain_id)


# ===========================================================================
# Scenario 2: Deal Lifecycle
# ===========================================================================
async def scenario_2_deal_lifecycle() -> None:
    banner("SCENARIO 2: Deal Lifecycle (inquiry -> payment -> transfer)")
    seller, buyer, admin = SellerBot(), BuyerBot(), AdminBot()
    price = Decimal("3000.00")

    session = await get_session()
    async with session:
        section("Setup: published domain")
        domain_id = await _published_domain(session, seller, admin, _unique("austinroofers"))

        section("Buyer inquires, admin approves")
        inquiry_id = await buyer.inquire(session, domain_id)
        await admin.approve_inquiry(session, inquiry_id)

        section("Seller opens a deal, terms agreed")
        deal_id = await seller.open_deal(session, inquiry_id, price)
        await admin.move_deal(session, deal_id, DealStatus.AGREED)

        section("Admin tries to skip payment")
        try:
            await admin.move_deal(session, deal_id, DealStatus.TRANSFER_INITIATED)
        except InvalidTransitionError as exc:
            await session.rollback()
            print(f"  ❌ Rejected: {exc.message}")

        section("Payment")
        await admin.move_deal(session, deal_id, DealStatus.PAYMENT_PENDING)
        payment_id = await buyer.upload_proof(session, deal_id, price)
        await admin.verify_payment(session, payment_id)

        section("Transfer")
        await admin.move_deal(session, deal_id, DealStatus.TRANSFER_INITIATED)
        final = await admin.move_deal(session, deal_id, DealStatus.COMPLETED)

        section("Final Status")
        domain = await DomainService(session).get_domain(seller.ctx, domain_id)
        print(f"\n  🤝 Deal status: {final}")
        print(f"  🏷️  Domain {domain.name} is {domain.status}")
        await print_audit_trail(session, EntityType.DEAL, deal_id)


# ===========================================================================
# Scenario 3: Wholesale Marketplace
# ===========================================================================
async def scenario_3_wholesale() -> None:
    banner("SCENARIO 3: Wholesale Marketplace")
    seller, admin = SellerBot(), AdminBot()
    rival = SellerBot(user_id="seller-dave")

    session = await get_session()
    async with session:
        section("Seller lists a verified domain for wholesale")
        domain_id = await seller.list_domain(
            session, _unique("dallasplumbers"), Decimal("900.00"), category="Plumbing", state="TX"
        )
        attempt_id = await seller.verify_ownership(session, domain_id, VerificationMethod.FILE_UPLOAD)
        await admin.approve_verification(session, attempt_id)
        entry_id = await seller.list_wholesale(session, domain_id)
        await admin.approve_wholesale(session, entry_id)

        section("Seller tries to buy their own listing")
        try:
            await seller.buy_wholesale(session, entry_id)
        except ForbiddenError as exc:
            await session.rollback()
            print(f"  🚫 {exc.code}: {exc.message}")

        section("Another seller buys it")
        sale = await rival.buy_wholesale(session, entry_id)
        print(f"  💵 Price: {sale.price}")
        print(f"  💵 Commission: {sale.commission_amount}")
        print(f"  💵 Seller payout: {sale.seller_payout}")

        section("Final Status")
        stats = await WholesaleService(session).get_stats(admin.ctx)
        print(f"\n  📊 Wholesale stats: {stats}")
        print(f"  📬 Seller notifications: {await seller.inbox(session)}")
        await print_audit_trail(session, EntityType.WHOLESALE_DOMAIN, entry_id)


# ===========================================================================
# Main
# ===========================================================================
SCENARIOS = {
    1: scenario_1_verification,
    2: scenario_2_deal_lifecycle,
    3: scenario_3_wholesale,
}


async def run_all(use_sqlite: bool = False) -> None:
    """Run all scenarios sequentially."""
    await init_database(use_sqlite=use_sqlite)
    try:
        print("\n" + "🌎" * 35)
        print("  GEODOMAIN MARKETPLACE - SIMULATION")
        db_type = "SQLite (in-memory)" if use_sqlite else "PostgreSQL"
        print(f"  Database: {db_type}")
        print("🌎" * 35 + "\n")

        for scenario in SCENARIOS.values():
            await scenario()

        print("\n" + "=" * 70)
        print("  ✅ ALL SCENARIOS COMPLETED SUCCESSFULLY")
        print("=" * 70 + "\n")
    finally:
        await shutdown_database()


async def run_scenario(num: int, use_sqlite: bool = False) -> None:
    """Run a specific scenario."""
    await init_database(use_sqlite=use_sqlite)
    try:
        if num not in SCENARIOS:
            print(f"Unknown scenario {num}. Available: {', '.join(map(str, SCENARIOS))}")
            return
        await SCENARIOS[num]()
    finally:
        await shutdown_database()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="GeoDomain Marketplace Simulation")
    parser.add_argument(
        "--scenario",
        type=int,
        default=0,
        help="Run a specific scenario (1, 2, or 3). Default: run all.",
    )
    parser.add_argument(
        "--sqlite",
        action="store_true",
        help="Use SQLite in-memory instead of PostgreSQL (no Docker needed).",
    )
    args = parser.parse_args()

    if args.scenario == 0:
        asyncio.run(run_all(use_sqlite=args.sqlite))
    else:
        asyncio.run(run_scenario(args.scenario, use_sqlite=args.sqlite))
