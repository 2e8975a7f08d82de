"""Pytest configuration and fixtures for Abasta tests.

Each test gets a fresh in-memory SQLite database. The HTTP client runs
the real app over ASGITransport with `get_db` and `get_mailer`
overridden, so no Postgres or SMTP server is needed.
"""

import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")

from datetime import datetime, timedelta
from decimal import Decimal
from types import SimpleNamespace
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from abasta.auth.jwt import create_access_token
from abasta.auth.password import hash_password
from abasta.database import Base, get_db
from abasta.main import app
from abasta.models import (
    Company,
    CompanyStatus,
    Order,
    OrderItem,
    OrderStatus,
    Product,
    Supplier,
    User,
    UserRole,
)
from abasta.services.email import get_mailer
from abasta.utils.money import line_subtotal

ADMIN_EMAIL = "admin@abasta.cat"
ADMIN_PASSWORD = "Secret123!"


class RecordingMailer:
    """Mailer fake that records messages and can be told to fail."""

    def __init__(self):
        self.sent: list[dict] = []
        self.fail_with: Exception | None = None

    def send(self, to: str, subject: str, html: str) -> None:
        if self.fail_with is not None:
            raise self.fail_with
        self.sent.append({"to": to, "subject": subject, "html": html})


# ── Test Database Setup ──────────────────────────────────────────

@pytest_asyncio.fixture
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Fresh in-memory SQLite database for each test."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with session_factory() as session:
        yield session

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
def mailer() -> RecordingMailer:
    return RecordingMailer()


@pytest_asyncio.fixture
async def unauth_client(db_session, mailer) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client with the request transaction semantics of get_db."""

    async def override_get_db():
        try:
            yield db_session
            await db_session.commit()
        except Exception:
            await db_session.rollback()
            raise

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_mailer] = lambda: mailer

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def client(unauth_client, seed) -> AsyncClient:
    """HTTP client authenticated as the seeded company admin."""
    unauth_client.headers["Authorization"] = f"Bearer {create_access_token(seed.admin_email)}"
    return unauth_client


# ── Test Data Fixtures ───────────────────────────────────────────

async def make_company(
    db: AsyncSession,
    name: str,
    tax_id: str,
    admin_email: str,
    role: UserRole = UserRole.ADMIN,
) -> tuple[Company, User]:
    company = Company(
        name=name,
        tax_id=tax_id,
        email=f"info@{tax_id.lower()}.cat",
        phone="930000000",
        address="Carrer Major 1",
        city="Barcelona",
        postal_code="08001",
        status=CompanyStatus.ACTIVE,
    )
    user = User(
        company=company,
        email=admin_email,
        hashed_password=hash_password(ADMIN_PASSWORD),
        first_name="Anna",
        last_name="Puig",
        role=role,
        is_active=True,
        email_verified=True,
    )
    db.add_all([company, user])
    await db.flush()
    return company, user


def make_order(
    company: Company,
    supplier: Supplier,
    user: User,
    lines: list[tuple[Product, str]],
    name: str = "Weekly order",
    status: OrderStatus = OrderStatus.PENDING,
    created_at: datetime | None = None,
) -> Order:
    """Build an order with items the same way the service prices them."""
    items = []
    for product, quantity in lines:
        qty = Decimal(quantity)
        items.append(
            OrderItem(
                product=product,
                quantity=qty,
                unit_price=product.price,
                subtotal=line_subtotal(qty, product.price),
            )
        )
    total = sum((i.subtotal for i in items), Decimal("0.00"))
    return Order(
        company=company,
        supplier=supplier,
        user=user,
        name=name,
        status=status,
        total_amount=total,
        items=items,
        created_at=created_at or datetime.utcnow() - timedelta(days=1),
    )


@pytest_asyncio.fixture
async def seed(db_session: AsyncSession) -> SimpleNamespace:
    """A company with its admin, two suppliers and three products.

    Returns plain values (UUIDs, emails) so tests keep working after a
    request rolls the session back.
    """
    company, admin = await make_company(db_session, "Bar Centric", "B12345678", ADMIN_EMAIL)

    oils = Supplier(
        company=company,
        name="Olis del Camp",
        contact_name="Marc Soler",
        email="comandes@olisdelcamp.cat",
        phone="977000111",
        address="Reus",
    )
    bakery = Supplier(
        company=company,
        name="Forn Sant Pau",
        contact_name="Laia Vidal",
        email="forn@fornsantpau.cat",
        phone="933000222",
        address="Barcelona",
    )
    oil = Product(
        supplier=oils, name="Oli d'oliva", category="Oils",
        price=Decimal("12.50"), unit="l", volume=Decimal("5.00"),
    )
    olives = Product(
        supplier=oils, name="OLIVES", category="Preserves",
        price=Decimal("3.99"), unit="kg", volume=Decimal("1.00"),
    )
    bread = Product(
        supplier=bakery, name="Pa", category="Bakery",
        price=Decimal("1.20"), unit="u",
    )
    db_session.add_all([oils, bakery, oil, olives, bread])
    await db_session.commit()

    return SimpleNamespace(
        company_id=company.id,
        company_uuid=company.uuid,
        admin_id=admin.id,
        admin_uuid=admin.uuid,
        admin_email=admin.email,
        oils_uuid=oils.uuid,
        bakery_uuid=bakery.uuid,
        oil_uuid=oil.uuid,
        olives_uuid=olives.uuid,
        bread_uuid=bread.uuid,
        company=company,
        admin=admin,
        oils=oils,
        bakery=bakery,
        oil=oil,
        olives=olives,
        bread=bread,
    )


@pytest_asyncio.fixture
async def other_company(db_session: AsyncSession, seed) -> SimpleNamespace:
    """A second tenant with its own admin, supplier and product."""
    company, admin = await make_company(
        db_session, "Restaurant Altre", "B87654321", "altre@abasta.cat"
    )
    supplier = Supplier(company=company, name="Olis del Camp", email="altre@olisaltre.cat")
    product = Product(supplier=supplier, name="Oli d'oliva", price=Decimal("11.00"), unit="l")
    db_session.add_all([supplier, product])
    await db_session.commit()
    return SimpleNamespace(
        company_uuid=company.uuid,
        admin_email=admin.email,
        supplier_uuid=supplier.uuid,
        product_uuid=product.uuid,
    )


@pytest.fixture
def build_order():
    """Factory for orders placed straight into the session."""
    return make_order


# ── Pytest Configuration ─────────────────────────────────────────

def pytest_configure(config):
    """Configure custom markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "api: API endpoint tests")
