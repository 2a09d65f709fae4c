"""
Test configuration: every test gets its own in-memory SQLite database.
"""
import os

os.environ["DB_TYPE"] = "sqlite"
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["DB_RETRY_DELAY"] = "0"
os.environ["APP_ENV"] = "development"
os.environ["SEND_WELCOME_EMAIL"] = "false"

from datetime import datetime, timezone
from decimal import Decimal

import pytest
from httpx import AsyncClient, ASGITransport
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from app.core.db import Base, get_db
from app.models import Client, SalesRep, Supervisor, Quotation, QuotationProduct
from main import app


def _enable_foreign_keys(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


@pytest.fixture
async def engine():
    test_engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    event.listen(test_engine.sync_engine, "connect", _enable_foreign_keys)
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield test_engine
    await test_engine.dispose()


@pytest.fixture
async def db_session(engine):
    session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with session_factory() as session:
        yield session


@pytest.fixture
async def client(db_session: AsyncSession):
    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
async def seeded(db_session: AsyncSession):
    """
    One client, sales rep and supervisor, plus quotation "Q-1001" that was
    already accepted by everyone and has two line items (250.00 + 15% VAT).
    Returns plain ids so tests never touch expired ORM instances.
    """
    client_row = Client(
        client_name="Nour Al-Harbi",
        company_name="Nour Trading",
        phone_number="+966 500 000 001",
        tax_number="300000000000003",
        branch_number="12",
        latitude=24.7136,
        longitude=46.6753,
        street="King Fahd Rd",
        city="Riyadh",
        region="Riyadh",
    )
    sales_rep = SalesRep(name="Omar Faris", email="omar@example.com", phone="+966 500 000 002")
    supervisor = Supervisor(name="Salem Nasser", email="salem@example.com", phone="+966 500 000 003")
    db_session.add_all([client_row, sales_rep, supervisor])
    await db_session.flush()

    quotation = Quotation(
        custom_id="Q-1001",
        client_id=client_row.id,
        sales_rep_id=sales_rep.id,
        supervisor_id=supervisor.id,
        delivery_date="2024-06-01",
        delivery_type="truck",
        notes="Handle with care",
        storekeeper_notes="Gate 3",
        status="not Delivered",
        storekeeperaccept="accepted",
        supervisoraccept="accepted",
        manageraccept="accepted",
        exported=False,
        total_price=Decimal("250.00"),
        total_vat=Decimal("37.50"),
        total_subtotal=Decimal("287.50"),
        created_at=datetime(2024, 5, 1, 9, 30, tzinfo=timezone.utc),
    )
    db_session.add(quotation)
    await db_session.flush()

    db_session.add_all([
        QuotationProduct(
            quotation_id=quotation.id, description="Cement",
            quantity=Decimal("2"), price=Decimal("100.00"),
            vat=Decimal("30.00"), subtotal=Decimal("230.00"),
        ),
        QuotationProduct(
            quotation_id=quotation.id, description="Steel",
            quantity=Decimal("1"), price=Decimal("50.00"),
            vat=Decimal("7.50"), subtotal=Decimal("57.50"),
        ),
    ])
    await db_session.commit()

    return {
        "client_id": client_row.id,
        "sales_rep_id": sales_rep.id,
        "supervisor_id": supervisor.id,
        "quotation_id": quotation.id,
    }
