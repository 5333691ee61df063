"""Pytest configuration shared by unit and contract tests."""

import os

# Set test configuration BEFORE any imports from rentbook
# so the module-level engine never points at a real database file
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["LOG_FILE"] = ""

import pytest  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine  # noqa: E402

from rentbook.config import reset_settings  # noqa: E402
from rentbook.models import Base, Property  # noqa: E402
from rentbook.services.validation import BillInput, MeterReadingInput  # noqa: E402


@pytest.fixture
async def async_db_session():
    """Create async test database session on a fresh in-memory database."""
    engine = create_async_engine("sqlite+aiosqlite:///:memory:")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async_session = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with async_session() as session:
        yield session

    await engine.dispose()


@pytest.fixture
async def rental_property(async_db_session):
    """Create a property to attach bills to."""
    prop = Property(property_name="Lakeside Flat 2B", owner_name="Dana Owner", property_code="LKS2B")
    async_db_session.add(prop)
    await async_db_session.commit()
    return prop


@pytest.fixture(autouse=True)
def fresh_settings():
    """Re-read settings for every test so monkeypatched env vars apply."""
    reset_settings()
    yield
    reset_settings()


@pytest.fixture
def bill_form(rental_property):
    """Build a bill form for the test property: base rent 1000, electricity 600, water 50, internet 60."""

    def _make(**overrides) -> BillInput:
        values = dict(
            property_id=rental_property.id,
            property_name=rental_property.property_name,
            tenant_name="Sam Tenant",
            tenant_email="sam@example.com",
            billing_period="January 2026",
            base_rent=1000,
            electricity=MeterReadingInput(previous_reading=100, current_reading=150, rate=12),
            water=MeterReadingInput(previous_reading=50, current_reading=60, rate=5),
            internet=60,
        )
        values.update(overrides)
        return BillInput(**values)

    return _make
