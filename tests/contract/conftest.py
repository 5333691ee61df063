"""Fixtures for HTTP contract tests: the app bound to a temporary SQLite file."""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import Session
from sqlalchemy.pool import NullPool

from rentbook.api.app import app
from rentbook.models import Base, Property
from rentbook.services.db import get_async_session


@pytest.fixture
def property_id(tmp_path):
    """Point the API at a fresh SQLite file holding one property."""
    db_path = tmp_path / "api.db"

    sync_engine = create_engine(f"sqlite:///{db_path}")
    Base.metadata.create_all(sync_engine)
    with Session(sync_engine) as session:
        prop = Property(property_name="Lakeside Flat 2B", owner_name="Dana Owner", property_code="LKS2B")
        session.add(prop)
        session.commit()
        prop_id = prop.id
    sync_engine.dispose()

    test_engine = create_async_engine(f"sqlite+aiosqlite:///{db_path}", poolclass=NullPool)
    session_factory = async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)

    async def override_get_async_session():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_async_session] = override_get_async_session
    yield prop_id
    app.dependency_overrides.clear()


@pytest.fixture
def client(property_id):
    """Provide a FastAPI test client bound to the test database."""
    return TestClient(app)
