"""Database engine and async session management."""

from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from rentbook.config import get_settings
from rentbook.models import Base

settings = get_settings()
DATABASE_URL = settings.database_url

# In-memory SQLite must share one connection or every session sees an empty database
if DATABASE_URL.startswith("sqlite") and ":memory:" in DATABASE_URL:
    async_engine = create_async_engine(
        DATABASE_URL,
        echo=settings.database_echo,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
elif DATABASE_URL.startswith("sqlite"):
    async_engine = create_async_engine(
        DATABASE_URL,
        echo=settings.database_echo,
        connect_args={"check_same_thread": False},
    )
else:
    async_engine = create_async_engine(DATABASE_URL, echo=settings.database_echo, pool_pre_ping=True)

AsyncSessionLocal = async_sessionmaker(
    async_engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


async def get_async_session() -> AsyncGenerator[AsyncSession, None]:
    """Get async database session."""
    async with AsyncSessionLocal() as session:
        yield session


async def init_models() -> None:
    """Create all tables that do not exist yet."""
    async with async_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


__all__ = [
    "AsyncSessionLocal",
    "async_engine",
    "get_async_session",
    "init_models",
]
