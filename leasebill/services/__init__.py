"""Database connection and session management."""

from typing import AsyncGenerator

from sqlalchemy import create_engine
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from leasebill.config import get_settings

# Database URL from settings (DATABASE_URL env var or .env)
DATABASE_URL = get_settings().database_url
DATABASE_ECHO = get_settings().database_echo


def to_async_url(url: str) -> str:
    """Map a sync SQLite URL onto the aiosqlite driver; other URLs pass through."""
    if url.startswith("sqlite:///"):
        return url.replace("sqlite:///", "sqlite+aiosqlite:///", 1)
    return url


# Create engines (in-memory SQLite needs StaticPool so every session sees one database)
if DATABASE_URL.startswith("sqlite") and ":memory:" in DATABASE_URL:
    engine = create_engine(
        DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        echo=DATABASE_ECHO,
    )
    async_engine = create_async_engine(
        to_async_url(DATABASE_URL),
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        echo=DATABASE_ECHO,
    )
elif DATABASE_URL.startswith("sqlite"):
    engine = create_engine(
        DATABASE_URL, connect_args={"check_same_thread": False}, echo=DATABASE_ECHO
    )
    async_engine = create_async_engine(to_async_url(DATABASE_URL), echo=DATABASE_ECHO)
else:
    engine = create_engine(DATABASE_URL, pool_pre_ping=True, echo=DATABASE_ECHO)
    async_engine = create_async_engine(
        to_async_url(DATABASE_URL), pool_pre_ping=True, echo=DATABASE_ECHO
    )

# Create session factory
AsyncSessionLocal = async_sessionmaker(
    async_engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


async def get_async_session() -> AsyncGenerator[AsyncSession, None]:
    """Get async database session."""
    async with AsyncSessionLocal() as session:
        yield session


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """Get the session factory used by concurrent billing tasks."""
    return AsyncSessionLocal


__all__ = [
    "engine",
    "async_engine",
    "AsyncSessionLocal",
    "get_async_session",
    "get_session_factory",
    "to_async_url",
]
