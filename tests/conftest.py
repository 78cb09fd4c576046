"""Pytest configuration and shared fixtures."""

import os

# Configure settings BEFORE any imports from leasebill so the cached settings
# and the module-level engines pick them up
os.environ["DATABASE_URL"] = "sqlite:///:memory:"
os.environ["SCHEDULER_SECRET"] = "test-scheduler-secret"
os.environ["JWT_SECRET"] = "test-jwt-secret-that-is-long-enough-for-hs256"
os.environ.pop("STRIPE_SECRET_KEY", None)

import pytest  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine  # noqa: E402

from leasebill.models import Base  # noqa: E402
from leasebill.services.payment_service import PaymentMethodRef  # noqa: E402


@pytest.fixture
async def session_factory(tmp_path):
    """File-backed SQLite database shared by concurrent sessions.

    Billing tasks run in separate sessions at the same time, so an in-memory
    single-connection database is not enough here.
    """
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'leasebill_test.db'}",
        connect_args={"timeout": 30},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    await engine.dispose()


@pytest.fixture
async def db_session(session_factory):
    """Single async session on the test database."""
    async with session_factory() as session:
        yield session


@pytest.fixture
def card() -> PaymentMethodRef:
    return PaymentMethodRef(payment_method_id="pm_card", tenant_id=1, tenant_name="Jane Doe")
