"""
Test infrastructure for the Message Board API.

Strategy
--------
- SQLite in-memory via aiosqlite, so no Postgres instance is needed.
- StaticPool makes every session share the single in-memory connection;
  a second connection would see an empty database.
- ``get_db`` is overridden so requests use the test session factory.
- Tables are created and seeded before each test and dropped after.
  Every test starts with account 1 (``testuser1`` / ``password``) and
  message 1 (``test message 1`` posted by account 1 at 1669947792).
- The cache manager is left disconnected, so reads always miss and the
  real database path is exercised.
"""
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession
from sqlalchemy.pool import StaticPool

from app.database import Base, get_db
from app.main import app
from app.middleware import install_query_counter
from app.models import AccountRow, MessageRow

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

SEED_EPOCH = 1669947792

engine_test = create_async_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

install_query_counter(engine_test)

async_session_test = async_sessionmaker(
    engine_test,
    class_=AsyncSession,
    expire_on_commit=False,
)


async def override_get_db():
    async with async_session_test() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


app.dependency_overrides[get_db] = override_get_db


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest_asyncio.fixture(autouse=True)
async def setup_db():
    """Create and seed all tables before each test, drop them after."""
    async with engine_test.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with async_session_test() as session:
        session.add(AccountRow(username="testuser1", password="password"))
        await session.flush()
        session.add(MessageRow(posted_by=1, message_text="test message 1", time_posted_epoch=SEED_EPOCH))
        await session.commit()

    yield
    async with engine_test.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest_asyncio.fixture
async def db_session() -> AsyncSession:
    """A live session for tests that drive repositories and services directly."""
    async with async_session_test() as session:
        yield session


@pytest_asyncio.fixture
async def async_client() -> AsyncClient:
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
