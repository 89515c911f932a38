"""Pytest configuration and shared fixtures."""

from collections.abc import AsyncGenerator

import pytest
import structlog
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from juris.core.auth import hash_password
from juris.core.database import Base

# Import all models to ensure they're registered with Base.metadata
from juris.modules.offices.models import Office, OfficeMember  # noqa: F401
from juris.modules.users.models import User
from juris.modules.users.repos import UserRepository


TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"
TEST_PASSWORD = "correct-horse-battery"


@pytest.fixture(autouse=True)
def reset_logging():
    """Restore the default structlog configuration after each test."""
    yield
    structlog.reset_defaults()


@pytest.fixture
async def engine():
    """Create an in-memory test database engine."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
        echo=False,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
async def db(engine) -> AsyncGenerator[AsyncSession, None]:
    """Provide a database session for tests.

    The database lives only as long as the engine, so each test starts
    from an empty schema.
    """
    session_factory = async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )

    async with session_factory() as session:
        yield session


# ============================================================
# User Fixtures
# ============================================================


async def make_user(db: AsyncSession, email: str, name: str) -> User:
    """Persist a user with the shared test password."""
    return await UserRepository(db).create(
        User(email=email, name=name, password_hash=hash_password(TEST_PASSWORD))
    )


@pytest.fixture
async def owner(db: AsyncSession) -> User:
    """Create the user who owns the test office."""
    return await make_user(db, "owner@example.com", "Olivia Owner")


@pytest.fixture
async def lawyer(db: AsyncSession) -> User:
    """Create a second user who joins offices."""
    return await make_user(db, "lawyer@example.com", "Luis Lawyer")


@pytest.fixture
async def stranger(db: AsyncSession) -> User:
    """Create a user unrelated to any office."""
    return await make_user(db, "stranger@example.com", "Sam Stranger")
