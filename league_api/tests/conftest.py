"""
Shared pytest configuration for league API tests.

Store-backed tests run against a throwaway SQLite database (aiosqlite) per
test unless TEST_DATABASE_URL points somewhere else.

SAFETY: This module REFUSES to run against any database whose name does not
contain the substring "test".
"""

import os
import tempfile

# Must be set before league_api modules read their configuration
os.environ.setdefault("ENV", "test")
os.environ.setdefault("SENTRY", "false")
os.environ.setdefault("DATABASE", "sqlite")
os.environ.setdefault("DB_CONN_STR", os.path.join(tempfile.gettempdir(), "league_api_test.db"))

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker  # noqa: E402
from sqlalchemy.pool import NullPool  # noqa: E402

from league_api.database import db  # noqa: E402
from league_api.database.db import Base  # noqa: E402
from league_api.database.init_defaults import seed_sports  # noqa: E402
from league_api.models.schemas import AccountCreate  # noqa: E402
from league_api.services import account_service, auth_service  # noqa: E402

TEST_PASSWORD = "Password1!"


def _resolve_test_database_url(tmp_path) -> str:
    """Build the test database URL, refusing any database not named for tests."""
    url = os.getenv("TEST_DATABASE_URL", "")
    if not url:
        url = f"sqlite+aiosqlite:///{tmp_path / 'league_test.db'}"

    db_name = url.rsplit("/", 1)[-1].split("?")[0]
    if "test" not in db_name.lower():
        raise RuntimeError(
            f"SAFETY: Refusing to run tests against database '{db_name}'. "
            f"The database name must contain 'test'."
        )
    return url


@pytest.fixture(autouse=True)
def fast_bcrypt(monkeypatch):
    """Cheap bcrypt cost so hashing does not dominate the suite."""
    monkeypatch.setattr(auth_service, "BCRYPT_ROUNDS", 4)


@pytest_asyncio.fixture(scope="function")
async def test_engine(tmp_path):
    """Create a fresh test database and point db.AsyncSessionLocal at it."""
    # NullPool avoids connection reuse across event loops
    engine = create_async_engine(
        _resolve_test_database_url(tmp_path),
        echo=False,
        poolclass=NullPool,
    )
    await db.init_database(engine)

    test_session_maker = async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autocommit=False,
        autoflush=False,
    )
    original_async_session_local = db.AsyncSessionLocal
    db.AsyncSessionLocal = test_session_maker

    yield engine

    db.AsyncSessionLocal = original_async_session_local
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture
async def session_maker(test_engine):
    return db.AsyncSessionLocal


@pytest_asyncio.fixture
async def db_session(session_maker):
    """A session on the test database, closed after the test."""
    async with session_maker() as session:
        yield session


@pytest_asyncio.fixture
async def seeded_sports(db_session):
    await seed_sports(db_session)


@pytest_asyncio.fixture
async def client(test_engine):
    """Async HTTP client driving the app against the test database."""
    from league_api.api.main import app

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as http:
        yield http


def account_payload(index: int = 0, **overrides) -> dict:
    """Valid account creation body; index keeps email and phone unique."""
    payload = {
        "firstName": "Pat",
        "lastName": f"Guardian{index}",
        "email": f"guardian{index}@example.com",
        "password": TEST_PASSWORD,
        "phone": f"+1555000{index:04d}",
        "dateOfBirth": "1985-04-12",
        "coach": False,
        "volunteer": True,
    }
    payload.update(overrides)
    return payload


async def create_account(session, index: int = 0, **overrides) -> dict:
    """Create an account through the service layer."""
    payload = AccountCreate.model_validate(account_payload(index, **overrides))
    return await account_service.create_account(session, payload)


async def create_active_user(session) -> dict:
    """
    Create the bootstrap admin plus one activated regular account.

    Returns:
        Dict with "admin_key", "admin_id", "user_key" and "user_id" (stored ids)
    """
    admin = await create_account(session, 0)
    admin_key = await account_service.set_api_key(session, admin["id"][:-1])
    user = await create_account(session, 1)
    user_key = await account_service.activate_account(session, user["id"])
    return {
        "admin_key": admin_key,
        "admin_id": admin["id"][:-1],
        "user_key": user_key,
        "user_id": user["id"][:-1],
    }
