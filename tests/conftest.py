"""
Test fixtures for the Appetite Checker API test suite.

  - db_engine / db_session: Fresh in-memory SQLite database for each test
  - client: Async HTTP test client (unauthenticated)
  - registered_user: A user created through POST /auth/register
  - admin_client: Test client authenticated as a user with the "admin" role
  - member_client: Test client authenticated as a regular "User"
  - carrier_client: Test client authenticated as a "carrier" account
  - SlowSession: Stand-in session whose database never answers

Key design decisions:
  - In-memory SQLite (sqlite+aiosqlite://) is used for speed and isolation.
    Each test gets a completely fresh database.
  - FastAPI's get_db dependency is overridden to use the test engine, so
    the application code runs exactly as it does in production.
  - The Argon2 work factor is lowered through the environment before the
    app is imported, so hashing doesn't dominate test time.
  - Admins are created by registering normally and then updating the role
    column directly, the way an operator would provision one.
"""

import asyncio
import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("ARGON2_TIME_COST", "1")
os.environ.setdefault("ARGON2_MEMORY_COST", "1024")
os.environ.setdefault("ARGON2_PARALLELISM", "1")

import pytest_asyncio  # noqa: E402
from httpx import AsyncClient, ASGITransport  # noqa: E402
from sqlalchemy import select, update  # noqa: E402
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker  # noqa: E402

from app.database import Base, get_db  # noqa: E402
from app.main import app  # noqa: E402
from app.models.user import User  # noqa: E402


TEST_DATABASE_URL = "sqlite+aiosqlite://"

USER_EMAIL = "broker@example.com"
USER_PASSWORD = "BrokerPass123!"
ADMIN_EMAIL = "admin@example.com"
ADMIN_PASSWORD = "AdminPass123!"
CARRIER_EMAIL = "underwriting@carrier.example"
CARRIER_PASSWORD = "CarrierPass123!"


class SlowSession:
    """Stands in for an AsyncSession whose database never answers."""

    async def execute(self, *args, **kwargs):
        await asyncio.sleep(10)

    async def flush(self):
        await asyncio.sleep(10)

    def add(self, obj):
        pass

    async def rollback(self):
        pass


@pytest_asyncio.fixture
async def db_engine():
    """Create a fresh async engine with all tables for each test."""
    engine = create_async_engine(TEST_DATABASE_URL)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture
async def session_factory(db_engine):
    return async_sessionmaker(
        db_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


@pytest_asyncio.fixture
async def db_session(session_factory):
    """Provide an async session bound to the test engine."""
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def client(session_factory):
    """
    Async HTTP test client with the test database injected.

    Overrides the get_db dependency so all requests hit the in-memory
    test database instead of the real one.
    """

    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac

    app.dependency_overrides.clear()


async def fetch_user(session_factory, email: str) -> User | None:
    """Read a user in a fresh session, bypassing any request's identity map."""
    async with session_factory() as session:
        result = await session.execute(select(User).where(User.email == email))
        return result.scalar_one_or_none()


async def register(client, email: str, password: str, **extra):
    return await client.post(
        "/auth/register",
        json={"email": email, "password": password, **extra},
    )


async def login(client, email: str, password: str):
    return await client.post(
        "/auth/login",
        json={"email": email, "password": password},
    )


@pytest_asyncio.fixture
async def registered_user(client):
    """Register the standard test user and return the response body."""
    response = await register(client, USER_EMAIL, USER_PASSWORD, name="Test Broker")
    assert response.status_code == 200, f"Register failed: {response.text}"
    return response.json()


async def provision(client, session_factory, email: str, password: str, role: str) -> str:
    """
    Register a user, set its role directly in the database (the way an
    operator would) and return a fresh login token.
    """
    response = await register(client, email, password, name=role.capitalize())
    assert response.status_code == 200, response.text

    async with session_factory() as session:
        await session.execute(
            update(User)
            .where(User.email == email)
            .values(roles=role)
        )
        await session.commit()

    login_response = await login(client, email, password)
    assert login_response.status_code == 200
    return login_response.json()["token"]


@pytest_asyncio.fixture
async def admin_client(client, session_factory):
    """Test client authenticated as a user with the "admin" role."""
    token = await provision(client, session_factory, ADMIN_EMAIL, ADMIN_PASSWORD, "admin")
    client.headers["Authorization"] = f"Bearer {token}"
    return client


@pytest_asyncio.fixture
async def carrier_client(client, session_factory):
    """Test client authenticated as a user with the "carrier" role."""
    token = await provision(
        client, session_factory, CARRIER_EMAIL, CARRIER_PASSWORD, "carrier"
    )
    client.headers["Authorization"] = f"Bearer {token}"
    return client


@pytest_asyncio.fixture
async def member_client(client, registered_user):
    """Test client authenticated as the standard (non-admin) test user."""
    client.headers["Authorization"] = f"Bearer {registered_user['token']}"
    return client
