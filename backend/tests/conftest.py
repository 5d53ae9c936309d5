"""Shared test configuration and fixtures.

Each test gets its own in-memory SQLite database (aiosqlite), created from
the model metadata, so no external PostgreSQL instance is needed. The
PostgreSQL-only pieces of the schema (btree_gist extension, the booking
exclusion constraint) are skipped on SQLite; the service-level overlap check
still applies.

Most tests share one session across the test body and its requests. Tests
that check commit and rollback use ``committing_client`` instead.
"""

import os

# Keep password hashing fast; must be set before app.config is imported.
os.environ.setdefault("BCRYPT_ROUNDS", "4")

import uuid
from collections.abc import AsyncGenerator

import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from app.auth.jwt import create_token_pair
from app.auth.passwords import hash_password
from app.database import Base, get_db
from app.main import app
from app.models.user import ROLE_ADMIN, ROLE_GUEST, User
from app.services.role_service import grant_role

TEST_PASSWORD = "testpass123"

# ---------------------------------------------------------------------------
# Per-test database
# ---------------------------------------------------------------------------


@pytest_asyncio.fixture
async def test_engine():
    """A fresh in-memory database with every table created."""
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(test_engine) -> AsyncGenerator[AsyncSession, None]:
    """Yield the session shared by the test body and every request it makes."""
    async with AsyncSession(bind=test_engine, expire_on_commit=False) as session:
        yield session


@pytest_asyncio.fixture
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """Provide an httpx AsyncClient wired to use the test DB session."""

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as ac:
        yield ac

    app.dependency_overrides.clear()


# ---------------------------------------------------------------------------
# Real per-request transactions
# ---------------------------------------------------------------------------


@pytest_asyncio.fixture
async def session_factory(test_engine, monkeypatch) -> async_sessionmaker[AsyncSession]:
    """Point the production ``get_db`` at the test database."""
    factory = async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)
    monkeypatch.setattr("app.database.async_session_factory", factory)
    return factory


@pytest_asyncio.fixture
async def committing_client(session_factory) -> AsyncGenerator[AsyncClient, None]:
    """A client whose requests each commit or roll back through ``get_db``."""
    app.dependency_overrides.clear()
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as ac:
        yield ac


@pytest_asyncio.fixture
async def committed_headers(session_factory) -> dict[str, dict[str, str]]:
    """Headers for a host, a guest and an admin whose rows are already committed."""
    async with session_factory() as session:
        users = {
            "host": await make_user(session, "Host"),
            "guest": await make_user(session, "Guest"),
            "admin": await make_user(session, "Admin", ROLE_ADMIN),
        }
        await session.commit()
    return {name: headers_for(user) for name, user in users.items()}


# ---------------------------------------------------------------------------
# Convenience fixtures: users and their headers
# ---------------------------------------------------------------------------


async def make_user(db: AsyncSession, first_name: str, *roles: str) -> User:
    """Insert a user holding ``guest`` plus ``roles``."""
    user = User(
        phone_number=f"+2420{uuid.uuid4().int % 10**9:09d}",
        hashed_password=hash_password(TEST_PASSWORD),
        first_name=first_name,
        last_name="Tester",
    )
    db.add(user)
    await db.flush()
    for role in (ROLE_GUEST, *roles):
        await grant_role(db, user.id, role)
    await db.refresh(user)
    return user


def headers_for(user: User) -> dict[str, str]:
    tokens = create_token_pair(str(user.id))
    return {"Authorization": f"Bearer {tokens['access_token']}"}


@pytest_asyncio.fixture
async def host_user(db_session: AsyncSession) -> User:
    return await make_user(db_session, "Host")


@pytest_asyncio.fixture
async def guest_user(db_session: AsyncSession) -> User:
    return await make_user(db_session, "Guest")


@pytest_asyncio.fixture
async def other_user(db_session: AsyncSession) -> User:
    return await make_user(db_session, "Other")


@pytest_asyncio.fixture
async def admin_user(db_session: AsyncSession) -> User:
    return await make_user(db_session, "Admin", ROLE_ADMIN)


@pytest_asyncio.fixture
async def host_headers(host_user: User) -> dict[str, str]:
    return headers_for(host_user)


@pytest_asyncio.fixture
async def guest_headers(guest_user: User) -> dict[str, str]:
    return headers_for(guest_user)


@pytest_asyncio.fixture
async def other_headers(other_user: User) -> dict[str, str]:
    return headers_for(other_user)


@pytest_asyncio.fixture
async def admin_headers(admin_user: User) -> dict[str, str]:
    return headers_for(admin_user)


# ---------------------------------------------------------------------------
# Convenience fixtures: listings
# ---------------------------------------------------------------------------


SHORT_TERM_LISTING = {
    "title": "Studio by the river",
    "property_type": "studio",
    "rental_type": "short_term",
    "max_guests": 2,
    "price_per_night": 50.00,
    "address": "1 avenue de la Paix",
    "city": "Brazzaville",
}

LONG_TERM_LISTING = {
    "title": "House for the season",
    "property_type": "house",
    "rental_type": "long_term",
    "max_guests": 5,
    "bedrooms": 3,
    "price_per_month": 800.00,
    "address": "9 rue du Port",
    "city": "Pointe-Noire",
}


@pytest_asyncio.fixture
async def short_term_property(client: AsyncClient, host_headers: dict) -> dict:
    """A 50/night listing owned by ``host_user``, created via the API."""
    response = await client.post("/api/v1/properties", json=SHORT_TERM_LISTING, headers=host_headers)
    assert response.status_code == 201, f"Failed to create listing: {response.text}"
    return response.json()


@pytest_asyncio.fixture
async def long_term_property(client: AsyncClient, host_headers: dict) -> dict:
    """An 800/month listing owned by ``host_user``, created via the API."""
    response = await client.post("/api/v1/properties", json=LONG_TERM_LISTING, headers=host_headers)
    assert response.status_code == 201, f"Failed to create listing: {response.text}"
    return response.json()
