"""
Pytest fixtures - per-test SQLite database, app, HTTP client, users and listings.
"""

from collections.abc import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from listings_web.config import Settings
from listings_web.context import AppContext
from listings_web.core.security import hash_password
from listings_web.db.base import Base
from listings_web.db.models import Listing, SessionRecord, User
from listings_web.main import create_app

TEST_PASSWORD = "password123"


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        _env_file=None,
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'test.db'}",
        secret_key="test-secret",
    )


@pytest_asyncio.fixture
async def context(settings: Settings) -> AsyncGenerator[AppContext, None]:
    context = AppContext(settings)
    async with context.engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield context
    await context.shutdown()


@pytest.fixture
def app(settings: Settings, context: AppContext):
    # ASGITransport does not run the lifespan; install the context directly
    app = create_app(settings)
    app.state.context = context
    return app


@pytest_asyncio.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


@pytest_asyncio.fixture
async def session(context: AppContext) -> AsyncGenerator[AsyncSession, None]:
    async with context.sessionmaker() as s:
        yield s


@pytest_asyncio.fixture
async def test_user(session: AsyncSession) -> User:
    user = User(
        username="tester",
        email="test@example.com",
        hashed_password=hash_password(TEST_PASSWORD),
    )
    session.add(user)
    await session.commit()
    return user


@pytest_asyncio.fixture
async def auth_client(client: AsyncClient, test_user: User) -> AsyncClient:
    response = await client.post(
        "/login", data={"username": test_user.username, "password": TEST_PASSWORD}
    )
    assert response.status_code == 302
    assert response.headers["location"] == "/listings"
    return client


def listing_fields(**overrides) -> dict:
    fields = {
        "title": "Cozy Loft",
        "description": "Bright loft near the river",
        "image": "https://example.com/loft.jpg",
        "price": 100.0,
        "location": "Paris",
        "country": "France",
    }
    fields.update(overrides)
    return fields


@pytest.fixture
def listing_form():
    """Form body the way the new/edit pages submit it."""

    def _form(**overrides) -> dict:
        return {f"listing[{key}]": str(value) for key, value in listing_fields(**overrides).items()}

    return _form


@pytest_asyncio.fixture
async def listing(session: AsyncSession) -> Listing:
    listing = Listing(**listing_fields())
    session.add(listing)
    await session.commit()
    return listing


@pytest.fixture
def fetch_listing(context: AppContext):
    """Read a listing through a fresh session (no identity-map leftovers)."""

    async def _fetch(listing_id: str) -> Listing | None:
        async with context.sessionmaker() as s:
            return await s.get(Listing, listing_id)

    return _fetch


@pytest.fixture
def count_rows(context: AppContext):
    async def _count(model=Listing) -> int:
        async with context.sessionmaker() as s:
            return await s.scalar(select(func.count()).select_from(model))

    return _count


@pytest.fixture
def session_records(context: AppContext):
    async def _records() -> list[SessionRecord]:
        async with context.sessionmaker() as s:
            return list((await s.execute(select(SessionRecord))).scalars().all())

    return _records


@pytest.fixture
def make_listing(context: AppContext):
    async def _make(**overrides) -> Listing:
        async with context.sessionmaker() as s:
            listing = Listing(**listing_fields(**overrides))
            s.add(listing)
            await s.commit()
            return listing

    return _make
