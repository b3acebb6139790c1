"""
Async database engine and per-request sessions.
The engine lives on the AppContext; routes get one AsyncSession per request.
"""

from collections.abc import AsyncGenerator
from typing import Annotated

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine


def build_engine(database_url: str, echo: bool = False) -> AsyncEngine:
    """Async engine with connection pool. SQLite keeps the driver's default pool."""
    options = {"echo": echo, "pool_pre_ping": True}
    if not database_url.startswith("sqlite"):
        options.update(pool_size=10, max_overflow=20)
    return create_async_engine(database_url, **options)


def build_sessionmaker(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


async def get_db(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """Yield a database session per request. Rollback on error, close on exit."""
    async with request.app.state.context.sessionmaker() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise


# Type alias for FastAPI dependency injection
DbSession = Annotated[AsyncSession, Depends(get_db)]
