"""
Process-wide application context: settings, database engine, session manager.
Built once in the lifespan and stored on `app.state.context`.
"""

import logging

from sqlalchemy import text

from listings_web.config import Settings
from listings_web.core.sessions import SessionManager
from listings_web.db import models  # noqa: F401 - ensure models are registered
from listings_web.db.base import Base
from listings_web.db.session import build_engine, build_sessionmaker

logger = logging.getLogger(__name__)


class AppContext:
    """Everything a request needs that outlives the request."""

    def __init__(self, settings: Settings):
        self.settings = settings
        self.engine = build_engine(settings.database_url, echo=settings.debug)
        self.sessionmaker = build_sessionmaker(self.engine)
        self.sessions = SessionManager(self.sessionmaker, settings)

    async def startup(self) -> None:
        """Check the database (and create tables if asked). A dead database is logged, not fatal."""
        try:
            async with self.engine.begin() as conn:
                if self.settings.create_tables:
                    await conn.run_sync(Base.metadata.create_all)
                await conn.execute(text("SELECT 1"))
        except Exception as err:
            logger.error(f"Database connection failed: {err}")
            return
        logger.info("Database connected")
        await self.sessions.purge_expired()

    async def ping(self) -> bool:
        try:
            async with self.engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
        except Exception as err:
            logger.warning(f"Database ping failed: {err}")
            return False
        return True

    async def shutdown(self) -> None:
        """Close pooled connections."""
        await self.engine.dispose()
        logger.info("Database connections closed")
