"""
Base repository - generic CRUD interface shared by the model repositories.
Keeps data access in one place and lets services be tested against a real session.
"""

from typing import Generic, TypeVar

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from listings_web.db.base import Base

ModelType = TypeVar("ModelType", bound=Base)


class BaseRepository(Generic[ModelType]):
    """Generic async repository. Subclasses define model-specific methods."""

    def __init__(self, session: AsyncSession, model: type[ModelType]):
        self.session = session
        self.model = model

    async def get_by_id(self, id: int | str) -> ModelType | None:
        """Fetch single entity by primary key."""
        return await self.session.get(self.model, id)

    async def get_all(self) -> list[ModelType]:
        """Every row, oldest first."""
        result = await self.session.execute(select(self.model).order_by(self.model.created_at))
        return list(result.scalars().all())

    async def add(self, entity: ModelType) -> ModelType:
        """Persist new entity. Caller commits session."""
        self.session.add(entity)
        await self.session.flush()  # Get ID without committing
        return entity

    async def delete(self, entity: ModelType) -> None:
        """Remove entity from DB."""
        await self.session.delete(entity)
        await self.session.flush()
