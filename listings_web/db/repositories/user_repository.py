"""
User repository - encapsulates all user data access.
"""

from sqlalchemy import select

from listings_web.db.models.user import User
from listings_web.db.repositories.base_repository import BaseRepository


class UserRepository(BaseRepository[User]):
    def __init__(self, session):
        super().__init__(session, User)

    async def get_by_username(self, username: str) -> User | None:
        """Find user by login name - used for registration checks and authentication."""
        result = await self.session.execute(select(User).where(User.username == username))
        return result.scalar_one_or_none()
