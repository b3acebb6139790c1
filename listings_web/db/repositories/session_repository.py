"""
Session repository - backing records for browser sessions.
"""

from datetime import datetime

from sqlalchemy import delete

from listings_web.db.models.session_record import SessionRecord
from listings_web.db.repositories.base_repository import BaseRepository


class SessionRepository(BaseRepository[SessionRecord]):
    def __init__(self, session):
        super().__init__(session, SessionRecord)

    async def delete_by_id(self, id: str) -> None:
        await self.session.execute(delete(SessionRecord).where(SessionRecord.id == id))

    async def delete_expired(self, now: datetime) -> int:
        """Drop every record whose expiry has passed. Returns how many went."""
        result = await self.session.execute(
            delete(SessionRecord).where(SessionRecord.expires_at <= now)
        )
        return result.rowcount or 0
