"""
Listing repository - listing data access, including the exact-match search.
"""

from typing import Any

from sqlalchemy import select

from listings_web.db.models.listing import Listing
from listings_web.db.repositories.base_repository import BaseRepository


class ListingRepository(BaseRepository[Listing]):
    def __init__(self, session):
        super().__init__(session, Listing)

    async def find(self, criteria: dict[str, Any]) -> list[Listing]:
        """Listings whose columns equal every given value. No ranges, no substrings."""
        result = await self.session.execute(
            select(Listing).filter_by(**criteria).order_by(Listing.created_at)
        )
        return list(result.scalars().all())
