"""
Listing service - the listing use cases behind the routes.
Routes stay thin: they validate, call one method here, then render or redirect.
"""

import logging

from listings_web.core.exceptions import NotFoundError
from listings_web.db.models.listing import Listing
from listings_web.db.repositories.listing_repository import ListingRepository
from listings_web.schemas.listing import ListingIn, ListingSearch

logger = logging.getLogger(__name__)


class ListingService:
    """Create, read, search, update and delete listings. Writes commit immediately."""

    def __init__(self, listing_repo: ListingRepository):
        self.listing_repo = listing_repo

    async def create(self, data: ListingIn) -> Listing:
        listing = Listing(**data.model_dump())
        listing = await self.listing_repo.add(listing)
        await self.listing_repo.session.commit()
        logger.info(f"Created listing {listing.id}")
        return listing

    async def list_listings(self) -> list[Listing]:
        return await self.listing_repo.get_all()

    async def search(self, query: ListingSearch) -> list[Listing]:
        """Exact-match filter on the given criteria."""
        return await self.listing_repo.find(query.criteria())

    async def get(self, id: str) -> Listing:
        listing = await self.listing_repo.get_by_id(id)
        if listing is None:
            raise NotFoundError("Listing", id)
        return listing

    async def update(self, id: str, data: ListingIn) -> Listing:
        """Overwrite every editable field. The id never changes."""
        listing = await self.get(id)
        for field, value in data.model_dump().items():
            setattr(listing, field, value)
        await self.listing_repo.session.commit()
        logger.info(f"Updated listing {id}")
        return listing

    async def delete(self, id: str) -> None:
        listing = await self.get(id)
        await self.listing_repo.delete(listing)
        await self.listing_repo.session.commit()
        logger.info(f"Deleted listing {id}")
