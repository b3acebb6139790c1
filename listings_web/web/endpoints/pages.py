"""
Home and about pages.
"""

from fastapi import APIRouter, Request
from fastapi.responses import HTMLResponse

from listings_web.core.dependencies import CurrentUser
from listings_web.db.repositories.listing_repository import ListingRepository
from listings_web.db.session import DbSession
from listings_web.services.listing_service import ListingService
from listings_web.web.rendering import render

router = APIRouter()


@router.get("/", response_class=HTMLResponse)
async def home(request: Request, user: CurrentUser, session: DbSession):
    """Landing page with every listing."""
    data = await ListingService(ListingRepository(session)).list_listings()
    return render(request, "listings/index.html", {"data": data})


@router.get("/about", response_class=HTMLResponse)
async def about(request: Request, user: CurrentUser):
    return render(request, "listings/about.html")
