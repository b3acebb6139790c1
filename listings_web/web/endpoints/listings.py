"""
Listing routes - browse, search, create, edit, delete.
Writes go through the login gate, then the validation gate, then one service call.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse

from listings_web.core.dependencies import CurrentUser, LoggedInUser
from listings_web.core.flash import flash
from listings_web.core.validation import nested_form, validate_listing, validate_search
from listings_web.db.repositories.listing_repository import ListingRepository
from listings_web.db.session import DbSession
from listings_web.schemas.listing import ListingIn
from listings_web.services.listing_service import ListingService
from listings_web.web.rendering import redirect, render

router = APIRouter()


def _get_listing_service(session: DbSession) -> ListingService:
    return ListingService(ListingRepository(session))


Listings = Annotated[ListingService, Depends(_get_listing_service)]


async def valid_listing(request: Request) -> ListingIn:
    """Validation gate: the `listing[...]` form fields must match ListingIn."""
    form = await request.form()
    return validate_listing(nested_form(form, "listing"))


ValidListing = Annotated[ListingIn, Depends(valid_listing)]


@router.get("/new", response_class=HTMLResponse)
async def new_listing_form(request: Request, user: LoggedInUser):
    return render(request, "listings/new.html")


@router.post("/search", response_class=HTMLResponse)
async def search_listings(request: Request, user: CurrentUser, svc: Listings):
    """Exact-match search on location and price."""
    form = await request.form()
    query = validate_search(form)
    search = await svc.search(query)
    return render(request, "listings/search.html", {"search": search, "query": query})


@router.post("")
async def create_listing(request: Request, user: LoggedInUser, data: ValidListing, svc: Listings):
    await svc.create(data)
    flash(request, "success", "New Listing Created!")
    return redirect("/listings")


@router.get("", response_class=HTMLResponse)
async def list_listings(request: Request, user: CurrentUser, svc: Listings):
    all_data = await svc.list_listings()
    return render(request, "listings/listing.html", {"all_data": all_data})


@router.get("/{listing_id}", response_class=HTMLResponse)
async def show_listing(request: Request, listing_id: str, user: CurrentUser, svc: Listings):
    listing = await svc.get(listing_id)
    return render(request, "listings/detail.html", {"listing": listing})


@router.get("/{listing_id}/edit", response_class=HTMLResponse)
async def edit_listing_form(request: Request, listing_id: str, user: LoggedInUser, svc: Listings):
    listing = await svc.get(listing_id)
    return render(request, "listings/edit.html", {"listing": listing})


@router.put("/{listing_id}")
async def update_listing(
    request: Request, listing_id: str, user: LoggedInUser, data: ValidListing, svc: Listings
):
    await svc.update(listing_id, data)
    flash(request, "success", "Listing Updated!")
    return redirect("/listings")


@router.delete("/{listing_id}")
async def delete_listing(request: Request, listing_id: str, user: LoggedInUser, svc: Listings):
    await svc.delete(listing_id)
    flash(request, "success", "Listing Deleted!")
    return redirect("/listings")
