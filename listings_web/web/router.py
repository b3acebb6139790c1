"""
Site router - aggregates all endpoint modules.
"""

from fastapi import APIRouter

from listings_web.web.endpoints import health, listings, pages, users

site_router = APIRouter()

site_router.include_router(pages.router, tags=["pages"])
site_router.include_router(listings.router, prefix="/listings", tags=["listings"])
site_router.include_router(users.router, tags=["users"])
site_router.include_router(health.router, prefix="/health", tags=["health"])
