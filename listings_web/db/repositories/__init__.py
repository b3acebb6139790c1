# Repository pattern: data access kept out of routes and services

from listings_web.db.repositories.listing_repository import ListingRepository
from listings_web.db.repositories.session_repository import SessionRepository
from listings_web.db.repositories.user_repository import UserRepository

__all__ = ["ListingRepository", "SessionRepository", "UserRepository"]
