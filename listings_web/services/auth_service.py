"""
Local username/password authentication.

`Authenticator` is what login relies on: check credentials, and turn a
user into the value kept in the session and back (see `login_user`).
"""

import logging
from typing import Protocol

from sqlalchemy.exc import IntegrityError

from listings_web.core.exceptions import AuthFailure, ConflictError
from listings_web.core.security import hash_password, verify_password
from listings_web.db.models.user import User
from listings_web.db.repositories.user_repository import UserRepository
from listings_web.schemas.user import UserCreate

logger = logging.getLogger(__name__)

USERNAME_TAKEN = "A user with the given username is already registered"
MISSING_CREDENTIALS = "Missing credentials"
INCORRECT_CREDENTIALS = "Password or username is incorrect"


class Authenticator(Protocol):
    async def authenticate(self, username: str, password: str) -> User: ...

    def serialize(self, user: User) -> int: ...

    async def deserialize(self, user_id: int) -> User | None: ...


class LocalAuthenticator:
    """Users stored in the database with bcrypt password hashes."""

    def __init__(self, user_repo: UserRepository):
        self.user_repo = user_repo

    async def register(self, data: UserCreate) -> User:
        """Create an account. Raises ConflictError if the username is taken."""
        if await self.user_repo.get_by_username(data.username) is not None:
            raise ConflictError(USERNAME_TAKEN)
        user = User(
            username=data.username,
            email=data.email,
            hashed_password=hash_password(data.password),
        )
        try:
            user = await self.user_repo.add(user)
            await self.user_repo.session.commit()
        except IntegrityError:
            # Lost a race with a concurrent signup for the same name
            await self.user_repo.session.rollback()
            raise ConflictError(USERNAME_TAKEN) from None
        logger.info(f"Registered user {user.username}")
        return user

    async def authenticate(self, username: str, password: str) -> User:
        if not username or not password:
            raise AuthFailure(MISSING_CREDENTIALS)
        user = await self.user_repo.get_by_username(username)
        if user is None or not verify_password(password, user.hashed_password):
            raise AuthFailure(INCORRECT_CREDENTIALS)
        return user

    def serialize(self, user: User) -> int:
        return user.id

    async def deserialize(self, user_id: int) -> User | None:
        return await self.user_repo.get_by_id(user_id)
