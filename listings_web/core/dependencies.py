"""
FastAPI dependencies - current user, the login gate, and session login/logout helpers.
"""

import logging
from dataclasses import dataclass
from typing import Annotated

from fastapi import Depends, Request

from listings_web.core.exceptions import LoginRequired
from listings_web.core.sessions import STORE_ERRORS, get_web_session
from listings_web.db.models.user import User
from listings_web.db.repositories.user_repository import UserRepository
from listings_web.db.session import DbSession
from listings_web.services.auth_service import Authenticator, LocalAuthenticator

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SessionUser:
    """What pages show about the logged-in user. Detached from any DB session."""

    id: int
    username: str

    @classmethod
    def from_user(cls, user: User) -> "SessionUser":
        return cls(id=user.id, username=user.username)


def get_authenticator(session: DbSession) -> LocalAuthenticator:
    return LocalAuthenticator(UserRepository(session))


Auth = Annotated[LocalAuthenticator, Depends(get_authenticator)]


async def get_current_user(request: Request, auth: Auth) -> User | None:
    """Rehydrate the session's user. A user that no longer exists logs the session out."""
    web_session = get_web_session(request)
    user = None
    if web_session.user_id is not None:
        user = await auth.deserialize(web_session.user_id)
        if user is None:
            web_session.user_id = None
    request.state.user = SessionUser.from_user(user) if user is not None else None
    return user


CurrentUser = Annotated[User | None, Depends(get_current_user)]


async def resolve_session_user(request: Request) -> None:
    """Fill `request.state.user` outside of routing (e.g. for the 404 page)."""
    if getattr(request.state, "user", None) is not None:
        return
    web_session = get_web_session(request)
    request.state.user = None
    if web_session.user_id is None:
        return
    try:
        async with request.app.state.context.sessionmaker() as session:
            user = await LocalAuthenticator(UserRepository(session)).deserialize(web_session.user_id)
            if user is not None:
                request.state.user = SessionUser.from_user(user)
    except STORE_ERRORS as err:
        logger.error(f"Could not load user for error page: {err}")


def is_authenticated(request: Request) -> bool:
    return get_web_session(request).is_authenticated and getattr(request.state, "user", None) is not None


async def require_login(request: Request, user: CurrentUser) -> User:
    """Auth gate for routes that change listings."""
    if user is None or not is_authenticated(request):
        raise LoginRequired()
    return user


LoggedInUser = Annotated[User, Depends(require_login)]


def login_user(request: Request, auth: Authenticator, user: User) -> None:
    """Bind the user to a freshly regenerated session."""
    web_session = get_web_session(request)
    request.app.state.context.sessions.regenerate(web_session, keep_data=True)
    web_session.user_id = auth.serialize(user)
    request.state.user = SessionUser.from_user(user)


def logout_user(request: Request) -> None:
    """Drop the user and everything else the session held."""
    web_session = get_web_session(request)
    request.app.state.context.sessions.regenerate(web_session, keep_data=False)
    web_session.user_id = None
    request.state.user = None
