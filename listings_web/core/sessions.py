"""
Server-side sessions: a signed cookie names a record in the database.

Policy:
- new anonymous sessions are stored straight away;
- an existing session is rewritten only when its user or data changed,
  or when `touch_after` has passed since the last write;
- expiry is fixed when the record is created;
- if the store cannot be reached the request carries on with a fresh
  anonymous session and the error is logged.
"""

import copy
import logging
import secrets
from collections.abc import Callable
from datetime import datetime, timedelta
from email.utils import format_datetime
from typing import Any

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from starlette.datastructures import MutableHeaders
from starlette.requests import HTTPConnection
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from listings_web.config import Settings
from listings_web.core.security import decode_session_token, encode_session_token
from listings_web.db.base import as_utc, utcnow
from listings_web.db.models.session_record import SessionRecord
from listings_web.db.repositories.session_repository import SessionRepository

logger = logging.getLogger(__name__)

SCOPE_KEY = "web_session"
STORE_ERRORS = (SQLAlchemyError, OSError)


def new_session_id() -> str:
    return secrets.token_urlsafe(32)


class WebSession:
    """The session attached to one request."""

    def __init__(
        self,
        id: str,
        created_at: datetime,
        expires_at: datetime,
        touched_at: datetime,
        user_id: int | None = None,
        data: dict[str, Any] | None = None,
        is_new: bool = True,
    ):
        self.id = id
        self.created_at = created_at
        self.expires_at = expires_at
        self.touched_at = touched_at
        self.user_id = user_id
        self.data = data if data is not None else {}
        self.is_new = is_new
        # Ids replaced by regenerate(); their records are deleted on save
        self.stale_ids: list[str] = []
        self._snapshot = self._state()

    @classmethod
    def from_record(cls, record: SessionRecord) -> "WebSession":
        return cls(
            id=record.id,
            created_at=as_utc(record.created_at),
            expires_at=as_utc(record.expires_at),
            touched_at=as_utc(record.touched_at),
            user_id=record.user_id,
            data=copy.deepcopy(record.data or {}),
            is_new=False,
        )

    def _state(self) -> tuple:
        return self.user_id, copy.deepcopy(self.data)

    @property
    def is_authenticated(self) -> bool:
        return self.user_id is not None

    @property
    def modified(self) -> bool:
        return self._state() != self._snapshot

    def mark_saved(self) -> None:
        self.is_new = False
        self.stale_ids = []
        self._snapshot = self._state()


class SessionManager:
    """Loads, regenerates and saves sessions against the database."""

    def __init__(
        self,
        sessionmaker: async_sessionmaker[AsyncSession],
        settings: Settings,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.sessionmaker = sessionmaker
        self.secret = settings.secret_key
        self.cookie_name = settings.session_cookie_name
        self.cookie_secure = settings.session_cookie_secure
        self.ttl = timedelta(seconds=settings.session_ttl_seconds)
        self.touch_after = timedelta(seconds=settings.session_touch_after_seconds)
        self.clock = clock

    def new_session(self) -> WebSession:
        now = self.clock()
        return WebSession(
            id=new_session_id(),
            created_at=now,
            expires_at=now + self.ttl,
            touched_at=now,
        )

    async def load(self, token: str | None) -> WebSession:
        """Resolve a cookie token to its session, or start a new one."""
        session_id = decode_session_token(token, self.secret) if token else None
        if session_id is None:
            return self.new_session()
        try:
            async with self.sessionmaker() as db:
                repo = SessionRepository(db)
                record = await repo.get_by_id(session_id)
                if record is not None and as_utc(record.expires_at) <= self.clock():
                    await repo.delete(record)
                    await db.commit()
                    record = None
        except STORE_ERRORS as err:
            logger.error(f"Error occurred in session store: {err}")
            return self.new_session()
        if record is None:
            return self.new_session()
        return WebSession.from_record(record)

    def regenerate(self, web_session: WebSession, keep_data: bool = True) -> None:
        """Give the session a new id and expiry (used at login and logout)."""
        if not web_session.is_new:
            web_session.stale_ids.append(web_session.id)
        fresh = self.new_session()
        web_session.id = fresh.id
        web_session.created_at = fresh.created_at
        web_session.expires_at = fresh.expires_at
        web_session.touched_at = fresh.touched_at
        web_session.is_new = True
        if not keep_data:
            web_session.data = {}

    def needs_write(self, web_session: WebSession) -> bool:
        return (
            web_session.is_new
            or web_session.modified
            or self.clock() - web_session.touched_at >= self.touch_after
        )

    async def save(self, web_session: WebSession) -> str | None:
        """Persist the session if needed. Returns a Set-Cookie value for new sessions."""
        write = self.needs_write(web_session)
        if not web_session.stale_ids and not write:
            return None
        is_new = web_session.is_new
        now = self.clock()
        try:
            async with self.sessionmaker() as db:
                repo = SessionRepository(db)
                for stale_id in web_session.stale_ids:
                    await repo.delete_by_id(stale_id)
                if is_new:
                    db.add(
                        SessionRecord(
                            id=web_session.id,
                            user_id=web_session.user_id,
                            data=copy.deepcopy(web_session.data),
                            created_at=web_session.created_at,
                            expires_at=web_session.expires_at,
                            touched_at=now,
                        )
                    )
                elif write:
                    record = await repo.get_by_id(web_session.id)
                    if record is not None:
                        record.user_id = web_session.user_id
                        record.data = copy.deepcopy(web_session.data)
                        record.touched_at = now
                await db.commit()
        except STORE_ERRORS as err:
            logger.error(f"Error occurred in session store: {err}")
            return None
        web_session.touched_at = now
        web_session.mark_saved()
        return self.cookie_header(web_session) if is_new else None

    def cookie_header(self, web_session: WebSession) -> str:
        token = encode_session_token(web_session.id, web_session.expires_at, self.secret)
        max_age = int((web_session.expires_at - web_session.created_at).total_seconds())
        parts = [
            f"{self.cookie_name}={token}",
            "path=/",
            f"Max-Age={max_age}",
            f"expires={format_datetime(web_session.expires_at, usegmt=True)}",
            "httponly",
            "samesite=lax",
        ]
        if self.cookie_secure:
            parts.append("secure")
        return "; ".join(parts)

    async def purge_expired(self) -> int:
        try:
            async with self.sessionmaker() as db:
                removed = await SessionRepository(db).delete_expired(self.clock())
                await db.commit()
        except STORE_ERRORS as err:
            logger.error(f"Error occurred in session store: {err}")
            return 0
        if removed:
            logger.info(f"Purged {removed} expired sessions")
        return removed


class SessionMiddleware:
    """Attaches a WebSession to every HTTP request and saves it when the response starts."""

    def __init__(self, app: ASGIApp):
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        manager: SessionManager = scope["app"].state.context.sessions
        connection = HTTPConnection(scope)
        web_session = await manager.load(connection.cookies.get(manager.cookie_name))
        scope[SCOPE_KEY] = web_session

        async def send_wrapper(message: Message) -> None:
            if message["type"] == "http.response.start":
                cookie = await manager.save(web_session)
                if cookie is not None:
                    headers = MutableHeaders(scope=message)
                    headers.append("Set-Cookie", cookie)
            await send(message)

        await self.app(scope, receive, send_wrapper)


def get_web_session(connection: HTTPConnection) -> WebSession:
    try:
        return connection.scope[SCOPE_KEY]
    except KeyError:
        raise RuntimeError("SessionMiddleware must be installed to use sessions") from None
