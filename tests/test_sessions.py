"""
Session manager tests - store-on-first-visit, resave only on change,
touch after the threshold, fixed expiry, and surviving a dead store.
"""

import logging
from datetime import datetime, timedelta, timezone

import pytest

from listings_web.config import Settings
from listings_web.context import AppContext
from listings_web.core.flash import consume_flashes
from listings_web.core.sessions import SessionManager
from listings_web.db.base import as_utc
from listings_web.db.models import SessionRecord


class FakeClock:
    def __init__(self):
        # Start from real time: cookie tokens carry an exp checked against the wall clock
        self.now = datetime.now(timezone.utc).replace(microsecond=0)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def manager(context: AppContext, settings: Settings, clock: FakeClock) -> SessionManager:
    return SessionManager(context.sessionmaker, settings, clock=clock)


def cookie_token(header: str) -> str:
    return header.split(";", 1)[0].split("=", 1)[1]


async def stored(context: AppContext, session_id: str) -> SessionRecord | None:
    async with context.sessionmaker() as s:
        return await s.get(SessionRecord, session_id)


@pytest.mark.asyncio
async def test_new_session_is_saved_with_cookie(manager, context):
    web_session = await manager.load(None)
    assert web_session.is_new
    assert not web_session.is_authenticated

    header = await manager.save(web_session)
    assert header is not None
    assert header.startswith("session=")
    assert "httponly" in header

    record = await stored(context, web_session.id)
    assert record is not None
    assert record.user_id is None


@pytest.mark.asyncio
async def test_cookie_resolves_to_same_session(manager):
    first = await manager.load(None)
    header = await manager.save(first)

    second = await manager.load(cookie_token(header))
    assert second.id == first.id
    assert not second.is_new


@pytest.mark.asyncio
async def test_unchanged_session_is_not_rewritten(manager, context, clock):
    web_session = await manager.load(None)
    header = await manager.save(web_session)
    touched = as_utc((await stored(context, web_session.id)).touched_at)

    clock.advance(hours=1)
    again = await manager.load(cookie_token(header))
    assert await manager.save(again) is None
    assert as_utc((await stored(context, web_session.id)).touched_at) == touched


@pytest.mark.asyncio
async def test_touch_after_threshold(manager, context, clock):
    web_session = await manager.load(None)
    header = await manager.save(web_session)
    expires = as_utc((await stored(context, web_session.id)).expires_at)

    clock.advance(hours=25)
    again = await manager.load(cookie_token(header))
    assert await manager.save(again) is None

    record = await stored(context, web_session.id)
    assert as_utc(record.touched_at) == clock.now
    # Expiry stays where creation put it
    assert as_utc(record.expires_at) == expires


@pytest.mark.asyncio
async def test_modified_session_is_saved(manager, context):
    web_session = await manager.load(None)
    header = await manager.save(web_session)

    again = await manager.load(cookie_token(header))
    again.data["flash"] = {"success": ["Saved!"]}
    assert again.modified
    await manager.save(again)

    record = await stored(context, web_session.id)
    assert record.data == {"flash": {"success": ["Saved!"]}}

    third = await manager.load(cookie_token(header))
    assert consume_flashes(third) == {"success": ["Saved!"], "error": []}
    assert third.modified


@pytest.mark.asyncio
async def test_expired_session_is_replaced(manager, context, clock):
    web_session = await manager.load(None)
    header = await manager.save(web_session)
    clock.advance(days=7, seconds=1)
    record = await stored(context, web_session.id)
    assert record is not None

    replacement = await manager.load(cookie_token(header))
    assert replacement.id != web_session.id
    assert replacement.is_new
    assert await stored(context, web_session.id) is None


@pytest.mark.asyncio
async def test_regenerate_drops_old_record(manager, context):
    web_session = await manager.load(None)
    await manager.save(web_session)
    old_id = web_session.id

    manager.regenerate(web_session, keep_data=False)
    web_session.user_id = 7
    header = await manager.save(web_session)

    assert header is not None
    assert web_session.id != old_id
    assert await stored(context, old_id) is None
    assert (await stored(context, web_session.id)).user_id == 7


@pytest.mark.asyncio
async def test_purge_expired(manager, clock):
    await manager.save(await manager.load(None))
    clock.advance(days=8)
    await manager.save(await manager.load(None))

    assert await manager.purge_expired() == 1


@pytest.mark.asyncio
async def test_unreachable_store_falls_back_to_anonymous(tmp_path, clock, caplog):
    settings = Settings(
        _env_file=None,
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'missing' / 'nowhere.db'}",
        secret_key="test-secret",
    )
    context = AppContext(settings)
    manager = SessionManager(context.sessionmaker, settings, clock=clock)
    token = cookie_token(manager.cookie_header(manager.new_session()))

    with caplog.at_level(logging.ERROR):
        web_session = await manager.load(token)
        assert web_session.is_new
        assert not web_session.is_authenticated
        assert await manager.save(web_session) is None

    assert "Error occurred in session store" in caplog.text
    await context.shutdown()
