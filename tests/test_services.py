"""
Service tests - listing store and local authenticator against a real database session.
"""

import pytest

from listings_web.core.exceptions import AuthFailure, ConflictError, NotFoundError
from listings_web.db.repositories import ListingRepository, UserRepository
from listings_web.schemas.listing import ListingIn, ListingSearch
from listings_web.schemas.user import UserCreate
from listings_web.services.auth_service import LocalAuthenticator
from listings_web.services.listing_service import ListingService


def payload(**overrides) -> ListingIn:
    fields = {
        "title": "Harbour View",
        "description": "Flat over the harbour",
        "image": "https://example.com/harbour.jpg",
        "price": 100,
        "location": "Paris",
        "country": "France",
    }
    fields.update(overrides)
    return ListingIn(**fields)


@pytest.fixture
def listings(session) -> ListingService:
    return ListingService(ListingRepository(session))


@pytest.fixture
def auth(session) -> LocalAuthenticator:
    return LocalAuthenticator(UserRepository(session))


@pytest.mark.asyncio
async def test_create_then_get_returns_submitted_fields(listings, context):
    data = payload()
    created = await listings.create(data)
    assert created.id

    async with context.sessionmaker() as s:
        found = await ListingService(ListingRepository(s)).get(created.id)
    for field, value in data.model_dump().items():
        assert getattr(found, field) == value


@pytest.mark.asyncio
async def test_ids_are_unique(listings):
    first = await listings.create(payload())
    second = await listings.create(payload())
    assert first.id != second.id


@pytest.mark.asyncio
async def test_update_keeps_id(listings):
    created = await listings.create(payload())
    updated = await listings.update(created.id, payload(title="New title", price=90))
    assert updated.id == created.id
    assert updated.title == "New title"
    assert updated.price == 90


@pytest.mark.asyncio
async def test_delete_then_get_is_not_found(listings):
    created = await listings.create(payload())
    await listings.delete(created.id)
    with pytest.raises(NotFoundError):
        await listings.get(created.id)


@pytest.mark.asyncio
async def test_update_and_delete_missing(listings):
    with pytest.raises(NotFoundError):
        await listings.update("missing", payload())
    with pytest.raises(NotFoundError):
        await listings.delete("missing")


@pytest.mark.asyncio
async def test_search_exact_match(listings):
    match = await listings.create(payload())
    await listings.create(payload(price=100.5))
    await listings.create(payload(location="paris"))
    await listings.create(payload(location="Paris 11e"))

    found = await listings.search(ListingSearch(location="Paris", price=100))
    assert [listing.id for listing in found] == [match.id]


@pytest.mark.asyncio
async def test_search_without_criteria_returns_all(listings):
    await listings.create(payload())
    await listings.create(payload(location="Rome"))
    assert len(await listings.search(ListingSearch())) == 2


@pytest.mark.asyncio
async def test_register_then_authenticate(auth):
    user = await auth.register(UserCreate(username="carol", email="carol@example.com", password="pw-123"))
    assert user.hashed_password != "pw-123"

    authenticated = await auth.authenticate("carol", "pw-123")
    assert authenticated.id == user.id


@pytest.mark.asyncio
async def test_authenticate_wrong_password(auth):
    await auth.register(UserCreate(username="dave", email="dave@example.com", password="right"))
    with pytest.raises(AuthFailure) as exc_info:
        await auth.authenticate("dave", "wrong")
    assert exc_info.value.message == "Password or username is incorrect"


@pytest.mark.asyncio
async def test_authenticate_unknown_user_and_blank_fields(auth):
    with pytest.raises(AuthFailure):
        await auth.authenticate("nobody", "pw")
    with pytest.raises(AuthFailure) as exc_info:
        await auth.authenticate("", "")
    assert exc_info.value.message == "Missing credentials"


@pytest.mark.asyncio
async def test_register_duplicate_username(auth):
    await auth.register(UserCreate(username="erin", email="erin@example.com", password="pw"))
    with pytest.raises(ConflictError):
        await auth.register(UserCreate(username="erin", email="other@example.com", password="pw"))


@pytest.mark.asyncio
async def test_serialize_round_trip(auth):
    user = await auth.register(UserCreate(username="frank", email="frank@example.com", password="pw"))
    assert auth.serialize(user) == user.id
    restored = await auth.deserialize(auth.serialize(user))
    assert restored.username == "frank"
    assert await auth.deserialize(9999) is None
