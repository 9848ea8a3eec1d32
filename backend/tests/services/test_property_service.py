"""Property service tests."""

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from estatehub.models import Account, AccountRole, Property, PropertyType
from estatehub.schemas.common import PaginationParams
from estatehub.schemas.property import PropertyCreate, PropertyUpdate
from estatehub.services.errors import Forbidden, NotFound
from estatehub.services.moderation import ModerationState, approve, moderation_state, reject
from estatehub.services.properties import PropertyService
from tests.conftest import make_account, make_property

CREATE_DATA = {
    "title": "Garden cottage",
    "description": "Quiet cottage with a private garden and parking.",
    "price": 120000,
    "property_type": "rent",
    "category": "house",
    "location": {
        "address": "4 Hill Road",
        "city": "Nashik",
        "state": "Maharashtra",
        "country": "India",
        "pincode": "422001",
    },
    "area": 700,
}


@pytest.fixture
def service(session: AsyncSession) -> PropertyService:
    return PropertyService(session)


async def test_create_by_approved_agent(service: PropertyService, agent: Account):
    prop = await service.create(agent, PropertyCreate(**CREATE_DATA))

    assert prop.agent_id == agent.id
    assert prop.city == "Nashik"
    assert prop.property_type == PropertyType.RENT
    assert moderation_state(prop) == ModerationState.PENDING


async def test_create_by_pending_agent(service: PropertyService, pending_agent: Account):
    with pytest.raises(Forbidden):
        await service.create(pending_agent, PropertyCreate(**CREATE_DATA))


async def test_update_resets_approved_listing(
    service: PropertyService, session: AsyncSession, agent: Account, admin: Account, listing: Property
):
    approve(listing, admin.id)
    await session.commit()

    prop = await service.update(agent, listing.id, PropertyUpdate(price=260000))

    assert prop.price == 260000
    assert prop.is_approved is False
    assert prop.rejection_reason == ""


async def test_update_clears_rejection(
    service: PropertyService, session: AsyncSession, agent: Account, listing: Property
):
    reject(listing, "Photos missing", "default")
    await session.commit()

    prop = await service.update(
        agent,
        listing.id,
        PropertyUpdate(location={**CREATE_DATA["location"], "city": "Thane"}),
    )

    assert prop.city == "Thane"
    assert moderation_state(prop) == ModerationState.PENDING


async def test_update_by_other_agent(
    service: PropertyService, session: AsyncSession, listing: Property
):
    other = await make_account(session, "other@example.com", AccountRole.AGENT)

    with pytest.raises(Forbidden):
        await service.update(other, listing.id, PropertyUpdate(price=1))


async def test_update_missing(service: PropertyService, agent: Account):
    with pytest.raises(NotFound):
        await service.update(agent, "missing", PropertyUpdate(price=1))


async def test_unapproved_listing_visibility(
    service: PropertyService, agent: Account, admin: Account, user: Account, listing: Property
):
    assert (await service.get(listing.id, agent)).id == listing.id
    assert (await service.get(listing.id, admin)).id == listing.id

    with pytest.raises(NotFound):
        await service.get(listing.id, user)
    with pytest.raises(NotFound):
        await service.get(listing.id, None)


async def test_approved_listing_is_public(
    service: PropertyService, session: AsyncSession, admin: Account, listing: Property
):
    approve(listing, admin.id)
    await session.commit()

    assert (await service.get(listing.id, None)).id == listing.id


async def test_list_for_agent_only_returns_own(
    service: PropertyService, session: AsyncSession, agent: Account, listing: Property
):
    other = await make_account(session, "other@example.com", AccountRole.AGENT)
    await make_property(session, other, title="Someone else's flat")

    props, total = await service.list_for_agent(agent, PaginationParams())

    assert total == 1
    assert [p.id for p in props] == [listing.id]


async def test_delete_rules(
    service: PropertyService, session: AsyncSession, agent: Account, admin: Account
):
    other = await make_account(session, "other@example.com", AccountRole.AGENT)
    mine = await make_property(session, agent)
    theirs = await make_property(session, other)

    with pytest.raises(Forbidden):
        await service.delete(agent, theirs.id)

    await service.delete(agent, mine.id)
    await service.delete(admin, theirs.id)

    with pytest.raises(NotFound):
        await service.get(mine.id, admin)
