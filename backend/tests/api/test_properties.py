"""Property endpoint tests."""

from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from estatehub.context import AppContext
from estatehub.models import Account, Property
from estatehub.services.moderation import approve
from tests.conftest import AuthenticatedClient, bearer

LISTING = {
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
    "bedrooms": 2,
    "bathrooms": 1,
    "area": 700,
    "furnishing": "fully-furnished",
}


async def test_create_property(agent_client: AuthenticatedClient, agent: Account):
    response = await agent_client.post("/api/property", json=LISTING)

    assert response.status_code == 201
    prop = response.json()["property"]
    assert prop["agent_id"] == agent.id
    assert prop["is_approved"] is False
    assert prop["city"] == "Nashik"


async def test_create_property_pending_agent(
    client: AsyncClient, ctx: AppContext, pending_agent: Account
):
    response = await client.post("/api/property", json=LISTING, headers=bearer(ctx, pending_agent))
    assert response.status_code == 403


async def test_create_property_as_user(authenticated_client: AuthenticatedClient):
    response = await authenticated_client.post("/api/property", json=LISTING)
    assert response.status_code == 403


async def test_create_property_invalid_pincode(agent_client: AuthenticatedClient):
    body = {**LISTING, "location": {**LISTING["location"], "pincode": "42"}}

    response = await agent_client.post("/api/property", json=body)

    assert response.status_code == 400
    assert response.json()["errors"][0]["field"] == "location.pincode"


async def test_get_property_visibility(
    client: AsyncClient,
    agent_client: AuthenticatedClient,
    authenticated_client: AuthenticatedClient,
    listing: Property,
):
    assert (await client.get(f"/api/property/{listing.id}")).status_code == 404
    assert (await authenticated_client.get(f"/api/property/{listing.id}")).status_code == 404
    assert (await agent_client.get(f"/api/property/{listing.id}")).status_code == 200


async def test_get_approved_property_anonymously(
    client: AsyncClient, session: AsyncSession, admin: Account, listing: Property
):
    approve(listing, admin.id)
    await session.commit()

    response = await client.get(f"/api/property/{listing.id}")
    assert response.status_code == 200
    assert response.json()["property"]["title"] == listing.title


async def test_update_resets_approval(
    agent_client: AuthenticatedClient, session: AsyncSession, admin: Account, listing: Property
):
    approve(listing, admin.id)
    await session.commit()

    response = await agent_client.put(f"/api/property/{listing.id}", json={"price": 300000})

    assert response.status_code == 200
    prop = response.json()["property"]
    assert prop["price"] == 300000
    assert prop["is_approved"] is False
    assert prop["rejection_reason"] == ""


async def test_my_properties(agent_client: AuthenticatedClient, listing: Property):
    response = await agent_client.get("/api/property/agent/my-properties")

    assert response.status_code == 200
    data = response.json()
    assert [p["id"] for p in data["properties"]] == [listing.id]
    assert data["pagination"]["total"] == 1


async def test_delete_property(
    agent_client: AuthenticatedClient, admin_client: AuthenticatedClient, listing: Property
):
    response = await agent_client.delete(f"/api/property/{listing.id}")
    assert response.status_code == 200

    response = await admin_client.get(f"/api/property/{listing.id}")
    assert response.status_code == 404


async def test_user_cannot_delete(authenticated_client: AuthenticatedClient, listing: Property):
    response = await authenticated_client.delete(f"/api/property/{listing.id}")
    assert response.status_code == 403


async def test_create_property_title_too_long(agent_client: AuthenticatedClient):
    response = await agent_client.post("/api/property", json={**LISTING, "title": "T" * 256})

    assert response.status_code == 400
    assert response.json()["errors"][0]["field"] == "title"
