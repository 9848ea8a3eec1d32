"""Property listing endpoints."""

from fastapi import APIRouter, status

from estatehub.api.deps import (
    AgentAccount,
    AgentOrAdminAccount,
    CurrentAccountOptional,
    PageDep,
    SessionDep,
)
from estatehub.models import PropertyRead
from estatehub.schemas.common import MessageResponse, Pagination
from estatehub.schemas.property import (
    PropertyCreate,
    PropertyListResponse,
    PropertyResponse,
    PropertyUpdate,
)
from estatehub.services.properties import PropertyService

router = APIRouter()


@router.post("", response_model=PropertyResponse, status_code=status.HTTP_201_CREATED)
async def create_property(data: PropertyCreate, agent: AgentAccount, session: SessionDep):
    """Create a listing. It stays hidden until an admin approves it."""
    prop = await PropertyService(session).create(agent, data)
    return PropertyResponse(
        message="Property created and sent for approval",
        property=PropertyRead.model_validate(prop),
    )


@router.get("/agent/my-properties", response_model=PropertyListResponse)
async def my_properties(agent: AgentAccount, session: SessionDep, page: PageDep):
    properties, total = await PropertyService(session).list_for_agent(agent, page)
    return PropertyListResponse(
        message="Properties fetched",
        properties=[PropertyRead.model_validate(p) for p in properties],
        pagination=Pagination.build(page, total),
    )


@router.get("/{property_id}", response_model=PropertyResponse)
async def get_property(property_id: str, session: SessionDep, viewer: CurrentAccountOptional):
    prop = await PropertyService(session).get(property_id, viewer)
    return PropertyResponse(message="Property fetched", property=PropertyRead.model_validate(prop))


@router.put("/{property_id}", response_model=PropertyResponse)
async def update_property(
    property_id: str, data: PropertyUpdate, agent: AgentAccount, session: SessionDep
):
    prop = await PropertyService(session).update(agent, property_id, data)
    return PropertyResponse(
        message="Property updated and sent for re-approval",
        property=PropertyRead.model_validate(prop),
    )


@router.delete("/{property_id}", response_model=MessageResponse)
async def delete_property(property_id: str, account: AgentOrAdminAccount, session: SessionDep):
    await PropertyService(session).delete(account, property_id)
    return MessageResponse(message="Property deleted successfully")
