"""Admin moderation endpoints."""

from typing import Annotated

from fastapi import APIRouter, Body, Depends, Query

from estatehub.api.deps import AdminAccount, ContextDep, PageDep, SessionDep
from estatehub.models import AccountRead, PropertyRead, PropertyStatus
from estatehub.schemas.admin import (
    AgentListResponse,
    AgentResponse,
    DashboardResponse,
    RejectRequest,
)
from estatehub.schemas.common import Pagination
from estatehub.schemas.property import PropertyListResponse, PropertyResponse
from estatehub.services.moderation import ModerationService, ModerationState

router = APIRouter()


def _service(session: SessionDep, ctx: ContextDep) -> ModerationService:
    return ModerationService(session, ctx.notifier)


ModerationDep = Annotated[ModerationService, Depends(_service)]


@router.get("/dashboard", response_model=DashboardResponse)
async def dashboard(_admin: AdminAccount, service: ModerationDep):
    data = await service.dashboard()
    return DashboardResponse(
        message="Dashboard stats fetched",
        stats=data["stats"],
        recent_pending_agents=[AccountRead.model_validate(a) for a in data["recent_pending_agents"]],
        recent_pending_properties=[
            PropertyRead.model_validate(p) for p in data["recent_pending_properties"]
        ],
    )


@router.get("/agents", response_model=AgentListResponse)
async def list_agents(
    _admin: AdminAccount,
    service: ModerationDep,
    page: PageDep,
    state: Annotated[ModerationState | None, Query(alias="status")] = None,
    search: str | None = None,
):
    """List agents, optionally filtered by moderation status and a search term."""
    agents, total = await service.list_agents(state, search, page)
    return AgentListResponse(
        message="Agents fetched",
        agents=[AccountRead.model_validate(a) for a in agents],
        pagination=Pagination.build(page, total),
    )


@router.put("/agents/{agent_id}/approve", response_model=AgentResponse)
async def approve_agent(agent_id: str, admin: AdminAccount, service: ModerationDep):
    agent = await service.approve_agent(agent_id, admin)
    return AgentResponse(message="Agent approved successfully", agent=AccountRead.model_validate(agent))


@router.put("/agents/{agent_id}/reject", response_model=AgentResponse)
async def reject_agent(
    agent_id: str,
    admin: AdminAccount,
    service: ModerationDep,
    data: Annotated[RejectRequest | None, Body()] = None,
):
    agent = await service.reject_agent(agent_id, admin, data.reason if data else None)
    return AgentResponse(message="Agent rejected", agent=AccountRead.model_validate(agent))


@router.get("/properties", response_model=PropertyListResponse)
async def list_properties(
    _admin: AdminAccount,
    service: ModerationDep,
    page: PageDep,
    approved: bool | None = None,
    status: PropertyStatus | None = None,
    search: str | None = None,
):
    properties, total = await service.list_properties(approved, status, search, page)
    return PropertyListResponse(
        message="Properties fetched",
        properties=[PropertyRead.model_validate(p) for p in properties],
        pagination=Pagination.build(page, total),
    )


@router.get("/properties/pending", response_model=PropertyListResponse)
async def pending_properties(_admin: AdminAccount, service: ModerationDep, page: PageDep):
    properties, total = await service.pending_properties(page)
    return PropertyListResponse(
        message="Pending properties fetched",
        properties=[PropertyRead.model_validate(p) for p in properties],
        pagination=Pagination.build(page, total),
    )


@router.put("/properties/{property_id}/approve", response_model=PropertyResponse)
async def approve_property(property_id: str, admin: AdminAccount, service: ModerationDep):
    prop = await service.approve_property(property_id, admin)
    return PropertyResponse(
        message="Property approved successfully", property=PropertyRead.model_validate(prop)
    )


@router.put("/properties/{property_id}/reject", response_model=PropertyResponse)
async def reject_property(
    property_id: str,
    admin: AdminAccount,
    service: ModerationDep,
    data: Annotated[RejectRequest | None, Body()] = None,
):
    prop = await service.reject_property(property_id, admin, data.reason if data else None)
    return PropertyResponse(message="Property rejected", property=PropertyRead.model_validate(prop))
