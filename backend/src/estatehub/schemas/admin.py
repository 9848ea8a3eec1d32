"""Schemas for the admin moderation endpoints."""

from pydantic import BaseModel, Field

from estatehub.models import AccountRead, PropertyRead
from estatehub.schemas.common import Pagination


class RejectRequest(BaseModel):
    reason: str | None = Field(default=None, max_length=1000)


class AgentResponse(BaseModel):
    message: str
    agent: AccountRead


class AgentListResponse(BaseModel):
    message: str
    agents: list[AccountRead]
    pagination: Pagination


class UserCounts(BaseModel):
    total: int


class ModerationCounts(BaseModel):
    total: int
    pending: int
    approved: int
    rejected: int


class DashboardStats(BaseModel):
    users: UserCounts
    agents: ModerationCounts
    properties: ModerationCounts


class DashboardResponse(BaseModel):
    message: str
    stats: DashboardStats
    recent_pending_agents: list[AccountRead]
    recent_pending_properties: list[PropertyRead]
