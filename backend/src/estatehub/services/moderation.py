"""Approval state machine for agent accounts and property listings."""

import logging
from datetime import datetime
from enum import Enum
from typing import Any

from sqlalchemy import func, or_
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from estatehub.constants import DEFAULT_AGENT_REJECTION_REASON, DEFAULT_PROPERTY_REJECTION_REASON
from estatehub.models import Account, AccountRole, ModerationMixin, Property, PropertyStatus
from estatehub.models.base import utcnow
from estatehub.schemas.common import PaginationParams
from estatehub.services.errors import AlreadyApproved, NotFound, ValidationError
from estatehub.services.notifications import NotificationDispatcher

logger = logging.getLogger(__name__)

RECENT_PENDING_LIMIT = 5


class ModerationState(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


def moderation_state(entity: ModerationMixin) -> ModerationState:
    if entity.is_approved:
        return ModerationState.APPROVED
    if entity.rejection_reason:
        return ModerationState.REJECTED
    return ModerationState.PENDING


def approve(entity: ModerationMixin, approver_id: str, now: datetime | None = None) -> None:
    """Move an entity to approved. Raises ``AlreadyApproved`` without touching it."""
    if entity.is_approved:
        raise AlreadyApproved(f"{type(entity).__name__} is already approved")
    entity.is_approved = True
    entity.rejection_reason = ""
    entity.approved_at = now or utcnow()
    entity.approved_by = approver_id


def reject(entity: ModerationMixin, reason: str | None, default_reason: str) -> None:
    """Move an entity to rejected. Allowed from any state."""
    entity.is_approved = False
    entity.rejection_reason = (reason or "").strip() or default_reason


def reset_to_pending(entity: ModerationMixin) -> None:
    entity.is_approved = False
    entity.rejection_reason = ""


def _state_filter(model: type[Account] | type[Property], state: ModerationState) -> Any:
    if state == ModerationState.APPROVED:
        return model.is_approved.is_(True)  # type: ignore[attr-defined]
    if state == ModerationState.REJECTED:
        return (model.is_approved.is_(False)) & (model.rejection_reason != "")  # type: ignore[attr-defined]
    return (model.is_approved.is_(False)) & (model.rejection_reason == "")  # type: ignore[attr-defined]


class ModerationService:
    """Admin review of agents and listings.

    Every transition is committed before the matching notification goes out;
    delivery failures are logged by the dispatcher and never undo the change.
    """

    def __init__(self, session: AsyncSession, notifier: NotificationDispatcher):
        self.session = session
        self.notifier = notifier

    async def _get_agent(self, agent_id: str) -> Account:
        account = await self.session.get(Account, agent_id)
        if not account:
            raise NotFound("Agent not found")
        if not account.is_agent:
            raise ValidationError("User is not an agent")
        return account

    async def _get_property(self, property_id: str) -> Property:
        prop = await self.session.get(Property, property_id)
        if not prop:
            raise NotFound("Property not found")
        return prop

    async def approve_agent(self, agent_id: str, admin: Account) -> Account:
        agent = await self._get_agent(agent_id)
        approve(agent, admin.id)
        self.session.add(agent)
        await self.session.commit()
        logger.info(f"Agent {agent.email} approved by {admin.email}")

        await self.notifier.send_agent_approved(agent.email, agent.name)
        return agent

    async def reject_agent(self, agent_id: str, admin: Account, reason: str | None = None) -> Account:
        agent = await self._get_agent(agent_id)
        reject(agent, reason, DEFAULT_AGENT_REJECTION_REASON)
        self.session.add(agent)
        await self.session.commit()
        logger.info(f"Agent {agent.email} rejected by {admin.email}")

        await self.notifier.send_agent_rejected(agent.email, agent.name, agent.rejection_reason)
        return agent

    async def approve_property(self, property_id: str, admin: Account) -> Property:
        prop = await self._get_property(property_id)
        approve(prop, admin.id)
        self.session.add(prop)
        await self.session.commit()
        logger.info(f"Property {prop.id} approved by {admin.email}")

        agent = await self.session.get(Account, prop.agent_id)
        if agent:
            await self.notifier.send_property_approved(agent.email, agent.name, prop.title)
        return prop

    async def reject_property(
        self, property_id: str, admin: Account, reason: str | None = None
    ) -> Property:
        prop = await self._get_property(property_id)
        reject(prop, reason, DEFAULT_PROPERTY_REJECTION_REASON)
        self.session.add(prop)
        await self.session.commit()
        logger.info(f"Property {prop.id} rejected by {admin.email}")

        agent = await self.session.get(Account, prop.agent_id)
        if agent:
            await self.notifier.send_property_rejected(
                agent.email, agent.name, prop.title, prop.rejection_reason
            )
        return prop

    async def list_agents(
        self,
        state: ModerationState | None,
        search: str | None,
        params: PaginationParams,
    ) -> tuple[list[Account], int]:
        """Agents newest first, optionally filtered by state and name/email/agency."""
        conditions: list[Any] = [Account.role == AccountRole.AGENT]
        if state:
            conditions.append(_state_filter(Account, state))
        if search:
            pattern = f"%{search.strip()}%"
            conditions.append(
                or_(
                    Account.name.ilike(pattern),  # type: ignore[attr-defined]
                    Account.email.ilike(pattern),  # type: ignore[attr-defined]
                    Account.agency_name.ilike(pattern),  # type: ignore[attr-defined]
                )
            )
        return await self._page(Account, conditions, params)

    async def list_properties(
        self,
        approved: bool | None,
        status: PropertyStatus | None,
        search: str | None,
        params: PaginationParams,
    ) -> tuple[list[Property], int]:
        conditions: list[Any] = []
        if approved is not None:
            conditions.append(Property.is_approved.is_(approved))  # type: ignore[attr-defined]
        if status:
            conditions.append(Property.status == status)
        if search:
            pattern = f"%{search.strip()}%"
            conditions.append(
                or_(
                    Property.title.ilike(pattern),  # type: ignore[attr-defined]
                    Property.city.ilike(pattern),  # type: ignore[attr-defined]
                )
            )
        return await self._page(Property, conditions, params)

    async def pending_properties(self, params: PaginationParams) -> tuple[list[Property], int]:
        return await self._page(
            Property, [_state_filter(Property, ModerationState.PENDING)], params
        )

    async def dashboard(self) -> dict[str, Any]:
        """Counts per state plus the most recent pending items."""
        user_total = await self._count(Account, [Account.role == AccountRole.USER])

        agent_base = [Account.role == AccountRole.AGENT]
        agents = {"total": await self._count(Account, agent_base)}
        properties = {"total": await self._count(Property, [])}
        for state in ModerationState:
            agents[state.value] = await self._count(
                Account, [*agent_base, _state_filter(Account, state)]
            )
            properties[state.value] = await self._count(
                Property, [_state_filter(Property, state)]
            )

        recent_params = PaginationParams(page=1, limit=RECENT_PENDING_LIMIT)
        recent_agents, _ = await self.list_agents(ModerationState.PENDING, None, recent_params)
        recent_properties, _ = await self.pending_properties(recent_params)

        return {
            "stats": {
                "users": {"total": user_total},
                "agents": agents,
                "properties": properties,
            },
            "recent_pending_agents": recent_agents,
            "recent_pending_properties": recent_properties,
        }

    async def _count(self, model: type[Account] | type[Property], conditions: list[Any]) -> int:
        stmt = select(func.count(1)).select_from(model)
        if conditions:
            stmt = stmt.where(*conditions)
        result = await self.session.execute(stmt)
        return result.scalar_one()

    async def _page(
        self,
        model: type[Account] | type[Property],
        conditions: list[Any],
        params: PaginationParams,
    ) -> tuple[list[Any], int]:
        total = await self._count(model, conditions)

        stmt = select(model)
        if conditions:
            stmt = stmt.where(*conditions)
        stmt = (
            stmt.order_by(model.created_at.desc())  # type: ignore[attr-defined]
            .offset(params.offset)
            .limit(params.limit)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all()), total
