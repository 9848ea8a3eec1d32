"""Property listing management for agents."""

import logging

from sqlalchemy import func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from estatehub.models import Account, Property
from estatehub.schemas.common import PaginationParams
from estatehub.schemas.property import PropertyCreate, PropertyUpdate
from estatehub.services.errors import Forbidden, NotFound
from estatehub.services.moderation import reset_to_pending

logger = logging.getLogger(__name__)


class PropertyService:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def _get(self, property_id: str) -> Property:
        prop = await self.session.get(Property, property_id)
        if not prop:
            raise NotFound("Property not found")
        return prop

    async def create(self, agent: Account, data: PropertyCreate) -> Property:
        """Create a listing awaiting review. Only approved agents may list."""
        if not agent.is_agent or not agent.is_approved:
            raise Forbidden("Only approved agents can create properties")

        fields = data.model_dump(exclude={"location"})
        prop = Property(**fields, **data.location.model_dump(), agent_id=agent.id)
        self.session.add(prop)
        await self.session.commit()

        logger.info(f"Property {prop.id} created by {agent.email}")
        return prop

    async def update(self, agent: Account, property_id: str, data: PropertyUpdate) -> Property:
        """Apply changes and send the listing back for review."""
        prop = await self._get(property_id)
        if prop.agent_id != agent.id:
            raise Forbidden("You can only update your own properties")

        updates = data.model_dump(exclude_unset=True, exclude_none=True)
        location = updates.pop("location", None)
        if location:
            updates.update(location)
        for field, value in updates.items():
            setattr(prop, field, value)

        reset_to_pending(prop)
        self.session.add(prop)
        await self.session.commit()
        return prop

    async def get(self, property_id: str, viewer: Account | None = None) -> Property:
        """Fetch a listing. Unapproved listings are visible to their owner and admins only."""
        prop = await self._get(property_id)
        if prop.is_approved:
            return prop
        if viewer and (viewer.is_admin or viewer.id == prop.agent_id):
            return prop
        raise NotFound("Property not found")

    async def list_for_agent(
        self, agent: Account, params: PaginationParams
    ) -> tuple[list[Property], int]:
        count_stmt = select(func.count(1)).select_from(Property).where(Property.agent_id == agent.id)
        total = (await self.session.execute(count_stmt)).scalar_one()

        stmt = (
            select(Property)
            .where(Property.agent_id == agent.id)
            .order_by(Property.created_at.desc())  # type: ignore[attr-defined]
            .offset(params.offset)
            .limit(params.limit)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all()), total

    async def delete(self, account: Account, property_id: str) -> None:
        prop = await self._get(property_id)
        if not account.is_admin and prop.agent_id != account.id:
            raise Forbidden("You can only delete your own properties")

        await self.session.delete(prop)
        await self.session.commit()
        logger.info(f"Property {property_id} deleted by {account.email}")
