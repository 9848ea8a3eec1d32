"""SQLModel database models."""

from estatehub.models.account import Account, AccountRead, AccountRole
from estatehub.models.base import BaseModel, ModerationMixin, TimestampMixin
from estatehub.models.property import (
    Furnishing,
    Property,
    PropertyRead,
    PropertyStatus,
    PropertyType,
)

__all__ = [
    "Account",
    "AccountRead",
    "AccountRole",
    "BaseModel",
    "Furnishing",
    "ModerationMixin",
    "Property",
    "PropertyRead",
    "PropertyStatus",
    "PropertyType",
    "TimestampMixin",
]
