"""Account model: users, agents and admins."""

from datetime import datetime
from enum import Enum

from sqlalchemy import JSON, Column
from sqlmodel import Field, SQLModel

from estatehub.models.base import BaseModel, ModerationMixin


class AccountRole(str, Enum):
    """Role of an account."""

    USER = "user"
    AGENT = "agent"
    ADMIN = "admin"


class Account(ModerationMixin, BaseModel, table=True):
    """Persisted identity record.

    Only agents carry meaningful approval state. Users and admins are
    created approved.
    """

    __tablename__ = "accounts"

    name: str = Field(max_length=255)
    email: str = Field(unique=True, index=True, max_length=255)
    password_hash: str = Field(max_length=255)
    contact: str = Field(max_length=20)
    role: AccountRole = Field(default=AccountRole.USER, index=True)

    # Address
    address: str = Field(default="", max_length=500)
    city: str = Field(default="", max_length=100)
    state: str = Field(default="", max_length=100)
    country: str = Field(default="", max_length=100)
    pincode: str = Field(default="", max_length=20)

    # Agent profile
    agency_name: str = Field(default="", max_length=255)
    license_number: str = Field(default="", max_length=100)
    experience: int = Field(default=0, ge=0)
    specialization: list[str] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))
    bio: str = Field(default="")

    @property
    def is_agent(self) -> bool:
        return self.role == AccountRole.AGENT

    @property
    def is_admin(self) -> bool:
        return self.role == AccountRole.ADMIN


class AccountRead(SQLModel):
    """Sanitized account projection returned by the API."""

    id: str
    name: str
    email: str
    contact: str
    role: AccountRole
    is_approved: bool
    address: str
    city: str
    state: str
    country: str
    pincode: str
    agency_name: str
    license_number: str
    experience: int
    specialization: list[str]
    bio: str
    rejection_reason: str
    approved_at: datetime | None
    created_at: datetime
