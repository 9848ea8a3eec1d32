"""Property listing model."""

from datetime import datetime
from enum import Enum

from sqlmodel import Field, SQLModel

from estatehub.models.base import BaseModel, ModerationMixin


class PropertyType(str, Enum):
    """Whether a listing is for sale or rent."""

    SALE = "sale"
    RENT = "rent"


class PropertyStatus(str, Enum):
    """Market status of a listing."""

    AVAILABLE = "available"
    SOLD = "sold"
    RENTED = "rented"
    PENDING = "pending"


class Furnishing(str, Enum):
    UNFURNISHED = "unfurnished"
    SEMI_FURNISHED = "semi-furnished"
    FULLY_FURNISHED = "fully-furnished"


class Property(ModerationMixin, BaseModel, table=True):
    """Property listing owned by an agent. Created pending review."""

    __tablename__ = "properties"

    title: str = Field(max_length=255)
    description: str
    price: float = Field(gt=0)
    property_type: PropertyType = Field(index=True)
    category: str = Field(max_length=100, index=True)

    # Location
    address: str = Field(max_length=500)
    city: str = Field(max_length=100, index=True)
    state: str = Field(max_length=100)
    country: str = Field(max_length=100)
    pincode: str = Field(max_length=10)

    bedrooms: int = Field(default=0, ge=0)
    bathrooms: int = Field(default=0, ge=0)
    area: float = Field(gt=0, description="Area in sq ft")
    furnishing: Furnishing = Field(default=Furnishing.UNFURNISHED)

    status: PropertyStatus = Field(default=PropertyStatus.AVAILABLE, index=True)
    is_active: bool = Field(default=True)

    agent_id: str = Field(foreign_key="accounts.id", index=True, ondelete="CASCADE", max_length=21)


class PropertyRead(SQLModel):
    """Schema for reading a property."""

    id: str
    title: str
    description: str
    price: float
    property_type: PropertyType
    category: str
    address: str
    city: str
    state: str
    country: str
    pincode: str
    bedrooms: int
    bathrooms: int
    area: float
    furnishing: Furnishing
    status: PropertyStatus
    is_active: bool
    agent_id: str
    is_approved: bool
    rejection_reason: str
    approved_at: datetime | None
    approved_by: str | None
    created_at: datetime
    updated_at: datetime
