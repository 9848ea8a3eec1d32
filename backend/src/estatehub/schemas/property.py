"""Request and response schemas for property listings."""

from pydantic import BaseModel, Field

from estatehub.models import Furnishing, PropertyRead, PropertyType
from estatehub.schemas.common import Pagination


class LocationIn(BaseModel):
    address: str = Field(min_length=5, max_length=500)
    city: str = Field(min_length=2, max_length=100)
    state: str = Field(min_length=2, max_length=100)
    country: str = Field(min_length=2, max_length=100)
    pincode: str = Field(pattern=r"^[0-9]{6}$")


class PropertyCreate(BaseModel):
    title: str = Field(min_length=5, max_length=255)
    description: str = Field(min_length=20)
    price: float = Field(gt=0)
    property_type: PropertyType
    category: str = Field(min_length=1, max_length=100)
    location: LocationIn
    bedrooms: int = Field(default=0, ge=0)
    bathrooms: int = Field(default=0, ge=0)
    area: float = Field(gt=0)
    furnishing: Furnishing = Furnishing.UNFURNISHED


class PropertyUpdate(BaseModel):
    """All fields optional; any change sends the listing back for review."""

    title: str | None = Field(default=None, min_length=5, max_length=255)
    description: str | None = Field(default=None, min_length=20)
    price: float | None = Field(default=None, gt=0)
    property_type: PropertyType | None = None
    category: str | None = Field(default=None, min_length=1, max_length=100)
    location: LocationIn | None = None
    bedrooms: int | None = Field(default=None, ge=0)
    bathrooms: int | None = Field(default=None, ge=0)
    area: float | None = Field(default=None, gt=0)
    furnishing: Furnishing | None = None


class PropertyResponse(BaseModel):
    message: str
    property: PropertyRead


class PropertyListResponse(BaseModel):
    message: str
    properties: list[PropertyRead]
    pagination: Pagination
