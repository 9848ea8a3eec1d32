"""Request and response schemas for the account endpoints."""

import re
from typing import Literal

from pydantic import BaseModel, EmailStr, Field, field_validator, model_validator

from estatehub.constants import OTP_LENGTH
from estatehub.models import AccountRead

CONTACT_RE = re.compile(r"^[0-9]{10}$")


def _normalize_email(value: str) -> str:
    return value.strip().lower()


def _check_contact(value: str) -> str:
    if not CONTACT_RE.match(value):
        raise ValueError("Contact must be a valid 10-digit number")
    return value


class SignupRequest(BaseModel):
    """Signup payload. Agent-only fields are ignored for other roles."""

    name: str = Field(min_length=3, max_length=255)
    email: EmailStr
    password: str = Field(min_length=8)
    contact: str
    role: Literal["user", "agent"] = "user"

    # Agent-specific
    agency_name: str | None = Field(default=None, min_length=2, max_length=255)
    license_number: str | None = Field(default=None, max_length=100)
    experience: int | None = Field(default=None, ge=0)
    specialization: list[str] | None = None

    normalize_email = field_validator("email")(_normalize_email)
    check_contact = field_validator("contact")(_check_contact)

    @model_validator(mode="after")
    def drop_agent_fields(self) -> "SignupRequest":
        if self.role != "agent":
            self.agency_name = None
            self.license_number = None
            self.experience = None
            self.specialization = None
        return self


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=1)

    normalize_email = field_validator("email")(_normalize_email)


class VerifyOtpRequest(BaseModel):
    email: EmailStr
    otp: str = Field(pattern=rf"^[0-9]{{{OTP_LENGTH}}}$")

    normalize_email = field_validator("email")(_normalize_email)


class ResendOtpRequest(BaseModel):
    email: EmailStr

    normalize_email = field_validator("email")(_normalize_email)


class ProfileUpdateRequest(BaseModel):
    """Partial profile update. Omitted fields keep their current value."""

    name: str | None = Field(default=None, min_length=3, max_length=255)
    contact: str | None = None
    address: str | None = Field(default=None, max_length=500)
    city: str | None = Field(default=None, max_length=100)
    state: str | None = Field(default=None, max_length=100)
    country: str | None = Field(default=None, max_length=100)
    pincode: str | None = Field(default=None, max_length=20)

    # Applied to agents only
    bio: str | None = None
    agency_name: str | None = Field(default=None, max_length=255)
    experience: int | None = Field(default=None, ge=0)
    specialization: list[str] | None = None

    @field_validator("contact")
    @classmethod
    def check_contact(cls, value: str | None) -> str | None:
        return None if value is None else _check_contact(value)


class SignupResponse(BaseModel):
    message: str
    # In development, include the verification path for testing
    verification_link: str | None = None


class AccountResponse(BaseModel):
    message: str
    user: AccountRead


class LoginResponse(BaseModel):
    message: str


class VerifyOtpResponse(BaseModel):
    message: str
    token: str
    user: AccountRead


class RefreshResponse(BaseModel):
    message: str
    access_token: str
