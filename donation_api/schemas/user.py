"""User schemas."""

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

Role = Literal["admin", "recipient", "donor"]

_TEXT_FIELDS = (
    "organization",
    "first_name",
    "last_name",
    "address",
    "phone",
    "city",
    "state",
    "donation_type",
)

# Changing any of these means the stored coordinates are stale
ADDRESS_FIELDS = ("address", "city", "state", "zip")


class UserCreate(BaseModel):
    """User registration request schema."""

    model_config = ConfigDict(extra="ignore")

    email: EmailStr
    password: str = Field(..., min_length=1)
    role: Role = "donor"
    organization: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    address: Optional[str] = None
    phone: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip: Optional[int] = None
    donation_type: Optional[str] = None
    notes: Optional[str] = None

    @field_validator(*_TEXT_FIELDS, mode="before")
    @classmethod
    def normalize_text(cls, v: Optional[str]) -> Optional[str]:
        """Normalize text fields by stripping whitespace."""
        return v.strip() if isinstance(v, str) else v


class UserUpdate(BaseModel):
    """User update request schema. Only the fields sent are changed."""

    model_config = ConfigDict(extra="ignore")

    email: Optional[EmailStr] = None
    password: Optional[str] = Field(None, min_length=1)
    role: Optional[Role] = None
    organization: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    address: Optional[str] = None
    phone: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip: Optional[int] = None
    donation_type: Optional[str] = None
    notes: Optional[str] = None

    @field_validator(*_TEXT_FIELDS, mode="before")
    @classmethod
    def normalize_text(cls, v: Optional[str]) -> Optional[str]:
        """Normalize text fields by stripping whitespace."""
        return v.strip() if isinstance(v, str) else v
