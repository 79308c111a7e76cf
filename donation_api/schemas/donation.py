"""Donation schemas."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, field_validator


class DonationCreate(BaseModel):
    """Donation creation request schema.

    Donor, recipient and pickup address are assigned by the server, so they
    are not accepted here.
    """

    model_config = ConfigDict(extra="ignore")

    category: Optional[str] = None
    details: Optional[str] = None
    amount: Optional[int] = None
    pickup_date: Optional[datetime] = None

    @field_validator("category", mode="before")
    @classmethod
    def normalize_category(cls, v: Optional[str]) -> Optional[str]:
        """Normalize category by stripping whitespace."""
        return v.strip() if isinstance(v, str) else v


class DonationUpdate(BaseModel):
    """Donation update request schema (admin only)."""

    model_config = ConfigDict(extra="ignore")

    category: Optional[str] = None
    details: Optional[str] = None
    amount: Optional[int] = None
    pickup_date: Optional[datetime] = None
    pickup_address: Optional[str] = None
    donor: Optional[int] = None
    recipient: Optional[int] = None

    @field_validator("category", "pickup_address", mode="before")
    @classmethod
    def normalize_text(cls, v: Optional[str]) -> Optional[str]:
        """Normalize text fields by stripping whitespace."""
        return v.strip() if isinstance(v, str) else v
