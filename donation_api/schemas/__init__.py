"""Pydantic schemas package."""

from donation_api.schemas.auth import UserLogin
from donation_api.schemas.donation import DonationCreate, DonationUpdate
from donation_api.schemas.user import UserCreate, UserUpdate

__all__ = [
    "UserCreate",
    "UserUpdate",
    "UserLogin",
    "DonationCreate",
    "DonationUpdate",
]
