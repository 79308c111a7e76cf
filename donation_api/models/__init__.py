"""Database models package."""

from donation_api.models.donation import Donation
from donation_api.models.user import User

__all__ = ["User", "Donation"]
