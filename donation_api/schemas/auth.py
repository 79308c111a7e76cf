"""Authentication schemas."""

from pydantic import BaseModel


class UserLogin(BaseModel):
    """User login request schema.

    The email is not format-checked here: an unknown or malformed address
    fails the same way as a wrong password.
    """

    email: str
    password: str
