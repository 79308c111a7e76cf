"""Error taxonomy shared by the gateway, auth, geocoding and routers.

Every error carries the HTTP status it is rendered with and a detail that ends
up in the ``{"err": detail}`` response body.
"""

from typing import Any


class DonationAPIError(Exception):
    """Base exception for request handling failures."""

    status_code: int = 500

    def __init__(self, detail: Any, status_code: int | None = None) -> None:
        super().__init__(str(detail))
        self.detail = detail
        if status_code is not None:
            self.status_code = status_code


class ValidationError(DonationAPIError):
    """Raised for bad or duplicate input, e.g. an email that already exists."""

    pass


class AuthError(DonationAPIError):
    """Raised for bad credentials, missing permissions or an invalid token."""

    status_code = 401


class PersistenceError(DonationAPIError):
    """Raised when the underlying storage fails."""

    pass


class GeocodeError(DonationAPIError):
    """Raised when an address cannot be resolved to coordinates."""

    pass
