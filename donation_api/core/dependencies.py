"""FastAPI dependencies for injected collaborators and the current caller."""

from typing import Annotated, Any

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from donation_api.config import Settings
from donation_api.core.exceptions import AuthError
from donation_api.core.gateway import PersistenceGateway
from donation_api.core.geocoding import GeocodeClient
from donation_api.core.security import verify_token

bearer_scheme = HTTPBearer(auto_error=False)


def get_app_settings(request: Request) -> Settings:
    """Return the settings the application was built with."""
    return request.app.state.settings


def get_gateway(request: Request) -> PersistenceGateway:
    """Return the persistence gateway built at startup."""
    return request.app.state.gateway


def get_geocoder(request: Request) -> GeocodeClient:
    """Return the geocode client built at startup."""
    return request.app.state.geocoder


def parse_id(raw: str) -> int | None:
    """Coerce a path id to an integer, or None when it is not numeric."""
    try:
        return int(raw)
    except (TypeError, ValueError):
        return None


def get_current_user(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
    settings: Annotated[Settings, Depends(get_app_settings)],
) -> dict[str, Any]:
    """Decode the bearer token of the request.

    Returns:
        The caller's user record as carried in the token

    Raises:
        AuthError: If the header is missing or the token is invalid or expired
    """
    if credentials is None:
        raise AuthError("no authorization token was found")
    return verify_token(credentials.credentials, settings.jwt_secret, settings.algorithm)
