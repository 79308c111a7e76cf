"""Authentication router."""

import logging
from typing import Annotated, Any

from fastapi import APIRouter, Depends
from fastapi.encoders import jsonable_encoder
from starlette.concurrency import run_in_threadpool

from donation_api.config import Settings
from donation_api.core.dependencies import get_app_settings, get_current_user, get_gateway
from donation_api.core.exceptions import AuthError, PersistenceError
from donation_api.core.gateway import PersistenceGateway
from donation_api.core.security import issue_token, strip_password, verify_password
from donation_api.schemas.auth import UserLogin

logger = logging.getLogger(__name__)

router = APIRouter(tags=["auth"])

LOGIN_FAILED = "failed to authenticate"


@router.post("/login")
async def login(
    user_data: UserLogin,
    gateway: Annotated[PersistenceGateway, Depends(get_gateway)],
    settings: Annotated[Settings, Depends(get_app_settings)],
) -> dict[str, Any]:
    """Authenticate user and return a bearer token.

    Args:
        user_data: User login data (email, password)
        gateway: Persistence gateway
        settings: Application settings

    Returns:
        The signed token and the user record without its password

    Raises:
        AuthError: If the lookup fails, the email is unknown or the password is wrong
    """
    try:
        user = await run_in_threadpool(gateway.users.find_one, {"email": user_data.email})
    except PersistenceError as e:
        raise AuthError(LOGIN_FAILED, status_code=500) from e

    stored_hash = user.get("password") if user is not None else None
    if not await run_in_threadpool(verify_password, user_data.password, stored_hash):
        logger.info(f"Failed login attempt for {user_data.email}")
        raise AuthError(LOGIN_FAILED, status_code=500)

    claims = jsonable_encoder(strip_password(user))
    token = issue_token(
        claims,
        settings.jwt_secret,
        ttl_seconds=settings.token_ttl_seconds,
        algorithm=settings.algorithm,
    )
    return {"token": token, "user": claims}


@router.get("/user_info")
async def user_info(
    current_user: Annotated[dict[str, Any], Depends(get_current_user)],
) -> dict[str, Any]:
    """Return the caller's user record as carried in their token."""
    return current_user
