"""Users router."""

import logging
from typing import Annotated, Any

from fastapi import APIRouter, Depends
from starlette.concurrency import run_in_threadpool

from donation_api.core.dependencies import get_current_user, get_gateway, get_geocoder, parse_id
from donation_api.core.exceptions import ValidationError
from donation_api.core.gateway import PersistenceGateway
from donation_api.core.geocoding import GeocodeClient
from donation_api.core.permissions import Action, is_authorized, require
from donation_api.core.security import hash_password, strip_password
from donation_api.schemas.user import ADDRESS_FIELDS, UserCreate, UserUpdate

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users", tags=["users"])

RECIPIENT_ROLE = "recipient"


@router.get("")
async def list_users(
    gateway: Annotated[PersistenceGateway, Depends(get_gateway)],
) -> list[dict[str, Any]]:
    """List every user."""
    users = await run_in_threadpool(gateway.users.find)
    return [strip_password(user) for user in users]


@router.post("")
async def create_user(
    user_data: UserCreate,
    gateway: Annotated[PersistenceGateway, Depends(get_gateway)],
    geocoder: Annotated[GeocodeClient, Depends(get_geocoder)],
) -> dict[str, Any]:
    """Register a new user.

    The email must be unused. The password is hashed and the address is
    geocoded before anything is stored.

    Args:
        user_data: Registration data
        gateway: Persistence gateway
        geocoder: Geocode client

    Returns:
        The stored user record

    Raises:
        ValidationError: If the email is already registered
        GeocodeError: If the address cannot be resolved
    """
    if await run_in_threadpool(gateway.users.find_one, {"email": user_data.email}) is not None:
        raise ValidationError("email already exists")

    fields = user_data.model_dump(exclude_none=True)
    fields["password"] = await run_in_threadpool(hash_password, user_data.password)

    coordinates = await geocoder.resolve(
        user_data.address, user_data.city, user_data.state, user_data.zip
    )
    fields["lat"] = coordinates.lat
    fields["lng"] = coordinates.lng

    user = await run_in_threadpool(gateway.users.create, fields)
    logger.info(f"Registered user {user['id']} with role {user['role']}")
    return user


@router.get("/{user_id}")
async def get_user(
    user_id: str,
    gateway: Annotated[PersistenceGateway, Depends(get_gateway)],
) -> Any:
    """Fetch one user with their donations, or list recipients.

    ``/users/recipient`` is routed here as well and returns every user with
    the recipient role.
    """
    if user_id == RECIPIENT_ROLE:
        recipients = await run_in_threadpool(gateway.users.find, {"role": RECIPIENT_ROLE})
        return [strip_password(user) for user in recipients]

    target_id = parse_id(user_id)
    if target_id is None:
        return None
    user = await run_in_threadpool(gateway.users.find_one, {"id": target_id}, populate=["donations"])
    return strip_password(user)


@router.put("/{user_id}")
async def update_user(
    user_id: str,
    user_data: UserUpdate,
    current_user: Annotated[dict[str, Any], Depends(get_current_user)],
    gateway: Annotated[PersistenceGateway, Depends(get_gateway)],
    geocoder: Annotated[GeocodeClient, Depends(get_geocoder)],
) -> Any:
    """Update a user's profile (self or admin).

    A new password is hashed, and the coordinates are resolved again when any
    address field changes. Only admins may change a role; a role sent by
    anyone else is ignored.

    Raises:
        AuthError: If the caller is neither the user nor an admin
    """
    target_id = parse_id(user_id)
    require(current_user, Action.MANAGE_USER, target_id)
    if target_id is None:
        raise ValidationError("invalid user id")

    fields = user_data.model_dump(exclude_unset=True, exclude_none=True)

    if "role" in fields and not is_authorized(current_user, Action.ADMIN):
        logger.info(f"Ignoring role change for user {target_id} requested by user {current_user.get('id')}")
        del fields["role"]

    if "password" in fields:
        fields["password"] = await run_in_threadpool(hash_password, fields["password"])

    if any(name in fields for name in ADDRESS_FIELDS):
        existing = await run_in_threadpool(gateway.users.find_one, {"id": target_id})
        if existing is None:
            return None
        location = {name: fields.get(name, existing.get(name)) for name in ADDRESS_FIELDS}
        coordinates = await geocoder.resolve(**location)
        fields["lat"] = coordinates.lat
        fields["lng"] = coordinates.lng

    user = await run_in_threadpool(gateway.users.update, {"id": target_id}, fields)
    if user is not None:
        logger.info(f"User {target_id} updated by user {current_user.get('id')}")
    return strip_password(user)


@router.delete("/{user_id}")
async def delete_user(
    user_id: str,
    current_user: Annotated[dict[str, Any], Depends(get_current_user)],
    gateway: Annotated[PersistenceGateway, Depends(get_gateway)],
) -> dict[str, str]:
    """Delete a user and every donation they made (self or admin).

    Raises:
        AuthError: If the caller is neither the user nor an admin
    """
    target_id = parse_id(user_id)
    require(current_user, Action.MANAGE_USER, target_id)
    if target_id is None:
        raise ValidationError("invalid user id")

    await run_in_threadpool(gateway.users.destroy, {"id": target_id})
    removed = await run_in_threadpool(gateway.donations.destroy, {"donor": target_id})

    logger.info(f"User {target_id} deleted by user {current_user.get('id')} with {removed} donations")
    return {"status": "User and donations deleted"}
