"""Donations router."""

import logging
from typing import Annotated, Any

from fastapi import APIRouter, Depends
from starlette.concurrency import run_in_threadpool

from donation_api.core.dependencies import get_current_user, get_gateway, parse_id
from donation_api.core.exceptions import ValidationError
from donation_api.core.gateway import PersistenceGateway
from donation_api.core.permissions import Action, require
from donation_api.schemas.donation import DonationCreate, DonationUpdate

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/donations", tags=["donations"])

UNASSIGNED_RECIPIENT = 0


def format_pickup_address(user: dict[str, Any]) -> str:
    """Render a user's address as ``"<address>, <city>, <state>, <zip>"``."""
    parts = (user.get("address"), user.get("city"), user.get("state"), user.get("zip"))
    return ", ".join(str(part) for part in parts if part not in (None, ""))


@router.get("")
async def list_donations(
    gateway: Annotated[PersistenceGateway, Depends(get_gateway)],
) -> list[dict[str, Any]]:
    """List every donation."""
    return await run_in_threadpool(gateway.donations.find)


@router.post("")
async def create_donation(
    donation_data: DonationCreate,
    current_user: Annotated[dict[str, Any], Depends(get_current_user)],
    gateway: Annotated[PersistenceGateway, Depends(get_gateway)],
) -> dict[str, Any]:
    """Create a donation on behalf of the caller.

    The donor is always the caller and the pickup address is taken from the
    caller's profile; the recipient starts unassigned.

    Args:
        donation_data: Donation details
        current_user: Current authenticated user
        gateway: Persistence gateway

    Returns:
        The stored donation record
    """
    fields = donation_data.model_dump(exclude_none=True)
    fields["donor"] = current_user.get("id")
    fields["pickup_address"] = format_pickup_address(current_user)
    fields["recipient"] = UNASSIGNED_RECIPIENT

    donation = await run_in_threadpool(gateway.donations.create, fields)
    logger.info(f"Donation {donation['id']} created by user {donation['donor']}")
    return donation


@router.get("/{donation_id}")
async def get_donation(
    donation_id: str,
    gateway: Annotated[PersistenceGateway, Depends(get_gateway)],
) -> Any:
    """Fetch one donation, or null when it does not exist."""
    record_id = parse_id(donation_id)
    if record_id is None:
        return None
    return await run_in_threadpool(gateway.donations.find_one, {"id": record_id})


@router.put("/{donation_id}")
async def update_donation(
    donation_id: str,
    donation_data: DonationUpdate,
    current_user: Annotated[dict[str, Any], Depends(get_current_user)],
    gateway: Annotated[PersistenceGateway, Depends(get_gateway)],
) -> Any:
    """Update a donation (admin only).

    Raises:
        AuthError: If the caller is not an admin
    """
    require(current_user, Action.ADMIN)

    record_id = parse_id(donation_id)
    if record_id is None:
        raise ValidationError("invalid donation id")

    fields = donation_data.model_dump(exclude_unset=True, exclude_none=True)
    donation = await run_in_threadpool(gateway.donations.update, {"id": record_id}, fields)
    if donation is not None:
        logger.info(f"Donation {record_id} updated by admin {current_user.get('id')}")
    return donation


@router.delete("/{donation_id}")
async def delete_donation(
    donation_id: str,
    current_user: Annotated[dict[str, Any], Depends(get_current_user)],
    gateway: Annotated[PersistenceGateway, Depends(get_gateway)],
) -> dict[str, str]:
    """Delete a donation (its donor or an admin).

    Raises:
        AuthError: If the caller is neither the donor nor an admin
    """
    record_id = parse_id(donation_id)
    donation = None
    if record_id is not None:
        donation = await run_in_threadpool(gateway.donations.find_one, {"id": record_id})
    require(current_user, Action.MANAGE_DONATION, donation)

    if donation is not None:
        await run_in_threadpool(gateway.donations.destroy, {"id": record_id})
        logger.info(f"Donation {record_id} deleted by user {current_user.get('id')}")
    return {"status": "donation deleted"}
