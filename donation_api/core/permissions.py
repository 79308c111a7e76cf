"""Role and ownership checks shared by the routers."""

from enum import Enum
from typing import Any

from donation_api.core.exceptions import AuthError

ADMIN_ROLE = "admin"


class Action(str, Enum):
    """Kinds of protected actions."""

    MANAGE_USER = "manage_user"
    MANAGE_DONATION = "manage_donation"
    ADMIN = "admin"


def is_authorized(caller: dict[str, Any], action: Action, resource: Any = None) -> bool:
    """Decide whether ``caller`` may perform ``action`` on ``resource``.

    Admins may do anything. Otherwise:

    - ``MANAGE_USER``: ``resource`` is the target user id and must be the caller's own id
    - ``MANAGE_DONATION``: ``resource`` is a donation record whose donor must be the caller
    - ``ADMIN``: never

    Args:
        caller: Decoded token claims of the authenticated user
        action: Action being attempted
        resource: Target user id or donation record, depending on ``action``

    Returns:
        True if the action is allowed
    """
    if caller.get("role") == ADMIN_ROLE:
        return True

    caller_id = caller.get("id")
    if caller_id is None:
        return False

    if action is Action.MANAGE_USER:
        return resource is not None and caller_id == resource
    if action is Action.MANAGE_DONATION:
        return resource is not None and caller_id == resource.get("donor")
    return False


def require(caller: dict[str, Any], action: Action, resource: Any = None) -> None:
    """Raise ``AuthError`` unless ``caller`` may perform ``action``."""
    if not is_authorized(caller, action, resource):
        raise AuthError("unauthorized")
