"""
Role-Based Access Control (RBAC) Module

Two roles: superadmins manage every partner; partner users are scoped to the
partner named by their ``partner_code``.
"""

from enum import Enum
from typing import Optional
import logging

from app.exceptions import ForbiddenError
from app.schemas.auth import AuthUser

logger = logging.getLogger(__name__)


class Role(str, Enum):
    """User roles."""
    SUPER_ADMIN = "super_admin"
    PARTNER_USER = "partner_user"


def get_user_role(user: AuthUser) -> Role:
    try:
        return Role(user.role)
    except ValueError:
        # Unknown roles get the narrowest scope
        return Role.PARTNER_USER


def is_super_admin(user: Optional[AuthUser]) -> bool:
    return user is not None and get_user_role(user) == Role.SUPER_ADMIN


def can_access_partner(user: Optional[AuthUser], partner_code: str) -> bool:
    """Superadmins see every partner; partner users only their own."""
    if user is None:
        return False
    if is_super_admin(user):
        return True
    return bool(user.partner_code) and user.partner_code.upper() == (partner_code or "").upper()


def require_super_admin(current_user: AuthUser) -> None:
    """
    Raise unless the user is a superadmin.

    Usage:
        @router.post("/admin/partners")
        async def create_partner(current_user: CurrentUser, ...):
            require_super_admin(current_user)
            ...
    """
    if not is_super_admin(current_user):
        logger.warning(
            f"Superadmin access denied for user {current_user.id}",
            extra={"user_id": current_user.id, "role": current_user.role},
        )
        raise ForbiddenError("Superadmin access required")


def require_partner_access(current_user: AuthUser, partner_code: str) -> None:
    """Raise unless the user may act for ``partner_code``."""
    if not can_access_partner(current_user, partner_code):
        logger.warning(
            f"Partner access denied for user {current_user.id} on {partner_code}",
            extra={"user_id": current_user.id, "partner_code": partner_code},
        )
        raise ForbiddenError("You do not have access to this partner")
