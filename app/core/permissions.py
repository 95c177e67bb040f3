"""
Role-based access control.

Roles are ordered: student < moderator < admin. Endpoints declare the
roles they accept with `require_roles`; the check runs after the bearer
token has been resolved to an active user.
"""
import logging
from typing import Callable

from fastapi import Depends, HTTPException, status

from app.core.constants import UserRole
from app.core.dependencies import get_current_active_user
from app.models.user import User

logger = logging.getLogger(__name__)


def has_role(user: User, *roles: UserRole) -> bool:
    """Check whether a user holds one of the given roles (without raising)."""
    return user.role in {r.value for r in roles}


def require_roles(*roles: UserRole) -> Callable[..., User]:
    """
    Build a dependency that only lets users with one of `roles` through.

    Example usage:
        ```python
        @router.post("/", dependencies=[Depends(require_roles(UserRole.ADMIN))])
        def create_topic(...): ...

        # or, to also get the user:
        current_user: User = Depends(require_roles(UserRole.ADMIN, UserRole.MODERATOR))
        ```

    Raises:
        HTTPException 403: User doesn't have the role
    """

    def checker(current_user: User = Depends(get_current_active_user)) -> User:
        if not has_role(current_user, *roles):
            logger.warning(
                f"User {current_user.id} with role {current_user.role} refused; "
                f"requires one of {[r.value for r in roles]}"
            )
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="You don't have permission to perform this action",
            )
        return current_user

    return checker


require_admin = require_roles(UserRole.ADMIN)
require_staff = require_roles(UserRole.ADMIN, UserRole.MODERATOR)
