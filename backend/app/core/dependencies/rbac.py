"""
Role-Based Access Control (RBAC) Dependencies Module
=====================================================

FastAPI dependencies for role-based authorization.

Role hierarchy (lowest to highest): client, operator, supervisor, admin.

- operator: reads, reports, dashboard, creating and editing records
- supervisor: deleting records, editing lookup tables
- admin: user management

Usage:
    @router.delete("/{vehicle_id}")
    def delete_vehicle(user: UserProfile = Depends(require_supervisor)):
        ...
"""

from typing import Callable

from fastapi import Depends, Request

from app.core.dependencies.auth import get_current_user
from app.core.exceptions import RoleNotAuthorizedError
from app.core.logging import get_logger, security_logger
from app.models.profile import UserProfile
from app.models.role_enum import Role

# Initialize logger
logger = get_logger(__name__)


# =====================================
# Role Hierarchy
# =====================================

# Higher index = more permissions
ROLE_HIERARCHY: list[Role] = [
    Role.CLIENT,
    Role.OPERATOR,
    Role.SUPERVISOR,
    Role.ADMIN,
]


def get_role_level(role: Role | str) -> int:
    """
    Get the hierarchy level for a role.

    Unknown roles get -1 and are denied everything.
    """
    try:
        return ROLE_HIERARCHY.index(Role(role))
    except ValueError:
        return -1


def has_role_or_higher(user_role: Role | str, required_role: Role) -> bool:
    """
    Check if user has the required role or higher.
    """
    return get_role_level(user_role) >= get_role_level(required_role)


# =====================================
# Role Requirement Dependencies
# =====================================

def _deny(request: Request, current_user: UserProfile, required: list[Role]) -> None:
    security_logger.log_unauthorized_access(
        user_id=str(current_user.id),
        resource=request.url.path,
        action=request.method,
    )
    logger.warning(
        "Role-based access denied",
        user_role=current_user.role,
        required_roles=[r.value for r in required],
        path=request.url.path,
    )
    raise RoleNotAuthorizedError(required_roles=[r.value for r in required])


def require_role(*allowed_roles: Role) -> Callable:
    """
    Create a dependency that requires one of the exact roles.

    This is stricter than require_role_or_higher.
    """
    def role_checker(
        request: Request,
        current_user: UserProfile = Depends(get_current_user),
    ) -> UserProfile:
        if current_user.role not in {r.value for r in allowed_roles}:
            _deny(request, current_user, list(allowed_roles))
        return current_user

    return role_checker


def require_role_or_higher(minimum_role: Role) -> Callable:
    """
    Create a dependency that requires a minimum role level.

    Users with the required role or any higher role can access.
    """
    def role_checker(
        request: Request,
        current_user: UserProfile = Depends(get_current_user),
    ) -> UserProfile:
        if not has_role_or_higher(current_user.role, minimum_role):
            _deny(request, current_user, ROLE_HIERARCHY[get_role_level(minimum_role):])
        return current_user

    return role_checker


# =====================================
# Convenience Dependencies
# =====================================

require_operator = require_role_or_higher(Role.OPERATOR)
require_supervisor = require_role_or_higher(Role.SUPERVISOR)
require_admin = require_role(Role.ADMIN)
