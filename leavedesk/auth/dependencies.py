"""Auth dependencies: bearer-token validation and RBAC enforcement.

Tokens are minted by the identity provider; this service only verifies
them. The ``sub`` claim carries the employee id and the role is read from
``user_roles`` so role changes take effect without re-issuing tokens.
"""

from __future__ import annotations

import uuid
from typing import Callable

from fastapi import Depends, Request
from jose import ExpiredSignatureError, JWTError, jwt
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from leavedesk.auth.models import RoleAssignment
from leavedesk.common.constants import PERMISSIONS, PRIVILEGED_ROLES, UserRole
from leavedesk.common.exceptions import ForbiddenException, UnauthorizedException
from leavedesk.config import settings
from leavedesk.core_hr.models import Employee
from leavedesk.database import get_db

# Role hierarchy: each role implicitly includes lower roles
_ROLE_HIERARCHY: dict[UserRole, set[UserRole]] = {
    UserRole.admin: {UserRole.admin, UserRole.hr, UserRole.manager, UserRole.employee},
    UserRole.hr: {UserRole.hr, UserRole.manager, UserRole.employee},
    UserRole.manager: {UserRole.manager, UserRole.employee},
    UserRole.employee: {UserRole.employee},
}


def _extract_bearer(request: Request) -> str:
    """Extract Bearer token from Authorization header."""
    auth_header = request.headers.get("Authorization")
    if not auth_header or not auth_header.startswith("Bearer "):
        raise UnauthorizedException("Missing or invalid Authorization header.")
    return auth_header[7:]


def current_role(request: Request) -> UserRole:
    """Role resolved by ``get_current_user`` for this request."""
    return getattr(request.state, "user_role", UserRole.employee)


def is_privileged(role: UserRole) -> bool:
    """HR and admin see the whole organization."""
    return role in PRIVILEGED_ROLES


# ── Core dependency ─────────────────────────────────────────────────

async def get_current_user(
    request: Request,
    db: AsyncSession = Depends(get_db),
) -> Employee:
    """Validate the bearer token and return the authenticated Employee."""
    token = _extract_bearer(request)

    try:
        payload = jwt.decode(
            token,
            settings.JWT_SECRET,
            algorithms=[settings.JWT_ALGORITHM],
        )
    except ExpiredSignatureError:
        raise UnauthorizedException("Token has expired.")
    except JWTError:
        raise UnauthorizedException("Invalid token.")

    try:
        employee_id = uuid.UUID(str(payload.get("sub")))
    except ValueError:
        raise UnauthorizedException("Token subject is not an employee id.")

    result = await db.execute(
        select(Employee)
        .where(Employee.id == employee_id, Employee.is_active.is_(True))
        .options(
            selectinload(Employee.department),
            selectinload(Employee.role_assignment),
        ),
    )
    employee = result.scalars().first()
    if employee is None:
        raise UnauthorizedException("User account is inactive or not found.")

    assignment: RoleAssignment | None = employee.role_assignment
    request.state.user_role = assignment.role if assignment else UserRole.employee

    return employee


# ── Role-based dependency ───────────────────────────────────────────

def require_role(*allowed_roles: UserRole) -> Callable:
    """Return a FastAPI dependency that enforces role membership.

    Respects hierarchy, e.g. admin can access hr endpoints.
    """

    async def _check(
        request: Request,
        employee: Employee = Depends(get_current_user),
    ) -> Employee:
        user_role = current_role(request)
        effective_roles = _ROLE_HIERARCHY.get(user_role, {user_role})
        if not effective_roles.intersection(set(allowed_roles)):
            raise ForbiddenException(
                detail=f"Role '{user_role.value}' is not permitted. Required: {[r.value for r in allowed_roles]}.",
            )
        return employee

    return _check


# ── Permission-based dependency ─────────────────────────────────────

def require_permission(permission: str) -> Callable:
    """Return a FastAPI dependency that enforces a specific permission string."""

    async def _check(
        request: Request,
        employee: Employee = Depends(get_current_user),
    ) -> Employee:
        user_role = current_role(request)
        if permission not in PERMISSIONS.get(user_role, []):
            raise ForbiddenException(
                detail=f"Permission '{permission}' is not granted to role '{user_role.value}'.",
            )
        return employee

    return _check
