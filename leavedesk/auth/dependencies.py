"""Auth dependencies — JWT validation, permission enforcement.

The identity provider signs the bearer token; ``sub`` is the canonical
employee id. The role is always read from the employee record, never from
the token, so a role change takes effect on the next request.
"""

from __future__ import annotations

import logging
import uuid
from typing import Callable

from fastapi import Depends, Request
from jose import ExpiredSignatureError, JWTError, jwt
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from leavedesk.auth.permissions import has_any_permission, has_permission
from leavedesk.auth.schemas import Actor
from leavedesk.common.exceptions import ForbiddenException, UnauthorizedException
from leavedesk.config import settings
from leavedesk.database import get_db
from leavedesk.employees.models import Employee

logger = logging.getLogger(__name__)


def _role_name(role) -> str:
    return getattr(role, "value", str(role))


def _extract_bearer(request: Request) -> str:
    """Extract Bearer token from Authorization header."""
    auth_header = request.headers.get("Authorization")
    if not auth_header or not auth_header.startswith("Bearer "):
        raise UnauthorizedException("Missing or invalid Authorization header.")
    return auth_header[7:]


def _decode(token: str) -> dict:
    options = {"verify_aud": settings.JWT_AUDIENCE is not None}
    try:
        return jwt.decode(
            token,
            settings.JWT_SECRET,
            algorithms=[settings.JWT_ALGORITHM],
            audience=settings.JWT_AUDIENCE,
            options=options,
        )
    except ExpiredSignatureError:
        raise UnauthorizedException("Token has expired.")
    except JWTError:
        raise UnauthorizedException("Invalid token.")


# ── Core dependency ─────────────────────────────────────────────────

async def get_current_employee(
    request: Request,
    db: AsyncSession = Depends(get_db),
) -> Employee:
    """Validate the JWT and return the active Employee it names."""
    payload = _decode(_extract_bearer(request))

    try:
        employee_id = uuid.UUID(str(payload.get("sub")))
    except ValueError:
        raise UnauthorizedException("Invalid token subject.")

    result = await db.execute(
        select(Employee).where(
            Employee.id == employee_id,
            Employee.is_active.is_(True),
        )
    )
    employee = result.scalars().first()
    if employee is None:
        logger.warning("token for unknown or inactive employee %s", employee_id)
        raise UnauthorizedException("User account is inactive or not found.")

    return employee


async def get_current_actor(
    employee: Employee = Depends(get_current_employee),
) -> Actor:
    """The caller as seen by the leave lifecycle: id plus stored role."""
    return Actor(id=employee.id, role=employee.role)


# ── Permission-based dependencies ───────────────────────────────────

def require_permission(permission: str) -> Callable:
    """Return a FastAPI dependency that enforces a specific permission string."""

    async def _check(actor: Actor = Depends(get_current_actor)) -> Actor:
        if not has_permission(actor.role, permission):
            raise ForbiddenException(
                detail=f"Permission '{permission}' is not granted to role '{_role_name(actor.role)}'.",
            )
        return actor

    return _check


def require_any_permission(*permissions: str) -> Callable:
    """Like ``require_permission`` but any one of *permissions* suffices."""

    async def _check(actor: Actor = Depends(get_current_actor)) -> Actor:
        if not has_any_permission(actor.role, permissions):
            raise ForbiddenException(
                detail=f"One of {list(permissions)} is required; role '{_role_name(actor.role)}' has none.",
            )
        return actor

    return _check
