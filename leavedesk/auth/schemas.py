"""Auth schemas — the resolved caller identity and the /me payload."""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel

from leavedesk.employees.schemas import EmployeeProfile


@dataclass(frozen=True)
class Actor:
    """The caller of a lifecycle operation.

    ``id`` is the canonical employee id and ``role`` the role stored on that
    employee, both resolved once at the API boundary.
    """

    id: uuid.UUID
    role: Any


class MeResponse(BaseModel):
    """Caller profile plus the permissions its role grants."""

    employee: EmployeeProfile
    permissions: list[str]


class RolePermissionsResponse(BaseModel):
    role: str
    permissions: list[str]
