"""Employee Pydantic schemas embedded in other responses."""

from __future__ import annotations

import uuid
from typing import Optional

from pydantic import BaseModel, ConfigDict

from leavedesk.common.constants import Role


class EmployeeBrief(BaseModel):
    """Minimal employee info embedded in leave responses."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    email: str
    full_name: str
    role: Role
    department: Optional[str] = None


class EmployeeProfile(EmployeeBrief):
    """The authenticated caller's own profile."""

    first_name: Optional[str] = None
    last_name: Optional[str] = None
    manager_id: Optional[uuid.UUID] = None
    is_active: bool = True
