"""Leave balance schemas."""

from __future__ import annotations

import uuid
from typing import Optional

from pydantic import BaseModel, ConfigDict

from leavedesk.leave.schemas import LeaveTypeBrief


class LeaveBalanceOut(BaseModel):
    """Allocation for one employee, leave type and year."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    employee_id: uuid.UUID
    leave_type_id: uuid.UUID
    year: int
    total_days: int
    used_days: int
    remaining_days: int
    leave_type: Optional[LeaveTypeBrief] = None
