"""Leave Pydantic v2 schemas — request / response validation.

Naming conventions:
  - *Create / *Update / *Request  → request bodies (write)
  - *Out                          → response bodies (read)
  - *Brief                        → compact embedded representations

Date-order and span rules are enforced by the service so that they surface as
the same validation failure whether the call came over HTTP or not.
"""

from __future__ import annotations

import uuid
from datetime import date, datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from leavedesk.common.constants import LeaveStatus
from leavedesk.employees.schemas import EmployeeBrief


# ═════════════════════════════════════════════════════════════════════
# Embedded / shared
# ═════════════════════════════════════════════════════════════════════


class LeaveTypeBrief(BaseModel):
    """Minimal leave type info embedded in leave responses."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    name: str


# ═════════════════════════════════════════════════════════════════════
# Requests
# ═════════════════════════════════════════════════════════════════════


class LeaveCreate(BaseModel):
    """Submit a leave request. The requester is always the caller."""

    leave_type_id: uuid.UUID
    start_date: date
    end_date: date
    reason: Optional[str] = Field(None, max_length=2000)


class LeaveUpdate(BaseModel):
    """Edit a pending leave request. Omitted fields are left unchanged."""

    leave_type_id: Optional[uuid.UUID] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    reason: Optional[str] = Field(None, max_length=2000)


class LeaveReviewRequest(BaseModel):
    """Approve or reject body."""

    comment: Optional[str] = Field(None, max_length=2000)


class LeaveCancelRequest(BaseModel):
    reason: Optional[str] = Field(None, max_length=2000)


class LeaveFilters(BaseModel):
    """Optional narrowing applied on top of the caller's visibility."""

    status: Optional[LeaveStatus] = None
    leave_type_id: Optional[uuid.UUID] = None
    requester_id: Optional[uuid.UUID] = None
    from_date: Optional[date] = None
    to_date: Optional[date] = None


# ═════════════════════════════════════════════════════════════════════
# Responses
# ═════════════════════════════════════════════════════════════════════


class LeaveOut(BaseModel):
    """Full leave request with related entities as single objects."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    requester_id: uuid.UUID
    leave_type_id: uuid.UUID
    start_date: date
    end_date: date
    days_count: int
    status: LeaveStatus
    reason: Optional[str] = None
    approver_id: Optional[uuid.UUID] = None
    approved_at: Optional[datetime] = None
    reviewer_comment: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    requester: Optional[EmployeeBrief] = None
    approver: Optional[EmployeeBrief] = None
    leave_type: Optional[LeaveTypeBrief] = None

    @field_validator("requester", "approver", "leave_type", mode="before")
    @classmethod
    def _single_related(cls, v: Any) -> Any:
        """Joined rows may arrive as a one-element list; keep only one object."""
        if isinstance(v, (list, tuple)):
            return v[0] if v else None
        return v
