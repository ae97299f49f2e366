"""Report schemas — leave aggregates for the reporting pages."""

from __future__ import annotations

import uuid
from datetime import date
from typing import Optional

from pydantic import BaseModel, Field


class ReportFilters(BaseModel):
    """Narrowing shared by every report, applied after the caller's visibility."""

    start_date: Optional[date] = None
    end_date: Optional[date] = None
    department: Optional[str] = None
    leave_type_id: Optional[uuid.UUID] = None


# ═════════════════════════════════════════════════════════════════════
# GET /leave-stats
# ═════════════════════════════════════════════════════════════════════


class LeaveStatsResponse(BaseModel):
    total_requests: int = 0
    approved_requests: int = 0
    pending_requests: int = 0
    rejected_requests: int = 0
    cancelled_requests: int = 0
    approved_days: int = Field(0, description="Sum of days_count over approved leaves")
    average_processing_days: float = Field(
        0.0, description="Mean whole days from submission to review or cancellation",
    )


# ═════════════════════════════════════════════════════════════════════
# GET /leave-by-type, /leave-by-department, /monthly-trends
# ═════════════════════════════════════════════════════════════════════


class LeaveTypeBreakdownItem(BaseModel):
    leave_type_id: uuid.UUID
    leave_type: str
    count: int
    percentage: float


class LeaveByTypeResponse(BaseModel):
    data: list[LeaveTypeBreakdownItem] = Field(default_factory=list)


class DepartmentBreakdownItem(BaseModel):
    department: str
    requests: int
    approved: int
    approval_rate: float


class LeaveByDepartmentResponse(BaseModel):
    data: list[DepartmentBreakdownItem] = Field(default_factory=list)


class MonthlyTrendItem(BaseModel):
    month: str = Field(..., description="YYYY-MM of the leave start date")
    requests: int
    approved: int


class MonthlyTrendsResponse(BaseModel):
    data: list[MonthlyTrendItem] = Field(default_factory=list)
