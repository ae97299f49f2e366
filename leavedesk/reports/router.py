"""Report endpoints — leave statistics and breakdowns.

Open to holders of ``reports.view`` (managers, HR, admins). Figures are
limited to the leaves the caller may see.
"""


import uuid
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from leavedesk.auth.dependencies import require_permission
from leavedesk.auth.permissions import REPORTS_VIEW
from leavedesk.auth.schemas import Actor
from leavedesk.common.exceptions import ValidationException
from leavedesk.database import get_db
from leavedesk.reports.schemas import (
    LeaveByDepartmentResponse,
    LeaveByTypeResponse,
    LeaveStatsResponse,
    MonthlyTrendsResponse,
    ReportFilters,
)
from leavedesk.reports.service import ReportService

router = APIRouter(prefix="", tags=["reports"])


def report_filters(
    start_date: Optional[date] = Query(None, description="Leaves starting on or after"),
    end_date: Optional[date] = Query(None, description="Leaves ending on or before"),
    department: Optional[str] = Query(None),
    leave_type_id: Optional[uuid.UUID] = Query(None),
) -> ReportFilters:
    if start_date and end_date and end_date < start_date:
        raise ValidationException({"end_date": ["End date must be on or after start date."]})
    return ReportFilters(
        start_date=start_date,
        end_date=end_date,
        department=department,
        leave_type_id=leave_type_id,
    )


# ── GET /leave-stats ────────────────────────────────────────────────

@router.get("/leave-stats", response_model=LeaveStatsResponse)
async def leave_stats(
    filters: ReportFilters = Depends(report_filters),
    actor: Actor = Depends(require_permission(REPORTS_VIEW)),
    db: AsyncSession = Depends(get_db),
):
    """Status counts, approved days and average processing time."""
    return await ReportService.get_leave_stats(db, actor, filters)


# ── GET /leave-by-type ──────────────────────────────────────────────

@router.get("/leave-by-type", response_model=LeaveByTypeResponse)
async def leave_by_type(
    filters: ReportFilters = Depends(report_filters),
    actor: Actor = Depends(require_permission(REPORTS_VIEW)),
    db: AsyncSession = Depends(get_db),
):
    return await ReportService.get_leave_by_type(db, actor, filters)


# ── GET /leave-by-department ────────────────────────────────────────

@router.get("/leave-by-department", response_model=LeaveByDepartmentResponse)
async def leave_by_department(
    filters: ReportFilters = Depends(report_filters),
    actor: Actor = Depends(require_permission(REPORTS_VIEW)),
    db: AsyncSession = Depends(get_db),
):
    return await ReportService.get_leave_by_department(db, actor, filters)


# ── GET /monthly-trends ─────────────────────────────────────────────

@router.get("/monthly-trends", response_model=MonthlyTrendsResponse)
async def monthly_trends(
    filters: ReportFilters = Depends(report_filters),
    actor: Actor = Depends(require_permission(REPORTS_VIEW)),
    db: AsyncSession = Depends(get_db),
):
    """Requests and approvals per month of the leave start date."""
    return await ReportService.get_monthly_trends(db, actor, filters)
