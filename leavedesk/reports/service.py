"""Report service — read-only leave aggregates.

Counting and grouping run in the database (COUNT/SUM/GROUP BY). Every query
is restricted by the caller's leave visibility, so a manager's figures cover
their own leaves and their direct reports' only.
"""

from __future__ import annotations

import math
from typing import Any

from sqlalchemy import Select, case, extract, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from leavedesk.auth.schemas import Actor
from leavedesk.common.constants import LeaveStatus
from leavedesk.employees.models import Employee
from leavedesk.leave.lifecycle import visibility_clause
from leavedesk.leave.models import Leave, LeaveType
from leavedesk.reports.schemas import (
    DepartmentBreakdownItem,
    LeaveByDepartmentResponse,
    LeaveByTypeResponse,
    LeaveStatsResponse,
    LeaveTypeBreakdownItem,
    MonthlyTrendItem,
    MonthlyTrendsResponse,
    ReportFilters,
)

UNKNOWN_DEPARTMENT = "Unknown"

_SECONDS_PER_DAY = 86400


def _percent(part: int, whole: int) -> float:
    return round(part / whole * 100, 2) if whole else 0.0


def _count_status(status: LeaveStatus):
    return func.count(case((Leave.status == status, 1)))


def _scoped(actor: Actor, filters: ReportFilters, *columns: Any) -> Select:
    """SELECT *columns* over visible leaves joined to requester and type."""
    query = (
        select(*columns)
        .select_from(Leave)
        .join(Employee, Employee.id == Leave.requester_id)
        .join(LeaveType, LeaveType.id == Leave.leave_type_id)
        .where(visibility_clause(actor))
    )
    if filters.start_date:
        query = query.where(Leave.start_date >= filters.start_date)
    if filters.end_date:
        query = query.where(Leave.end_date <= filters.end_date)
    if filters.department:
        query = query.where(Employee.department == filters.department)
    if filters.leave_type_id:
        query = query.where(Leave.leave_type_id == filters.leave_type_id)
    return query


class ReportService:
    """Async report aggregation queries."""

    @staticmethod
    async def get_leave_stats(
        db: AsyncSession,
        actor: Actor,
        filters: ReportFilters,
    ) -> LeaveStatsResponse:
        """Status counts, approved days and average processing time."""
        counts = (
            await db.execute(
                _scoped(
                    actor,
                    filters,
                    func.count(Leave.id).label("total"),
                    _count_status(LeaveStatus.approved).label("approved"),
                    _count_status(LeaveStatus.pending).label("pending"),
                    _count_status(LeaveStatus.rejected).label("rejected"),
                    _count_status(LeaveStatus.cancelled).label("cancelled"),
                    func.coalesce(
                        func.sum(
                            case(
                                (Leave.status == LeaveStatus.approved, Leave.days_count),
                                else_=0,
                            )
                        ),
                        0,
                    ).label("approved_days"),
                )
            )
        ).one()

        processed = (
            await db.execute(
                _scoped(
                    actor,
                    filters,
                    Leave.created_at,
                    Leave.approved_at,
                    Leave.updated_at,
                ).where(Leave.status != LeaveStatus.pending)
            )
        ).all()

        # Whole days, rounded up: a same-day review counts as one day
        durations = [
            math.ceil(
                ((row.approved_at or row.updated_at) - row.created_at).total_seconds()
                / _SECONDS_PER_DAY
            )
            for row in processed
        ]
        average = round(sum(durations) / len(durations), 2) if durations else 0.0

        return LeaveStatsResponse(
            total_requests=counts.total,
            approved_requests=counts.approved,
            pending_requests=counts.pending,
            rejected_requests=counts.rejected,
            cancelled_requests=counts.cancelled,
            approved_days=int(counts.approved_days),
            average_processing_days=average,
        )

    @staticmethod
    async def get_leave_by_type(
        db: AsyncSession,
        actor: Actor,
        filters: ReportFilters,
    ) -> LeaveByTypeResponse:
        request_count = func.count(Leave.id)
        rows = (
            await db.execute(
                _scoped(
                    actor,
                    filters,
                    LeaveType.id,
                    LeaveType.name,
                    request_count.label("count"),
                )
                .group_by(LeaveType.id, LeaveType.name)
                .order_by(request_count.desc(), LeaveType.name)
            )
        ).all()

        total = sum(row.count for row in rows)
        return LeaveByTypeResponse(
            data=[
                LeaveTypeBreakdownItem(
                    leave_type_id=row.id,
                    leave_type=row.name,
                    count=row.count,
                    percentage=_percent(row.count, total),
                )
                for row in rows
            ]
        )

    @staticmethod
    async def get_leave_by_department(
        db: AsyncSession,
        actor: Actor,
        filters: ReportFilters,
    ) -> LeaveByDepartmentResponse:
        rows = (
            await db.execute(
                _scoped(
                    actor,
                    filters,
                    Employee.department,
                    func.count(Leave.id).label("requests"),
                    _count_status(LeaveStatus.approved).label("approved"),
                )
                .group_by(Employee.department)
                .order_by(Employee.department)
            )
        ).all()

        return LeaveByDepartmentResponse(
            data=[
                DepartmentBreakdownItem(
                    department=row.department or UNKNOWN_DEPARTMENT,
                    requests=row.requests,
                    approved=row.approved,
                    approval_rate=_percent(row.approved, row.requests),
                )
                for row in rows
            ]
        )

    @staticmethod
    async def get_monthly_trends(
        db: AsyncSession,
        actor: Actor,
        filters: ReportFilters,
    ) -> MonthlyTrendsResponse:
        """Requests and approvals per month of the leave start date."""
        year = extract("year", Leave.start_date)
        month = extract("month", Leave.start_date)
        rows = (
            await db.execute(
                _scoped(
                    actor,
                    filters,
                    year.label("year"),
                    month.label("month"),
                    func.count(Leave.id).label("requests"),
                    _count_status(LeaveStatus.approved).label("approved"),
                )
                .group_by(year, month)
                .order_by(year, month)
            )
        ).all()

        return MonthlyTrendsResponse(
            data=[
                MonthlyTrendItem(
                    month=f"{int(row.year):04d}-{int(row.month):02d}",
                    requests=row.requests,
                    approved=row.approved,
                )
                for row in rows
            ]
        )
