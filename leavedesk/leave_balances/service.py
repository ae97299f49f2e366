"""Leave balance lookups (read-only)."""

from __future__ import annotations

import uuid

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from leavedesk.auth.permissions import LEAVE_BALANCES_VIEW_ALL, has_permission
from leavedesk.auth.schemas import Actor
from leavedesk.common.exceptions import ForbiddenException, NotFoundException
from leavedesk.employees.models import Employee
from leavedesk.leave.models import LeaveBalance
from leavedesk.leave_balances.schemas import LeaveBalanceOut


class LeaveBalanceService:

    @staticmethod
    async def get_balances(
        db: AsyncSession,
        actor: Actor,
        employee_id: uuid.UUID,
        year: int,
    ) -> list[LeaveBalanceOut]:
        """Balances of *employee_id* for *year*.

        Reading someone else's balances requires ``leave-balances.view.all``.
        """
        if employee_id != actor.id:
            if not has_permission(actor.role, LEAVE_BALANCES_VIEW_ALL):
                raise ForbiddenException("You can only view your own leave balances.")
            emp_check = await db.execute(
                select(Employee.id).where(Employee.id == employee_id)
            )
            if emp_check.scalar() is None:
                raise NotFoundException("Employee", employee_id)

        result = await db.execute(
            select(LeaveBalance)
            .where(
                LeaveBalance.employee_id == employee_id,
                LeaveBalance.year == year,
            )
            .options(selectinload(LeaveBalance.leave_type))
            .order_by(LeaveBalance.leave_type_id)
        )
        return [LeaveBalanceOut.model_validate(b) for b in result.scalars().all()]
