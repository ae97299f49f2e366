"""Leave balance endpoints."""


import uuid
from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from leavedesk.auth.dependencies import require_any_permission
from leavedesk.auth.permissions import LEAVE_BALANCES_VIEW, LEAVE_BALANCES_VIEW_ALL
from leavedesk.auth.schemas import Actor
from leavedesk.database import get_db
from leavedesk.leave_balances.schemas import LeaveBalanceOut
from leavedesk.leave_balances.service import LeaveBalanceService

router = APIRouter(prefix="", tags=["leave-balances"])


@router.get("", response_model=list[LeaveBalanceOut])
async def get_balances(
    year: Optional[int] = Query(None, description="Leave year; defaults to current year"),
    employee_id: Optional[uuid.UUID] = Query(None, description="Defaults to the caller"),
    actor: Actor = Depends(
        require_any_permission(LEAVE_BALANCES_VIEW, LEAVE_BALANCES_VIEW_ALL)
    ),
    db: AsyncSession = Depends(get_db),
):
    """Leave balances for the caller, or for another employee with view-all."""
    target_year = year or datetime.now(timezone.utc).year
    return await LeaveBalanceService.get_balances(
        db, actor, employee_id or actor.id, target_year,
    )
