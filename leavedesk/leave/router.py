"""Leave router — submit, list, view, edit, delete, approve/reject, cancel.

All endpoints require authentication. Route permissions are a first gate;
ownership, self-approval and state rules are enforced again by the service
and surface as 403 / 409 problem documents.
"""


import uuid
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request, Response
from sqlalchemy.ext.asyncio import AsyncSession

from leavedesk.auth.dependencies import get_current_actor, require_permission
from leavedesk.auth.permissions import LEAVES_APPROVE, LEAVES_CREATE, LEAVES_REJECT, LEAVES_VIEW
from leavedesk.auth.schemas import Actor
from leavedesk.common.constants import LeaveStatus
from leavedesk.common.pagination import PaginatedResponse, PaginationParams
from leavedesk.common.rate_limit import limiter
from leavedesk.config import settings
from leavedesk.database import get_db
from leavedesk.leave.results import unwrap
from leavedesk.leave.schemas import (
    LeaveCancelRequest,
    LeaveCreate,
    LeaveFilters,
    LeaveOut,
    LeaveReviewRequest,
    LeaveUpdate,
)
from leavedesk.leave.service import LeaveService

router = APIRouter(prefix="", tags=["leaves"])


# ── GET / ───────────────────────────────────────────────────────────

@router.get("", response_model=PaginatedResponse[LeaveOut])
async def list_leaves(
    status: Optional[LeaveStatus] = Query(None),
    leave_type_id: Optional[uuid.UUID] = Query(None),
    requester_id: Optional[uuid.UUID] = Query(None),
    from_date: Optional[date] = Query(None),
    to_date: Optional[date] = Query(None),
    pagination: PaginationParams = Depends(),
    actor: Actor = Depends(require_permission(LEAVES_VIEW)),
    db: AsyncSession = Depends(get_db),
):
    """Leaves visible to the caller: own, team (manager) or all (HR/admin)."""
    filters = LeaveFilters(
        status=status,
        leave_type_id=leave_type_id,
        requester_id=requester_id,
        from_date=from_date,
        to_date=to_date,
    )
    return unwrap(await LeaveService.list_leaves(db, actor, filters, pagination))


# ── POST / ──────────────────────────────────────────────────────────

@router.post("", response_model=LeaveOut, status_code=201)
@limiter.limit(settings.LEAVE_CREATE_RATE_LIMIT)
async def create_leave(
    request: Request,
    body: LeaveCreate,
    actor: Actor = Depends(require_permission(LEAVES_CREATE)),
    db: AsyncSession = Depends(get_db),
):
    """Submit a leave request for the caller. Starts as pending."""
    return unwrap(await LeaveService.create_leave(db, actor, body))


# ── GET /{id} ───────────────────────────────────────────────────────

@router.get("/{leave_id}", response_model=LeaveOut)
async def get_leave(
    leave_id: uuid.UUID,
    actor: Actor = Depends(require_permission(LEAVES_VIEW)),
    db: AsyncSession = Depends(get_db),
):
    return unwrap(await LeaveService.get_leave(db, actor, leave_id))


# ── PATCH /{id} ─────────────────────────────────────────────────────

@router.patch("/{leave_id}", response_model=LeaveOut)
async def edit_leave(
    leave_id: uuid.UUID,
    body: LeaveUpdate,
    actor: Actor = Depends(require_permission(LEAVES_CREATE)),
    db: AsyncSession = Depends(get_db),
):
    """Edit one's own pending leave request. Recomputes the day count."""
    return unwrap(await LeaveService.edit_leave(db, actor, leave_id, body))


# ── DELETE /{id} ────────────────────────────────────────────────────

@router.delete("/{leave_id}", status_code=204)
async def delete_leave(
    leave_id: uuid.UUID,
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db),
):
    """Delete a leave: own pending request, or any request for HR/admin."""
    unwrap(await LeaveService.delete_leave(db, actor, leave_id))
    return Response(status_code=204)


# ── POST /{id}/approve ──────────────────────────────────────────────

@router.post("/{leave_id}/approve", response_model=LeaveOut)
async def approve_leave(
    leave_id: uuid.UUID,
    body: Optional[LeaveReviewRequest] = None,
    actor: Actor = Depends(require_permission(LEAVES_APPROVE)),
    db: AsyncSession = Depends(get_db),
):
    """Approve a pending leave request. Self-approval is refused."""
    comment = body.comment if body else None
    return unwrap(
        await LeaveService.approve_leave(db, actor, leave_id, comment=comment)
    )


# ── POST /{id}/reject ───────────────────────────────────────────────

@router.post("/{leave_id}/reject", response_model=LeaveOut)
async def reject_leave(
    leave_id: uuid.UUID,
    body: Optional[LeaveReviewRequest] = None,
    actor: Actor = Depends(require_permission(LEAVES_REJECT)),
    db: AsyncSession = Depends(get_db),
):
    """Reject a pending leave request."""
    comment = body.comment if body else None
    return unwrap(
        await LeaveService.reject_leave(db, actor, leave_id, comment=comment)
    )


# ── POST /{id}/cancel ───────────────────────────────────────────────

@router.post("/{leave_id}/cancel", response_model=LeaveOut)
async def cancel_leave(
    leave_id: uuid.UUID,
    body: Optional[LeaveCancelRequest] = None,
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db),
):
    """Withdraw one's own pending leave request."""
    reason = body.reason if body else None
    return unwrap(
        await LeaveService.cancel_leave(db, actor, leave_id, reason=reason)
    )
