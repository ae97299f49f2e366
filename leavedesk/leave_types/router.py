"""Leave type endpoints — catalog of kinds of leave."""


import uuid

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from leavedesk.auth.dependencies import require_permission
from leavedesk.auth.permissions import (
    LEAVE_TYPES_CREATE,
    LEAVE_TYPES_UPDATE,
    LEAVE_TYPES_VIEW,
    has_permission,
)
from leavedesk.auth.schemas import Actor
from leavedesk.database import get_db
from leavedesk.leave_types.schemas import LeaveTypeCreate, LeaveTypeOut, LeaveTypeUpdate
from leavedesk.leave_types.service import LeaveTypeService

router = APIRouter(prefix="", tags=["leave-types"])


@router.get("", response_model=list[LeaveTypeOut])
async def list_leave_types(
    include_inactive: bool = Query(False, description="Only honoured for leave type managers"),
    actor: Actor = Depends(require_permission(LEAVE_TYPES_VIEW)),
    db: AsyncSession = Depends(get_db),
):
    include_inactive = include_inactive and has_permission(actor.role, LEAVE_TYPES_UPDATE)
    return await LeaveTypeService.list_leave_types(db, include_inactive=include_inactive)


@router.post("", response_model=LeaveTypeOut, status_code=201)
async def create_leave_type(
    body: LeaveTypeCreate,
    actor: Actor = Depends(require_permission(LEAVE_TYPES_CREATE)),
    db: AsyncSession = Depends(get_db),
):
    return await LeaveTypeService.create_leave_type(db, actor.id, body)


@router.patch("/{leave_type_id}", response_model=LeaveTypeOut)
async def update_leave_type(
    leave_type_id: uuid.UUID,
    body: LeaveTypeUpdate,
    actor: Actor = Depends(require_permission(LEAVE_TYPES_UPDATE)),
    db: AsyncSession = Depends(get_db),
):
    return await LeaveTypeService.update_leave_type(db, actor.id, leave_type_id, body)
