"""Leave type catalog — list, create, update."""

from __future__ import annotations

import logging
import uuid
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from leavedesk.common.audit import create_audit_entry
from leavedesk.common.exceptions import ConflictError, NotFoundException
from leavedesk.leave.models import LeaveType
from leavedesk.leave_types.schemas import LeaveTypeCreate, LeaveTypeOut, LeaveTypeUpdate

logger = logging.getLogger(__name__)


class LeaveTypeService:

    @staticmethod
    async def _ensure_unique_name(
        db: AsyncSession,
        name: str,
        *,
        exclude_id: Optional[uuid.UUID] = None,
    ) -> None:
        query = select(LeaveType.id).where(func.lower(LeaveType.name) == name.lower())
        if exclude_id is not None:
            query = query.where(LeaveType.id != exclude_id)
        if (await db.execute(query)).first() is not None:
            raise ConflictError("name", name)

    @staticmethod
    async def list_leave_types(
        db: AsyncSession,
        *,
        include_inactive: bool = False,
    ) -> list[LeaveTypeOut]:
        """Leave types ordered by name; active only unless asked otherwise."""
        query = select(LeaveType).order_by(LeaveType.name)
        if not include_inactive:
            query = query.where(LeaveType.is_active.is_(True))

        result = await db.execute(query)
        return [LeaveTypeOut.model_validate(lt) for lt in result.scalars().all()]

    @staticmethod
    async def create_leave_type(
        db: AsyncSession,
        actor_id: uuid.UUID,
        data: LeaveTypeCreate,
    ) -> LeaveTypeOut:
        name = data.name.strip()
        await LeaveTypeService._ensure_unique_name(db, name)

        leave_type = LeaveType(
            name=name,
            description=data.description,
            default_allocation_days=data.default_allocation_days,
            is_active=data.is_active,
        )
        db.add(leave_type)
        await db.flush()

        await create_audit_entry(
            db,
            action="create",
            entity_type="leave_type",
            entity_id=leave_type.id,
            actor_id=actor_id,
            new_values=data.model_dump(),
        )
        logger.info("leave type %r created by %s", name, actor_id)
        return LeaveTypeOut.model_validate(leave_type)

    @staticmethod
    async def update_leave_type(
        db: AsyncSession,
        actor_id: uuid.UUID,
        leave_type_id: uuid.UUID,
        data: LeaveTypeUpdate,
    ) -> LeaveTypeOut:
        leave_type = await db.get(LeaveType, leave_type_id)
        if leave_type is None:
            raise NotFoundException("LeaveType", leave_type_id)

        changes = data.model_dump(exclude_unset=True)
        if changes.get("name") is not None:
            changes["name"] = changes["name"].strip()
            await LeaveTypeService._ensure_unique_name(
                db, changes["name"], exclude_id=leave_type_id,
            )

        old_values = {k: getattr(leave_type, k) for k in changes}
        for field, value in changes.items():
            if value is not None or field == "description":
                setattr(leave_type, field, value)
        await db.flush()
        await db.refresh(leave_type)

        await create_audit_entry(
            db,
            action="update",
            entity_type="leave_type",
            entity_id=leave_type.id,
            actor_id=actor_id,
            old_values=old_values,
            new_values=changes,
        )
        return LeaveTypeOut.model_validate(leave_type)
