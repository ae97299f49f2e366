"""Leave service layer — submission, review, cancellation, edit and delete.

Business logic:
  - Submission computes the inclusive day count and always files the leave
    under the caller
  - Every state change is one conditional UPDATE/DELETE whose WHERE clause
    restates the precondition; the affected-row count decides the outcome,
    so two concurrent reviews of one leave cannot both succeed
  - Reads are filtered by the caller's visibility (own / team / all)
  - Submit, approve, reject and cancel publish a ``LeaveEvent``

Operations return ``Success`` or ``Failure``; business failures never raise.
"""

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Optional

from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from leavedesk.auth.permissions import resolve_role
from leavedesk.auth.schemas import Actor
from leavedesk.common.audit import create_audit_entry
from leavedesk.common.constants import PRIVILEGED_ROLES, LeaveStatus
from leavedesk.common.pagination import PaginatedResponse, PaginationParams, paginate
from leavedesk.config import settings
from leavedesk.leave.events import LeaveEvent, dispatcher
from leavedesk.leave.lifecycle import (
    LeaveAction,
    authorize,
    calculate_days_count,
    can_view,
    next_status,
    visibility_clause,
)
from leavedesk.leave.models import Leave, LeaveType
from leavedesk.leave.results import Failure, Result, Success
from leavedesk.leave.schemas import LeaveCreate, LeaveFilters, LeaveOut, LeaveUpdate

logger = logging.getLogger(__name__)

ENTITY_TYPE = "leave"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ═════════════════════════════════════════════════════════════════════
# LeaveService
# ═════════════════════════════════════════════════════════════════════


class LeaveService:
    """Async leave lifecycle operations."""

    # ─────────────────────────────────────────────────────────────────
    # Helpers
    # ─────────────────────────────────────────────────────────────────

    @staticmethod
    def _base_query():
        return select(Leave).options(
            selectinload(Leave.requester),
            selectinload(Leave.approver),
            selectinload(Leave.leave_type),
        )

    @staticmethod
    async def _fetch(db: AsyncSession, leave_id: uuid.UUID) -> Optional[Leave]:
        """Load a leave with its relations, overwriting any stale copy."""
        result = await db.execute(
            LeaveService._base_query()
            .where(Leave.id == leave_id)
            .execution_options(populate_existing=True)
        )
        return result.scalars().first()

    @staticmethod
    def _to_out(leave: Leave) -> LeaveOut:
        return LeaveOut.model_validate(leave)

    @staticmethod
    def _snapshot(leave: Leave) -> dict[str, Any]:
        """JSON-safe view of the mutable fields, for the audit trail."""
        return {
            "status": leave.status.value,
            "leave_type_id": str(leave.leave_type_id),
            "start_date": leave.start_date.isoformat(),
            "end_date": leave.end_date.isoformat(),
            "days_count": leave.days_count,
            "reason": leave.reason,
        }

    @staticmethod
    async def _validate_request(
        db: AsyncSession,
        leave_type_id: uuid.UUID,
        start_date,
        end_date,
        *,
        check_type: bool = True,
    ) -> dict[str, list[str]]:
        """Return field errors for a submitted or edited date range and type.

        With ``check_type=False`` the leave type is taken as already accepted.
        """
        errors: dict[str, list[str]] = {}

        if end_date < start_date:
            errors.setdefault("end_date", []).append(
                "End date must be on or after start date."
            )
        elif calculate_days_count(start_date, end_date) > settings.MAX_LEAVE_SPAN_DAYS:
            errors.setdefault("end_date", []).append(
                f"A leave request may span at most {settings.MAX_LEAVE_SPAN_DAYS} days."
            )

        if not check_type:
            return errors

        leave_type = await db.get(LeaveType, leave_type_id)
        if leave_type is None:
            errors.setdefault("leave_type_id", []).append("Unknown leave type.")
        elif not leave_type.is_active:
            errors.setdefault("leave_type_id", []).append(
                f"Leave type '{leave_type.name}' is no longer available."
            )
        return errors

    @staticmethod
    def _refused(leave_id: Any, action: LeaveAction, actor: Actor, failure: Failure) -> Failure:
        logger.warning(
            "leave %s %s refused for %s: %s",
            leave_id, action.value, actor.id, failure.kind.value,
        )
        return failure

    @staticmethod
    async def _explain_miss(
        db: AsyncSession,
        leave_id: uuid.UUID,
        action: LeaveAction,
        actor: Actor,
    ) -> Failure:
        """Classify a conditional write that matched no row."""
        current = await LeaveService._fetch(db, leave_id)
        if current is None:
            failure = Failure.not_found(leave_id)
        else:
            failure = Failure.invalid_transition(
                f"Cannot {action.value} a leave request that is {current.status.value}."
            )
        return LeaveService._refused(leave_id, action, actor, failure)

    @staticmethod
    async def _transition(
        db: AsyncSession,
        actor: Actor,
        leave_id: uuid.UUID,
        action: LeaveAction,
        values: dict[str, Any],
        *,
        audit_extra: Optional[dict[str, Any]] = None,
    ) -> Result[LeaveOut]:
        """Shared approve / reject / cancel path."""
        leave = await LeaveService._fetch(db, leave_id)
        if leave is None:
            return LeaveService._refused(
                leave_id, action, actor, Failure.not_found(leave_id)
            )

        failure = authorize(leave, actor, action)
        if failure is not None:
            return LeaveService._refused(leave_id, action, actor, failure)

        target = next_status(leave.status, action)
        stmt = update(Leave).where(
            Leave.id == leave_id,
            Leave.status == LeaveStatus.pending,
        )
        if action is LeaveAction.cancel:
            stmt = stmt.where(Leave.requester_id == actor.id)
        result = await db.execute(
            stmt.values(status=target, updated_at=_utcnow(), **values)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            return await LeaveService._explain_miss(db, leave_id, action, actor)

        updated = await LeaveService._fetch(db, leave_id)

        await create_audit_entry(
            db,
            action=action.value,
            entity_type=ENTITY_TYPE,
            entity_id=leave_id,
            actor_id=actor.id,
            old_values={"status": LeaveStatus.pending.value},
            new_values={"status": target.value, **(audit_extra or {})},
        )
        await dispatcher.publish(
            db,
            LeaveEvent(
                leave_id=leave_id,
                new_status=target,
                actor_id=actor.id,
                requester_id=updated.requester_id,
            ),
        )
        logger.info("leave %s %s by %s", leave_id, target.value, actor.id)
        return Success(LeaveService._to_out(updated))

    # ─────────────────────────────────────────────────────────────────
    # Submit
    # ─────────────────────────────────────────────────────────────────

    @staticmethod
    async def create_leave(
        db: AsyncSession,
        actor: Actor,
        data: LeaveCreate,
    ) -> Result[LeaveOut]:
        """File a new pending leave for the caller."""
        errors = await LeaveService._validate_request(
            db, data.leave_type_id, data.start_date, data.end_date,
        )
        if errors:
            logger.warning("leave submission by %s rejected: %s", actor.id, errors)
            return Failure.validation(errors)

        leave = Leave(
            requester_id=actor.id,
            leave_type_id=data.leave_type_id,
            start_date=data.start_date,
            end_date=data.end_date,
            days_count=calculate_days_count(data.start_date, data.end_date),
            status=LeaveStatus.pending,
            reason=data.reason,
        )
        db.add(leave)
        await db.flush()

        await create_audit_entry(
            db,
            action="create",
            entity_type=ENTITY_TYPE,
            entity_id=leave.id,
            actor_id=actor.id,
            new_values=LeaveService._snapshot(leave),
        )
        await dispatcher.publish(
            db,
            LeaveEvent(
                leave_id=leave.id,
                new_status=LeaveStatus.pending,
                actor_id=actor.id,
                requester_id=actor.id,
            ),
        )
        logger.info(
            "leave %s submitted by %s (%d days)", leave.id, actor.id, leave.days_count,
        )
        created = await LeaveService._fetch(db, leave.id)
        return Success(LeaveService._to_out(created))

    # ─────────────────────────────────────────────────────────────────
    # Review
    # ─────────────────────────────────────────────────────────────────

    @staticmethod
    async def approve_leave(
        db: AsyncSession,
        actor: Actor,
        leave_id: uuid.UUID,
        comment: Optional[str] = None,
    ) -> Result[LeaveOut]:
        """Approve a pending leave. Requires ``leaves.approve``; never one's own."""
        return await LeaveService._transition(
            db, actor, leave_id, LeaveAction.approve,
            {
                "approver_id": actor.id,
                "approved_at": _utcnow(),
                "reviewer_comment": comment,
            },
            audit_extra={"comment": comment},
        )

    @staticmethod
    async def reject_leave(
        db: AsyncSession,
        actor: Actor,
        leave_id: uuid.UUID,
        comment: Optional[str] = None,
    ) -> Result[LeaveOut]:
        """Reject a pending leave. Requires ``leaves.reject``; never one's own."""
        return await LeaveService._transition(
            db, actor, leave_id, LeaveAction.reject,
            {
                "approver_id": actor.id,
                "approved_at": _utcnow(),
                "reviewer_comment": comment,
            },
            audit_extra={"comment": comment},
        )

    # ─────────────────────────────────────────────────────────────────
    # Cancel
    # ─────────────────────────────────────────────────────────────────

    @staticmethod
    async def cancel_leave(
        db: AsyncSession,
        actor: Actor,
        leave_id: uuid.UUID,
        reason: Optional[str] = None,
    ) -> Result[LeaveOut]:
        """Withdraw one's own pending leave."""
        return await LeaveService._transition(
            db, actor, leave_id, LeaveAction.cancel, {},
            audit_extra={"reason": reason},
        )

    # ─────────────────────────────────────────────────────────────────
    # Edit
    # ─────────────────────────────────────────────────────────────────

    @staticmethod
    async def edit_leave(
        db: AsyncSession,
        actor: Actor,
        leave_id: uuid.UUID,
        data: LeaveUpdate,
    ) -> Result[LeaveOut]:
        """Change type, dates or reason of one's own pending leave."""
        action = LeaveAction.edit
        leave = await LeaveService._fetch(db, leave_id)
        if leave is None:
            return LeaveService._refused(
                leave_id, action, actor, Failure.not_found(leave_id)
            )

        failure = authorize(leave, actor, action)
        if failure is not None:
            return LeaveService._refused(leave_id, action, actor, failure)

        changes = data.model_dump(exclude_unset=True)
        leave_type_id = changes.get("leave_type_id") or leave.leave_type_id
        start_date = changes.get("start_date") or leave.start_date
        end_date = changes.get("end_date") or leave.end_date

        # An unchanged type was accepted at submission, even if since retired
        errors = await LeaveService._validate_request(
            db, leave_type_id, start_date, end_date,
            check_type=leave_type_id != leave.leave_type_id,
        )
        if errors:
            return LeaveService._refused(
                leave_id, action, actor, Failure.validation(errors)
            )

        old_values = LeaveService._snapshot(leave)
        values: dict[str, Any] = {
            "leave_type_id": leave_type_id,
            "start_date": start_date,
            "end_date": end_date,
            "days_count": calculate_days_count(start_date, end_date),
            "updated_at": _utcnow(),
        }
        if "reason" in changes:
            values["reason"] = changes["reason"]

        result = await db.execute(
            update(Leave)
            .where(
                Leave.id == leave_id,
                Leave.status == LeaveStatus.pending,
                Leave.requester_id == actor.id,
            )
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            return await LeaveService._explain_miss(db, leave_id, action, actor)

        updated = await LeaveService._fetch(db, leave_id)
        await create_audit_entry(
            db,
            action="update",
            entity_type=ENTITY_TYPE,
            entity_id=leave_id,
            actor_id=actor.id,
            old_values=old_values,
            new_values=LeaveService._snapshot(updated),
        )
        logger.info("leave %s edited by %s", leave_id, actor.id)
        return Success(LeaveService._to_out(updated))

    # ─────────────────────────────────────────────────────────────────
    # Delete
    # ─────────────────────────────────────────────────────────────────

    @staticmethod
    async def delete_leave(
        db: AsyncSession,
        actor: Actor,
        leave_id: uuid.UUID,
    ) -> Result[None]:
        """Remove a leave: the requester while pending, HR/admin at any state."""
        action = LeaveAction.delete
        leave = await LeaveService._fetch(db, leave_id)
        if leave is None:
            return LeaveService._refused(
                leave_id, action, actor, Failure.not_found(leave_id)
            )

        failure = authorize(leave, actor, action)
        if failure is not None:
            return LeaveService._refused(leave_id, action, actor, failure)

        old_values = LeaveService._snapshot(leave)
        stmt = delete(Leave).where(Leave.id == leave_id)
        if resolve_role(actor.role) not in PRIVILEGED_ROLES:
            stmt = stmt.where(
                Leave.status == LeaveStatus.pending,
                Leave.requester_id == actor.id,
            )
        db.expunge(leave)
        result = await db.execute(stmt.execution_options(synchronize_session=False))
        if result.rowcount == 0:
            return await LeaveService._explain_miss(db, leave_id, action, actor)

        await create_audit_entry(
            db,
            action="delete",
            entity_type=ENTITY_TYPE,
            entity_id=leave_id,
            actor_id=actor.id,
            old_values=old_values,
        )
        logger.info("leave %s deleted by %s", leave_id, actor.id)
        return Success(None)

    # ─────────────────────────────────────────────────────────────────
    # Read
    # ─────────────────────────────────────────────────────────────────

    @staticmethod
    async def get_leave(
        db: AsyncSession,
        actor: Actor,
        leave_id: uuid.UUID,
    ) -> Result[LeaveOut]:
        leave = await LeaveService._fetch(db, leave_id)
        if leave is None:
            return Failure.not_found(leave_id)
        manager_id = leave.requester.manager_id if leave.requester else None
        if not can_view(leave, actor, manager_id):
            return Failure.forbidden("You do not have access to this leave request.")
        return Success(LeaveService._to_out(leave))

    @staticmethod
    async def list_leaves(
        db: AsyncSession,
        actor: Actor,
        filters: LeaveFilters,
        params: PaginationParams,
    ) -> Result[PaginatedResponse]:
        """List visible leaves, newest first, with optional filters."""
        query = (
            LeaveService._base_query()
            .where(visibility_clause(actor))
            .order_by(Leave.created_at.desc(), Leave.id.desc())
        )

        if filters.status:
            query = query.where(Leave.status == filters.status)
        if filters.leave_type_id:
            query = query.where(Leave.leave_type_id == filters.leave_type_id)
        if filters.requester_id:
            query = query.where(Leave.requester_id == filters.requester_id)
        if filters.from_date:
            query = query.where(Leave.end_date >= filters.from_date)
        if filters.to_date:
            query = query.where(Leave.start_date <= filters.to_date)

        page = await paginate(db, query, params, transform=LeaveService._to_out)
        return Success(page)
