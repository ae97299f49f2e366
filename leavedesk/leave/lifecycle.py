"""Leave request lifecycle: transition table, authorization and visibility.

    pending ──approve──▶ approved
    pending ──reject───▶ rejected
    pending ──cancel───▶ cancelled
    pending ──edit─────▶ pending

``approved``, ``rejected`` and ``cancelled`` are terminal. Delete removes the
record; the requester may delete while pending, HR/admin at any state.

Everything here is pure: decisions are made on a snapshot (anything with
``requester_id`` and ``status``) and the caller's ``Actor``. The service
layer re-checks the state atomically when it writes.
"""

from __future__ import annotations

import enum
from datetime import date
from types import MappingProxyType
from typing import Any, Mapping, Optional

from sqlalchemy import ColumnElement, or_, select, true

from leavedesk.auth.permissions import LEAVES_APPROVE, LEAVES_REJECT, has_permission, resolve_role
from leavedesk.auth.schemas import Actor
from leavedesk.common.constants import PRIVILEGED_ROLES, LeaveStatus, Role
from leavedesk.employees.models import Employee
from leavedesk.leave.models import Leave
from leavedesk.leave.results import Failure


class LeaveAction(str, enum.Enum):
    approve = "approve"
    reject = "reject"
    cancel = "cancel"
    edit = "edit"
    delete = "delete"


TRANSITIONS: Mapping[tuple[LeaveStatus, LeaveAction], LeaveStatus] = MappingProxyType({
    (LeaveStatus.pending, LeaveAction.approve): LeaveStatus.approved,
    (LeaveStatus.pending, LeaveAction.reject): LeaveStatus.rejected,
    (LeaveStatus.pending, LeaveAction.cancel): LeaveStatus.cancelled,
    (LeaveStatus.pending, LeaveAction.edit): LeaveStatus.pending,
})

TERMINAL_STATES: frozenset[LeaveStatus] = frozenset({
    LeaveStatus.approved,
    LeaveStatus.rejected,
    LeaveStatus.cancelled,
})

_REVIEW_PERMISSION = {
    LeaveAction.approve: LEAVES_APPROVE,
    LeaveAction.reject: LEAVES_REJECT,
}


def _status(value: Any) -> Optional[LeaveStatus]:
    try:
        return LeaveStatus(value)
    except ValueError:
        return None


def next_status(status: Any, action: LeaveAction) -> Optional[LeaveStatus]:
    """Target state of *action* from *status*, or None if not allowed."""
    current = _status(status)
    if current is None:
        return None
    return TRANSITIONS.get((current, action))


def calculate_days_count(start_date: date, end_date: date) -> int:
    """Inclusive calendar-day span: the same day counts as 1."""
    return (end_date - start_date).days + 1


# ── Authorization ───────────────────────────────────────────────────

def authorize(snapshot: Any, actor: Actor, action: LeaveAction) -> Optional[Failure]:
    """Decide whether *actor* may perform *action* on the leave.

    Returns None when allowed, otherwise the ``Failure`` to report.
    Permission and ownership are checked before the state.
    """
    current = _status(snapshot.status)
    is_requester = snapshot.requester_id == actor.id

    if action in _REVIEW_PERMISSION:
        if not has_permission(actor.role, _REVIEW_PERMISSION[action]):
            return Failure.forbidden(f"Your role may not {action.value} leave requests.")
        if is_requester:
            return Failure.forbidden(f"You cannot {action.value} your own leave request.")
    elif action in (LeaveAction.cancel, LeaveAction.edit):
        if not is_requester:
            return Failure.forbidden(f"Only the requester can {action.value} a leave request.")
    elif action is LeaveAction.delete:
        if resolve_role(actor.role) in PRIVILEGED_ROLES:
            return None
        if is_requester and current is LeaveStatus.pending:
            return None
        return Failure.forbidden("You can only delete your own pending leave requests.")

    if next_status(current, action) is None:
        state = current.value if current is not None else str(snapshot.status)
        return Failure.invalid_transition(
            f"Cannot {action.value} a leave request that is {state}."
        )
    return None


# ── Visibility ──────────────────────────────────────────────────────

def visibility_clause(actor: Actor) -> ColumnElement[bool]:
    """SQL filter restricting ``Leave`` rows to those *actor* may read."""
    role = resolve_role(actor.role)
    if role in PRIVILEGED_ROLES:
        return true()
    if role is Role.manager:
        # Never correlated: callers may already join employees
        team = (
            select(Employee.id)
            .where(Employee.manager_id == actor.id)
            .correlate(None)
        )
        return or_(Leave.requester_id == actor.id, Leave.requester_id.in_(team))
    return Leave.requester_id == actor.id


def can_view(snapshot: Any, actor: Actor, requester_manager_id: Any = None) -> bool:
    """Single-record form of ``visibility_clause``."""
    role = resolve_role(actor.role)
    if role in PRIVILEGED_ROLES or snapshot.requester_id == actor.id:
        return True
    return role is Role.manager and requester_manager_id == actor.id
