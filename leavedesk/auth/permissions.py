"""Role → permission model.

The role table is fixed configuration: it is built once at import time as a
read-only mapping of frozensets, and every accessor hands out immutable
values only. Lookups fail safe: an unknown role or permission is simply
"not granted", nothing here ever raises.
"""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Iterable, Mapping, Optional

from leavedesk.common.constants import Role


# ── Permission catalog ──────────────────────────────────────────────

# Leave management
LEAVES_CREATE = "leaves.create"
LEAVES_VIEW = "leaves.view"
LEAVES_VIEW_ALL = "leaves.view.all"
LEAVES_APPROVE = "leaves.approve"
LEAVES_REJECT = "leaves.reject"
LEAVES_DELETE = "leaves.delete"

# User management
USERS_CREATE = "users.create"
USERS_VIEW = "users.view"
USERS_VIEW_ALL = "users.view.all"
USERS_UPDATE = "users.update"
USERS_DELETE = "users.delete"

# Leave type management
LEAVE_TYPES_CREATE = "leave-types.create"
LEAVE_TYPES_VIEW = "leave-types.view"
LEAVE_TYPES_UPDATE = "leave-types.update"
LEAVE_TYPES_DELETE = "leave-types.delete"

# Leave balance management
LEAVE_BALANCES_VIEW = "leave-balances.view"
LEAVE_BALANCES_VIEW_ALL = "leave-balances.view.all"
LEAVE_BALANCES_UPDATE = "leave-balances.update"

# Reports
REPORTS_VIEW = "reports.view"
REPORTS_EXPORT = "reports.export"

# System settings
SETTINGS_VIEW = "settings.view"
SETTINGS_UPDATE = "settings.update"

ALL_PERMISSIONS: frozenset[str] = frozenset({
    LEAVES_CREATE, LEAVES_VIEW, LEAVES_VIEW_ALL,
    LEAVES_APPROVE, LEAVES_REJECT, LEAVES_DELETE,
    USERS_CREATE, USERS_VIEW, USERS_VIEW_ALL, USERS_UPDATE, USERS_DELETE,
    LEAVE_TYPES_CREATE, LEAVE_TYPES_VIEW, LEAVE_TYPES_UPDATE, LEAVE_TYPES_DELETE,
    LEAVE_BALANCES_VIEW, LEAVE_BALANCES_VIEW_ALL, LEAVE_BALANCES_UPDATE,
    REPORTS_VIEW, REPORTS_EXPORT,
    SETTINGS_VIEW, SETTINGS_UPDATE,
})


# ── Role-based permissions ──────────────────────────────────────────

_EMPLOYEE: frozenset[str] = frozenset({
    LEAVES_CREATE,
    LEAVES_VIEW,
    LEAVE_TYPES_VIEW,
    LEAVE_BALANCES_VIEW,
})

_MANAGER: frozenset[str] = _EMPLOYEE | {
    LEAVES_VIEW_ALL,
    LEAVES_APPROVE,
    LEAVES_REJECT,
    USERS_VIEW,
    USERS_VIEW_ALL,
    LEAVE_BALANCES_VIEW_ALL,
    REPORTS_VIEW,
}

_HR: frozenset[str] = _MANAGER | {
    USERS_CREATE,
    USERS_UPDATE,
    LEAVE_TYPES_CREATE,
    LEAVE_TYPES_UPDATE,
    LEAVE_BALANCES_UPDATE,
    REPORTS_EXPORT,
}

ROLE_PERMISSIONS: Mapping[Role, frozenset[str]] = MappingProxyType({
    Role.employee: _EMPLOYEE,
    Role.manager: _MANAGER,
    Role.hr: _HR,
    Role.admin: ALL_PERMISSIONS,
})

_NO_PERMISSIONS: frozenset[str] = frozenset()


# ── Lookups ─────────────────────────────────────────────────────────

def resolve_role(role: Any) -> Optional[Role]:
    """Map a role tag to ``Role``; anything unrecognised maps to None."""
    if isinstance(role, Role):
        return role
    try:
        return Role(role)
    except (ValueError, TypeError):
        return None


def get_permissions_for_role(role: Any) -> frozenset[str]:
    """Return the immutable permission set of *role* (empty if unknown)."""
    resolved = resolve_role(role)
    if resolved is None:
        return _NO_PERMISSIONS
    return ROLE_PERMISSIONS.get(resolved, _NO_PERMISSIONS)


def has_permission(role: Any, permission: Any) -> bool:
    """True iff *permission* is granted to *role*."""
    if not isinstance(permission, str):
        return False
    return permission in get_permissions_for_role(role)


def has_all_permissions(role: Any, permissions: Iterable[Any]) -> bool:
    """True iff every permission is granted. Vacuously true for none."""
    return all(has_permission(role, p) for p in permissions)


def has_any_permission(role: Any, permissions: Iterable[Any]) -> bool:
    """True iff at least one permission is granted. False for none."""
    return any(has_permission(role, p) for p in permissions)


# ── Role-bound view ─────────────────────────────────────────────────

@dataclass(frozen=True)
class RolePermissions:
    """Permission checks bound to a single role.

    Usage::

        perms = RolePermissions(actor.role)
        if perms.can(LEAVES_APPROVE):
            ...
    """

    role: Any

    def can(self, permission: Any) -> bool:
        return has_permission(self.role, permission)

    def can_all(self, permissions: Iterable[Any]) -> bool:
        return has_all_permissions(self.role, permissions)

    def can_any(self, permissions: Iterable[Any]) -> bool:
        return has_any_permission(self.role, permissions)

    def get_all_permissions(self) -> frozenset[str]:
        return get_permissions_for_role(self.role)
