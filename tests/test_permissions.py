"""Permission model tests — role map contents, fail-safe lookups, immutability.

Pure logic; no database needed.
"""

from __future__ import annotations

import dataclasses

import pytest

from leavedesk.auth import permissions as perms
from leavedesk.auth.permissions import (
    ALL_PERMISSIONS,
    ROLE_PERMISSIONS,
    RolePermissions,
    get_permissions_for_role,
    has_all_permissions,
    has_any_permission,
    has_permission,
    resolve_role,
)
from leavedesk.common.constants import Role


ROLE_ORDER = [Role.employee, Role.manager, Role.hr, Role.admin]


# ═════════════════════════════════════════════════════════════════════
# Role map contents
# ═════════════════════════════════════════════════════════════════════


class TestRoleMap:
    """The fixed role → permission table."""

    def test_employee_has_exactly_four_permissions(self):
        assert get_permissions_for_role("employee") == frozenset({
            "leaves.create",
            "leaves.view",
            "leave-types.view",
            "leave-balances.view",
        })

    def test_manager_adds_review_and_team_permissions(self):
        added = get_permissions_for_role("manager") - get_permissions_for_role("employee")
        assert added == {
            "leaves.view.all",
            "leaves.approve",
            "leaves.reject",
            "users.view",
            "users.view.all",
            "leave-balances.view.all",
            "reports.view",
        }

    def test_hr_adds_management_permissions(self):
        added = get_permissions_for_role("hr") - get_permissions_for_role("manager")
        assert added == {
            "users.create",
            "users.update",
            "leave-types.create",
            "leave-types.update",
            "leave-balances.update",
            "reports.export",
        }

    def test_admin_has_whole_catalog(self):
        assert get_permissions_for_role(Role.admin) == ALL_PERMISSIONS
        assert len(ALL_PERMISSIONS) == 22

    def test_only_admin_has_settings_and_deletes(self):
        for role in (Role.employee, Role.manager, Role.hr):
            assert not has_permission(role, "settings.update")
            assert not has_permission(role, "users.delete")
            assert not has_permission(role, "leaves.delete")
        assert has_permission(Role.admin, "settings.update")

    @pytest.mark.parametrize("lower,higher", list(zip(ROLE_ORDER, ROLE_ORDER[1:])))
    def test_roles_are_monotonic(self, lower, higher):
        assert get_permissions_for_role(lower) <= get_permissions_for_role(higher)

    def test_every_role_is_mapped(self):
        assert set(ROLE_PERMISSIONS) == set(Role)


# ═════════════════════════════════════════════════════════════════════
# Lookups
# ═════════════════════════════════════════════════════════════════════


class TestLookups:
    """has_permission / has_all / has_any / get_permissions_for_role."""

    def test_role_accepts_enum_or_string(self):
        assert has_permission(Role.manager, "leaves.approve")
        assert has_permission("manager", "leaves.approve")

    def test_employee_cannot_approve(self):
        assert not has_permission("employee", "leaves.approve")

    @pytest.mark.parametrize("role", ["superuser", "", None, 42, "ADMIN"])
    def test_unknown_role_has_nothing(self, role):
        assert has_permission(role, "leaves.view") is False
        assert get_permissions_for_role(role) == frozenset()

    @pytest.mark.parametrize("permission", [None, 7, ["leaves.view"], b"leaves.view"])
    def test_non_string_permission_is_false(self, permission):
        assert has_permission(Role.admin, permission) is False

    def test_unknown_permission_is_false(self):
        assert has_permission(Role.admin, "leaves.teleport") is False

    def test_has_all_permissions(self):
        assert has_all_permissions("hr", ["leaves.approve", "reports.export"])
        assert not has_all_permissions("manager", ["leaves.approve", "reports.export"])

    def test_has_all_permissions_empty_is_true(self):
        assert has_all_permissions("employee", []) is True
        assert has_all_permissions("nobody", []) is True

    def test_has_any_permission(self):
        assert has_any_permission("employee", ["reports.export", "leaves.create"])
        assert not has_any_permission("employee", ["reports.export", "users.view"])

    def test_has_any_permission_empty_is_false(self):
        assert has_any_permission(Role.admin, []) is False

    def test_resolve_role(self):
        assert resolve_role("hr") is Role.hr
        assert resolve_role(Role.admin) is Role.admin
        assert resolve_role("root") is None
        assert resolve_role({"role": "hr"}) is None


# ═════════════════════════════════════════════════════════════════════
# Immutability
# ═════════════════════════════════════════════════════════════════════


class TestImmutability:
    """Callers cannot alter the role table through any accessor."""

    def test_role_map_is_read_only(self):
        with pytest.raises(TypeError):
            ROLE_PERMISSIONS[Role.employee] = frozenset({"settings.update"})  # type: ignore[index]

    def test_returned_set_is_frozen(self):
        granted = get_permissions_for_role("employee")
        with pytest.raises(AttributeError):
            granted.add("settings.update")  # type: ignore[attr-defined]

    def test_mutating_a_copy_does_not_leak(self):
        copy = set(get_permissions_for_role("employee"))
        copy.add("settings.update")
        assert not has_permission("employee", "settings.update")

    def test_module_map_identity_is_stable(self):
        assert perms.ROLE_PERMISSIONS[Role.manager] is get_permissions_for_role("manager")


# ═════════════════════════════════════════════════════════════════════
# Role-bound view
# ═════════════════════════════════════════════════════════════════════


class TestRolePermissions:

    def test_can_helpers(self):
        view = RolePermissions(Role.manager)
        assert view.can("leaves.reject")
        assert not view.can("leave-types.create")
        assert view.can_all(["leaves.view", "reports.view"])
        assert view.can_any(["settings.update", "users.view"])
        assert view.get_all_permissions() == get_permissions_for_role("manager")

    def test_unknown_role_view_denies_everything(self):
        view = RolePermissions("intern")
        assert view.role == "intern"
        assert not view.can("leaves.view")
        assert view.can_all([])
        assert not view.can_any(["leaves.view"])
        assert view.get_all_permissions() == frozenset()

    def test_view_is_frozen(self):
        view = RolePermissions(Role.employee)
        with pytest.raises(dataclasses.FrozenInstanceError):
            view.role = Role.admin  # type: ignore[misc]
