"""Auth router — current user profile and role permission lookups.

Tokens are issued by the external identity provider; this service only
verifies them, so there is no login or refresh endpoint here.
"""


from fastapi import APIRouter, Depends

from leavedesk.auth.dependencies import get_current_employee
from leavedesk.auth.permissions import get_permissions_for_role
from leavedesk.auth.schemas import MeResponse, RolePermissionsResponse
from leavedesk.employees.models import Employee
from leavedesk.employees.schemas import EmployeeProfile

router = APIRouter(prefix="", tags=["auth"])


# ── GET /me: current user profile ──────────────────────────────────

@router.get("/me", response_model=MeResponse)
async def me(employee: Employee = Depends(get_current_employee)):
    """The caller's profile and the sorted permissions of its role."""
    return MeResponse(
        employee=EmployeeProfile.model_validate(employee),
        permissions=sorted(get_permissions_for_role(employee.role)),
    )


# ── GET /permissions/{role} ─────────────────────────────────────────

@router.get("/permissions/{role}", response_model=RolePermissionsResponse)
async def role_permissions(
    role: str,
    employee: Employee = Depends(get_current_employee),
):
    """Permission list of any role; unknown roles have none."""
    return RolePermissionsResponse(
        role=role,
        permissions=sorted(get_permissions_for_role(role)),
    )
