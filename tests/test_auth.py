"""Auth boundary tests — bearer token verification, /me, role permission
lookups and route-level permission enforcement.
"""

from __future__ import annotations

import uuid

import pytest

from leavedesk.auth.dependencies import require_any_permission
from leavedesk.auth.schemas import Actor
from leavedesk.common.constants import Role
from leavedesk.common.exceptions import ForbiddenException
from tests.conftest import (
    _seed_employee,
    auth_headers_for,
    create_access_token,
)


# ── Token verification ──────────────────────────────────────────────


async def test_missing_token_is_401(client):
    resp = await client.get("/api/v1/auth/me")
    assert resp.status_code == 401
    body = resp.json()
    assert body["type"].endswith("/unauthorized")
    assert body["status"] == 401
    assert resp.headers["content-type"].startswith("application/problem+json")


async def test_malformed_header_is_401(client):
    resp = await client.get("/api/v1/auth/me", headers={"Authorization": "Token abc"})
    assert resp.status_code == 401


async def test_expired_token_is_401(client, db):
    emp = await _seed_employee(db)
    await db.commit()

    token = create_access_token(emp.id, expired=True)
    resp = await client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {token}"})

    assert resp.status_code == 401
    assert "expired" in resp.json()["detail"].lower()


async def test_wrong_signature_is_401(client, db):
    emp = await _seed_employee(db)
    await db.commit()

    token = create_access_token(emp.id, secret="not-the-real-secret")
    resp = await client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert resp.status_code == 401


async def test_unknown_employee_is_401(client):
    resp = await client.get("/api/v1/auth/me", headers=auth_headers_for(uuid.uuid4()))
    assert resp.status_code == 401


async def test_inactive_employee_is_401(client, db):
    emp = await _seed_employee(db, is_active=False)
    await db.commit()

    resp = await client.get("/api/v1/auth/me", headers=auth_headers_for(emp.id))
    assert resp.status_code == 401


# ── /me ─────────────────────────────────────────────────────────────


async def test_me_returns_profile_and_permissions(client, db):
    emp = await _seed_employee(db, first_name="Ada", last_name="Lovelace")
    await db.commit()

    resp = await client.get("/api/v1/auth/me", headers=auth_headers_for(emp.id))

    assert resp.status_code == 200
    data = resp.json()
    assert data["employee"]["id"] == str(emp.id)
    assert data["employee"]["full_name"] == "Ada Lovelace"
    assert data["employee"]["role"] == "employee"
    assert data["permissions"] == sorted([
        "leaves.create", "leaves.view", "leave-types.view", "leave-balances.view",
    ])


async def test_role_comes_from_employee_record(client, db):
    """Role changes on the record apply without a new token."""
    emp = await _seed_employee(db)
    await db.commit()
    headers = auth_headers_for(emp.id)

    emp.role = Role.hr
    await db.commit()

    resp = await client.get("/api/v1/auth/me", headers=headers)
    assert resp.json()["employee"]["role"] == "hr"
    assert "leave-types.create" in resp.json()["permissions"]


# ── /permissions/{role} ─────────────────────────────────────────────


async def test_role_permissions_lookup(client, db):
    emp = await _seed_employee(db)
    await db.commit()

    resp = await client.get("/api/v1/auth/permissions/manager", headers=auth_headers_for(emp.id))

    assert resp.status_code == 200
    assert "leaves.approve" in resp.json()["permissions"]
    assert resp.json()["permissions"] == sorted(resp.json()["permissions"])


async def test_unknown_role_permissions_empty(client, db):
    emp = await _seed_employee(db)
    await db.commit()

    resp = await client.get("/api/v1/auth/permissions/overlord", headers=auth_headers_for(emp.id))

    assert resp.status_code == 200
    assert resp.json() == {"role": "overlord", "permissions": []}


# ── Route permission gate ───────────────────────────────────────────


async def test_route_permission_denied_is_403_problem(client, db):
    emp = await _seed_employee(db)
    await db.commit()

    resp = await client.post(
        "/api/v1/leave-types",
        json={"name": "Jury Duty"},
        headers=auth_headers_for(emp.id),
    )

    assert resp.status_code == 403
    body = resp.json()
    assert body["type"].endswith("/forbidden")
    assert "leave-types.create" in body["detail"]


async def test_require_any_permission_accepts_one_of_many():
    check = require_any_permission("reports.export", "leaves.view")
    actor = Actor(id=uuid.uuid4(), role=Role.employee)

    assert await check(actor=actor) is actor


async def test_require_any_permission_refuses_unknown_role():
    check = require_any_permission("leaves.view", "leave-balances.view")

    with pytest.raises(ForbiddenException) as exc_info:
        await check(actor=Actor(id=uuid.uuid4(), role="overlord"))
    assert "overlord" in exc_info.value.detail
