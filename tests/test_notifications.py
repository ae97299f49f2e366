"""Notification module test suite — create, mark read, bulk mark, pagination,
filtering, and creation from leave events.

Uses the shared conftest.py pattern with in-memory SQLite.
"""

from __future__ import annotations

import uuid
from datetime import date

import pytest
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from leavedesk.common.constants import LeaveStatus, NotificationType, Role
from leavedesk.common.exceptions import ForbiddenException, NotFoundException
from leavedesk.common.pagination import PaginationParams
from leavedesk.leave.events import LeaveEvent
from leavedesk.leave.schemas import LeaveCreate
from leavedesk.leave.service import LeaveService
from leavedesk.notifications.models import Notification
from leavedesk.notifications.service import NotificationService, handle_leave_event
from tests.conftest import (
    _seed_employee,
    _seed_leave,
    _seed_leave_type,
    actor_for,
    auth_headers_for,
)


# ── Helpers ─────────────────────────────────────────────────────────


async def _create_notification(
    db: AsyncSession,
    recipient_id: uuid.UUID,
    *,
    type: NotificationType = NotificationType.info,
    title: str = "Test Notification",
    message: str = "Test message body",
) -> Notification:
    """Create a notification directly via the service."""
    return await NotificationService.create_notification(
        db,
        recipient_id=recipient_id,
        type=type,
        title=title,
        message=message,
    )


# ═════════════════════════════════════════════════════════════════════
# Service
# ═════════════════════════════════════════════════════════════════════


class TestNotificationService:

    async def test_list_newest_first_with_unread_meta(self, db: AsyncSession):
        emp = await _seed_employee(db)
        for i in range(3):
            await _create_notification(db, emp.id, title=f"N{i}")

        resp = await NotificationService.get_notifications(
            db, emp.id, PaginationParams(page=1, page_size=2),
        )

        assert resp.meta.total == 3
        assert resp.meta.unread == 3
        assert resp.meta.has_next is True
        assert len(resp.data) == 2

    async def test_filter_by_type_and_read_state(self, db: AsyncSession):
        emp = await _seed_employee(db)
        ok = await _create_notification(db, emp.id, type=NotificationType.success)
        await _create_notification(db, emp.id, type=NotificationType.error)
        await NotificationService.mark_read(db, ok.id, emp.id)

        by_type = await NotificationService.get_notifications(
            db, emp.id, PaginationParams(page=1, page_size=10),
            notification_type=NotificationType.error,
        )
        assert [n.type for n in by_type.data] == [NotificationType.error]

        unread = await NotificationService.get_notifications(
            db, emp.id, PaginationParams(page=1, page_size=10), is_read=False,
        )
        assert unread.meta.total == 1

    async def test_mark_read_sets_timestamp(self, db: AsyncSession):
        emp = await _seed_employee(db)
        note = await _create_notification(db, emp.id)

        updated = await NotificationService.mark_read(db, note.id, emp.id)

        assert updated.is_read is True
        assert updated.read_at is not None
        assert await NotificationService.get_unread_count(db, emp.id) == 0

    async def test_mark_read_foreign_is_forbidden(self, db: AsyncSession):
        owner = await _seed_employee(db)
        other = await _seed_employee(db)
        note = await _create_notification(db, owner.id)

        with pytest.raises(ForbiddenException):
            await NotificationService.mark_read(db, note.id, other.id)

    async def test_mark_read_missing(self, db: AsyncSession):
        emp = await _seed_employee(db)
        with pytest.raises(NotFoundException):
            await NotificationService.mark_read(db, uuid.uuid4(), emp.id)

    async def test_mark_all_read_only_touches_own(self, db: AsyncSession):
        emp = await _seed_employee(db)
        other = await _seed_employee(db)
        for _ in range(2):
            await _create_notification(db, emp.id)
        await _create_notification(db, other.id)

        count = await NotificationService.mark_all_read(db, emp.id)

        assert count == 2
        assert await NotificationService.get_unread_count(db, emp.id) == 0
        assert await NotificationService.get_unread_count(db, other.id) == 1


# ═════════════════════════════════════════════════════════════════════
# Leave event subscriber
# ═════════════════════════════════════════════════════════════════════


class TestHandleLeaveEvent:

    async def test_submission_asks_manager_for_action(self, db: AsyncSession):
        mgr = await _seed_employee(db, role=Role.manager)
        emp = await _seed_employee(db, manager_id=mgr.id, first_name="Eli", last_name="Report")
        lt = await _seed_leave_type(db)
        leave = await _seed_leave(db, emp.id, lt.id)

        note = await handle_leave_event(
            db,
            LeaveEvent(
                leave_id=leave.id,
                new_status=LeaveStatus.pending,
                actor_id=emp.id,
                requester_id=emp.id,
            ),
        )

        assert note.recipient_id == mgr.id
        assert note.type == NotificationType.action_required
        assert note.title == "New Leave Request"
        assert "Eli Report" in note.message
        assert "(5 day(s))" in note.message
        assert note.action_url == f"/leaves/{leave.id}"
        assert note.entity_id == leave.id

    async def test_submission_without_manager_notifies_nobody(self, db: AsyncSession):
        emp = await _seed_employee(db)
        lt = await _seed_leave_type(db)
        leave = await _seed_leave(db, emp.id, lt.id)

        result = await handle_leave_event(
            db,
            LeaveEvent(
                leave_id=leave.id,
                new_status=LeaveStatus.pending,
                actor_id=emp.id,
                requester_id=emp.id,
            ),
        )
        assert result is None

    async def test_create_leave_notifies_manager(self, db: AsyncSession):
        mgr = await _seed_employee(db, role=Role.manager)
        emp = await _seed_employee(db, manager_id=mgr.id)
        lt = await _seed_leave_type(db)

        result = await LeaveService.create_leave(
            db,
            actor_for(emp),
            LeaveCreate(
                leave_type_id=lt.id,
                start_date=date(2025, 3, 3),
                end_date=date(2025, 3, 4),
            ),
        )

        notes = (
            await db.execute(select(Notification).where(Notification.recipient_id == mgr.id))
        ).scalars().all()
        assert len(notes) == 1
        assert notes[0].type == NotificationType.action_required
        assert notes[0].entity_id == result.value.id

        own = await db.execute(select(Notification).where(Notification.recipient_id == emp.id))
        assert own.scalars().all() == []

    async def test_missing_leave_is_ignored(self, db: AsyncSession):
        emp = await _seed_employee(db)
        result = await handle_leave_event(
            db,
            LeaveEvent(
                leave_id=uuid.uuid4(),
                new_status=LeaveStatus.approved,
                actor_id=emp.id,
                requester_id=emp.id,
            ),
        )
        assert result is None

    async def test_approval_message_mentions_dates(self, db: AsyncSession):
        mgr = await _seed_employee(db, role=Role.manager)
        emp = await _seed_employee(db, manager_id=mgr.id)
        lt = await _seed_leave_type(db)
        leave = await _seed_leave(db, emp.id, lt.id, status=LeaveStatus.approved)

        note = await handle_leave_event(
            db,
            LeaveEvent(
                leave_id=leave.id,
                new_status=LeaveStatus.approved,
                actor_id=mgr.id,
                requester_id=emp.id,
            ),
        )

        assert note.recipient_id == emp.id
        assert note.type == NotificationType.success
        assert "2025-02-01" in note.message
        assert note.entity_type == "leave"


# ═════════════════════════════════════════════════════════════════════
# API
# ═════════════════════════════════════════════════════════════════════


class TestNotificationEndpoints:

    async def test_list_and_unread_count(self, client, db):
        emp = await _seed_employee(db)
        await _create_notification(db, emp.id)
        await db.commit()
        headers = auth_headers_for(emp.id)

        resp = await client.get("/api/v1/notifications", headers=headers)
        assert resp.status_code == 200
        assert resp.json()["meta"]["unread"] == 1

        resp = await client.get("/api/v1/notifications/unread-count", headers=headers)
        assert resp.json() == {"data": {"count": 1}}

    async def test_mark_read_endpoints(self, client, db):
        emp = await _seed_employee(db)
        other = await _seed_employee(db)
        mine = await _create_notification(db, emp.id)
        theirs = await _create_notification(db, other.id)
        await _create_notification(db, emp.id)
        await db.commit()
        headers = auth_headers_for(emp.id)

        resp = await client.put(f"/api/v1/notifications/{mine.id}/read", headers=headers)
        assert resp.status_code == 200
        assert resp.json()["data"]["is_read"] is True

        resp = await client.put(f"/api/v1/notifications/{theirs.id}/read", headers=headers)
        assert resp.status_code == 403

        resp = await client.put(f"/api/v1/notifications/{uuid.uuid4()}/read", headers=headers)
        assert resp.status_code == 404

        resp = await client.put("/api/v1/notifications/read-all", headers=headers)
        assert resp.json()["data"]["count"] == 1

    async def test_review_over_http_creates_notification(self, client, db):
        mgr = await _seed_employee(db, role=Role.manager)
        emp = await _seed_employee(db, manager_id=mgr.id)
        lt = await _seed_leave_type(db)
        leave = await _seed_leave(db, emp.id, lt.id)
        await db.commit()

        resp = await client.post(
            f"/api/v1/leaves/{leave.id}/reject",
            json={"comment": "Quarter close"},
            headers=auth_headers_for(mgr.id),
        )
        assert resp.status_code == 200

        resp = await client.get("/api/v1/notifications", headers=auth_headers_for(emp.id))
        data = resp.json()["data"]
        assert len(data) == 1
        assert data[0]["type"] == "error"
        assert "Quarter close" in data[0]["message"]
