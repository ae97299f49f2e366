"""Notification service — CRUD operations and the leave event subscriber."""

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from leavedesk.common.constants import LeaveStatus, NotificationType
from leavedesk.common.exceptions import ForbiddenException, NotFoundException
from leavedesk.common.pagination import PaginationParams, build_meta
from leavedesk.employees.models import Employee
from leavedesk.leave.events import LeaveEvent
from leavedesk.leave.models import Leave
from leavedesk.notifications.models import Notification
from leavedesk.notifications.schemas import (
    NotificationListMeta,
    NotificationListResponse,
    NotificationResponse,
)

logger = logging.getLogger(__name__)


# ── Core service ────────────────────────────────────────────────────


class NotificationService:
    """Async notification operations."""

    @staticmethod
    async def create_notification(
        db: AsyncSession,
        *,
        recipient_id: uuid.UUID,
        type: NotificationType = NotificationType.info,
        title: str,
        message: str,
        action_url: Optional[str] = None,
        entity_type: Optional[str] = None,
        entity_id: Optional[uuid.UUID] = None,
    ) -> Notification:
        """Create a new notification and flush to DB."""
        notification = Notification(
            recipient_id=recipient_id,
            type=type,
            title=title,
            message=message,
            action_url=action_url,
            entity_type=entity_type,
            entity_id=entity_id,
        )
        db.add(notification)
        await db.flush()
        return notification

    @staticmethod
    async def get_notifications(
        db: AsyncSession,
        employee_id: uuid.UUID,
        pagination: PaginationParams,
        *,
        is_read: Optional[bool] = None,
        notification_type: Optional[NotificationType] = None,
    ) -> NotificationListResponse:
        """Return paginated notifications for an employee, newest first."""
        query = (
            select(Notification)
            .where(Notification.recipient_id == employee_id)
            .order_by(Notification.created_at.desc())
        )

        if is_read is not None:
            query = query.where(Notification.is_read == is_read)
        if notification_type is not None:
            query = query.where(Notification.type == notification_type)

        # Total count (with filters applied)
        count_q = select(func.count()).select_from(query.order_by(None).subquery())
        total: int = (await db.execute(count_q)).scalar_one()

        # Paginated rows
        rows = (
            await db.execute(
                query.offset(pagination.offset).limit(pagination.page_size)
            )
        ).scalars().all()

        # Unread count is unfiltered (badge)
        unread = await NotificationService.get_unread_count(db, employee_id)

        meta = build_meta(pagination, total)
        return NotificationListResponse(
            data=[NotificationResponse.model_validate(n) for n in rows],
            meta=NotificationListMeta(**meta.model_dump(), unread=unread),
        )

    @staticmethod
    async def mark_read(
        db: AsyncSession,
        notification_id: uuid.UUID,
        employee_id: uuid.UUID,
    ) -> Notification:
        """Mark a single notification as read. Verifies ownership."""
        result = await db.execute(
            select(Notification).where(Notification.id == notification_id)
        )
        notification = result.scalars().first()

        if notification is None:
            raise NotFoundException("Notification", notification_id)

        if notification.recipient_id != employee_id:
            raise ForbiddenException("You can only mark your own notifications as read.")

        if not notification.is_read:
            notification.is_read = True
            notification.read_at = datetime.now(timezone.utc)
            await db.flush()
        return notification

    @staticmethod
    async def mark_all_read(
        db: AsyncSession,
        employee_id: uuid.UUID,
    ) -> int:
        """Bulk-mark all unread notifications as read. Returns count updated."""
        now = datetime.now(timezone.utc)
        result = await db.execute(
            update(Notification)
            .where(
                Notification.recipient_id == employee_id,
                Notification.is_read.is_(False),
            )
            .values(is_read=True, read_at=now)
            .execution_options(synchronize_session=False)
        )
        await db.flush()
        return result.rowcount  # type: ignore[return-value]

    @staticmethod
    async def get_unread_count(
        db: AsyncSession,
        employee_id: uuid.UUID,
    ) -> int:
        """Return the number of unread notifications for an employee."""
        result = await db.execute(
            select(func.count())
            .select_from(Notification)
            .where(
                Notification.recipient_id == employee_id,
                Notification.is_read.is_(False),
            )
        )
        return result.scalar_one()


# ── Leave event subscriber ──────────────────────────────────────────
# Subscribed to the leave dispatcher in main.create_app().

_LEAVE_MESSAGES: dict[LeaveStatus, tuple[NotificationType, str, str]] = {
    LeaveStatus.approved: (
        NotificationType.success,
        "Leave Request Approved",
        "Your leave request from {start} to {end} has been approved.",
    ),
    LeaveStatus.rejected: (
        NotificationType.error,
        "Leave Request Rejected",
        "Your leave request from {start} to {end} was rejected.",
    ),
    LeaveStatus.cancelled: (
        NotificationType.info,
        "Leave Request Cancelled",
        "Your leave request from {start} to {end} was cancelled.",
    ),
}


async def _notify_manager_of_submission(
    db: AsyncSession,
    leave: Leave,
    requester: Optional[Employee],
) -> Optional[Notification]:
    """Tell the requester's manager that a new request needs review."""
    if requester is None or requester.manager_id is None:
        return None
    return await NotificationService.create_notification(
        db,
        recipient_id=requester.manager_id,
        type=NotificationType.action_required,
        title="New Leave Request",
        message=(
            f"{requester.full_name} requested leave from {leave.start_date} to "
            f"{leave.end_date} ({leave.days_count} day(s)); it requires your approval."
        ),
        action_url=f"/leaves/{leave.id}",
        entity_type="leave",
        entity_id=leave.id,
    )


async def handle_leave_event(db: AsyncSession, event: LeaveEvent) -> Optional[Notification]:
    """Write the in-app notification for a leave state change.

    A new submission goes to the requester's manager for review. Review
    outcomes go to the requester. A cancellation by the requester goes to
    their manager instead. With no manager on record nobody is notified.
    """
    leave = await db.get(Leave, event.leave_id)
    if leave is None:
        logger.warning("leave %s vanished before notification", event.leave_id)
        return None

    if event.new_status is LeaveStatus.pending:
        requester = await db.get(Employee, event.requester_id)
        return await _notify_manager_of_submission(db, leave, requester)

    kind, title, template = _LEAVE_MESSAGES[event.new_status]
    message = template.format(start=leave.start_date, end=leave.end_date)
    recipient_id = event.requester_id

    if event.new_status is LeaveStatus.cancelled and event.actor_id == event.requester_id:
        requester = await db.get(Employee, event.requester_id)
        if requester is None or requester.manager_id is None:
            return None
        recipient_id = requester.manager_id
        message = (
            f"{requester.full_name} cancelled their leave request from "
            f"{leave.start_date} to {leave.end_date}."
        )

    if leave.reviewer_comment and event.new_status is not LeaveStatus.cancelled:
        message = f"{message} Comment: {leave.reviewer_comment}"

    return await NotificationService.create_notification(
        db,
        recipient_id=recipient_id,
        type=kind,
        title=title,
        message=message,
        action_url=f"/leaves/{leave.id}",
        entity_type="leave",
        entity_id=leave.id,
    )
