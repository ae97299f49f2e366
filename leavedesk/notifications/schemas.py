"""Notification schemas.

Notifications written for leave events link back to the request through
``entity_type="leave"`` and ``entity_id`` (the leave id); ``action_url`` is
the UI path of that request.
"""


import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict

from leavedesk.common.constants import NotificationType
from leavedesk.common.pagination import PaginationMeta


class NotificationResponse(BaseModel):
    """One in-app notification as shown in the caller's inbox."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    type: NotificationType
    title: str
    message: str
    action_url: Optional[str] = None
    entity_type: Optional[str] = None
    entity_id: Optional[uuid.UUID] = None
    is_read: bool
    read_at: Optional[datetime] = None
    created_at: datetime


class NotificationListMeta(PaginationMeta):
    # Unread total of the whole inbox, independent of list filters
    unread: int


class NotificationListResponse(BaseModel):
    data: list[NotificationResponse]
    meta: NotificationListMeta


# ── Small envelopes for the badge and mark-read endpoints ───────────

class CountPayload(BaseModel):
    count: int


class UnreadCountResponse(BaseModel):
    data: CountPayload


class MarkReadResponse(BaseModel):
    message: str
    data: NotificationResponse


class MarkAllReadResponse(BaseModel):
    message: str
    data: CountPayload
