"""Leave domain events and their in-process dispatcher.

Handlers run inside the caller's session, so whatever they write commits or
rolls back together with the state change that produced the event.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Awaitable, Callable

from sqlalchemy.ext.asyncio import AsyncSession

from leavedesk.common.constants import LeaveStatus

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LeaveEvent:
    leave_id: uuid.UUID
    new_status: LeaveStatus
    actor_id: uuid.UUID
    requester_id: uuid.UUID
    occurred_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


EventHandler = Callable[[AsyncSession, LeaveEvent], Awaitable[None]]


class LeaveEventDispatcher:
    """Fan a ``LeaveEvent`` out to every subscribed async handler, in order."""

    def __init__(self) -> None:
        self._handlers: list[EventHandler] = []

    def subscribe(self, handler: EventHandler) -> None:
        if handler not in self._handlers:
            self._handlers.append(handler)

    def unsubscribe(self, handler: EventHandler) -> None:
        if handler in self._handlers:
            self._handlers.remove(handler)

    @property
    def handlers(self) -> tuple[EventHandler, ...]:
        return tuple(self._handlers)

    async def publish(self, session: AsyncSession, event: LeaveEvent) -> None:
        logger.debug(
            "leave %s -> %s (%d handlers)",
            event.leave_id, event.new_status.value, len(self._handlers),
        )
        for handler in self._handlers:
            await handler(session, event)


dispatcher = LeaveEventDispatcher()
