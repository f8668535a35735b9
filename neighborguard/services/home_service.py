"""Aggregate "home" view: my circles, pending work and my inbox.

Inbox new events are derived from the caller's unread ``event_created``
notifications. When there are none, a degraded fallback lists open events
created within ``home_inbox_fallback_hours`` (0 disables the fallback).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import timedelta
from typing import TYPE_CHECKING

from neighborguard.core.config import get_settings
from neighborguard.models import NotificationType
from neighborguard.models.circle import utcnow
from neighborguard.services.event_service import EventService, EventView
from neighborguard.services.membership import MembershipDirectory
from neighborguard.services.notification_service import (
    NOTIFICATION_PAGE_MAX_LIMIT,
    NotificationService,
)

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

    from neighborguard.models import CircleMember, Notification


@dataclass
class HomeTasks:
    """Everything the home screen shows for one caller."""

    inbox_new_events: list[EventView] = field(default_factory=list)
    inbox_notifications: list[Notification] = field(default_factory=list)
    pending_events: list[EventView] = field(default_factory=list)
    my_circles: list[CircleMember] = field(default_factory=list)


class HomeService:
    """Builds the aggregate home view from events, notifications and memberships."""

    def __init__(
        self,
        session: AsyncSession,
        session_factory: async_sessionmaker[AsyncSession] | None = None,
    ) -> None:
        self._events = EventService(session, session_factory=session_factory)
        self._notifications = NotificationService(session)
        self._membership = MembershipDirectory(session)

    async def get_home_tasks(self, caller_id: str) -> HomeTasks:
        """Collect my circles, pending events, unread notifications and inbox events."""
        memberships = await self._membership.memberships_for_user(caller_id)
        pending_events = await self._events.list_open_for_user(caller_id)
        unread = list(
            await self._notifications.list_for_user(
                caller_id, unread_only=True, limit=NOTIFICATION_PAGE_MAX_LIMIT
            )
        )

        # Unique event ids in notification order
        event_ids: list[str] = []
        for notification in unread:
            event_id = notification.event_id
            if (
                notification.notification_type == NotificationType.EVENT_CREATED
                and event_id
                and event_id not in event_ids
            ):
                event_ids.append(event_id)

        if event_ids:
            inbox_new_events = await self._events.get_by_ids(event_ids, caller_id)
        else:
            inbox_new_events = await self._fallback_new_events(caller_id)

        return HomeTasks(
            inbox_new_events=inbox_new_events,
            inbox_notifications=unread,
            pending_events=pending_events,
            my_circles=list(memberships),
        )

    async def _fallback_new_events(self, caller_id: str) -> list[EventView]:
        hours = get_settings().home_inbox_fallback_hours
        if hours <= 0:
            return []
        since = utcnow() - timedelta(hours=hours)
        return await self._events.list_open_for_user(caller_id, created_after=since)
