"""Notification fan-out and per-user notification inbox operations.

Fan-out turns one circle activity into one notification row per member
other than the actor. The lifecycle engine calls it after its own commit,
in a separate session, so a failure here never touches the primary change.
"""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from neighborguard.core.config import get_settings
from neighborguard.core.exceptions import InvalidInputError, NotificationNotFoundError
from neighborguard.core.logging import get_logger
from neighborguard.core.metrics import record_notifications_created
from neighborguard.models import Notification, NotificationType
from neighborguard.repositories.circle_repository import MembershipRepository
from neighborguard.repositories.event_repository import clamp_limit
from neighborguard.repositories.notification_repository import NotificationRepository
from neighborguard.services.timestamps import parse_cursor

if TYPE_CHECKING:
    from collections.abc import Sequence

    from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)

NOTIFICATION_PAGE_MAX_LIMIT = 100


def parse_notification_type(value: str | NotificationType | None) -> NotificationType | None:
    """Convert a raw type filter into a NotificationType.

    Raises:
        InvalidInputError: If the value is not a known notification type.
    """
    if value is None or isinstance(value, NotificationType):
        return value
    try:
        return NotificationType(value)
    except ValueError:
        raise InvalidInputError(
            f"Invalid notification type: {value}",
            field="type",
            value=value,
            constraint=f"one of {[t.value for t in NotificationType]}",
        ) from None


class NotificationService:
    """Creates and reads notifications within one session.

    Methods flush but never commit; the caller owns the transaction.
    """

    def __init__(self, session: AsyncSession) -> None:
        self.session = session
        self._notifications = NotificationRepository(session)
        self._members = MembershipRepository(session)

    async def notify_circle(
        self,
        circle_id: str,
        *,
        exclude_user_id: str | None,
        notification_type: NotificationType,
        event_id: str,
        title: str,
        message: str,
    ) -> int:
        """Create one notification per circle member except the excluded user.

        All rows are persisted as a single batch. An empty batch is a no-op.

        Args:
            circle_id: Circle whose members are notified.
            exclude_user_id: Member to skip, usually the actor.
            notification_type: Type stored on every row.
            event_id: Event the notification is about.
            title: Short heading.
            message: Body text.

        Returns:
            Number of notifications created.
        """
        recipient_ids = await self._members.user_ids_for_circle(circle_id)
        payload = {
            "circleId": circle_id,
            "eventId": event_id,
            "title": title,
            "message": message,
        }

        batch = [
            Notification(
                user_id=user_id,
                notification_type=notification_type,
                payload=dict(payload),
                is_read=False,
            )
            for user_id in recipient_ids
            if user_id != exclude_user_id
        ]
        await self._notifications.create_many(batch)

        record_notifications_created(notification_type.value, len(batch))
        logger.debug(
            f"Fan-out created {len(batch)} {notification_type.value} notifications",
            extra={"circle_id": circle_id, "event_id": event_id},
        )
        return len(batch)

    async def list_for_user(
        self,
        user_id: str,
        *,
        unread_only: bool = False,
        notification_type: str | NotificationType | None = None,
        cursor: str | datetime | None = None,
        limit: int | None = None,
    ) -> Sequence[Notification]:
        """List a user's notifications, newest first.

        Raises:
            InvalidInputError: On an unknown type or unparsable cursor.
        """
        parsed_type = parse_notification_type(notification_type)
        parsed_cursor = parse_cursor(cursor)
        page_size = clamp_limit(
            limit,
            default=get_settings().notification_page_default_limit,
            maximum=NOTIFICATION_PAGE_MAX_LIMIT,
        )
        return await self._notifications.list_for_user(
            user_id,
            unread_only=unread_only,
            notification_type=parsed_type,
            cursor=parsed_cursor,
            limit=page_size,
        )

    async def unread_count(self, user_id: str) -> int:
        return await self._notifications.unread_count(user_id)

    async def mark_read(self, user_id: str, notification_id: str) -> None:
        """Mark one of the user's notifications read.

        Raises:
            NotificationNotFoundError: If the notification does not exist or
                belongs to someone else.
        """
        if not await self._notifications.mark_read(user_id, notification_id):
            raise NotificationNotFoundError(notification_id)

    async def mark_all_read(self, user_id: str) -> int:
        updated = await self._notifications.mark_all_read(user_id)
        logger.debug(f"Marked {updated} notifications read", extra={"user_id": user_id})
        return updated
