"""Repository for Notification entity database operations."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import desc, func, select, update

from neighborguard.models import Notification, NotificationType
from neighborguard.repositories.base import Repository

if TYPE_CHECKING:
    from collections.abc import Sequence


class NotificationRepository(Repository[Notification]):
    """Repository for Notification entity database operations.

    Rows are only ever inserted in batches and then have their read flag
    flipped. Every query is scoped to a recipient.
    """

    model_class = Notification

    async def list_for_user(
        self,
        user_id: str,
        *,
        unread_only: bool = False,
        notification_type: NotificationType | None = None,
        cursor: datetime | None = None,
        limit: int,
    ) -> Sequence[Notification]:
        """Get a page of a user's notifications, newest first.

        Args:
            user_id: Recipient.
            unread_only: Only return rows with is_read=False.
            notification_type: Optional type equality filter.
            cursor: Only rows created strictly before this instant.
            limit: Already-clamped page size.
        """
        stmt = select(Notification).where(Notification.user_id == user_id)
        if unread_only:
            stmt = stmt.where(Notification.is_read == False)  # noqa: E712
        if notification_type is not None:
            stmt = stmt.where(Notification.notification_type == notification_type)
        if cursor is not None:
            stmt = stmt.where(Notification.created_at < cursor)
        stmt = (
            stmt.order_by(desc(Notification.created_at))
            .limit(limit)
            .execution_options(populate_existing=True)
        )

        result = await self.session.execute(stmt)
        return result.scalars().all()

    async def unread_count(self, user_id: str) -> int:
        stmt = (
            select(func.count())
            .select_from(Notification)
            .where(Notification.user_id == user_id, Notification.is_read == False)  # noqa: E712
        )
        result = await self.session.execute(stmt)
        return result.scalar_one()

    async def mark_read(self, user_id: str, notification_id: str) -> bool:
        """Mark one notification read if it belongs to user_id.

        Returns:
            False when no row matched (missing or someone else's).
        """
        stmt = (
            update(Notification)
            .where(Notification.id == notification_id, Notification.user_id == user_id)
            .values(is_read=True)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        return bool(result.rowcount)

    async def mark_all_read(self, user_id: str) -> int:
        """Mark every unread notification of a user read; returns rows changed."""
        stmt = (
            update(Notification)
            .where(Notification.user_id == user_id, Notification.is_read == False)  # noqa: E712
            .values(is_read=True)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        return result.rowcount or 0
