"""Pydantic schemas for notification endpoints."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import Field

from neighborguard.api.schemas.base import CamelModel
from neighborguard.models import Notification, NotificationType


class NotificationResponse(CamelModel):
    id: str
    type: NotificationType
    payload: dict[str, Any] = Field(..., description="circleId, eventId, title, message")
    is_read: bool
    created_at: datetime

    @classmethod
    def from_notification(cls, notification: Notification) -> NotificationResponse:
        return cls(
            id=notification.id,
            type=notification.notification_type,
            payload=notification.payload,
            is_read=notification.is_read,
            created_at=notification.created_at,
        )


class UnreadCountResponse(CamelModel):
    unread_count: int


class MarkAllReadResponse(CamelModel):
    ok: bool = True
    updated: int = Field(0, description="Number of notifications marked read")
