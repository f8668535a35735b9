"""Notification model for per-user circle activity records."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from sqlalchemy import JSON, Boolean, DateTime, Enum, ForeignKey, Index, String
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from .circle import Base, new_id, utcnow
from .enums import NotificationType, enum_values


class Notification(Base):
    """A notification addressed to a single recipient.

    Rows are created in batches by the circle fan-out and afterwards only
    their ``is_read`` flag changes.

    Payload keys: ``circleId``, ``eventId``, ``title``, ``message``.
    """

    __tablename__ = "notifications"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    user_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    notification_type: Mapped[NotificationType] = mapped_column(
        "type",
        Enum(
            NotificationType,
            name="notification_type_enum",
            values_callable=enum_values,
            native_enum=False,
            length=32,
        ),
        nullable=False,
    )
    payload: Mapped[dict[str, Any]] = mapped_column(
        JSON().with_variant(JSONB, "postgresql"), nullable=False
    )
    is_read: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )

    __table_args__ = (
        Index("idx_notifications_user_read_created", "user_id", "is_read", "created_at"),
    )

    def __repr__(self) -> str:
        return (
            f"<Notification(id={self.id!r}, user_id={self.user_id!r}, "
            f"type={self.notification_type.value!r}, is_read={self.is_read!r})>"
        )

    @property
    def event_id(self) -> str | None:
        return (self.payload or {}).get("eventId")
