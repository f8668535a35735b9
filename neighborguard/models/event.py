"""Event model for circle incident reports."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, Enum, ForeignKey, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .circle import Base, new_id, utcnow
from .enums import EventStatus, Severity, enum_values

if TYPE_CHECKING:
    from .circle import Circle
    from .media import VideoAsset
    from .user import User


class Event(Base):
    """An incident reported inside one circle.

    Events start ``open`` and end ``resolved``; a resolved event is locked.
    ``resolution`` is a free-form summary that defaults to an empty string,
    while ``resolution_note`` holds the explanation required when resolving
    and stays NULL until one is given.

    The circle is fixed at creation: nothing in the persistence layer ever
    writes ``circle_id`` after the INSERT.
    """

    __tablename__ = "events"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    circle_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("circles.id", ondelete="CASCADE"), nullable=False
    )
    title: Mapped[str | None] = mapped_column(String(120), nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    request_text: Mapped[str] = mapped_column(Text, nullable=False)
    # Free-form tags agreed with clients, e.g. "suspicious_person", "front-door"
    event_type: Mapped[str] = mapped_column(String(64), nullable=False)
    camera_zone: Mapped[str] = mapped_column(String(64), nullable=False)
    severity: Mapped[Severity] = mapped_column(
        Enum(
            Severity,
            name="event_severity_enum",
            values_callable=enum_values,
            native_enum=False,
            length=16,
        ),
        default=Severity.MEDIUM,
        nullable=False,
    )
    status: Mapped[EventStatus] = mapped_column(
        Enum(
            EventStatus,
            name="event_status_enum",
            values_callable=enum_values,
            native_enum=False,
            length=16,
        ),
        default=EventStatus.OPEN,
        nullable=False,
    )
    resolution: Mapped[str] = mapped_column(Text, default="", nullable=False)
    resolution_note: Mapped[str | None] = mapped_column(Text, nullable=True)
    occurred_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    video_asset_id: Mapped[str | None] = mapped_column(
        String(36), ForeignKey("video_assets.id", ondelete="SET NULL"), nullable=True
    )
    created_by_id: Mapped[str | None] = mapped_column(
        String(36), ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False
    )

    # Relationships
    circle: Mapped[Circle] = relationship("Circle")
    video_asset: Mapped[VideoAsset | None] = relationship("VideoAsset")
    created_by: Mapped[User | None] = relationship("User")

    __table_args__ = (
        Index("idx_events_circle_created_at", "circle_id", "created_at"),
        Index("idx_events_status", "status"),
        Index("idx_events_created_by_id", "created_by_id"),
    )

    def __repr__(self) -> str:
        return (
            f"<Event(id={self.id!r}, circle_id={self.circle_id!r}, "
            f"status={self.status.value if self.status else None!r})>"
        )

    @property
    def is_resolved(self) -> bool:
        return self.status == EventStatus.RESOLVED
