"""Discussion notes attached to events."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, Enum, ForeignKey, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .circle import Base, new_id, utcnow
from .enums import NoteType, enum_values

if TYPE_CHECKING:
    from .user import User


class EventNote(Base):
    """A message in an event's discussion thread.

    ``circle_id`` is copied from the event when the note is written so notes
    can be scoped by circle without a join.
    """

    __tablename__ = "event_notes"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    event_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("events.id", ondelete="CASCADE"), nullable=False
    )
    circle_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("circles.id", ondelete="CASCADE"), nullable=False
    )
    user_id: Mapped[str | None] = mapped_column(
        String(36), ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    body: Mapped[str] = mapped_column(Text, nullable=False)
    note_type: Mapped[NoteType] = mapped_column(
        "type",
        Enum(
            NoteType,
            name="event_note_type_enum",
            values_callable=enum_values,
            native_enum=False,
            length=16,
        ),
        default=NoteType.COMMENT,
        nullable=False,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False
    )

    user: Mapped[User | None] = relationship("User")

    __table_args__ = (Index("idx_event_notes_event_created_at", "event_id", "created_at"),)

    def __repr__(self) -> str:
        return f"<EventNote(id={self.id!r}, event_id={self.event_id!r})>"
