"""Repository for EventNote entity database operations."""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import select
from sqlalchemy.orm import selectinload

from neighborguard.models import EventNote
from neighborguard.repositories.base import Repository

if TYPE_CHECKING:
    from collections.abc import Sequence


class EventNoteRepository(Repository[EventNote]):
    """Repository for EventNote entity database operations."""

    model_class = EventNote

    async def list_for_event(self, event_id: str) -> Sequence[EventNote]:
        """List an event's notes oldest first, with authors loaded."""
        stmt = (
            select(EventNote)
            .options(selectinload(EventNote.user))
            .where(EventNote.event_id == event_id)
            .order_by(EventNote.created_at.asc())
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(stmt)
        return result.scalars().all()

    async def get_with_user(self, note_id: str) -> EventNote | None:
        stmt = (
            select(EventNote)
            .options(selectinload(EventNote.user))
            .where(EventNote.id == note_id)
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()
