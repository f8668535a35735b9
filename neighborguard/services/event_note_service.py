"""Discussion threads attached to events."""

from __future__ import annotations

from typing import TYPE_CHECKING

from neighborguard.core.exceptions import EventNotFoundError, InvalidInputError
from neighborguard.core.logging import get_logger
from neighborguard.models import EventNote, NoteType
from neighborguard.repositories.event_note_repository import EventNoteRepository
from neighborguard.repositories.event_repository import EventRepository
from neighborguard.services.membership import MembershipDirectory

if TYPE_CHECKING:
    from collections.abc import Sequence

    from sqlalchemy.ext.asyncio import AsyncSession

    from neighborguard.models import Event

logger = get_logger(__name__)


class EventNoteService:
    """Reads and writes notes. Callers must belong to the event's circle."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session
        self._events = EventRepository(session)
        self._notes = EventNoteRepository(session)
        self._membership = MembershipDirectory(session)

    async def list_for_event(self, event_id: str, caller_id: str) -> Sequence[EventNote]:
        """List an event's notes oldest first."""
        event = await self._require_event(event_id)
        await self._membership.assert_member(event.circle_id, caller_id)
        return await self._notes.list_for_event(event.id)

    async def create(
        self,
        event_id: str,
        caller_id: str,
        *,
        body: str,
        note_type: str | NoteType | None = None,
    ) -> EventNote:
        """Add a note to an event.

        Notes are discussion only and are accepted on resolved events too.

        Raises:
            EventNotFoundError: If the event does not exist.
            CircleAccessDeniedError: If the caller is not a member of its circle.
            InvalidInputError: On a blank body or unknown note type.
        """
        event = await self._require_event(event_id)
        await self._membership.assert_member(event.circle_id, caller_id)

        if not body or not body.strip():
            raise InvalidInputError("body is required", field="body")
        try:
            parsed_type = NoteType(note_type) if note_type is not None else NoteType.COMMENT
        except ValueError:
            raise InvalidInputError(
                f"Invalid note type: {note_type}", field="type", value=note_type
            ) from None

        note = await self._notes.create(
            EventNote(
                event_id=event.id,
                circle_id=event.circle_id,
                user_id=caller_id,
                body=body,
                note_type=parsed_type,
            )
        )
        await self.session.commit()
        logger.info(
            f"Note {note.id} added to event {event.id}",
            extra={"event_id": event.id, "circle_id": event.circle_id, "user_id": caller_id},
        )

        saved = await self._notes.get_with_user(note.id)
        return saved if saved is not None else note

    async def _require_event(self, event_id: str) -> Event:
        event = await self._events.get_by_id(event_id)
        if event is None:
            raise EventNotFoundError(event_id)
        return event
