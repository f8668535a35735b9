"""Pydantic schemas for event note endpoints."""

from __future__ import annotations

from datetime import datetime

from pydantic import Field

from neighborguard.api.schemas.base import CamelModel
from neighborguard.models import EventNote, NoteType


class NoteCreate(CamelModel):
    body: str = Field(..., min_length=1, max_length=5000)
    type: NoteType | None = Field(None, description="Defaults to comment")


class NoteResponse(CamelModel):
    id: str
    event_id: str
    circle_id: str
    user_id: str | None = None
    user_name: str
    user_email: str
    body: str
    type: NoteType
    created_at: datetime

    @classmethod
    def from_note(cls, note: EventNote) -> NoteResponse:
        user = note.user
        return cls(
            id=note.id,
            event_id=note.event_id,
            circle_id=note.circle_id,
            user_id=note.user_id,
            user_name=(user.name or "") if user else "",
            user_email=user.email if user else "",
            body=note.body,
            type=note.note_type,
            created_at=note.created_at,
        )
