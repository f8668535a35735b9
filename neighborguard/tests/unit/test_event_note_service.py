"""Unit tests for event discussion notes."""

from __future__ import annotations

import pytest

from neighborguard.core.exceptions import (
    CircleAccessDeniedError,
    EventNotFoundError,
    InvalidInputError,
)
from neighborguard.models import EventStatus, MemberRole, NoteType
from neighborguard.services.event_note_service import EventNoteService
from neighborguard.tests.factories import seed_circle, seed_event, seed_member, seed_user


@pytest.fixture
async def event_setup(session):
    owner = await seed_user(session)
    circle = await seed_circle(session, owner)
    observer = await seed_member(session, circle, role=MemberRole.OBSERVER)
    event = await seed_event(session, circle, owner)
    return owner, observer, event, circle


class TestEventNotes:
    @pytest.mark.asyncio
    async def test_create_and_list(self, session, event_setup):
        owner, observer, event, _ = event_setup
        service = EventNoteService(session)

        note = await service.create(event.id, observer.id, body="Saw it too")
        await service.create(event.id, owner.id, body="Thanks", note_type="system")

        assert note.note_type == NoteType.COMMENT
        assert note.user.id == observer.id
        notes = await service.list_for_event(event.id, owner.id)
        assert {n.body for n in notes} == {"Saw it too", "Thanks"}
        assert {n.circle_id for n in notes} == {event.circle_id}

    @pytest.mark.asyncio
    async def test_allowed_on_resolved_event(self, session, event_setup):
        owner, _, _, circle = event_setup
        resolved = await seed_event(
            session,
            circle,
            owner,
            status=EventStatus.RESOLVED,
            resolution_note="done",
        )

        note = await EventNoteService(session).create(resolved.id, owner.id, body="Follow-up")

        assert note.event_id == resolved.id

    @pytest.mark.asyncio
    async def test_non_member_is_forbidden(self, session, event_setup):
        _, _, event, _ = event_setup
        stranger = await seed_user(session)
        service = EventNoteService(session)

        with pytest.raises(CircleAccessDeniedError):
            await service.create(event.id, stranger.id, body="hi")
        with pytest.raises(CircleAccessDeniedError):
            await service.list_for_event(event.id, stranger.id)

    @pytest.mark.asyncio
    async def test_missing_event(self, session, event_setup):
        owner, _, _, _ = event_setup

        with pytest.raises(EventNotFoundError):
            await EventNoteService(session).create("missing", owner.id, body="hi")

    @pytest.mark.asyncio
    @pytest.mark.parametrize(("body", "note_type"), [("  ", None), ("ok", "shout")])
    async def test_invalid_input(self, session, event_setup, body, note_type):
        owner, _, event, _ = event_setup

        with pytest.raises(InvalidInputError):
            await EventNoteService(session).create(
                event.id, owner.id, body=body, note_type=note_type
            )

