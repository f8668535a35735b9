"""API routes for the event lifecycle and event notes."""

from fastapi import APIRouter, Depends, status

from neighborguard.api.dependencies import (
    get_current_user,
    get_event_note_service,
    get_event_service,
)
from neighborguard.api.schemas.events import EventCreate, EventResponse, EventStatusUpdate
from neighborguard.api.schemas.notes import NoteCreate, NoteResponse
from neighborguard.models import User
from neighborguard.services.event_note_service import EventNoteService
from neighborguard.services.event_service import (
    CreateEventCommand,
    EventService,
    UpdateStatusCommand,
)

router = APIRouter(prefix="/api/events", tags=["events"])


@router.post("", response_model=EventResponse, status_code=status.HTTP_201_CREATED)
async def create_event(
    body: EventCreate,
    user: User = Depends(get_current_user),
    service: EventService = Depends(get_event_service),
) -> EventResponse:
    """Report a new event in one of the caller's circles."""
    command = CreateEventCommand(
        circle_id=body.circle_id,
        request_text=body.request_text,
        event_type=body.event_type,
        camera_zone=body.camera_zone,
        title=body.title,
        description=body.description,
        severity=body.severity,
        occurred_at=body.occurred_at,
        video_asset_id=body.video_asset_id,
    )
    return EventResponse.model_validate(await service.create(command, user.id))


@router.get("/open", response_model=list[EventResponse])
async def list_open_events(
    user: User = Depends(get_current_user),
    service: EventService = Depends(get_event_service),
) -> list[EventResponse]:
    """List open events across all of the caller's circles."""
    views = await service.list_open_for_user(user.id)
    return [EventResponse.model_validate(v) for v in views]


@router.get("/{event_id}", response_model=EventResponse)
async def get_event(
    event_id: str,
    user: User = Depends(get_current_user),
    service: EventService = Depends(get_event_service),
) -> EventResponse:
    return EventResponse.model_validate(await service.get(event_id, user.id))


@router.patch("/{event_id}/status", response_model=EventResponse)
async def update_event_status(
    event_id: str,
    body: EventStatusUpdate,
    user: User = Depends(get_current_user),
    service: EventService = Depends(get_event_service),
) -> EventResponse:
    """Change status and/or resolution note. Owner or creator only."""
    command = UpdateStatusCommand(status=body.status, resolution=body.resolution)
    return EventResponse.model_validate(await service.update_status(event_id, command, user.id))


@router.get("/{event_id}/notes", response_model=list[NoteResponse])
async def list_event_notes(
    event_id: str,
    user: User = Depends(get_current_user),
    service: EventNoteService = Depends(get_event_note_service),
) -> list[NoteResponse]:
    notes = await service.list_for_event(event_id, user.id)
    return [NoteResponse.from_note(n) for n in notes]


@router.post("/{event_id}/notes", response_model=NoteResponse, status_code=status.HTTP_201_CREATED)
async def create_event_note(
    event_id: str,
    body: NoteCreate,
    user: User = Depends(get_current_user),
    service: EventNoteService = Depends(get_event_note_service),
) -> NoteResponse:
    note = await service.create(event_id, user.id, body=body.body, note_type=body.type)
    return NoteResponse.from_note(note)
