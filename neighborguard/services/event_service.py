"""Event lifecycle engine: create, read and transition circle events.

State machine per event::

    open <-> in_progress
      \\        /
       resolved   (terminal)

Every operation authorizes through the membership directory before touching
storage. Transitions commit first; notification fan-out runs afterwards in
its own session and a failure there is logged and counted, never raised.

The single predicate ``can_modify`` decides both whether a caller may change
an event's status and the ``can_change_resolution`` flag of the view.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING

from neighborguard.core.database import get_session_factory
from neighborguard.core.exceptions import (
    CircleAccessDeniedError,
    CircleNotFoundError,
    EventLockedError,
    EventModificationDeniedError,
    EventNotFoundError,
    InvalidInputError,
    ObserverCannotCreateError,
    ResolutionRequiredError,
    VideoAssetNotFoundError,
)
from neighborguard.core.logging import get_logger
from neighborguard.core.metrics import (
    record_event_created,
    record_event_resolved,
    record_fanout_failure,
)
from neighborguard.models import Event, EventStatus, MemberRole, NotificationType, Severity
from neighborguard.models.circle import utcnow
from neighborguard.repositories.circle_repository import CircleRepository
from neighborguard.repositories.event_repository import EventRepository
from neighborguard.repositories.user_repository import UserRepository
from neighborguard.repositories.video_asset_repository import VideoAssetRepository
from neighborguard.services.membership import MembershipDirectory
from neighborguard.services.notification_service import NotificationService
from neighborguard.services.timestamps import parse_cursor

if TYPE_CHECKING:
    from collections.abc import Sequence

    from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

    from neighborguard.models import User

logger = get_logger(__name__)

SUMMARY_MAX_CHARS = 120
UNKNOWN_ROLE = "unknown"
FALLBACK_ACTOR_NAME = "Someone in your circle"
FALLBACK_CIRCLE_NAME = "your circle"
FALLBACK_RESOLVED_MESSAGE = "An event was resolved"


def can_modify(role: MemberRole | None, caller_id: str | None, event: Event) -> bool:
    """Whether the caller may change the event's status or resolution note.

    True for the circle owner and for the event's creator.
    """
    if role == MemberRole.OWNER:
        return True
    return caller_id is not None and event.created_by_id == caller_id


def display_name(user: User | None) -> str:
    """Name shown in notification messages for a user."""
    if user is None:
        return FALLBACK_ACTOR_NAME
    return user.name or user.email or FALLBACK_ACTOR_NAME


def parse_status(value: str | EventStatus) -> EventStatus:
    """Convert a raw status into an EventStatus.

    Raises:
        InvalidInputError: If the value is not a known status.
    """
    if isinstance(value, EventStatus):
        return value
    try:
        return EventStatus(value)
    except ValueError:
        raise InvalidInputError(
            f"Invalid status: {value}",
            field="status",
            value=value,
            constraint=f"one of {[s.value for s in EventStatus]}",
        ) from None


def parse_severity(value: str | Severity | None) -> Severity:
    """Convert a raw severity into a Severity, defaulting to medium."""
    if value is None:
        return Severity.MEDIUM
    if isinstance(value, Severity):
        return value
    try:
        return Severity(value)
    except ValueError:
        raise InvalidInputError(
            f"Invalid severity: {value}",
            field="severity",
            value=value,
            constraint=f"one of {[s.value for s in Severity]}",
        ) from None


def _summary(event: Event) -> str:
    return event.title or (event.request_text or "")[:SUMMARY_MAX_CHARS]


@dataclass(frozen=True)
class CreateEventCommand:
    """Input for creating an event."""

    circle_id: str
    request_text: str
    event_type: str
    camera_zone: str
    title: str | None = None
    description: str | None = None
    severity: str | Severity | None = None
    occurred_at: datetime | None = None
    video_asset_id: str | None = None


@dataclass(frozen=True)
class UpdateStatusCommand:
    """Input for a status/resolution change. Both fields are optional."""

    status: str | EventStatus | None = None
    resolution: str | None = None


@dataclass(frozen=True)
class EventView:
    """An event as seen by one caller, with permission flags."""

    id: str
    circle_id: str
    circle_name: str | None
    circle_address: str | None
    title: str | None
    description: str | None
    request_text: str
    event_type: str
    camera_zone: str
    severity: Severity
    status: EventStatus
    resolution: str
    resolution_note: str | None
    occurred_at: datetime | None
    created_at: datetime
    updated_at: datetime
    video_asset_id: str | None
    video_url: str | None
    created_by_id: str | None
    created_by_name: str | None
    created_by_email: str | None
    created_by_role: str
    is_mine: bool
    my_role_in_circle: str
    can_edit_event: bool
    can_change_resolution: bool

    @classmethod
    def build(
        cls,
        event: Event,
        *,
        caller_id: str,
        my_role: MemberRole | None,
        creator_role: MemberRole | None,
    ) -> EventView:
        """Build the view from an event with its relations loaded."""
        is_mine = event.created_by_id is not None and event.created_by_id == caller_id
        circle = event.circle
        creator = event.created_by
        video = event.video_asset
        return cls(
            id=event.id,
            circle_id=event.circle_id,
            circle_name=circle.name if circle else None,
            circle_address=circle.address if circle else None,
            title=event.title,
            description=event.description,
            request_text=event.request_text,
            event_type=event.event_type,
            camera_zone=event.camera_zone,
            severity=event.severity,
            status=event.status,
            resolution=event.resolution,
            resolution_note=event.resolution_note,
            occurred_at=event.occurred_at,
            created_at=event.created_at,
            updated_at=event.updated_at,
            video_asset_id=event.video_asset_id,
            video_url=video.url if video else None,
            created_by_id=event.created_by_id,
            created_by_name=creator.name if creator else None,
            created_by_email=creator.email if creator else None,
            created_by_role=creator_role.value if creator_role else UNKNOWN_ROLE,
            is_mine=is_mine,
            my_role_in_circle=my_role.value if my_role else UNKNOWN_ROLE,
            can_edit_event=is_mine,
            can_change_resolution=can_modify(my_role, caller_id, event),
        )


class EventService:
    """Service implementing the event lifecycle for one request session.

    Args:
        session: Session for the primary unit of work. The service commits
            it after each successful mutation.
        session_factory: Factory for the separate session used by
            notification fan-out. Defaults to the global factory.
    """

    def __init__(
        self,
        session: AsyncSession,
        session_factory: async_sessionmaker[AsyncSession] | None = None,
    ) -> None:
        self.session = session
        self._session_factory = session_factory
        self._events = EventRepository(session)
        self._circles = CircleRepository(session)
        self._users = UserRepository(session)
        self._videos = VideoAssetRepository(session)
        self._membership = MembershipDirectory(session)

    # -------------------------------------------------------------------------
    # Commands
    # -------------------------------------------------------------------------

    async def create(self, command: CreateEventCommand, caller_id: str) -> EventView:
        """Create an event in a circle the caller belongs to.

        Raises:
            CircleNotFoundError: If the circle does not exist.
            CircleAccessDeniedError: If the caller is not a member.
            ObserverCannotCreateError: If the caller is an observer there.
            VideoAssetNotFoundError: If a supplied video asset id is unknown.
            InvalidInputError: On blank required text or unknown severity.
        """
        circle = await self._circles.get_by_id(command.circle_id)
        if circle is None:
            raise CircleNotFoundError(command.circle_id)

        role = await self._membership.assert_member(circle.id, caller_id)
        if role == MemberRole.OBSERVER:
            raise ObserverCannotCreateError(details={"circle_id": circle.id})

        if command.video_asset_id is not None and not await self._videos.exists(
            command.video_asset_id
        ):
            raise VideoAssetNotFoundError(command.video_asset_id)

        for field_name in ("request_text", "event_type", "camera_zone"):
            if not (getattr(command, field_name) or "").strip():
                raise InvalidInputError(f"{field_name} is required", field=field_name)
        severity = parse_severity(command.severity)
        creator = await self._users.get_by_id(caller_id)

        event = Event(
            circle_id=circle.id,
            title=command.title,
            description=command.description,
            request_text=command.request_text,
            event_type=command.event_type,
            camera_zone=command.camera_zone,
            severity=severity,
            occurred_at=command.occurred_at or utcnow(),
            video_asset_id=command.video_asset_id,
            created_by_id=caller_id,
        )
        await self._events.create(event)
        await self.session.commit()

        record_event_created()
        logger.info(
            f"Event {event.id} created in circle {circle.id}",
            extra={"event_id": event.id, "circle_id": circle.id, "user_id": caller_id},
        )

        await self._fan_out(
            circle.id,
            exclude_user_id=caller_id,
            notification_type=NotificationType.EVENT_CREATED,
            event_id=event.id,
            title=f"New event in {circle.name or FALLBACK_CIRCLE_NAME}",
            message=f"{display_name(creator)}: {_summary(event)}",
        )

        loaded = await self._require_event(event.id)
        return EventView.build(loaded, caller_id=caller_id, my_role=role, creator_role=role)

    async def update_status(
        self, event_id: str, command: UpdateStatusCommand, caller_id: str
    ) -> EventView:
        """Change an event's status and/or resolution note.

        The resolved lock is checked before any permission check.

        Raises:
            EventNotFoundError: If the event does not exist.
            EventLockedError: If the event is (or concurrently became) resolved.
            CircleAccessDeniedError: If the caller is not a member of its circle.
            EventModificationDeniedError: If the caller is neither owner nor creator.
            InvalidInputError: On an unknown status value.
            ResolutionRequiredError: When resolving without a non-blank resolution.
        """
        event = await self._require_event(event_id)
        if event.is_resolved:
            raise EventLockedError(event.id)

        role = await self._membership.get_role(event.circle_id, caller_id)
        if role is None:
            raise CircleAccessDeniedError(event.circle_id, caller_id)
        if not can_modify(role, caller_id, event):
            raise EventModificationDeniedError(details={"event_id": event.id})

        new_status = event.status
        if command.status is not None:
            new_status = parse_status(command.status)
            if new_status == EventStatus.RESOLVED and not (command.resolution or "").strip():
                raise ResolutionRequiredError(details={"event_id": event.id})

        resolution_note = event.resolution_note
        if command.resolution is not None:
            resolution_note = command.resolution.strip() or None

        if not await self._events.save(event, status=new_status, resolution_note=resolution_note):
            raise EventLockedError(event.id)
        await self.session.commit()

        logger.info(
            f"Event {event.id} status set to {new_status.value}",
            extra={"event_id": event.id, "circle_id": event.circle_id, "user_id": caller_id},
        )

        if new_status == EventStatus.RESOLVED:
            record_event_resolved()
            actor = await self._users.get_by_id(caller_id)
            circle_name = event.circle.name if event.circle else None
            detail = (
                resolution_note
                or event.title
                or (event.request_text or "")[:SUMMARY_MAX_CHARS]
                or FALLBACK_RESOLVED_MESSAGE
            )
            await self._fan_out(
                event.circle_id,
                exclude_user_id=caller_id,
                notification_type=NotificationType.EVENT_RESOLVED,
                event_id=event.id,
                title=f"Event resolved in {circle_name or FALLBACK_CIRCLE_NAME}",
                message=f"{display_name(actor)}: {detail}",
            )

        updated = await self._require_event(event.id)
        creator_role = await self._membership.get_role(updated.circle_id, updated.created_by_id)
        return EventView.build(
            updated, caller_id=caller_id, my_role=role, creator_role=creator_role
        )

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    async def get(self, event_id: str, caller_id: str) -> EventView:
        """Get one event as seen by a circle member.

        Raises:
            EventNotFoundError: If the event does not exist.
            CircleAccessDeniedError: If the caller is not a member of its circle.
        """
        event = await self._require_event(event_id)
        role = await self._membership.assert_member(event.circle_id, caller_id)
        return await self._to_view(event, caller_id, role)

    async def list_by_circle(
        self,
        circle_id: str,
        caller_id: str,
        *,
        status: str | EventStatus | None = None,
        cursor: str | datetime | None = None,
        limit: int | None = None,
    ) -> list[EventView]:
        """List a circle's events newest first, one page at a time.

        Raises:
            CircleAccessDeniedError: If the caller is not a member.
            InvalidInputError: On an unknown status or unparsable cursor.
        """
        role = await self._membership.assert_member(circle_id, caller_id)
        parsed_status = parse_status(status) if status is not None else None
        parsed_cursor = parse_cursor(cursor)

        events = await self._events.find_by_circle(
            circle_id, status=parsed_status, cursor=parsed_cursor, limit=limit
        )
        return [await self._to_view(event, caller_id, role) for event in events]

    async def list_open_for_user(
        self, caller_id: str, *, created_after: datetime | None = None
    ) -> list[EventView]:
        """List open events across every circle the caller belongs to."""
        memberships = await self._membership.memberships_for_user(caller_id)
        if not memberships:
            return []

        roles = {m.circle_id: m.role for m in memberships}
        events = await self._events.find_open_for_circles(
            list(roles), created_after=created_after
        )
        return [await self._to_view(event, caller_id, roles[event.circle_id]) for event in events]

    async def get_by_ids(self, event_ids: Sequence[str], caller_id: str) -> list[EventView]:
        """Get events by id, silently skipping those the caller may not see."""
        views: list[EventView] = []
        for event in await self._events.find_by_ids(list(event_ids)):
            role = await self._membership.get_role(event.circle_id, caller_id)
            if role is None:
                continue
            views.append(await self._to_view(event, caller_id, role))
        return views

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    async def _require_event(self, event_id: str) -> Event:
        event = await self._events.get_with_relations(event_id)
        if event is None:
            raise EventNotFoundError(event_id)
        return event

    async def _to_view(self, event: Event, caller_id: str, role: MemberRole) -> EventView:
        # One lookup per event for the creator's role
        creator_role = await self._membership.get_role(event.circle_id, event.created_by_id)
        return EventView.build(event, caller_id=caller_id, my_role=role, creator_role=creator_role)

    async def _fan_out(
        self,
        circle_id: str,
        *,
        exclude_user_id: str | None,
        notification_type: NotificationType,
        event_id: str,
        title: str,
        message: str,
    ) -> None:
        """Notify circle members in a separate session; never raises."""
        try:
            factory = self._session_factory or get_session_factory()
            async with factory() as session:
                await NotificationService(session).notify_circle(
                    circle_id,
                    exclude_user_id=exclude_user_id,
                    notification_type=notification_type,
                    event_id=event_id,
                    title=title,
                    message=message,
                )
                await session.commit()
        except Exception:
            record_fanout_failure(notification_type.value)
            logger.warning(
                f"Notification fan-out failed for event {event_id}",
                exc_info=True,
                extra={
                    "event_id": event_id,
                    "circle_id": circle_id,
                    "notification_type": notification_type.value,
                },
            )
