"""Repository for Event entity database operations.

This module provides the EventRepository class which extends the generic
Repository base class with the event queries the lifecycle engine needs:
keyed loads with relations, newest-first pagination by circle, open events
across circles, and the guarded status write.

Example:
    async with get_session_factory()() as session:
        repo = EventRepository(session)
        page = await repo.find_by_circle(circle_id, status=EventStatus.OPEN, limit=20)
"""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import desc, select, update
from sqlalchemy.orm import joinedload

from neighborguard.core.config import get_settings
from neighborguard.models import Event, EventStatus
from neighborguard.models.circle import utcnow
from neighborguard.repositories.base import Repository

if TYPE_CHECKING:
    from collections.abc import Sequence

    from sqlalchemy import Select


def clamp_limit(limit: int | None, *, default: int, maximum: int) -> int:
    """Clamp a requested page size to [1, maximum], using default when absent.

    Example:
        clamp_limit(200, default=50, maximum=100) -> 100
        clamp_limit(0, default=50, maximum=100) -> 1
    """
    if limit is None:
        return default
    return max(1, min(limit, maximum))


def _with_relations(stmt: Select[tuple[Event]]) -> Select[tuple[Event]]:
    # Many-to-one joins only, so rows never need uniquing. Instances already in
    # the session are refreshed so bulk UPDATEs are visible.
    return stmt.options(
        joinedload(Event.circle),
        joinedload(Event.video_asset),
        joinedload(Event.created_by),
    ).execution_options(populate_existing=True)


class EventRepository(Repository[Event]):
    """Repository for Event entity database operations.

    Nothing here ever writes ``id``, ``circle_id`` or ``created_at`` after
    the initial INSERT.

    Attributes:
        model_class: Set to Event for type inference and query construction.
    """

    model_class = Event

    async def create(self, entity: Event) -> Event:
        """Persist a new event in its initial state.

        Status is forced to open, resolution to the empty string and the
        resolution note to NULL regardless of what the caller set.
        """
        entity.status = EventStatus.OPEN
        entity.resolution = ""
        entity.resolution_note = None
        return await super().create(entity)

    async def get_with_relations(self, event_id: str) -> Event | None:
        """Get an event with circle, video asset and creator eagerly loaded.

        Always reloads column values from the database, so a row changed by
        a bulk UPDATE in this session is seen in its current state.
        """
        stmt = _with_relations(select(Event)).where(Event.id == event_id)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def find_by_circle(
        self,
        circle_id: str,
        *,
        status: EventStatus | None = None,
        cursor: datetime | None = None,
        limit: int | None = None,
    ) -> Sequence[Event]:
        """Get a page of a circle's events, newest created first.

        Args:
            circle_id: Circle to list.
            status: Optional status equality filter.
            cursor: Only events created strictly before this instant.
            limit: Page size; defaults to 50 and is clamped to [1, 100].

        Returns:
            Events with relations loaded.
        """
        settings = get_settings()
        page_size = clamp_limit(
            limit,
            default=settings.event_page_default_limit,
            maximum=settings.event_page_max_limit,
        )

        stmt = _with_relations(select(Event)).where(Event.circle_id == circle_id)
        if status is not None:
            stmt = stmt.where(Event.status == status)
        if cursor is not None:
            stmt = stmt.where(Event.created_at < cursor)
        stmt = stmt.order_by(desc(Event.created_at)).limit(page_size)

        result = await self.session.execute(stmt)
        return result.scalars().all()

    async def find_open_for_circles(
        self, circle_ids: Sequence[str], *, created_after: datetime | None = None
    ) -> Sequence[Event]:
        """Get open events across several circles, newest first.

        Args:
            circle_ids: Circles to search. Empty input returns [] without a query.
            created_after: Optional lower bound (exclusive) on creation time.
        """
        if not circle_ids:
            return []

        stmt = _with_relations(select(Event)).where(
            Event.circle_id.in_(circle_ids),
            Event.status == EventStatus.OPEN,
        )
        if created_after is not None:
            stmt = stmt.where(Event.created_at > created_after)
        stmt = stmt.order_by(desc(Event.created_at))

        result = await self.session.execute(stmt)
        return result.scalars().all()

    async def find_by_ids(self, event_ids: Sequence[str]) -> Sequence[Event]:
        """Get events by id, in no particular order. Missing ids are skipped."""
        if not event_ids:
            return []

        stmt = _with_relations(select(Event)).where(Event.id.in_(event_ids))
        result = await self.session.execute(stmt)
        return result.scalars().all()

    async def save(
        self,
        event: Event,
        *,
        status: EventStatus,
        resolution_note: str | None,
    ) -> bool:
        """Write status and resolution note in one guarded UPDATE.

        The statement only matches while the row is not resolved, so of two
        racing resolutions exactly one lands and the other sees zero rows.

        Args:
            event: The event being changed (only its id is used).
            status: New status value.
            resolution_note: New resolution note (None clears it).

        Returns:
            True if the row was updated, False if it was already resolved.
        """
        stmt = (
            update(Event)
            .where(Event.id == event.id, Event.status != EventStatus.RESOLVED)
            .values(status=status, resolution_note=resolution_note, updated_at=utcnow())
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        await self.session.flush()
        return bool(result.rowcount)
