"""Unit tests for the event lifecycle engine."""

from __future__ import annotations

import logging
from datetime import UTC, datetime, timedelta
from unittest.mock import AsyncMock, patch

import pytest
from sqlalchemy import func, select

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
from neighborguard.models import (
    Event,
    EventStatus,
    MemberRole,
    Notification,
    NotificationType,
    Severity,
)
from neighborguard.repositories.circle_repository import MembershipRepository
from neighborguard.repositories.event_repository import EventRepository
from neighborguard.services.event_service import (
    CreateEventCommand,
    EventService,
    UpdateStatusCommand,
)
from neighborguard.services.notification_service import NotificationService
from neighborguard.tests.factories import (
    seed_circle,
    seed_event,
    seed_member,
    seed_user,
    seed_video,
)


def _command(circle_id: str, **overrides) -> CreateEventCommand:
    values = {
        "circle_id": circle_id,
        "request_text": "Package taken from the porch around noon",
        "event_type": "package_theft",
        "camera_zone": "porch",
    }
    values.update(overrides)
    return CreateEventCommand(**values)


async def _notifications(session, **filters) -> list[Notification]:
    stmt = select(Notification)
    for key, value in filters.items():
        stmt = stmt.where(getattr(Notification, key) == value)
    result = await session.execute(stmt)
    return list(result.scalars().all())


async def _event_count(session) -> int:
    result = await session.execute(select(func.count()).select_from(Event))
    return result.scalar_one()


@pytest.fixture
async def circle_setup(session):
    """Circle with an owner, a resident, a neighbor and an observer."""
    owner = await seed_user(session, name="Olivia Owner")
    circle = await seed_circle(session, owner, name="Maple Court")
    resident = await seed_member(session, circle, role=MemberRole.RESIDENT)
    neighbor = await seed_member(session, circle, role=MemberRole.NEIGHBOR)
    observer = await seed_member(session, circle, role=MemberRole.OBSERVER)
    return {
        "circle": circle,
        "owner": owner,
        "resident": resident,
        "neighbor": neighbor,
        "observer": observer,
    }


# =============================================================================
# create
# =============================================================================


class TestCreate:
    """Tests for EventService.create."""

    @pytest.mark.asyncio
    async def test_create_applies_defaults(self, session, circle_setup):
        """New events are open, medium severity, with empty resolution."""
        neighbor = circle_setup["neighbor"]
        service = EventService(session)

        view = await service.create(_command(circle_setup["circle"].id), neighbor.id)

        assert view.status == EventStatus.OPEN
        assert view.severity == Severity.MEDIUM
        assert view.resolution == ""
        assert view.resolution_note is None
        assert view.occurred_at is not None
        assert view.created_by_id == neighbor.id
        assert view.circle_name == "Maple Court"

    @pytest.mark.asyncio
    async def test_create_view_flags_for_creator(self, session, circle_setup):
        neighbor = circle_setup["neighbor"]
        view = await EventService(session).create(_command(circle_setup["circle"].id), neighbor.id)

        assert view.is_mine is True
        assert view.can_edit_event is True
        assert view.can_change_resolution is True
        assert view.my_role_in_circle == "neighbor"
        assert view.created_by_role == "neighbor"

    @pytest.mark.asyncio
    async def test_create_keeps_supplied_values(self, session, circle_setup):
        occurred = datetime(2026, 3, 1, 22, 15, tzinfo=UTC)
        video = await seed_video(session)

        view = await EventService(session).create(
            _command(
                circle_setup["circle"].id,
                title="Porch pirate",
                severity="high",
                occurred_at=occurred,
                video_asset_id=video.id,
            ),
            circle_setup["resident"].id,
        )

        assert view.title == "Porch pirate"
        assert view.severity == Severity.HIGH
        assert view.occurred_at.replace(tzinfo=UTC) == occurred
        assert view.video_asset_id == video.id
        assert view.video_url == video.url

    @pytest.mark.asyncio
    async def test_create_unknown_circle_is_not_found(self, session, circle_setup):
        with pytest.raises(CircleNotFoundError):
            await EventService(session).create(_command("no-such-circle"), circle_setup["owner"].id)

    @pytest.mark.asyncio
    async def test_create_by_non_member_is_forbidden(self, session, circle_setup):
        stranger = await seed_user(session)

        with pytest.raises(CircleAccessDeniedError):
            await EventService(session).create(_command(circle_setup["circle"].id), stranger.id)
        assert await _event_count(session) == 0

    @pytest.mark.asyncio
    async def test_create_by_observer_is_forbidden(self, session, circle_setup):
        with pytest.raises(ObserverCannotCreateError):
            await EventService(session).create(
                _command(circle_setup["circle"].id), circle_setup["observer"].id
            )
        assert await _event_count(session) == 0

    @pytest.mark.asyncio
    async def test_observer_is_forbidden_even_when_owner_elsewhere(self, session, circle_setup):
        """Ownership of another circle does not lift the observer restriction."""
        observer = circle_setup["observer"]
        own_circle = await seed_circle(session, observer, name="Observer's Home")
        service = EventService(session)

        with pytest.raises(ObserverCannotCreateError):
            await service.create(_command(circle_setup["circle"].id), observer.id)

        view = await service.create(_command(own_circle.id), observer.id)
        assert view.my_role_in_circle == "owner"

    @pytest.mark.asyncio
    async def test_create_with_unknown_video_is_not_found(self, session, circle_setup):
        with pytest.raises(VideoAssetNotFoundError):
            await EventService(session).create(
                _command(circle_setup["circle"].id, video_asset_id="missing-video"),
                circle_setup["neighbor"].id,
            )
        assert await _event_count(session) == 0

    @pytest.mark.asyncio
    async def test_create_with_blank_request_text_is_bad_request(self, session, circle_setup):
        with pytest.raises(InvalidInputError):
            await EventService(session).create(
                _command(circle_setup["circle"].id, request_text="   "),
                circle_setup["neighbor"].id,
            )

    @pytest.mark.asyncio
    async def test_create_with_unknown_severity_is_bad_request(self, session, circle_setup):
        with pytest.raises(InvalidInputError):
            await EventService(session).create(
                _command(circle_setup["circle"].id, severity="apocalyptic"),
                circle_setup["neighbor"].id,
            )

    @pytest.mark.asyncio
    async def test_create_notifies_everyone_but_creator(self, session, circle_setup):
        neighbor = circle_setup["neighbor"]

        view = await EventService(session).create(
            _command(circle_setup["circle"].id, title="Open gate"), neighbor.id
        )

        notifications = await _notifications(session)
        recipients = {n.user_id for n in notifications}
        assert recipients == {
            circle_setup["owner"].id,
            circle_setup["resident"].id,
            circle_setup["observer"].id,
        }
        for n in notifications:
            assert n.notification_type == NotificationType.EVENT_CREATED
            assert n.is_read is False
            assert n.payload["eventId"] == view.id
            assert n.payload["circleId"] == circle_setup["circle"].id
            assert n.payload["title"] == "New event in Maple Court"
            assert n.payload["message"] == f"{neighbor.name}: Open gate"

    @pytest.mark.asyncio
    async def test_create_message_falls_back_to_request_text(self, session, circle_setup):
        long_text = "x" * 300

        await EventService(session).create(
            _command(circle_setup["circle"].id, request_text=long_text),
            circle_setup["owner"].id,
        )

        notifications = await _notifications(session)
        assert notifications
        assert notifications[0].payload["message"] == f"Olivia Owner: {'x' * 120}"

    @pytest.mark.asyncio
    async def test_create_succeeds_when_fanout_fails(self, session, circle_setup, caplog):
        """A failing fan-out is logged and never fails or rolls back the create."""
        failing = AsyncMock(side_effect=RuntimeError("notification store down"))

        with (
            patch.object(NotificationService, "notify_circle", failing),
            caplog.at_level(logging.WARNING),
        ):
            view = await EventService(session).create(
                _command(circle_setup["circle"].id), circle_setup["neighbor"].id
            )

        assert failing.await_count == 1
        assert view.status == EventStatus.OPEN
        assert await _event_count(session) == 1
        assert await _notifications(session) == []
        assert any("fan-out failed" in r.getMessage() for r in caplog.records)


# =============================================================================
# get / list
# =============================================================================


class TestQueries:
    """Tests for get, list_by_circle, list_open_for_user and get_by_ids."""

    @pytest.mark.asyncio
    async def test_get_returns_view_for_member(self, session, circle_setup):
        event = await seed_event(session, circle_setup["circle"], circle_setup["neighbor"])

        view = await EventService(session).get(event.id, circle_setup["resident"].id)

        assert view.id == event.id
        assert view.is_mine is False
        assert view.can_edit_event is False
        assert view.can_change_resolution is False
        assert view.my_role_in_circle == "resident"
        assert view.created_by_role == "neighbor"

    @pytest.mark.asyncio
    async def test_get_missing_event_is_not_found(self, session, circle_setup):
        with pytest.raises(EventNotFoundError):
            await EventService(session).get("missing", circle_setup["owner"].id)

    @pytest.mark.asyncio
    async def test_get_by_non_member_is_forbidden(self, session, circle_setup):
        event = await seed_event(session, circle_setup["circle"], circle_setup["neighbor"])
        stranger = await seed_user(session)

        with pytest.raises(CircleAccessDeniedError):
            await EventService(session).get(event.id, stranger.id)

    @pytest.mark.asyncio
    async def test_creator_role_unknown_after_removal(self, session, circle_setup):
        """A creator who is no longer a member is reported as unknown."""
        outsider = await seed_user(session)
        event = await seed_event(session, circle_setup["circle"], outsider)

        view = await EventService(session).get(event.id, circle_setup["owner"].id)

        assert view.created_by_role == "unknown"
        assert view.can_change_resolution is True

    @pytest.mark.asyncio
    async def test_list_by_circle_newest_first(self, session, circle_setup):
        circle = circle_setup["circle"]
        base = datetime(2026, 5, 1, 12, 0, tzinfo=UTC)
        for minutes in (0, 10, 20):
            await seed_event(
                session,
                circle,
                circle_setup["neighbor"],
                title=f"t{minutes}",
                created_at=base + timedelta(minutes=minutes),
            )

        views = await EventService(session).list_by_circle(circle.id, circle_setup["owner"].id)

        assert [v.title for v in views] == ["t20", "t10", "t0"]

    @pytest.mark.asyncio
    async def test_list_by_circle_status_and_cursor(self, session, circle_setup):
        circle = circle_setup["circle"]
        base = datetime(2026, 5, 1, 12, 0, tzinfo=UTC)
        await seed_event(session, circle, None, title="old", created_at=base)
        await seed_event(
            session,
            circle,
            None,
            title="resolved",
            status=EventStatus.RESOLVED,
            resolution_note="done",
            created_at=base + timedelta(minutes=5),
        )
        await seed_event(session, circle, None, title="new", created_at=base + timedelta(minutes=10))
        service = EventService(session)

        open_views = await service.list_by_circle(circle.id, circle_setup["owner"].id, status="open")
        assert [v.title for v in open_views] == ["new", "old"]

        cursor = (base + timedelta(minutes=10)).isoformat()
        older = await service.list_by_circle(circle.id, circle_setup["owner"].id, cursor=cursor)
        assert [v.title for v in older] == ["resolved", "old"]

    @pytest.mark.asyncio
    async def test_list_by_circle_accepts_zulu_cursor(self, session, circle_setup):
        circle = circle_setup["circle"]
        await seed_event(session, circle, None, created_at=datetime(2026, 1, 1, tzinfo=UTC))

        views = await EventService(session).list_by_circle(
            circle.id, circle_setup["owner"].id, cursor="2026-01-02T00:00:00Z"
        )

        assert len(views) == 1

    @pytest.mark.asyncio
    async def test_list_by_circle_limit_zero_returns_one(self, session, circle_setup):
        circle = circle_setup["circle"]
        for _ in range(3):
            await seed_event(session, circle, None)

        views = await EventService(session).list_by_circle(
            circle.id, circle_setup["owner"].id, limit=0
        )

        assert len(views) == 1

    @pytest.mark.asyncio
    async def test_list_by_circle_rejects_unknown_status(self, session, circle_setup):
        with pytest.raises(InvalidInputError):
            await EventService(session).list_by_circle(
                circle_setup["circle"].id, circle_setup["owner"].id, status="closed-ish"
            )

    @pytest.mark.asyncio
    async def test_list_by_circle_rejects_bad_cursor(self, session, circle_setup):
        with pytest.raises(InvalidInputError):
            await EventService(session).list_by_circle(
                circle_setup["circle"].id, circle_setup["owner"].id, cursor="yesterday"
            )

    @pytest.mark.asyncio
    async def test_list_by_circle_requires_membership(self, session, circle_setup):
        stranger = await seed_user(session)

        with pytest.raises(CircleAccessDeniedError):
            await EventService(session).list_by_circle(circle_setup["circle"].id, stranger.id)

    @pytest.mark.asyncio
    async def test_list_open_for_user_without_circles_is_empty(self, session, circle_setup):
        await seed_event(session, circle_setup["circle"], None)
        loner = await seed_user(session)

        assert await EventService(session).list_open_for_user(loner.id) == []

    @pytest.mark.asyncio
    async def test_list_open_for_user_spans_circles(self, session, circle_setup):
        owner = circle_setup["owner"]
        other_circle = await seed_circle(session, owner, name="Cabin")
        await seed_event(session, circle_setup["circle"], None, title="home")
        await seed_event(session, other_circle, None, title="cabin")
        await seed_event(
            session,
            other_circle,
            None,
            title="done",
            status=EventStatus.RESOLVED,
            resolution_note="ok",
        )

        views = await EventService(session).list_open_for_user(owner.id)

        assert {v.title for v in views} == {"home", "cabin"}
        assert all(v.my_role_in_circle == "owner" for v in views)

    @pytest.mark.asyncio
    async def test_get_by_ids_skips_foreign_circles(self, session, circle_setup):
        """Events in circles the caller is not in are omitted without error."""
        circle = circle_setup["circle"]
        outsider_owner = await seed_user(session)
        foreign = await seed_circle(session, outsider_owner)
        e1 = await seed_event(session, circle, None)
        e2 = await seed_event(session, foreign, None)
        e3 = await seed_event(session, circle, None)

        views = await EventService(session).get_by_ids(
            [e1.id, e2.id, e3.id], circle_setup["neighbor"].id
        )

        assert len(views) == 2
        assert {v.id for v in views} == {e1.id, e3.id}


# =============================================================================
# update_status
# =============================================================================


class TestUpdateStatus:
    """Tests for EventService.update_status."""

    @pytest.mark.asyncio
    async def test_owner_and_neighbor_walkthrough(self, session, circle_setup):
        """Owner resolves a neighbor's event; afterwards nobody can touch it."""
        owner = circle_setup["owner"]
        neighbor = circle_setup["neighbor"]
        service = EventService(session)
        created = await service.create(_command(circle_setup["circle"].id), neighbor.id)
        assert created.status == EventStatus.OPEN
        assert created.resolution == ""

        with pytest.raises(ResolutionRequiredError):
            await service.update_status(
                created.id, UpdateStatusCommand(status="resolved"), owner.id
            )

        resolved = await service.update_status(
            created.id,
            UpdateStatusCommand(status="resolved", resolution="handled"),
            owner.id,
        )
        assert resolved.status == EventStatus.RESOLVED
        assert resolved.resolution_note == "handled"

        resolved_notifications = await _notifications(
            session, notification_type=NotificationType.EVENT_RESOLVED
        )
        assert owner.id not in {n.user_id for n in resolved_notifications}
        assert neighbor.id in {n.user_id for n in resolved_notifications}

        with pytest.raises(EventLockedError, match="Resolved events cannot be modified"):
            await service.update_status(
                created.id, UpdateStatusCommand(resolution="more detail"), neighbor.id
            )

    @pytest.mark.asyncio
    async def test_resolved_lock_precedes_permission_check(self, session, circle_setup):
        event = await seed_event(
            session,
            circle_setup["circle"],
            circle_setup["neighbor"],
            status=EventStatus.RESOLVED,
            resolution_note="done",
        )
        stranger = await seed_user(session)

        with pytest.raises(EventLockedError):
            await EventService(session).update_status(
                event.id, UpdateStatusCommand(status="open"), stranger.id
            )

    @pytest.mark.asyncio
    async def test_missing_event_is_not_found(self, session, circle_setup):
        with pytest.raises(EventNotFoundError):
            await EventService(session).update_status(
                "missing", UpdateStatusCommand(status="open"), circle_setup["owner"].id
            )

    @pytest.mark.asyncio
    async def test_non_member_is_forbidden(self, session, circle_setup):
        event = await seed_event(session, circle_setup["circle"], circle_setup["neighbor"])
        stranger = await seed_user(session)

        with pytest.raises(CircleAccessDeniedError):
            await EventService(session).update_status(
                event.id, UpdateStatusCommand(status="in_progress"), stranger.id
            )

    @pytest.mark.asyncio
    async def test_member_who_is_not_owner_or_creator_is_forbidden(self, session, circle_setup):
        event = await seed_event(session, circle_setup["circle"], circle_setup["neighbor"])

        with pytest.raises(EventModificationDeniedError):
            await EventService(session).update_status(
                event.id, UpdateStatusCommand(status="in_progress"), circle_setup["resident"].id
            )

    @pytest.mark.asyncio
    async def test_creator_can_move_to_in_progress_and_back(self, session, circle_setup):
        neighbor = circle_setup["neighbor"]
        event = await seed_event(session, circle_setup["circle"], neighbor)
        service = EventService(session)

        view = await service.update_status(
            event.id, UpdateStatusCommand(status="in_progress"), neighbor.id
        )
        assert view.status == EventStatus.IN_PROGRESS

        view = await service.update_status(event.id, UpdateStatusCommand(status="open"), neighbor.id)
        assert view.status == EventStatus.OPEN
        assert await _notifications(session) == []

    @pytest.mark.asyncio
    async def test_unknown_status_is_bad_request(self, session, circle_setup):
        event = await seed_event(session, circle_setup["circle"], circle_setup["neighbor"])

        with pytest.raises(InvalidInputError):
            await EventService(session).update_status(
                event.id, UpdateStatusCommand(status="archived"), circle_setup["owner"].id
            )

    @pytest.mark.asyncio
    @pytest.mark.parametrize("resolution", [None, "", "   ", "\n\t"])
    async def test_resolving_requires_non_blank_resolution(self, session, circle_setup, resolution):
        event = await seed_event(session, circle_setup["circle"], circle_setup["neighbor"])

        with pytest.raises(ResolutionRequiredError):
            await EventService(session).update_status(
                event.id,
                UpdateStatusCommand(status="resolved", resolution=resolution),
                circle_setup["owner"].id,
            )

        reloaded = await EventRepository(session).get_with_relations(event.id)
        assert reloaded.status == EventStatus.OPEN

    @pytest.mark.asyncio
    async def test_resolution_is_trimmed_and_blank_becomes_null(self, session, circle_setup):
        neighbor = circle_setup["neighbor"]
        event = await seed_event(session, circle_setup["circle"], neighbor)
        service = EventService(session)

        view = await service.update_status(
            event.id, UpdateStatusCommand(resolution="  checked cameras  "), neighbor.id
        )
        assert view.resolution_note == "checked cameras"
        assert view.status == EventStatus.OPEN

        view = await service.update_status(event.id, UpdateStatusCommand(resolution="   "), neighbor.id)
        assert view.resolution_note is None

    @pytest.mark.asyncio
    async def test_resolve_message_names_actor_and_note(self, session, circle_setup):
        owner = circle_setup["owner"]
        event = await seed_event(session, circle_setup["circle"], circle_setup["neighbor"])

        await EventService(session).update_status(
            event.id,
            UpdateStatusCommand(status="resolved", resolution="Neighbor's cat"),
            owner.id,
        )

        notifications = await _notifications(
            session, notification_type=NotificationType.EVENT_RESOLVED
        )
        assert len(notifications) == 3
        for n in notifications:
            assert n.payload["title"] == "Event resolved in Maple Court"
            assert n.payload["message"] == "Olivia Owner: Neighbor's cat"
            assert n.payload["eventId"] == event.id

    @pytest.mark.asyncio
    async def test_resolve_succeeds_when_fanout_fails(self, session, circle_setup):
        event = await seed_event(session, circle_setup["circle"], circle_setup["neighbor"])
        failing = AsyncMock(side_effect=RuntimeError("boom"))

        with patch.object(NotificationService, "notify_circle", failing):
            view = await EventService(session).update_status(
                event.id,
                UpdateStatusCommand(status="resolved", resolution="ok"),
                circle_setup["owner"].id,
            )

        assert view.status == EventStatus.RESOLVED
        reloaded = await EventRepository(session).get_with_relations(event.id)
        assert reloaded.status == EventStatus.RESOLVED
        assert await _notifications(session) == []

    @pytest.mark.asyncio
    async def test_guard_rejection_reports_locked(self, session, circle_setup):
        """If the row was resolved between load and write, the caller sees the lock error."""
        event = await seed_event(session, circle_setup["circle"], circle_setup["neighbor"])

        with (
            patch.object(EventRepository, "save", AsyncMock(return_value=False)),
            pytest.raises(EventLockedError),
        ):
            await EventService(session).update_status(
                event.id,
                UpdateStatusCommand(status="resolved", resolution="late"),
                circle_setup["owner"].id,
            )
        assert await _notifications(session) == []

    @pytest.mark.asyncio
    async def test_permission_follows_role_changes(self, session, circle_setup):
        """Promoting a resident to owner grants modify rights on others' events."""
        resident = circle_setup["resident"]
        event = await seed_event(session, circle_setup["circle"], circle_setup["neighbor"])
        service = EventService(session)

        before = await service.get(event.id, resident.id)
        assert before.can_change_resolution is False

        membership = await MembershipRepository(session).get_membership(
            circle_setup["circle"].id, resident.id
        )
        membership.role = MemberRole.OWNER
        await session.commit()

        after = await service.get(event.id, resident.id)
        assert after.can_change_resolution is True
        view = await service.update_status(
            event.id, UpdateStatusCommand(status="in_progress"), resident.id
        )
        assert view.status == EventStatus.IN_PROGRESS
