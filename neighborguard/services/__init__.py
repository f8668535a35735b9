"""Business logic services.

Services own the unit of work: they validate and authorize, call
repositories, and commit.
"""

from neighborguard.services.circle_service import CircleService
from neighborguard.services.event_note_service import EventNoteService
from neighborguard.services.event_service import (
    CreateEventCommand,
    EventService,
    EventView,
    UpdateStatusCommand,
    can_modify,
)
from neighborguard.services.home_service import HomeService, HomeTasks
from neighborguard.services.membership import MembershipDirectory
from neighborguard.services.notification_service import NotificationService
from neighborguard.services.user_service import MeView, UserService

__all__ = [
    "CircleService",
    "CreateEventCommand",
    "EventNoteService",
    "EventService",
    "EventView",
    "HomeService",
    "HomeTasks",
    "MeView",
    "MembershipDirectory",
    "NotificationService",
    "UpdateStatusCommand",
    "UserService",
    "can_modify",
]
