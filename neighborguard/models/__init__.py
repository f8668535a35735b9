"""SQLAlchemy models for NeighborGuard."""

from .circle import Base, Circle, CircleMember
from .enums import EventStatus, MemberRole, NoteType, NotificationType, Severity
from .event import Event
from .event_note import EventNote
from .media import VideoAsset
from .notification import Notification
from .user import User

__all__ = [
    "Base",
    "Circle",
    "CircleMember",
    "Event",
    "EventNote",
    "EventStatus",
    "MemberRole",
    "NoteType",
    "Notification",
    "NotificationType",
    "Severity",
    "User",
    "VideoAsset",
]
