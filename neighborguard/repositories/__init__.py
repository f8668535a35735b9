"""Repository layer for database access.

Repositories wrap an AsyncSession and never commit; services own the unit
of work.
"""

from neighborguard.repositories.base import Repository
from neighborguard.repositories.circle_repository import CircleRepository, MembershipRepository
from neighborguard.repositories.event_note_repository import EventNoteRepository
from neighborguard.repositories.event_repository import EventRepository, clamp_limit
from neighborguard.repositories.notification_repository import NotificationRepository
from neighborguard.repositories.user_repository import UserRepository
from neighborguard.repositories.video_asset_repository import VideoAssetRepository

__all__ = [
    "CircleRepository",
    "EventNoteRepository",
    "EventRepository",
    "MembershipRepository",
    "NotificationRepository",
    "Repository",
    "UserRepository",
    "VideoAssetRepository",
    "clamp_limit",
]
