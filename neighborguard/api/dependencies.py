"""FastAPI dependency functions.

Services are built per request on top of the request's database session.
The caller is resolved from the optional ``X-User-Id`` header.

Usage:
    @router.get("/items")
    async def list_items(
        user: User = Depends(get_current_user),
        service: EventService = Depends(get_event_service),
    ):
        ...
"""

from __future__ import annotations

from fastapi import Depends, Header
from sqlalchemy.ext.asyncio import AsyncSession

from neighborguard.core.database import get_db
from neighborguard.models import User
from neighborguard.services.circle_service import CircleService
from neighborguard.services.event_note_service import EventNoteService
from neighborguard.services.event_service import EventService
from neighborguard.services.home_service import HomeService
from neighborguard.services.notification_service import NotificationService
from neighborguard.services.user_service import UserService


async def get_current_user(
    x_user_id: str | None = Header(default=None, alias="X-User-Id"),
    db: AsyncSession = Depends(get_db),
) -> User:
    """Resolve the caller; an unknown non-empty id is a 404."""
    return await UserService(db).resolve_current_user(x_user_id)


def get_user_service(db: AsyncSession = Depends(get_db)) -> UserService:
    return UserService(db)


def get_circle_service(db: AsyncSession = Depends(get_db)) -> CircleService:
    return CircleService(db)


def get_event_service(db: AsyncSession = Depends(get_db)) -> EventService:
    return EventService(db)


def get_event_note_service(db: AsyncSession = Depends(get_db)) -> EventNoteService:
    return EventNoteService(db)


def get_notification_service(db: AsyncSession = Depends(get_db)) -> NotificationService:
    return NotificationService(db)


def get_home_service(db: AsyncSession = Depends(get_db)) -> HomeService:
    return HomeService(db)
