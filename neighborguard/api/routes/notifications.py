"""API routes for the caller's notifications."""

from fastapi import APIRouter, Depends, Query

from neighborguard.api.dependencies import get_current_user, get_notification_service
from neighborguard.api.schemas.base import OkResponse
from neighborguard.api.schemas.notifications import (
    MarkAllReadResponse,
    NotificationResponse,
    UnreadCountResponse,
)
from neighborguard.models import User
from neighborguard.services.notification_service import NotificationService

router = APIRouter(prefix="/api/notifications", tags=["notifications"])


@router.get("", response_model=list[NotificationResponse])
async def list_notifications(
    unread_only: bool = Query(False, alias="unreadOnly"),
    notification_type: str | None = Query(None, alias="type"),
    cursor: str | None = Query(None, description="ISO-8601; only notifications created before it"),
    limit: int | None = Query(None, description="Page size, clamped to 1-100 (default 20)"),
    user: User = Depends(get_current_user),
    service: NotificationService = Depends(get_notification_service),
) -> list[NotificationResponse]:
    """List the caller's notifications, newest first."""
    notifications = await service.list_for_user(
        user.id,
        unread_only=unread_only,
        notification_type=notification_type,
        cursor=cursor,
        limit=limit,
    )
    return [NotificationResponse.from_notification(n) for n in notifications]


@router.get("/unread-count", response_model=UnreadCountResponse)
async def unread_count(
    user: User = Depends(get_current_user),
    service: NotificationService = Depends(get_notification_service),
) -> UnreadCountResponse:
    return UnreadCountResponse(unread_count=await service.unread_count(user.id))


@router.patch("/{notification_id}/read", response_model=OkResponse)
async def mark_read(
    notification_id: str,
    user: User = Depends(get_current_user),
    service: NotificationService = Depends(get_notification_service),
) -> OkResponse:
    await service.mark_read(user.id, notification_id)
    return OkResponse()


@router.post("/mark-all-read", response_model=MarkAllReadResponse)
async def mark_all_read(
    user: User = Depends(get_current_user),
    service: NotificationService = Depends(get_notification_service),
) -> MarkAllReadResponse:
    return MarkAllReadResponse(updated=await service.mark_all_read(user.id))
