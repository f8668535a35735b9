"""API route for the aggregate home view."""

from fastapi import APIRouter, Depends

from neighborguard.api.dependencies import get_current_user, get_home_service
from neighborguard.api.schemas.events import EventResponse
from neighborguard.api.schemas.home import HomeCircleSummary, HomeTasksResponse
from neighborguard.api.schemas.notifications import NotificationResponse
from neighborguard.models import User
from neighborguard.services.home_service import HomeService

router = APIRouter(prefix="/api/home", tags=["home"])


@router.get("/tasks", response_model=HomeTasksResponse)
async def get_home_tasks(
    user: User = Depends(get_current_user),
    service: HomeService = Depends(get_home_service),
) -> HomeTasksResponse:
    """My circles, open events, unread notifications and new events."""
    tasks = await service.get_home_tasks(user.id)
    return HomeTasksResponse(
        inbox_new_events=[EventResponse.model_validate(v) for v in tasks.inbox_new_events],
        inbox_notifications=[
            NotificationResponse.from_notification(n) for n in tasks.inbox_notifications
        ],
        pending_events=[EventResponse.model_validate(v) for v in tasks.pending_events],
        my_circles=[HomeCircleSummary.from_membership(m) for m in tasks.my_circles],
    )
