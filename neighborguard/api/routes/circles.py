"""API routes for circles, their members and their event feed."""

from fastapi import APIRouter, Depends, Query, status

from neighborguard.api.dependencies import (
    get_circle_service,
    get_current_user,
    get_event_service,
)
from neighborguard.api.schemas.circles import (
    CircleCreate,
    CircleResponse,
    MemberAdd,
    MemberResponse,
    RemoveMemberResponse,
)
from neighborguard.api.schemas.events import EventResponse
from neighborguard.api.schemas.users import MyCircleResponse
from neighborguard.models import User
from neighborguard.services.circle_service import CircleService
from neighborguard.services.event_service import EventService

router = APIRouter(prefix="/api/circles", tags=["circles"])


@router.get("", response_model=list[MyCircleResponse])
async def list_my_circles(
    user: User = Depends(get_current_user),
    service: CircleService = Depends(get_circle_service),
) -> list[MyCircleResponse]:
    """List the circles the caller belongs to, with the caller's role."""
    memberships = await service.list_for_user(user)
    return [MyCircleResponse.from_membership(m) for m in memberships]


@router.post("", response_model=CircleResponse, status_code=status.HTTP_201_CREATED)
async def create_circle(
    body: CircleCreate,
    user: User = Depends(get_current_user),
    service: CircleService = Depends(get_circle_service),
) -> CircleResponse:
    """Create a circle owned by the caller."""
    circle = await service.create_circle(user, body.name, body.address)
    return CircleResponse.model_validate(circle)


@router.get("/{circle_id}/members", response_model=list[MemberResponse])
async def list_members(
    circle_id: str,
    user: User = Depends(get_current_user),
    service: CircleService = Depends(get_circle_service),
) -> list[MemberResponse]:
    """List a circle's members. Members only."""
    members = await service.list_members(circle_id, user)
    return [MemberResponse.from_member(m) for m in members]


@router.post("/{circle_id}/members", response_model=MemberResponse)
async def add_member(
    circle_id: str,
    body: MemberAdd,
    user: User = Depends(get_current_user),
    service: CircleService = Depends(get_circle_service),
) -> MemberResponse:
    """Add a member by email or change an existing member's role. Owner only."""
    member = await service.add_member(
        circle_id, user, email=body.email, name=body.name, role=body.role
    )
    return MemberResponse.from_member(member)


@router.delete("/{circle_id}/members/{member_id}", response_model=RemoveMemberResponse)
async def remove_member(
    circle_id: str,
    member_id: str,
    user: User = Depends(get_current_user),
    service: CircleService = Depends(get_circle_service),
) -> RemoveMemberResponse:
    """Remove a non-owner member. Owner only."""
    await service.remove_member(circle_id, member_id, user)
    return RemoveMemberResponse()


@router.get("/{circle_id}/events", response_model=list[EventResponse])
async def list_circle_events(
    circle_id: str,
    status_filter: str | None = Query(None, alias="status", description="Filter by status"),
    cursor: str | None = Query(None, description="ISO-8601; only events created before it"),
    limit: int | None = Query(None, description="Page size, clamped to 1-100 (default 50)"),
    user: User = Depends(get_current_user),
    service: EventService = Depends(get_event_service),
) -> list[EventResponse]:
    """List a circle's events, newest first."""
    views = await service.list_by_circle(
        circle_id, user.id, status=status_filter, cursor=cursor, limit=limit
    )
    return [EventResponse.model_validate(v) for v in views]
