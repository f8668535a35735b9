"""Pydantic schemas for the current-user endpoint."""

from __future__ import annotations

from datetime import datetime

from pydantic import Field

from neighborguard.api.schemas.base import CamelModel
from neighborguard.models import CircleMember
from neighborguard.services.user_service import MeView


class MyCircleResponse(CamelModel):
    """A circle the caller belongs to, with the caller's role there."""

    id: str
    name: str
    address: str | None = None
    owner_id: str
    role: str = Field(..., description="Caller's role in this circle")
    created_at: datetime

    @classmethod
    def from_membership(cls, membership: CircleMember) -> MyCircleResponse:
        circle = membership.circle
        return cls(
            id=circle.id,
            name=circle.name,
            address=circle.address,
            owner_id=circle.owner_id,
            role=membership.role.value,
            created_at=circle.created_at,
        )


class MeResponse(CamelModel):
    """Schema for GET /api/users/me."""

    id: str
    email: str
    name: str | None = None
    avatar_url: str | None = None
    circles: list[MyCircleResponse] = Field(default_factory=list)

    @classmethod
    def from_view(cls, view: MeView) -> MeResponse:
        return cls(
            id=view.user.id,
            email=view.user.email,
            name=view.user.name,
            avatar_url=view.user.avatar_url,
            circles=[MyCircleResponse.from_membership(m) for m in view.memberships],
        )
