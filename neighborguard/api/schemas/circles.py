"""Pydantic schemas for circle and membership endpoints."""

from __future__ import annotations

from datetime import datetime

from pydantic import Field

from neighborguard.api.schemas.base import CamelModel
from neighborguard.models import CircleMember, MemberRole


class CircleCreate(CamelModel):
    """Schema for creating a circle."""

    name: str = Field(..., min_length=1, max_length=200, description="Circle display name")
    address: str | None = Field(None, max_length=500, description="Optional street address")


class CircleResponse(CamelModel):
    """Schema for a circle."""

    id: str
    name: str
    address: str | None = None
    owner_id: str
    created_at: datetime
    updated_at: datetime


class MemberAdd(CamelModel):
    """Schema for adding a member (or changing an existing member's role)."""

    email: str = Field(
        ...,
        min_length=3,
        max_length=320,
        pattern=r"^[^@\s]+@[^@\s]+$",
        description="Email of the user to add; the user is created if unknown",
    )
    name: str | None = Field(None, max_length=200)
    role: MemberRole | None = Field(None, description="Defaults to neighbor for new members")


class MemberResponse(CamelModel):
    """Schema for a circle membership row."""

    id: str
    circle_id: str
    user_id: str
    user_name: str
    user_email: str
    role: MemberRole
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_member(cls, member: CircleMember) -> MemberResponse:
        user = member.user
        return cls(
            id=member.id,
            circle_id=member.circle_id,
            user_id=member.user_id,
            user_name=(user.name or "") if user else "",
            user_email=user.email if user else "",
            role=member.role,
            created_at=member.created_at,
            updated_at=member.updated_at,
        )


class RemoveMemberResponse(CamelModel):
    success: bool = True
