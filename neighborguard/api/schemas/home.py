"""Pydantic schemas for the home tasks endpoint."""

from __future__ import annotations

from pydantic import Field

from neighborguard.api.schemas.base import CamelModel
from neighborguard.api.schemas.events import EventResponse
from neighborguard.api.schemas.notifications import NotificationResponse
from neighborguard.models import CircleMember


class HomeCircleSummary(CamelModel):
    id: str
    name: str
    address: str | None = None
    role: str

    @classmethod
    def from_membership(cls, membership: CircleMember) -> HomeCircleSummary:
        return cls(
            id=membership.circle.id,
            name=membership.circle.name,
            address=membership.circle.address,
            role=membership.role.value,
        )


class HomeTasksResponse(CamelModel):
    """Aggregate inbox for the home screen."""

    inbox_new_events: list[EventResponse] = Field(default_factory=list)
    inbox_notifications: list[NotificationResponse] = Field(default_factory=list)
    pending_events: list[EventResponse] = Field(default_factory=list)
    my_circles: list[HomeCircleSummary] = Field(default_factory=list)
