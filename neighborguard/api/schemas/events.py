"""Pydantic schemas for event endpoints."""

from __future__ import annotations

from datetime import datetime

from pydantic import Field

from neighborguard.api.schemas.base import CamelModel
from neighborguard.models import EventStatus, Severity


class EventCreate(CamelModel):
    """Schema for creating an event."""

    circle_id: str = Field(..., min_length=1, description="Circle the event belongs to")
    event_type: str = Field(..., min_length=1, max_length=64, description="Free-form event tag")
    camera_zone: str = Field(..., min_length=1, max_length=64, description="Camera zone tag")
    title: str | None = Field(None, max_length=120)
    description: str | None = None
    request_text: str = Field(..., min_length=1, description="What happened, in the reporter's words")
    severity: Severity | None = Field(None, description="Defaults to medium")
    occurred_at: datetime | None = Field(None, description="Defaults to the creation time")
    video_asset_id: str | None = Field(None, description="Previously registered video asset")


class EventStatusUpdate(CamelModel):
    """Schema for PATCH /api/events/{id}/status.

    Status is a plain string so unknown values are reported as a bad request
    by the lifecycle engine rather than as a schema error.
    """

    status: str | None = Field(None, description="open, in_progress or resolved")
    resolution: str | None = Field(None, description="Resolution note; required when resolving")


class EventResponse(CamelModel):
    """An event as seen by the caller."""

    id: str
    circle_id: str
    circle_name: str | None = None
    circle_address: str | None = None
    title: str | None = None
    description: str | None = None
    request_text: str
    event_type: str
    camera_zone: str
    severity: Severity
    status: EventStatus
    resolution: str
    resolution_note: str | None = None
    occurred_at: datetime | None = None
    created_at: datetime
    updated_at: datetime
    video_asset_id: str | None = None
    video_url: str | None = None
    created_by_id: str | None = None
    created_by_name: str | None = None
    created_by_email: str | None = None
    created_by_role: str
    is_mine: bool
    my_role_in_circle: str
    can_edit_event: bool
    can_change_resolution: bool
