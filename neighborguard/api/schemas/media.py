"""Pydantic schemas for video asset endpoints."""

from __future__ import annotations

from datetime import datetime

from pydantic import Field

from neighborguard.api.schemas.base import CamelModel


class VideoAssetCreate(CamelModel):
    """Register a clip that is already hosted somewhere reachable."""

    url: str = Field(..., min_length=1, max_length=2048)
    storage_path: str | None = Field(None, max_length=2048)
    duration_sec: int | None = Field(None, ge=0)


class VideoAssetResponse(CamelModel):
    id: str
    url: str
    storage_path: str | None = None
    duration_sec: int | None = None
    created_at: datetime
