"""Pydantic schemas for system endpoints."""

from pydantic import Field

from neighborguard.api.schemas.base import CamelModel


class HealthResponse(CamelModel):
    status: str = Field(..., description="healthy or degraded")
    version: str
    database: str = Field(..., description="Database connectivity: ok or unavailable")
