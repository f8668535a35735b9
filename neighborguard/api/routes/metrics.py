"""Prometheus metrics endpoint."""

from fastapi import APIRouter, Response

from neighborguard.core.metrics import get_metrics_response

router = APIRouter(prefix="/api", tags=["metrics"])


@router.get("/metrics")
async def metrics() -> Response:
    """Expose Prometheus metrics in text exposition format."""
    return Response(
        content=get_metrics_response(),
        media_type="text/plain; version=0.0.4; charset=utf-8",
    )
