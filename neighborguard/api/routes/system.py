"""System endpoints: health check with database connectivity."""

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from neighborguard.api.schemas.system import HealthResponse
from neighborguard.core.config import get_settings
from neighborguard.core.database import get_db
from neighborguard.core.logging import get_logger, sanitize_error

logger = get_logger(__name__)

router = APIRouter(tags=["system"])


@router.get("/health", response_model=HealthResponse)
async def health(db: AsyncSession = Depends(get_db)) -> HealthResponse:
    """Report service health, including database connectivity."""
    database = "ok"
    try:
        await db.execute(text("SELECT 1"))
    except Exception as e:
        logger.warning(f"Database health check failed: {sanitize_error(e)}")
        database = "unavailable"

    return HealthResponse(
        status="healthy" if database == "ok" else "degraded",
        version=get_settings().app_version,
        database=database,
    )
