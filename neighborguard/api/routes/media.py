"""API routes for video assets.

Uploading and storing the file itself happens elsewhere; these routes only
record where an already-hosted clip lives so events can link to it.
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from neighborguard.api.dependencies import get_current_user
from neighborguard.api.schemas.media import VideoAssetCreate, VideoAssetResponse
from neighborguard.core.database import get_db
from neighborguard.core.exceptions import VideoAssetNotFoundError
from neighborguard.core.logging import get_logger
from neighborguard.models import User, VideoAsset
from neighborguard.repositories.video_asset_repository import VideoAssetRepository

logger = get_logger(__name__)

router = APIRouter(prefix="/api/media", tags=["media"])


@router.post("/videos", response_model=VideoAssetResponse, status_code=status.HTTP_201_CREATED)
async def register_video(
    body: VideoAssetCreate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> VideoAssetResponse:
    """Register a hosted video clip."""
    asset = await VideoAssetRepository(db).create(
        VideoAsset(url=body.url, storage_path=body.storage_path, duration_sec=body.duration_sec)
    )
    await db.commit()
    logger.info(f"Registered video asset {asset.id}", extra={"user_id": user.id})
    return VideoAssetResponse.model_validate(asset)


@router.get("/videos/{asset_id}", response_model=VideoAssetResponse)
async def get_video(
    asset_id: str,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> VideoAssetResponse:
    asset = await VideoAssetRepository(db).get_by_id(asset_id)
    if asset is None:
        raise VideoAssetNotFoundError(asset_id)
    return VideoAssetResponse.model_validate(asset)
