"""Repository for VideoAsset entity database operations."""

from __future__ import annotations

from neighborguard.models import VideoAsset
from neighborguard.repositories.base import Repository


class VideoAssetRepository(Repository[VideoAsset]):
    """Repository for VideoAsset entity database operations.

    Only keyed lookups and inserts are needed; the base class covers both.
    """

    model_class = VideoAsset
