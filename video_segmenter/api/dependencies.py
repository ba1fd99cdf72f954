"""FastAPI dependency wiring for the segmentation service."""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends

from video_segmenter.config import Settings, StorageConfig, get_settings
from video_segmenter.segmentation.service import VideoService


def get_video_service(settings: Annotated[Settings, Depends(get_settings)]) -> VideoService:
    """Build the service from the current settings (overridden in tests)."""
    return VideoService(StorageConfig.from_settings(settings))
