"""Video endpoints: segment a stored video and list available sources."""

from __future__ import annotations

import asyncio
from typing import Annotated

from fastapi import APIRouter, Depends

from video_segmenter.api.dependencies import get_video_service
from video_segmenter.api.models import SegmentVideoRequest, SegmentVideoResponse, VideoListResponse
from video_segmenter.api.security import require_api_key
from video_segmenter.api.validation import validate_segment_request
from video_segmenter.config import Settings, get_settings
from video_segmenter.segmentation.service import VideoService

router = APIRouter(prefix="/video", tags=["video"], dependencies=[Depends(require_api_key)])


@router.post("/segment", response_model=SegmentVideoResponse, status_code=201)
async def segment_video(
    body: SegmentVideoRequest,
    service: Annotated[VideoService, Depends(get_video_service)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> SegmentVideoResponse:
    """Split a video from the videos directory into fixed-duration segments.

    Blocks until ffmpeg has finished and the segments have been counted.
    Failures are raised as SegmenterError and mapped to HTTP by the app.
    """
    request = validate_segment_request(body, settings.default_segment_duration)
    result = await service.segment_video(request)
    return SegmentVideoResponse(
        message=result.message,
        segments_created=result.segments_created,
        output_path=result.output_path,
    )


@router.get("/list", response_model=VideoListResponse)
async def list_videos(
    service: Annotated[VideoService, Depends(get_video_service)],
) -> VideoListResponse:
    """List the video files available for segmentation."""
    videos = await asyncio.to_thread(service.list_videos)
    return VideoListResponse(count=len(videos), videos=videos)
