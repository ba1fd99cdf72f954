"""Request checks applied before a segmentation request reaches the service."""

from __future__ import annotations

from pathlib import PurePath

from fastapi import HTTPException

from video_segmenter.api.models import SegmentVideoRequest
from video_segmenter.segmentation.models import (
    DEFAULT_SEGMENT_DURATION,
    MEDIA_EXTENSIONS,
    SegmentationRequest,
)


def validate_segment_request(
    body: SegmentVideoRequest,
    default_duration: int = DEFAULT_SEGMENT_DURATION,
) -> SegmentationRequest:
    """Turn a request body into a SegmentationRequest or raise HTTPException(400).

    The file name must be present, carry a recognised video extension, and
    name a file directly inside the videos directory.
    """
    name = body.video_file_name
    if not name:
        raise HTTPException(status_code=400, detail="Video file is required")

    if PurePath(name).suffix.lower() not in MEDIA_EXTENSIONS:
        raise HTTPException(
            status_code=400,
            detail=f"Invalid file extension. Allowed: {', '.join(MEDIA_EXTENSIONS)}",
        )

    # Only bare names: no directories, no traversal out of the videos root
    if "/" in name or "\\" in name or name in (".", ".."):
        raise HTTPException(status_code=400, detail="Invalid video file name")

    duration = body.segment_duration if body.segment_duration is not None else default_duration
    return SegmentationRequest(source_file_name=name, segment_duration=duration)
