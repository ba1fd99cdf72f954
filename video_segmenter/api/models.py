"""Pydantic request/response schemas for the segmentation API."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Accepts and emits camelCase JSON while keeping snake_case attributes."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class SegmentVideoRequest(CamelModel):
    """Request body for POST /video/segment.

    ``video_file_name`` is optional at the schema level so a missing name is
    reported by the video-name check with its own message. An omitted
    ``segment_duration`` falls back to the configured default.
    """

    video_file_name: str | None = None
    segment_duration: int | None = Field(default=None, ge=1)


class SegmentVideoResponse(CamelModel):
    """Response body for POST /video/segment."""

    message: str
    segments_created: int
    output_path: str


class VideoListResponse(BaseModel):
    """Response body for GET /video/list."""

    count: int
    videos: list[str]
