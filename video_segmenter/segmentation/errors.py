"""Error taxonomy for the segmentation pipeline.

Every error carries the message that is safe to show to API callers; the
underlying exception is chained as ``__cause__`` and logged, never returned.
"""

from __future__ import annotations


class SegmenterError(Exception):
    """Base class for failures of a segmentation or listing request."""

    status_code: int = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class DirectoryCreationError(SegmenterError):
    """The input/output roots or a job directory could not be created."""


class SourceNotFoundError(SegmenterError):
    """The requested source video is absent or inaccessible."""

    status_code = 404

    def __init__(self, file_name: str) -> None:
        super().__init__(f"Video file not found: {file_name}")
        self.file_name = file_name


class TranscodeError(SegmenterError):
    """The external ffmpeg process reported a failure."""

    def __init__(self, detail: str) -> None:
        super().__init__(f"FFmpeg error: {detail}")
        self.detail = detail


class SegmentCountError(SegmenterError):
    """ffmpeg succeeded but the job's output directory could not be enumerated."""

    def __init__(self) -> None:
        super().__init__("Failed to count segments")


class ListingError(SegmenterError):
    """The input directory could not be enumerated."""

    def __init__(self) -> None:
        super().__init__("Failed to list videos")
