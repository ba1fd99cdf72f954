"""Data models for the segmentation pipeline."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

DEFAULT_SEGMENT_DURATION = 10

# Extensions recognised as source videos (compared lowercase)
MEDIA_EXTENSIONS = (".mp4", ".avi", ".mov", ".mkv", ".webm")


def is_media_file(name: str) -> bool:
    """Return True if ``name`` carries one of the recognised video extensions."""
    return Path(name).suffix.lower() in MEDIA_EXTENSIONS


@dataclass(frozen=True)
class SegmentationRequest:
    """An accepted request to split one source video."""

    source_file_name: str
    segment_duration: int = DEFAULT_SEGMENT_DURATION

    def __post_init__(self) -> None:
        if not self.source_file_name:
            raise ValueError("source_file_name must be a non-empty string")
        if self.segment_duration < 1:
            raise ValueError("segment_duration must be a positive integer")


@dataclass(frozen=True)
class SegmentationJob:
    """One request-scoped segmentation attempt.

    Identified by its ``output_dir``, which is unique per job. Nothing keeps a
    handle on the job once its result has been produced.
    """

    input_path: Path
    output_dir: Path
    base_name: str
    extension: str
    created_at: int

    @property
    def output_pattern(self) -> Path:
        """Segment file pattern with a zero-padded sequential index."""
        return self.output_dir / f"{self.base_name}_segment_%03d{self.extension}"


@dataclass(frozen=True)
class SegmentationResult:
    """Outcome of a successful job."""

    message: str
    segments_created: int
    output_path: str
