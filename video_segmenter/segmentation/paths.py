"""Derive input and per-job output locations for a segmentation request."""

from __future__ import annotations

import time
from collections.abc import Callable
from pathlib import Path

from video_segmenter.config import StorageConfig
from video_segmenter.segmentation.models import SegmentationJob


def resolve_job(
    config: StorageConfig,
    file_name: str,
    clock: Callable[[], int] = time.time_ns,
) -> SegmentationJob:
    """Build the job for ``file_name`` without touching the filesystem.

    The output directory is ``<segments_dir>/<base>_<timestamp>``; the
    nanosecond timestamp keeps jobs for the same source apart.

    Args:
        config: Storage roots (absolute).
        file_name: Sanitised source file name, relative to ``videos_dir``.
        clock: Timestamp source, injectable for tests.

    Returns:
        A fresh SegmentationJob.
    """
    source = Path(file_name)
    created_at = clock()
    base_name = source.stem
    return SegmentationJob(
        input_path=config.videos_dir / file_name,
        output_dir=config.segments_dir / f"{base_name}_{created_at}",
        base_name=base_name,
        extension=source.suffix.lower(),
        created_at=created_at,
    )
