"""Count what ffmpeg left in a job's output directory."""

from __future__ import annotations

import logging
import os
from pathlib import Path

from video_segmenter.segmentation.errors import SegmentCountError

logger = logging.getLogger(__name__)


class ResultAggregator:
    def __init__(self, log: logging.Logger | None = None) -> None:
        self._log = log or logger

    def count_segments(self, output_dir: Path) -> int:
        """Return the number of entries in ``output_dir``.

        Raises:
            SegmentCountError: The directory vanished or cannot be read.
        """
        try:
            entries = os.listdir(output_dir)
        except OSError as exc:
            self._log.error("Error reading output folder %s: %s", output_dir, exc)
            raise SegmentCountError() from exc
        return len(entries)
