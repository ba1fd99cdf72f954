"""Filesystem checks that must pass before ffmpeg is launched."""

from __future__ import annotations

import logging
import os
from pathlib import Path

from video_segmenter.config import StorageConfig
from video_segmenter.segmentation.errors import DirectoryCreationError, SourceNotFoundError

logger = logging.getLogger(__name__)


class PreconditionChecker:
    """Ensures the storage roots exist and the requested source is readable."""

    def __init__(self, config: StorageConfig, log: logging.Logger | None = None) -> None:
        self._config = config
        self._log = log or logger

    def ensure_directories(self) -> None:
        """Create the input and output roots if missing (idempotent).

        Raises:
            DirectoryCreationError: The filesystem refused to create a root.
        """
        try:
            self._config.videos_dir.mkdir(parents=True, exist_ok=True)
            self._config.segments_dir.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            self._log.error("Error creating folders: %s", exc)
            raise DirectoryCreationError("Failed to create necessary folders") from exc
        self._log.info("Folders ensured to exist")

    def check_input_exists(self, path: Path) -> None:
        """Raise SourceNotFoundError (with the bare file name) unless ``path`` is a readable file."""
        if not path.is_file() or not os.access(path, os.R_OK):
            self._log.error("File not found: %s", path)
            raise SourceNotFoundError(path.name)

    def create_job_directory(self, path: Path) -> None:
        """Create a job's output directory; an existing one is never reused."""
        try:
            path.mkdir(parents=True, exist_ok=False)
        except OSError as exc:
            self._log.error("Error creating output directory %s: %s", path, exc)
            raise DirectoryCreationError("Failed to create output directory") from exc
