"""List the source videos available for segmentation."""

from __future__ import annotations

import logging
import os

from video_segmenter.config import StorageConfig
from video_segmenter.segmentation.errors import ListingError
from video_segmenter.segmentation.models import is_media_file
from video_segmenter.segmentation.preconditions import PreconditionChecker

logger = logging.getLogger(__name__)


class ListingService:
    def __init__(
        self,
        config: StorageConfig,
        checker: PreconditionChecker | None = None,
        log: logging.Logger | None = None,
    ) -> None:
        self._config = config
        self._log = log or logger
        self._checker = checker or PreconditionChecker(config, self._log)

    def list_videos(self) -> list[str]:
        """Return the names of media files directly inside the videos directory.

        Matching is by extension, case-insensitive. Subdirectories are not
        descended into. Names are sorted so repeated calls agree.

        Raises:
            DirectoryCreationError: The storage roots could not be created.
            ListingError: The videos directory could not be read.
        """
        self._checker.ensure_directories()
        try:
            with os.scandir(self._config.videos_dir) as entries:
                names = [e.name for e in entries if e.is_file() and is_media_file(e.name)]
        except OSError as exc:
            self._log.error("Error listing videos in %s: %s", self._config.videos_dir, exc)
            raise ListingError() from exc
        return sorted(names)
