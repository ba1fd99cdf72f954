"""Segmentation pipeline: resolve -> check -> orchestrate -> aggregate."""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable

from video_segmenter.config import StorageConfig
from video_segmenter.segmentation.ffmpeg import FFmpegProcess, ProcessFactory
from video_segmenter.segmentation.listing import ListingService
from video_segmenter.segmentation.models import SegmentationRequest, SegmentationResult
from video_segmenter.segmentation.orchestrator import SegmentationOrchestrator
from video_segmenter.segmentation.paths import resolve_job
from video_segmenter.segmentation.preconditions import PreconditionChecker

logger = logging.getLogger(__name__)

SUCCESS_MESSAGE = "Video segmentation completed successfully"


class VideoService:
    """Entry point for the two operations the API exposes.

    Holds configuration only; every call builds its own job, so concurrent
    requests share no mutable state. Output directories are the only thing
    keeping jobs apart.
    """

    def __init__(
        self,
        config: StorageConfig,
        process_factory: ProcessFactory = FFmpegProcess,
        log: logging.Logger | None = None,
        clock: Callable[[], int] = time.time_ns,
    ) -> None:
        self._config = config
        self._log = log or logger
        self._clock = clock
        self._checker = PreconditionChecker(config, self._log)
        self._orchestrator = SegmentationOrchestrator(
            process_factory=process_factory,
            ffmpeg_path=config.ffmpeg_path,
            log=self._log,
        )
        self._listing = ListingService(config, self._checker, self._log)

    async def segment_video(self, request: SegmentationRequest) -> SegmentationResult:
        """Split the requested video into ``request.segment_duration``-second files.

        Raises:
            DirectoryCreationError: Storage roots or the job directory could not be created.
            SourceNotFoundError: The source video is missing; nothing was created for the job.
            TranscodeError: ffmpeg failed.
            SegmentCountError: ffmpeg succeeded but its output could not be counted.
        """
        job = resolve_job(self._config, request.source_file_name, self._clock)

        # Filesystem checks are blocking; keep them off the event loop
        await asyncio.to_thread(self._checker.ensure_directories)
        await asyncio.to_thread(self._checker.check_input_exists, job.input_path)
        await asyncio.to_thread(self._checker.create_job_directory, job.output_dir)

        segments_created = await self._orchestrator.run(job, request.segment_duration)

        return SegmentationResult(
            message=SUCCESS_MESSAGE,
            segments_created=segments_created,
            output_path=str(job.output_dir),
        )

    def list_videos(self) -> list[str]:
        return self._listing.list_videos()
