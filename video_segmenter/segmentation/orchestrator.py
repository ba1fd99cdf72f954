"""Drive one ffmpeg invocation and settle it to a single outcome.

The process reports its lifecycle through callbacks (start, progress, end,
error). The orchestrator turns them into one awaitable result:

    Created -> Started -> (Progressing)* -> Ended | Failed

``Ended`` runs the segment count; a count failure fails the job even though
ffmpeg succeeded. Whichever terminal event arrives first wins, and every
later event is ignored.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from video_segmenter.segmentation.aggregator import ResultAggregator
from video_segmenter.segmentation.errors import SegmentCountError, TranscodeError
from video_segmenter.segmentation.ffmpeg import (
    FFmpegProcess,
    ProcessFactory,
    Progress,
    TranscodeEvent,
    build_segment_command,
)
from video_segmenter.segmentation.models import SegmentationJob

logger = logging.getLogger(__name__)


class Settlement:
    """A future that can be resolved or rejected at most once.

    Later attempts are no-ops and return False.
    """

    def __init__(self, future: asyncio.Future[Any]) -> None:
        self._future = future

    @property
    def settled(self) -> bool:
        return self._future.done()

    def resolve(self, value: Any) -> bool:
        if self._future.done():
            return False
        self._future.set_result(value)
        return True

    def reject(self, error: BaseException) -> bool:
        if self._future.done():
            return False
        self._future.set_exception(error)
        return True

    def __await__(self):  # type: ignore[no-untyped-def]
        return self._future.__await__()


class SegmentationOrchestrator:
    """Runs the external segmenting process for a job and returns the segment count."""

    def __init__(
        self,
        process_factory: ProcessFactory = FFmpegProcess,
        ffmpeg_path: str = "ffmpeg",
        aggregator: ResultAggregator | None = None,
        log: logging.Logger | None = None,
    ) -> None:
        self._process_factory = process_factory
        self._ffmpeg_path = ffmpeg_path
        self._log = log or logger
        self._aggregator = aggregator or ResultAggregator(self._log)

    async def run(self, job: SegmentationJob, segment_duration: int) -> int:
        """Segment ``job.input_path`` into ``job.output_dir``.

        Returns:
            Number of entries in the output directory after ffmpeg finished.

        Raises:
            TranscodeError: ffmpeg failed, could not start, or exited silently.
            SegmentCountError: ffmpeg finished but the output could not be listed.
        """
        settlement = Settlement(asyncio.get_running_loop().create_future())
        command = build_segment_command(job, segment_duration, self._ffmpeg_path)
        process = self._process_factory(command)

        def on_start(command_line: str) -> None:
            if not settlement.settled:
                self._log.info("FFmpeg command: %s", command_line)

        def on_progress(progress: Progress) -> None:
            if settlement.settled:
                return
            if progress.percent is not None:
                self._log.info("Processing: %.2f%% done", progress.percent)
            else:
                self._log.debug("Processing: %.1fs written", progress.out_time)

        def on_end() -> None:
            if settlement.settled:
                return
            try:
                count = self._aggregator.count_segments(job.output_dir)
            except SegmentCountError as exc:
                settlement.reject(exc)
                return
            self._log.info("Segmentation completed. Created %d segments", count)
            settlement.resolve(count)

        def on_error(error: BaseException) -> None:
            if settlement.settled:
                return
            self._log.error("FFmpeg error for %s: %s", job.input_path, error)
            failure = TranscodeError(str(error))
            failure.__cause__ = error
            settlement.reject(failure)

        def on_exit(task: asyncio.Task[None]) -> None:
            if task.cancelled():
                return
            error = task.exception()
            if error is not None:
                on_error(error)
            elif not settlement.settled:
                self._log.error("FFmpeg process for %s exited without reporting completion", job.input_path)
                settlement.reject(TranscodeError("process exited without reporting completion"))

        process.on(TranscodeEvent.START, on_start)
        process.on(TranscodeEvent.PROGRESS, on_progress)
        process.on(TranscodeEvent.END, on_end)
        process.on(TranscodeEvent.ERROR, on_error)

        self._log.info("Starting segmentation: %s", job.input_path)
        self._log.info("Segment duration: %d seconds", segment_duration)

        task = asyncio.create_task(process.run())
        task.add_done_callback(on_exit)
        try:
            return await settlement
        finally:
            if not task.done():
                task.cancel()
