"""ffmpeg invocation contract and an asyncio runner that reports its lifecycle as events.

The runner never raises for process failures. Everything it learns about the
child is reported through handlers registered with ``on()``:

- ``start(command_line: str)`` once the child has been spawned
- ``progress(Progress)`` zero or more times
- ``end()`` when ffmpeg exits with status 0
- ``error(Exception)`` when the child cannot be spawned or exits non-zero
"""

from __future__ import annotations

import asyncio
import logging
import re
import shlex
from collections import deque
from collections.abc import AsyncIterator, Callable
from dataclasses import dataclass
from enum import Enum
from typing import Any, Protocol

from video_segmenter.segmentation.models import SegmentationJob

logger = logging.getLogger(__name__)

# Number of trailing stderr lines kept for error reporting
_STDERR_TAIL = 20

# Pipes are read in chunks; longer lines are truncated
_READ_CHUNK = 64 * 1024
_MAX_LINE = 8 * 1024

_DURATION_RE = re.compile(r"Duration:\s*(\d+:\d{2}:\d{2}(?:\.\d+)?)")


class TranscodeEvent(str, Enum):
    """Lifecycle notifications emitted by a transcode process."""

    START = "start"
    PROGRESS = "progress"
    END = "end"
    ERROR = "error"


@dataclass(frozen=True)
class Progress:
    """One progress snapshot. Advisory only."""

    out_time: float
    percent: float | None = None
    fps: float | None = None
    speed: str | None = None


class TranscodeProcess(Protocol):
    """What the orchestrator needs from an external transcode process."""

    def on(self, event: TranscodeEvent, handler: Callable[..., Any]) -> TranscodeProcess: ...

    async def run(self) -> None: ...


ProcessFactory = Callable[[list[str]], TranscodeProcess]


class FFmpegExitError(Exception):
    """ffmpeg terminated with a non-zero exit status."""

    def __init__(self, returncode: int, detail: str) -> None:
        super().__init__(f"ffmpeg exited with code {returncode}: {detail}")
        self.returncode = returncode


def build_segment_command(
    job: SegmentationJob,
    segment_duration: int,
    ffmpeg_path: str = "ffmpeg",
) -> list[str]:
    """Return the argv that splits ``job.input_path`` into ``segment_duration``-second files.

    Streams are copied, not re-encoded, and timestamps restart at every
    segment boundary. Progress goes to stdout as ``key=value`` blocks.
    """
    return [
        ffmpeg_path,
        "-y",
        "-nostats",
        "-progress",
        "pipe:1",
        "-i",
        str(job.input_path),
        "-c",
        "copy",
        "-map",
        "0",
        "-f",
        "segment",
        "-segment_time",
        str(segment_duration),
        "-reset_timestamps",
        "1",
        str(job.output_pattern),
    ]


def parse_timestamp(value: str) -> float | None:
    """Convert ``HH:MM:SS.xxx`` to seconds; None for ``N/A`` or garbage."""
    parts = value.strip().split(":")
    if len(parts) != 3:
        return None
    try:
        hours, minutes, seconds = parts
        return int(hours) * 3600 + int(minutes) * 60 + float(seconds)
    except ValueError:
        return None


def parse_duration(line: str) -> float | None:
    """Extract the input duration from an ffmpeg stderr line, if present."""
    match = _DURATION_RE.search(line)
    if match is None:
        return None
    return parse_timestamp(match.group(1))


class ProgressParser:
    """Accumulates ``-progress`` output into Progress snapshots.

    ffmpeg writes one ``key=value`` per line and closes each block with
    ``progress=continue`` or ``progress=end``.
    """

    def __init__(self) -> None:
        self.duration: float | None = None
        self._fields: dict[str, str] = {}

    def feed(self, line: str) -> Progress | None:
        key, sep, value = line.strip().partition("=")
        if not sep:
            return None
        if key != "progress":
            self._fields[key] = value.strip()
            return None
        snapshot = self._snapshot()
        self._fields = {}
        return snapshot

    def _snapshot(self) -> Progress | None:
        out_time = self._out_time()
        if out_time is None:
            return None
        percent = None
        if self.duration:
            percent = min(out_time / self.duration * 100, 100.0)
        return Progress(
            out_time=out_time,
            percent=percent,
            fps=_to_float(self._fields.get("fps")),
            speed=self._fields.get("speed"),
        )

    def _out_time(self) -> float | None:
        # out_time_ms is also in microseconds (long-standing ffmpeg quirk)
        for key in ("out_time_us", "out_time_ms"):
            micros = _to_float(self._fields.get(key))
            if micros is not None and micros >= 0:
                return micros / 1_000_000
        if "out_time" in self._fields:
            return parse_timestamp(self._fields["out_time"])
        return None


def _to_float(value: str | None) -> float | None:
    if value is None:
        return None
    try:
        return float(value)
    except ValueError:
        return None


class FFmpegProcess:
    """Runs one ffmpeg command as an asyncio subprocess and emits lifecycle events."""

    def __init__(self, command: list[str]) -> None:
        self._command = list(command)
        self._handlers: dict[TranscodeEvent, list[Callable[..., Any]]] = {}

    def on(self, event: TranscodeEvent, handler: Callable[..., Any]) -> FFmpegProcess:
        self._handlers.setdefault(TranscodeEvent(event), []).append(handler)
        return self

    def _emit(self, event: TranscodeEvent, *args: Any) -> None:
        for handler in self._handlers.get(event, []):
            handler(*args)

    async def run(self) -> None:
        """Spawn ffmpeg and report its lifecycle until it exits.

        If anything interrupts the run (cancellation, a failing reader or
        handler), the child is killed and reaped before the error propagates.
        """
        try:
            proc = await asyncio.create_subprocess_exec(
                *self._command,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as exc:
            self._emit(TranscodeEvent.ERROR, exc)
            return

        self._emit(TranscodeEvent.START, shlex.join(self._command))

        parser = ProgressParser()
        stderr_tail: deque[str] = deque(maxlen=_STDERR_TAIL)
        readers = [
            asyncio.create_task(self._read_progress(proc.stdout, parser)),
            asyncio.create_task(self._read_stderr(proc.stderr, parser, stderr_tail)),
        ]
        try:
            await asyncio.gather(*readers)
            returncode = await proc.wait()
        except BaseException:
            for reader in readers:
                reader.cancel()
            if proc.returncode is None:
                logger.warning("Killing ffmpeg (pid %s) after interrupted run", proc.pid)
                proc.kill()
                await proc.wait()
            raise

        if returncode == 0:
            self._emit(TranscodeEvent.END)
        else:
            detail = stderr_tail[-1] if stderr_tail else "no diagnostic output"
            self._emit(TranscodeEvent.ERROR, FFmpegExitError(returncode, detail))

    async def _read_progress(self, stream: asyncio.StreamReader | None, parser: ProgressParser) -> None:
        if stream is None:
            return
        async for raw in read_lines(stream):
            progress = parser.feed(raw.decode("utf-8", errors="replace"))
            if progress is not None:
                self._emit(TranscodeEvent.PROGRESS, progress)

    async def _read_stderr(
        self,
        stream: asyncio.StreamReader | None,
        parser: ProgressParser,
        tail: deque[str],
    ) -> None:
        if stream is None:
            return
        async for raw in read_lines(stream):
            line = raw.decode("utf-8", errors="replace").strip()
            if not line:
                continue
            tail.append(line)
            if parser.duration is None:
                parser.duration = parse_duration(line)


async def read_lines(stream: asyncio.StreamReader) -> AsyncIterator[bytes]:
    """Yield newline-separated lines from ``stream`` read in fixed-size chunks.

    Lines longer than ``_MAX_LINE`` bytes are cut to that length; the rest of
    the line is discarded, never buffered.
    """
    buffer = bytearray()
    overlong = False
    while True:
        chunk = await stream.read(_READ_CHUNK)
        if not chunk:
            break
        buffer += chunk
        while True:
            newline = buffer.find(b"\n")
            if newline < 0:
                break
            line = bytes(buffer[:newline])
            del buffer[: newline + 1]
            if overlong:
                overlong = False
                continue
            yield line[:_MAX_LINE]
        if len(buffer) > _MAX_LINE:
            if not overlong:
                yield bytes(buffer[:_MAX_LINE])
                overlong = True
            buffer.clear()
    if buffer and not overlong:
        yield bytes(buffer[:_MAX_LINE])
