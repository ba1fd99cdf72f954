"""Shared fixtures: temporary storage roots and a scripted stand-in for ffmpeg."""

from __future__ import annotations

import asyncio
import shutil
from collections.abc import Iterator
from pathlib import Path
from typing import Any

import pytest
from fastapi.testclient import TestClient

from video_segmenter.api.dependencies import get_video_service
from video_segmenter.api.main import app
from video_segmenter.config import Settings, StorageConfig, get_settings
from video_segmenter.segmentation.ffmpeg import Progress, TranscodeEvent
from video_segmenter.segmentation.service import VideoService

API_KEY = "test-key"


class ScriptedProcess:
    """Implements the ``on()/run()`` process contract by replaying a script.

    Steps are tuples. ``("start",)``, ``("progress", Progress)``, ``("end",)``
    and ``("error", exc)`` emit events; ``("write", n)`` creates ``n`` segment
    files next to the output pattern; ``("remove_output",)`` deletes the
    output directory; ``("raise", exc)`` makes ``run()`` raise.
    """

    def __init__(self, command: list[str], steps: tuple[tuple[Any, ...], ...]) -> None:
        self.command = command
        self.steps = steps
        self.emitted: list[TranscodeEvent] = []
        self._handlers: dict[TranscodeEvent, list[Any]] = {}

    @property
    def output_dir(self) -> Path:
        return Path(self.command[-1]).parent

    def on(self, event: TranscodeEvent, handler: Any) -> ScriptedProcess:
        self._handlers.setdefault(TranscodeEvent(event), []).append(handler)
        return self

    def _emit(self, event: TranscodeEvent, *args: Any) -> None:
        self.emitted.append(event)
        for handler in self._handlers.get(event, []):
            handler(*args)

    async def run(self) -> None:
        for kind, *args in self.steps:
            await asyncio.sleep(0)
            if kind == "start":
                self._emit(TranscodeEvent.START, " ".join(self.command))
            elif kind == "progress":
                self._emit(TranscodeEvent.PROGRESS, args[0])
            elif kind == "end":
                self._emit(TranscodeEvent.END)
            elif kind == "error":
                self._emit(TranscodeEvent.ERROR, args[0])
            elif kind == "write":
                pattern = Path(self.command[-1]).name
                for i in range(args[0]):
                    (self.output_dir / (pattern % i)).write_bytes(b"segment")
            elif kind == "remove_output":
                shutil.rmtree(self.output_dir)
            elif kind == "raise":
                raise args[0]


class ScriptedFactory:
    """Process factory handing out ScriptedProcess instances; remembers them."""

    def __init__(self, *steps: tuple[Any, ...]) -> None:
        self.steps = steps
        self.processes: list[ScriptedProcess] = []

    def __call__(self, command: list[str]) -> ScriptedProcess:
        process = ScriptedProcess(command, self.steps)
        self.processes.append(process)
        return process


SUCCESS_STEPS: tuple[tuple[Any, ...], ...] = (
    ("start",),
    ("progress", Progress(out_time=5.0, percent=50.0)),
    ("write", 2),
    ("progress", Progress(out_time=10.0, percent=100.0)),
    ("end",),
)


@pytest.fixture
def storage(tmp_path: Path) -> StorageConfig:
    return StorageConfig(
        videos_dir=tmp_path / "videos",
        segments_dir=tmp_path / "segments",
    )


@pytest.fixture
def settings(storage: StorageConfig) -> Settings:
    return Settings(
        _env_file=None,  # type: ignore[call-arg]
        api_key=API_KEY,
        videos_dir=str(storage.videos_dir),
        segments_dir=str(storage.segments_dir),
    )


@pytest.fixture
def add_video(storage: StorageConfig):  # type: ignore[no-untyped-def]
    """Create a (fake) source video in the videos directory."""

    def _add(name: str) -> Path:
        storage.videos_dir.mkdir(parents=True, exist_ok=True)
        path = storage.videos_dir / name
        path.write_bytes(b"\x00\x00\x00\x18ftypmp42")
        return path

    return _add


@pytest.fixture
def process_factory() -> ScriptedFactory:
    return ScriptedFactory(*SUCCESS_STEPS)


@pytest.fixture
def client(
    settings: Settings,
    storage: StorageConfig,
    process_factory: ScriptedFactory,
) -> Iterator[TestClient]:
    """TestClient wired to temporary storage and the scripted process factory."""
    app.dependency_overrides[get_settings] = lambda: settings
    app.dependency_overrides[get_video_service] = lambda: VideoService(
        storage, process_factory=process_factory
    )
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
