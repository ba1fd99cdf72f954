from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings

DEFAULT_API_KEY = "key"


class Settings(BaseSettings):
    """Application settings validated via Pydantic.

    Values are loaded from environment variables and/or a .env file.
    """

    # Auth. The default is for local development only.
    api_key: str = DEFAULT_API_KEY

    # Storage
    videos_dir: str = "videos"
    segments_dir: str = "segments"
    ffmpeg_path: str = "ffmpeg"

    # App config
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    log_level: str = "INFO"
    default_segment_duration: int = 10
    cors_origins: list[str] = [
        "http://localhost:3000",
        "http://localhost:8501",
    ]

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}

    @property
    def uses_default_api_key(self) -> bool:
        return self.api_key == DEFAULT_API_KEY


@dataclass(frozen=True)
class StorageConfig:
    """Immutable filesystem configuration handed to the segmentation components.

    Paths are absolute; relative settings are resolved against the working
    directory once, when the config is built.
    """

    videos_dir: Path
    segments_dir: Path
    ffmpeg_path: str = "ffmpeg"

    @classmethod
    def from_settings(cls, settings: Settings) -> StorageConfig:
        return cls(
            videos_dir=Path(settings.videos_dir).resolve(),
            segments_dir=Path(settings.segments_dir).resolve(),
            ffmpeg_path=settings.ffmpeg_path,
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return a cached Settings instance.

    Gracefully handles missing .env files (e.g. in CI/testing) by falling
    back to environment variables and defaults.
    """
    try:
        return Settings()
    except Exception:
        # If .env is missing or unreadable, build settings from env vars only.
        return Settings(_env_file=None)  # type: ignore[call-arg]
