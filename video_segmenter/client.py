"""HTTP client wrapper for the Video Segmenter API."""

from __future__ import annotations

import os
from typing import Any

import httpx

API_URL = os.getenv("API_URL", "http://localhost:8000")


class SegmenterClient:
    """Thin httpx wrapper. Non-2xx responses raise ``httpx.HTTPStatusError``."""

    def __init__(
        self,
        base_url: str = API_URL,
        api_key: str | None = None,
        timeout: float = 600.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        headers = {"x-api-key": api_key if api_key is not None else os.getenv("API_KEY", "key")}
        self._http = httpx.Client(
            base_url=base_url,
            headers=headers,
            timeout=timeout,
            transport=transport,
        )

    def close(self) -> None:
        self._http.close()

    def __enter__(self) -> SegmenterClient:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def check_health(self) -> bool:
        """Return True if the API server responds to /health."""
        try:
            r = self._http.get("/health", timeout=5.0)
            return r.status_code == 200
        except httpx.ConnectError:
            return False

    def segment_video(self, video_file_name: str, segment_duration: int | None = None) -> dict[str, Any]:
        """Ask the server to segment a video. Waits for ffmpeg to finish."""
        payload: dict[str, Any] = {"videoFileName": video_file_name}
        if segment_duration is not None:
            payload["segmentDuration"] = segment_duration
        r = self._http.post("/video/segment", json=payload)
        r.raise_for_status()
        return r.json()  # type: ignore[no-any-return]

    def list_videos(self) -> dict[str, Any]:
        """Fetch ``{"count": ..., "videos": [...]}``."""
        r = self._http.get("/video/list")
        r.raise_for_status()
        return r.json()  # type: ignore[no-any-return]
