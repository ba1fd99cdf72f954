"""Tests for API endpoints (no ffmpeg required)."""

from __future__ import annotations

import asyncio

import pytest
from fastapi.testclient import TestClient

from conftest import API_KEY, ScriptedFactory
from video_segmenter.api.dependencies import get_video_service
from video_segmenter.api.main import app

AUTH = {"x-api-key": API_KEY}


def test_health():
    response = TestClient(app).get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "healthy"}


class TestAuth:
    def test_missing_key(self, client: TestClient) -> None:
        response = client.get("/video/list")
        assert response.status_code == 401
        assert response.json()["detail"] == "Invalid API key"

    def test_wrong_key(self, client: TestClient) -> None:
        response = client.post("/video/segment", json={"videoFileName": "a.mp4"}, headers={"x-api-key": "nope"})
        assert response.status_code == 401

    def test_valid_key(self, client: TestClient) -> None:
        assert client.get("/video/list", headers=AUTH).status_code == 200


class TestSegmentValidation:
    def test_missing_file_name(self, client: TestClient) -> None:
        response = client.post("/video/segment", json={}, headers=AUTH)
        assert response.status_code == 400
        assert response.json()["detail"] == "Video file is required"

    def test_empty_file_name(self, client: TestClient) -> None:
        response = client.post("/video/segment", json={"videoFileName": ""}, headers=AUTH)
        assert response.status_code == 400
        assert response.json()["detail"] == "Video file is required"

    def test_bad_extension(self, client: TestClient) -> None:
        response = client.post("/video/segment", json={"videoFileName": "notes.txt"}, headers=AUTH)
        assert response.status_code == 400
        assert response.json()["detail"] == "Invalid file extension. Allowed: .mp4, .avi, .mov, .mkv, .webm"

    @pytest.mark.parametrize("name", ["../secret.mp4", "sub/dir.mp4", "..\\x.mp4"])
    def test_path_components_rejected(self, client: TestClient, name: str) -> None:
        response = client.post("/video/segment", json={"videoFileName": name}, headers=AUTH)
        assert response.status_code == 400

    @pytest.mark.parametrize("duration", [0, -5, "ten"])
    def test_bad_duration(self, client: TestClient, duration: object) -> None:
        response = client.post(
            "/video/segment",
            json={"videoFileName": "a.mp4", "segmentDuration": duration},
            headers=AUTH,
        )
        assert response.status_code == 400
        assert "segmentDuration" in response.json()["detail"]


class TestSegmentEndpoint:
    def test_success(self, client: TestClient, add_video, storage) -> None:  # type: ignore[no-untyped-def]
        add_video("test.mp4")
        response = client.post(
            "/video/segment",
            json={"videoFileName": "test.mp4", "segmentDuration": 5},
            headers=AUTH,
        )
        assert response.status_code == 201, response.text
        data = response.json()
        assert data["message"] == "Video segmentation completed successfully"
        assert data["segmentsCreated"] == 2
        assert data["outputPath"].startswith(str(storage.segments_dir / "test_"))

    def test_default_duration(
        self, client: TestClient, add_video, process_factory: ScriptedFactory  # type: ignore[no-untyped-def]
    ) -> None:
        add_video("test.mp4")
        response = client.post("/video/segment", json={"videoFileName": "test.mp4"}, headers=AUTH)
        assert response.status_code == 201
        cmd = process_factory.processes[0].command
        assert cmd[cmd.index("-segment_time") + 1] == "10"

    def test_configured_default_duration(
        self, client: TestClient, add_video, settings, process_factory: ScriptedFactory  # type: ignore[no-untyped-def]
    ) -> None:
        settings.default_segment_duration = 15
        add_video("test.mp4")
        response = client.post("/video/segment", json={"videoFileName": "test.mp4"}, headers=AUTH)
        assert response.status_code == 201
        cmd = process_factory.processes[0].command
        assert cmd[cmd.index("-segment_time") + 1] == "15"

    def test_source_not_found(self, client: TestClient, storage) -> None:  # type: ignore[no-untyped-def]
        response = client.post("/video/segment", json={"videoFileName": "ghost.mp4"}, headers=AUTH)
        assert response.status_code == 404
        assert response.json()["detail"] == "Video file not found: ghost.mp4"
        assert list(storage.segments_dir.iterdir()) == []

    def test_transcode_failure(self, client: TestClient, add_video, process_factory: ScriptedFactory) -> None:  # type: ignore[no-untyped-def]
        add_video("test.mp4")
        process_factory.steps = (("start",), ("error", RuntimeError("moov atom not found")))
        response = client.post("/video/segment", json={"videoFileName": "test.mp4"}, headers=AUTH)
        assert response.status_code == 500
        assert response.json()["detail"] == "FFmpeg error: moov atom not found"

    def test_count_failure(self, client: TestClient, add_video, process_factory: ScriptedFactory) -> None:  # type: ignore[no-untyped-def]
        add_video("test.mp4")
        process_factory.steps = (("write", 1), ("remove_output",), ("end",))
        response = client.post("/video/segment", json={"videoFileName": "test.mp4"}, headers=AUTH)
        assert response.status_code == 500
        assert response.json()["detail"] == "Failed to count segments"


class TestListEndpoint:
    def test_lists_media_only(self, client: TestClient, add_video) -> None:  # type: ignore[no-untyped-def]
        for name in ("a.mp4", "b.txt", "c.MKV"):
            add_video(name)
        response = client.get("/video/list", headers=AUTH)
        assert response.status_code == 200
        assert response.json() == {"count": 2, "videos": ["a.mp4", "c.MKV"]}

    def test_repeatable(self, client: TestClient, add_video) -> None:  # type: ignore[no-untyped-def]
        add_video("a.mp4")
        first = client.get("/video/list", headers=AUTH).json()
        assert client.get("/video/list", headers=AUTH).json() == first

    def test_empty(self, client: TestClient) -> None:
        assert client.get("/video/list", headers=AUTH).json() == {"count": 0, "videos": []}

    def test_listing_runs_off_the_event_loop(self, client: TestClient) -> None:
        calls: list[bool] = []

        class RecordingService:
            def list_videos(self) -> list[str]:
                try:
                    asyncio.get_running_loop()
                    calls.append(True)
                except RuntimeError:
                    calls.append(False)
                return ["a.mp4"]

        app.dependency_overrides[get_video_service] = RecordingService
        response = client.get("/video/list", headers=AUTH)
        assert response.json() == {"count": 1, "videos": ["a.mp4"]}
        assert calls == [False]


def test_malformed_json_body(client: TestClient) -> None:
    response = client.post(
        "/video/segment",
        content=b"{not json",
        headers={**AUTH, "content-type": "application/json"},
    )
    assert response.status_code == 400
    assert response.json()["detail"] == "Request body is not valid JSON"
