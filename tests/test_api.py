"""
Tests for the dashboard HTTP API.
"""

import threading

import cv2
import numpy as np
import pytest
from fastapi.testclient import TestClient

from conftest import FakeDetector, bike, wait_until
from inference.loader import ModelLoader
from models.config import Config
from web.app import create_app
from web.services.stream_service import BOUNDARY, StreamService


def png_bytes():
    ok, buf = cv2.imencode(".png", np.zeros((30, 40, 3), dtype=np.uint8))
    assert ok
    return buf.tobytes()


@pytest.fixture
def app_config(tmp_path):
    return Config.from_dict({"uploads": {"directory": str(tmp_path / "uploads")}})


@pytest.fixture
def client_for(make_session, app_config):
    def _make(**kwargs):
        session = make_session(config=app_config, **kwargs)
        return TestClient(create_app(session, app_config)), session
    return _make


@pytest.fixture
def client(client_for):
    c, _ = client_for(detector=FakeDetector([[bike(), bike(cls="motorcycle")]]))
    return c


def _failed_loader():
    def factory():
        raise OSError("weights missing")

    loader = ModelLoader(factory)
    loader.start()
    loader.wait(timeout=2.0)
    return loader


class TestStatus:
    def test_status(self, client):
        resp = client.get("/api/status")

        assert resp.status_code == 200
        body = resp.json()
        assert body["status"] == "Model ready"
        assert body["source"] is None
        assert body["can_select_source"] is True
        assert body["can_start"] is False

    def test_health(self, client):
        body = client.get("/api/health").json()

        assert body["model_state"] == "ready"
        assert "free_bytes" in body["disk"]

    def test_dashboard_page(self, client):
        resp = client.get("/")

        assert resp.status_code == 200
        assert "BikePark" in resp.text
        assert "Model ready" in resp.text


class TestErrors:
    def test_toggle_without_source_is_409(self, client):
        resp = client.post("/api/processing/toggle")

        assert resp.status_code == 409
        assert resp.json()["error"] == "ControlDisabledError"

    def test_failed_model_is_409(self, client_for):
        c, _ = client_for(loader=_failed_loader())

        assert c.get("/api/status").json()["status"] == "Model load failed"
        assert c.post("/api/source/camera").status_code == 409

    def test_camera_denied_is_503(self, client_for):
        c, _ = client_for(fail_camera=True)

        resp = c.post("/api/source/camera")

        assert resp.status_code == 503
        assert c.get("/api/status").json()["source"] is None

    def test_second_source_is_409(self, client):
        assert client.post("/api/source/camera").status_code == 200

        assert client.post("/api/source/camera").status_code == 409

    def test_unsupported_upload_is_415(self, client):
        resp = client.post("/api/source/upload", files={"file": ("notes.txt", b"hello", "text/plain")})

        assert resp.status_code == 415
        assert client.get("/api/status").json()["source"] is None


class TestProcessing:
    def test_toggle_records_history(self, client_for, manual_scheduler):
        c, session = client_for(detector=FakeDetector([[bike(), bike(cls="motorcycle"), bike(cls="car")]]))
        c.post("/api/source/camera")
        assert session.frame_source.wait_for_frame(timeout=2.0)

        started = c.post("/api/processing/toggle").json()
        assert started["processing"] is True
        assert started["history_item"] is None
        manual_scheduler.tick()

        detections = c.get("/api/detections").json()
        assert detections["count"] == 2
        assert {d["class"] for d in detections["detections"]} == {"bicycle", "motorcycle"}

        stopped = c.post("/api/processing/toggle").json()
        assert stopped["processing"] is False
        assert stopped["history_item"]["count"] == 2

        history = c.get("/api/history").json()
        assert history["capacity"] == 10
        assert [item["count"] for item in history["items"]] == [2]
        assert c.get("/api/history/chart").json()["counts"] == [2]

    def test_reset(self, client_for):
        c, _ = client_for(detector=FakeDetector([[bike()]]))
        c.post("/api/source/camera")
        c.post("/api/processing/toggle")

        body = c.post("/api/reset").json()

        assert body["processing"] is False
        assert body["source"] is None
        assert body["count"] == 0
        assert c.get("/api/history").json()["items"] == []

    def test_image_upload(self, client_for):
        c, session = client_for()

        resp = c.post("/api/source/upload", files={"file": ("lot.png", png_bytes(), "image/png")})

        assert resp.status_code == 200
        assert resp.json() == {"source": "upload", "media": "image"}
        assert session.frame_source.wait_for_frame(timeout=2.0)

        overlay = c.get("/api/overlay.png")
        assert overlay.status_code == 200
        assert overlay.headers["content-type"] == "image/png"

    def test_overlay_without_source(self, client):
        assert client.get("/api/overlay.png").status_code == 204


class TestExports:
    def test_pdf(self, client):
        resp = client.get("/api/export/report.pdf")

        assert resp.status_code == 200
        assert resp.headers["content-type"] == "application/pdf"
        assert 'filename="bike-report.pdf"' in resp.headers["content-disposition"]
        assert resp.content.startswith(b"%PDF")

    def test_xlsx(self, client):
        resp = client.get("/api/export/data.xlsx")

        assert resp.status_code == 200
        assert 'filename="bike-data.xlsx"' in resp.headers["content-disposition"]
        # XLSX is a zip container.
        assert resp.content.startswith(b"PK")

    def test_chart_png(self, client):
        resp = client.get("/api/history/chart.png")

        assert resp.status_code == 200
        assert resp.content.startswith(b"\x89PNG")


class TestStreamService:
    def test_single_frame(self, make_session):
        session = make_session()
        session.select_camera()
        assert session.frame_source.wait_for_frame(timeout=2.0)

        chunks = list(StreamService.mjpeg_stream(session, fps=30, max_frames=1))

        assert len(chunks) == 1
        assert chunks[0].startswith(b"--" + BOUNDARY.encode())
        assert b"Content-Type: image/jpeg" in chunks[0]

    def test_no_source_ends_immediately(self, make_session):
        assert list(StreamService.mjpeg_stream(make_session(), fps=30)) == []

    def test_stream_ends_after_reset(self, make_session):
        session = make_session()
        session.select_camera()
        assert session.frame_source.wait_for_frame(timeout=2.0)
        stream = StreamService.mjpeg_stream(session, fps=30)

        assert next(stream).startswith(b"--" + BOUNDARY.encode())

        session.reset()
        with pytest.raises(StopIteration):
            next(stream)

    def test_stream_ends_when_frames_stop(self, make_session, camera_sources):
        session = make_session()
        session.select_camera()
        assert session.frame_source.wait_for_frame(timeout=2.0)

        camera_sources[0].dead = True
        assert wait_until(lambda: not session.frame_source.playback.is_running, timeout=5.0)

        assert list(StreamService.mjpeg_stream(session, fps=30, no_frame_timeout=0.2)) == []


class TestLoading:
    def test_controls_rejected_while_loading(self, client_for):
        release = threading.Event()

        def factory():
            release.wait(timeout=5.0)
            return FakeDetector()

        loader = ModelLoader(factory)
        loader.start()
        try:
            c, _ = client_for(loader=loader)

            body = c.get("/api/status").json()
            assert body["loading"] is True
            assert body["status"] == "Loading model..."
            assert body["can_select_source"] is False
            assert body["can_start"] is False
            assert c.post("/api/source/camera").status_code == 409
            assert c.post("/api/processing/toggle").status_code == 409
        finally:
            release.set()

        assert loader.wait(timeout=2.0)
        assert c.post("/api/source/camera").status_code == 200
