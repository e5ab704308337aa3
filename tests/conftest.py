"""
Pytest configuration and shared fixtures.
"""

import os
import sys
import time
from collections import deque

import numpy as np
import pytest

# Add src to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from inference.loader import ModelLoader  # noqa: E402
from models.config import Config  # noqa: E402
from models.detection import Detection  # noqa: E402
from models.frame import FrameData  # noqa: E402
from observation.base import ObservationConfig, ObservationSource  # noqa: E402
from observation.frame_source import FrameSource  # noqa: E402
from session.dashboard import DashboardSession  # noqa: E402


class ManualScheduler:
    """Scheduler that only runs callbacks when the test calls tick()."""

    def __init__(self):
        self.pending = deque()
        self.scheduled = 0

    def schedule(self, callback):
        self.pending.append(callback)
        self.scheduled += 1

    def cancel_all(self):
        self.pending.clear()

    def tick(self):
        batch = list(self.pending)
        self.pending.clear()
        for callback in batch:
            callback()
        return len(batch)


class FakeDetector:
    """Returns scripted detection lists, repeating the last one when exhausted."""

    def __init__(self, script=None):
        self.script = list(script or [[]])
        self.calls = 0

    def detect(self, frame):
        idx = min(self.calls, len(self.script) - 1)
        self.calls += 1
        result = self.script[idx]
        if isinstance(result, Exception):
            raise result
        return list(result)


class ArraySource(ObservationSource):
    """In-memory live source returning the same frame on every read.

    Set `dead = True` to make every later read fail, like an unplugged camera.
    """

    def __init__(self, frame=None, fail_open=False):
        super().__init__(ObservationConfig(source_id="camera", fps=100))
        self.frame = frame if frame is not None else np.zeros((48, 64, 3), dtype=np.uint8)
        self.fail_open = fail_open
        self.dead = False
        self.closed = 0

    def open(self):
        if self.fail_open:
            raise RuntimeError("Permission denied")
        self._is_open = True

    def read(self):
        if not self._is_open or self.dead:
            return None
        self._frame_index += 1
        return FrameData.from_numpy(self.frame, timestamp=time.time(), frame_index=self._frame_index, source="camera")

    def close(self):
        self._is_open = False
        self.closed += 1


def wait_until(predicate, timeout=2.0, interval=0.01):
    """Poll until predicate() is true. Returns its final value."""
    deadline = time.monotonic() + timeout
    while not predicate():
        if time.monotonic() > deadline:
            return predicate()
        time.sleep(interval)
    return True


def bike(x=10, y=30, w=20, h=20, score=0.9, cls="bicycle"):
    return Detection.from_xywh(x, y, w, h, class_name=cls, score=score)


def frame_data(index=1, shape=(48, 64, 3)):
    return FrameData.from_numpy(np.zeros(shape, dtype=np.uint8), timestamp=0.0, frame_index=index)


@pytest.fixture
def manual_scheduler():
    return ManualScheduler()


@pytest.fixture
def ready_loader_factory():
    def _make(detector):
        loader = ModelLoader(lambda: detector)
        loader.start()
        assert loader.wait(timeout=2.0)
        return loader
    return _make


@pytest.fixture
def camera_sources():
    """Records every source the frame source acquires."""
    return []


@pytest.fixture
def make_session(manual_scheduler, ready_loader_factory, camera_sources, tmp_path):
    def _make(detector=None, loader=None, fail_camera=False, config=None):
        detector = detector or FakeDetector()
        loader = loader or ready_loader_factory(detector)

        def acquire():
            source = ArraySource(fail_open=fail_camera)
            camera_sources.append(source)
            return source

        cfg = config or Config.from_dict({"uploads": {"directory": str(tmp_path / "uploads")}})
        return DashboardSession(loader, FrameSource(acquire), manual_scheduler, config=cfg)

    sessions = []

    def _tracked(*args, **kwargs):
        session = _make(*args, **kwargs)
        sessions.append(session)
        return session

    yield _tracked
    for session in sessions:
        session.reset()


@pytest.fixture
def valid_config():
    """Return a valid configuration dictionary."""
    return {
        "camera": {
            "device_id": 0,
            "resolution": [640, 480],
            "fps": 30,
        },
        "detection": {
            "model": "yolov8n.pt",
            "conf_threshold": 0.25,
            "iou_threshold": 0.45,
            "target_classes": ["bicycle", "motorcycle"],
            "refresh_fps": 30,
        },
        "history": {"capacity": 10},
        "web": {"host": "127.0.0.1", "port": 5000},
        "log_path": "logs/test.log",
        "log_level": "INFO",
    }
