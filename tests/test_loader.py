"""
Tests for the background model loader.
"""

import threading

import numpy as np
import pytest

from conftest import FakeDetector, bike
from inference.loader import ModelLoader
from models.status import ModelState
from session.errors import ModelNotReadyError

FRAME = np.zeros((8, 8, 3), dtype=np.uint8)


class TestModelLoader:
    def test_loading_until_factory_returns(self):
        release = threading.Event()
        detector = FakeDetector([[bike()]])

        def factory():
            release.wait(timeout=2.0)
            return detector

        loader = ModelLoader(factory)
        loader.start()

        assert loader.state == ModelState.LOADING
        assert loader.status_message == "Loading model..."
        with pytest.raises(ModelNotReadyError):
            loader.detect(FRAME)

        release.set()
        assert loader.wait(timeout=2.0)
        assert loader.state == ModelState.READY
        assert loader.status_message == "Model ready"
        assert len(loader.detect(FRAME)) == 1

    def test_failure_is_permanent(self):
        def factory():
            raise OSError("weights missing")

        loader = ModelLoader(factory)
        loader.start()
        assert loader.wait(timeout=2.0)

        assert loader.state == ModelState.FAILED
        assert loader.status_message == "Model load failed"
        assert "weights missing" in loader.error
        with pytest.raises(ModelNotReadyError):
            loader.detect(FRAME)

    def test_start_loads_once(self):
        calls = []

        def factory():
            calls.append(1)
            return FakeDetector()

        loader = ModelLoader(factory)
        loader.start()
        loader.start()
        loader.wait(timeout=2.0)
        loader.start()

        assert calls == [1]

    def test_not_started(self):
        loader = ModelLoader(FakeDetector)

        assert loader.state == ModelState.LOADING
        assert loader.wait(timeout=0.01) is False
