"""
Asynchronous, load-once model loader.

The detector is built on a background thread at startup so the web UI can
come up immediately and report "Loading model..." while weights load. A
failed load is final for the process: there is no retry.
"""

from __future__ import annotations

import logging
import threading
from typing import Callable, List, Optional

import numpy as np

from models.detection import Detection
from models.status import ModelState, STATUS_MESSAGES
from session.errors import ModelNotReadyError
from .backend import DetectorBackend

DetectorFactory = Callable[[], DetectorBackend]


class ModelLoader:
    """
    Owns the detector instance and its readiness.

    Lifecycle:
        1. Create with a factory that builds the backend (may be slow)
        2. Call start() once; loading runs on a daemon thread
        3. state flips to READY (detect() usable) or FAILED (permanent)
    """

    def __init__(self, factory: DetectorFactory):
        self._factory = factory
        self._lock = threading.Lock()
        self._done = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self._backend: Optional[DetectorBackend] = None
        self._state = ModelState.LOADING
        self._error: Optional[str] = None

    @property
    def state(self) -> ModelState:
        with self._lock:
            return self._state

    @property
    def is_ready(self) -> bool:
        return self.state == ModelState.READY

    @property
    def status_message(self) -> str:
        return STATUS_MESSAGES[self.state]

    @property
    def error(self) -> Optional[str]:
        with self._lock:
            return self._error

    def start(self) -> None:
        """Begin loading in the background. Subsequent calls do nothing."""
        with self._lock:
            if self._thread is not None:
                return
            self._thread = threading.Thread(target=self._load, name="model-loader", daemon=True)
        logging.info("Loading detection model...")
        self._thread.start()

    def _load(self) -> None:
        try:
            backend = self._factory()
        except Exception as e:
            logging.exception("Failed to load detection model")
            with self._lock:
                self._state = ModelState.FAILED
                self._error = str(e)
        else:
            with self._lock:
                self._backend = backend
                self._state = ModelState.READY
            logging.info("Detection model ready")
        finally:
            self._done.set()

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Block until loading finished (either way). Returns False on timeout."""
        return self._done.wait(timeout)

    def detect(self, frame: np.ndarray) -> List[Detection]:
        with self._lock:
            backend = self._backend if self._state == ModelState.READY else None
            state = self._state
        if backend is None:
            raise ModelNotReadyError(f"Model is not ready (state={state.value})")
        return backend.detect(frame)
