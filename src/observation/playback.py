"""
Playback surface: keeps the latest frame of a bound source.

A daemon thread reads the source at its frame rate, the way a <video>
element plays independently of whoever samples it. Detection passes and the
MJPEG preview both read `latest()` without advancing the source.
"""

from __future__ import annotations

import logging
import threading
from typing import Optional

from models.frame import FrameData
from .base import ObservationSource

DEFAULT_FPS = 30.0


class Playback:
    def __init__(
        self,
        source: ObservationSource,
        fps: Optional[float] = None,
        stop_when_exhausted: bool = False,
        max_consecutive_failures: int = 10,
    ):
        self._source = source
        self._fps = fps
        self._stop_when_exhausted = stop_when_exhausted
        self._max_consecutive_failures = max_consecutive_failures
        self._lock = threading.Lock()
        self._stop = threading.Event()
        self._first_frame = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self._latest: Optional[FrameData] = None

    @property
    def source(self) -> ObservationSource:
        return self._source

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        """
        Open the source and start playing.

        Raises:
            RuntimeError: If the source cannot be opened.
        """
        self._source.open()
        fps = self._fps or self._source.native_fps or DEFAULT_FPS
        self._thread = threading.Thread(
            target=self._run,
            args=(1.0 / max(1.0, float(fps)),),
            name=f"playback-{self._source.source_id}",
            daemon=True,
        )
        self._thread.start()

    def _run(self, delay: float) -> None:
        failures = 0
        while not self._stop.is_set():
            frame_data = self._source.read()
            if frame_data is None:
                if self._stop_when_exhausted:
                    logging.info(f"Playback finished: source_id={self._source.source_id}")
                    return
                failures += 1
                if failures >= self._max_consecutive_failures:
                    logging.error(
                        f"Too many consecutive read failures ({failures}), "
                        f"stopping playback of {self._source.source_id}"
                    )
                    # A dead live source has no current frame.
                    with self._lock:
                        self._latest = None
                    return
            else:
                failures = 0
                with self._lock:
                    self._latest = frame_data
                self._first_frame.set()
            self._stop.wait(delay)

    def latest(self) -> Optional[FrameData]:
        with self._lock:
            return self._latest

    def wait_for_frame(self, timeout: Optional[float] = None) -> bool:
        return self._first_frame.wait(timeout)

    def stop(self, join_timeout: float = 2.0) -> None:
        """Stop reading and release the source."""
        self._stop.set()
        if self._thread is not None and self._thread is not threading.current_thread():
            self._thread.join(timeout=join_timeout)
        self._source.close()
        with self._lock:
            self._latest = None
