"""
Frame source selection: exactly one of camera or upload is bound at a time.
"""

from __future__ import annotations

import logging
import os
import threading
from pathlib import Path
from typing import Callable, Optional

from models.frame import FrameData
from models.status import SourceKind
from session.errors import SourceBusyError, SourceUnavailableError, UnsupportedMediaError
from .base import ObservationSource
from .image_source import StillImageConfig, StillImageSource
from .opencv_source import OpenCVSource, OpenCVSourceConfig
from .playback import Playback

IMAGE_EXTENSIONS = frozenset({".jpg", ".jpeg", ".png", ".bmp", ".webp"})
VIDEO_EXTENSIONS = frozenset({".mp4", ".avi", ".mov", ".mkv", ".webm"})

# Returns an unopened source for the live camera.
StreamAcquirer = Callable[[], ObservationSource]


def media_kind(filename: str) -> Optional[str]:
    """Return "image", "video" or None based on the file extension."""
    suffix = Path(filename).suffix.lower()
    if suffix in IMAGE_EXTENSIONS:
        return "image"
    if suffix in VIDEO_EXTENSIONS:
        return "video"
    return None


class FrameSource:
    """
    Binds the live camera or an uploaded file to a Playback surface.

    Selection is mutually exclusive until reset(). Camera failures leave the
    source unset so the user can try again.
    """

    def __init__(self, acquire_stream: StreamAcquirer):
        self._acquire_stream = acquire_stream
        self._lock = threading.RLock()
        self._kind: Optional[SourceKind] = None
        self._playback: Optional[Playback] = None
        self._upload_path: Optional[str] = None

    @property
    def kind(self) -> Optional[SourceKind]:
        with self._lock:
            return self._kind

    @property
    def is_bound(self) -> bool:
        return self.kind is not None

    @property
    def playback(self) -> Optional[Playback]:
        """The playback surface currently bound, replaced on every selection."""
        with self._lock:
            return self._playback

    def _ensure_unbound(self) -> None:
        if self._kind is not None:
            raise SourceBusyError(f"Source already selected: {self._kind.value}")

    def select_camera(self) -> None:
        with self._lock:
            self._ensure_unbound()
            try:
                playback = Playback(self._acquire_stream())
                playback.start()
            except RuntimeError as e:
                logging.error(f"Error accessing camera: {e}")
                raise SourceUnavailableError(str(e)) from e
            self._playback = playback
            self._kind = SourceKind.CAMERA
            logging.info("Frame source bound: camera")

    def select_upload(self, path: str, filename: Optional[str] = None) -> str:
        """
        Bind an uploaded file that has already been saved to `path`.

        The file is owned by the frame source from here on and deleted on
        reset() or when it cannot be used. Returns "image" or "video".
        """
        with self._lock:
            try:
                self._ensure_unbound()
            except SourceBusyError:
                _remove_quietly(path)
                raise

            kind = media_kind(filename or path)
            if kind is None:
                _remove_quietly(path)
                raise UnsupportedMediaError(f"Unsupported file type: {filename or path}")

            if kind == "image":
                source: ObservationSource = StillImageSource(StillImageConfig(source_id="upload", path=path))
                playback = Playback(source)
            else:
                source = OpenCVSource(OpenCVSourceConfig.for_file(path))
                playback = Playback(source, stop_when_exhausted=True)

            try:
                playback.start()
            except RuntimeError as e:
                _remove_quietly(path)
                raise UnsupportedMediaError(f"Could not decode {filename or path}: {e}") from e

            self._playback = playback
            self._upload_path = path
            self._kind = SourceKind.UPLOAD
            logging.info(f"Frame source bound: upload ({kind}) {filename or path}")
            return kind

    def current_frame(self) -> Optional[FrameData]:
        with self._lock:
            playback = self._playback
        return playback.latest() if playback is not None else None

    def wait_for_frame(self, timeout: Optional[float] = None) -> bool:
        with self._lock:
            playback = self._playback
        return playback.wait_for_frame(timeout) if playback is not None else False

    def reset(self) -> None:
        """Release whatever is bound and return to the unselected state."""
        with self._lock:
            playback, self._playback = self._playback, None
            upload_path, self._upload_path = self._upload_path, None
            previous, self._kind = self._kind, None

        if playback is not None:
            playback.stop()
        if upload_path is not None:
            _remove_quietly(upload_path)
        if previous is not None:
            logging.info(f"Frame source reset (was {previous.value})")


def _remove_quietly(path: str) -> None:
    try:
        os.remove(path)
    except OSError:
        pass
