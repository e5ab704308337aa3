"""
OpenCV-based observation source.

Supports:
- USB webcams (device_id as int, e.g., 0)
- Video files (device_id as file path)
"""

from __future__ import annotations

import logging
import os
import time
from dataclasses import dataclass
from typing import Optional, Union

import cv2

from models.config import CameraConfig
from models.frame import FrameData
from .base import ObservationSource, ObservationConfig


@dataclass
class OpenCVSourceConfig(ObservationConfig):
    """
    Configuration for OpenCV-based observation sources.

    Attributes:
        device_id: Camera index (int) or video file path (str).
        buffer_size: OpenCV capture buffer size (reduces latency for live feeds).
        max_retries: Maximum attempts to open the device.
        warmup_s: Pause after opening a camera before the first read.
    """
    device_id: Union[int, str] = 0
    buffer_size: int = 1
    max_retries: int = 3
    warmup_s: float = 0.5

    @classmethod
    def from_camera_config(cls, camera_cfg: CameraConfig, source_id: str = "camera") -> "OpenCVSourceConfig":
        """Adapter: Create OpenCVSourceConfig from the typed camera config."""
        resolution = tuple(camera_cfg.resolution) if camera_cfg.resolution else None
        return cls(
            source_id=source_id,
            resolution=resolution,
            fps=camera_cfg.fps,
            device_id=camera_cfg.device_id,
        )

    @classmethod
    def for_file(cls, path: str, source_id: str = "upload") -> "OpenCVSourceConfig":
        return cls(source_id=source_id, device_id=path, max_retries=1, warmup_s=0.0)


class OpenCVSource(ObservationSource):
    """
    OpenCV-based observation source for cameras and video files.

    Wraps cv2.VideoCapture to provide frames as FrameData objects.
    """

    def __init__(self, config: OpenCVSourceConfig):
        super().__init__(config)
        self._opencv_config = config
        self._cap: Optional[cv2.VideoCapture] = None

    @property
    def device_id(self) -> Union[int, str]:
        return self._opencv_config.device_id

    @property
    def is_file(self) -> bool:
        return isinstance(self.device_id, str) and os.path.exists(self.device_id)

    @property
    def native_fps(self) -> Optional[float]:
        if self._cap is not None and self.is_file:
            fps = self._cap.get(cv2.CAP_PROP_FPS)
            if fps and fps > 0:
                return float(fps)
        return self._opencv_config.fps

    def open(self) -> None:
        """
        Open the camera or file, retrying with backoff.

        Raises:
            RuntimeError: If every attempt fails (camera busy, permission
                denied, unreadable file).
        """
        if self._is_open:
            return

        attempts = max(1, self._opencv_config.max_retries)
        for attempt in range(1, attempts + 1):
            cap = cv2.VideoCapture(self.device_id)
            if cap.isOpened():
                self._cap = cap
                break
            cap.release()
            if attempt < attempts:
                backoff = min(2 ** attempt, 10)
                logging.warning(
                    f"Could not open {self.device_id} (attempt {attempt}/{attempts}), retrying in {backoff}s"
                )
                time.sleep(backoff)
        else:
            raise RuntimeError(f"Could not open {self.device_id} after {attempts} attempts")

        self._configure_camera()
        self._is_open = True
        self._frame_index = 0
        logging.info(f"OpenCVSource opened: source_id={self.source_id}, device={self.device_id}")

    def _configure_camera(self) -> None:
        # Capture properties only apply to device indices.
        if not isinstance(self.device_id, int):
            return
        cfg = self._opencv_config
        if cfg.resolution:
            self._cap.set(cv2.CAP_PROP_FRAME_WIDTH, cfg.resolution[0])
            self._cap.set(cv2.CAP_PROP_FRAME_HEIGHT, cfg.resolution[1])
        if cfg.fps:
            self._cap.set(cv2.CAP_PROP_FPS, cfg.fps)
        self._cap.set(cv2.CAP_PROP_BUFFERSIZE, cfg.buffer_size)
        if cfg.warmup_s > 0:
            time.sleep(cfg.warmup_s)

    def read(self) -> Optional[FrameData]:
        """Next decoded frame, or None at end of file or on a camera read error."""
        if self._cap is None:
            return None

        ok, frame = self._cap.read()
        if not ok or frame is None:
            if self.is_file:
                logging.info(f"End of {self.device_id}")
            else:
                logging.warning(f"Camera read failed: {self.device_id}")
            return None

        self._frame_index += 1
        return FrameData.from_numpy(frame, timestamp=time.time(), frame_index=self._frame_index, source=self.source_id)

    def close(self) -> None:
        cap, self._cap = self._cap, None
        if cap is not None:
            cap.release()
            logging.info(f"OpenCVSource closed: source_id={self.source_id}")
        self._is_open = False
