"""
Still image source for uploaded pictures.

A still image behaves like a paused video: every read returns the same frame.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Optional

import cv2
import numpy as np

from models.frame import FrameData
from .base import ObservationSource, ObservationConfig


@dataclass
class StillImageConfig(ObservationConfig):
    path: str = ""


class StillImageSource(ObservationSource):
    def __init__(self, config: StillImageConfig):
        super().__init__(config)
        self._path = config.path
        self._image: Optional[np.ndarray] = None

    def open(self) -> None:
        if self._is_open:
            return
        image = cv2.imread(self._path, cv2.IMREAD_COLOR)
        if image is None:
            raise RuntimeError(f"Failed to decode image {self._path}")
        self._image = image
        self._is_open = True
        self._frame_index = 0
        logging.info(f"StillImageSource opened: {self._path} ({image.shape[1]}x{image.shape[0]})")

    def read(self) -> Optional[FrameData]:
        if not self._is_open or self._image is None:
            return None
        self._frame_index += 1
        return FrameData.from_numpy(
            self._image,
            timestamp=time.time(),
            frame_index=self._frame_index,
            source=self.source_id,
        )

    def close(self) -> None:
        self._image = None
        self._is_open = False
