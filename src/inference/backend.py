"""
Inference backend interface.

Backends return pixel-space detections in the original frame coordinate system.
"""

from __future__ import annotations

from typing import List, Protocol

import numpy as np

from models.detection import Detection


class DetectorBackend(Protocol):
    def detect(self, frame: np.ndarray) -> List[Detection]:
        ...
