"""
FrameData: one frame from the bound source plus where it came from.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

import numpy as np


@dataclass(frozen=True)
class FrameData:
    """
    A decoded BGR frame as seen by the playback surface.

    The overlay and the detection pass both size themselves from this frame,
    so width/height always come from the array itself.
    """
    frame: np.ndarray
    timestamp: float
    frame_index: int = 0
    source: Optional[str] = None

    @classmethod
    def from_numpy(
        cls,
        frame: np.ndarray,
        timestamp: float,
        frame_index: int = 0,
        source: Optional[str] = None,
    ) -> "FrameData":
        if frame.ndim != 3:
            raise ValueError(f"Expected an HxWxC frame, got shape {frame.shape}")
        return cls(frame=frame, timestamp=timestamp, frame_index=frame_index, source=source)

    @property
    def width(self) -> int:
        return int(self.frame.shape[1])

    @property
    def height(self) -> int:
        return int(self.frame.shape[0])

    @property
    def size(self) -> Tuple[int, int]:
        """(width, height), the order cv2 and the overlay use."""
        return (self.width, self.height)
