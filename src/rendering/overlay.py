"""
Overlay rendering for detections.

The overlay is a transparent BGRA surface the size of the frame, redrawn from
scratch for every detection pass. `composite` blends it onto a frame for the
MJPEG preview.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterable, Tuple

import cv2
import numpy as np

from models.config import OverlayConfig
from models.detection import Detection

LABEL_MARGIN = 20
LABEL_OFFSET = 5
LABEL_INSIDE_Y = 10


@dataclass(frozen=True)
class OverlayStyle:
    color_bgr: Tuple[int, int, int] = (94, 197, 34)
    line_width: int = 4
    font_scale: float = 0.6

    @classmethod
    def from_config(cls, cfg: OverlayConfig) -> "OverlayStyle":
        return cls(
            color_bgr=hex_to_bgr(cfg.color),
            line_width=cfg.line_width,
            font_scale=cfg.font_scale,
        )


def hex_to_bgr(value: str) -> Tuple[int, int, int]:
    """'#22c55e' -> (94, 197, 34)"""
    value = value.lstrip("#")
    if len(value) != 6:
        raise ValueError(f"Expected a #rrggbb color, got {value!r}")
    r, g, b = (int(value[i:i + 2], 16) for i in (0, 2, 4))
    return (b, g, r)


def format_label(detection: Detection) -> str:
    # Half-up rounding: 0.125 -> 13%, not banker's 12%.
    percent = int(math.floor(detection.score * 100 + 0.5))
    return f"{detection.class_name} ({percent}%)"


def label_origin(x: float, y: float) -> Tuple[int, int]:
    """Text baseline origin: above the box if there is room, else just inside it."""
    return (int(x), int(y - LABEL_OFFSET) if y > LABEL_MARGIN else LABEL_INSIDE_Y)


def render_overlay(
    detections: Iterable[Detection],
    size: Tuple[int, int],
    style: OverlayStyle = OverlayStyle(),
) -> np.ndarray:
    """
    Draw boxes and labels on a fresh transparent surface.

    Args:
        detections: Filtered detections for the current pass.
        size: Surface size as (width, height).
        style: Stroke/text style.

    Returns:
        BGRA array of shape (height, width, 4); untouched pixels have alpha 0.
    """
    width, height = size
    surface = np.zeros((height, width, 4), dtype=np.uint8)
    color = (*style.color_bgr, 255)

    for det in detections:
        x1, y1, x2, y2 = det.bbox.as_int_tuple()
        cv2.rectangle(surface, (x1, y1), (x2, y2), color, style.line_width)
        cv2.putText(
            surface,
            format_label(det),
            label_origin(det.bbox.x1, det.bbox.y1),
            cv2.FONT_HERSHEY_SIMPLEX,
            style.font_scale,
            color,
            2,
            cv2.LINE_AA,
        )

    return surface


def composite(frame: np.ndarray, overlay: np.ndarray) -> np.ndarray:
    """Alpha-blend a BGRA overlay onto a copy of a BGR frame."""
    if overlay.shape[:2] != frame.shape[:2]:
        raise ValueError("Overlay and frame sizes differ")
    alpha = overlay[..., 3:4].astype(np.float32) / 255.0
    blended = frame.astype(np.float32) * (1.0 - alpha) + overlay[..., :3].astype(np.float32) * alpha
    return blended.astype(np.uint8)
