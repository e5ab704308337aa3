"""
Detection models for object detection results.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple


@dataclass(frozen=True)
class BoundingBox:
    """
    A bounding box in pixel coordinates.

    Attributes:
        x1: Left edge x coordinate.
        y1: Top edge y coordinate.
        x2: Right edge x coordinate.
        y2: Bottom edge y coordinate.
    """
    x1: float
    y1: float
    x2: float
    y2: float

    @property
    def width(self) -> float:
        return self.x2 - self.x1

    @property
    def height(self) -> float:
        return self.y2 - self.y1

    @property
    def center(self) -> Tuple[float, float]:
        return ((self.x1 + self.x2) / 2, (self.y1 + self.y2) / 2)

    def as_tuple(self) -> Tuple[float, float, float, float]:
        """Return as (x1, y1, x2, y2) tuple."""
        return (self.x1, self.y1, self.x2, self.y2)

    def as_int_tuple(self) -> Tuple[int, int, int, int]:
        """Return as integer (x1, y1, x2, y2) tuple."""
        return (int(self.x1), int(self.y1), int(self.x2), int(self.y2))

    def as_xywh(self) -> Tuple[float, float, float, float]:
        """Return as (x, y, width, height) tuple."""
        return (self.x1, self.y1, self.width, self.height)

    @classmethod
    def from_xywh(cls, x: float, y: float, w: float, h: float) -> "BoundingBox":
        """Create from (x, y, width, height) format."""
        return cls(x1=x, y1=y, x2=x + w, y2=y + h)


@dataclass(frozen=True)
class Detection:
    """
    A single object reported by the detector for one frame.

    Attributes:
        bbox: Bounding box in pixel coordinates.
        class_name: Label from the detector vocabulary (e.g. "bicycle").
        score: Detection confidence (0-1).
        class_id: Optional numeric class ID from the detector.
    """
    bbox: BoundingBox
    class_name: str
    score: float = 1.0
    class_id: Optional[int] = None

    @property
    def x(self) -> float:
        return self.bbox.x1

    @property
    def y(self) -> float:
        return self.bbox.y1

    @classmethod
    def from_xyxy(
        cls,
        x1: float,
        y1: float,
        x2: float,
        y2: float,
        class_name: str,
        score: float = 1.0,
        class_id: Optional[int] = None,
    ) -> "Detection":
        """Create Detection from x1, y1, x2, y2 coordinates."""
        return cls(
            bbox=BoundingBox(x1=x1, y1=y1, x2=x2, y2=y2),
            class_name=class_name,
            score=score,
            class_id=class_id,
        )

    @classmethod
    def from_xywh(
        cls,
        x: float,
        y: float,
        w: float,
        h: float,
        class_name: str,
        score: float = 1.0,
    ) -> "Detection":
        return cls(bbox=BoundingBox.from_xywh(x, y, w, h), class_name=class_name, score=score)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization (bbox as x, y, w, h)."""
        return {
            "bbox": list(self.bbox.as_xywh()),
            "class": self.class_name,
            "score": self.score,
        }


def detections_to_dicts(detections: List[Detection]) -> List[Dict[str, Any]]:
    return [d.to_dict() for d in detections]
