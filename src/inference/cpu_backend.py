"""
CPU inference backend.

Uses a pretrained Ultralytics YOLO model (COCO vocabulary). All classes are
returned; filtering to bicycles/motorcycles happens in the detection loop.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import numpy as np

from models.config import DetectionConfig
from models.detection import Detection
from .backend import DetectorBackend


@dataclass(frozen=True)
class CpuYoloConfig:
    model: str
    conf_threshold: float = 0.25
    iou_threshold: float = 0.45
    class_name_overrides: Optional[Dict[int, str]] = None

    @classmethod
    def from_detection_config(cls, cfg: DetectionConfig) -> "CpuYoloConfig":
        return cls(
            model=cfg.model,
            conf_threshold=cfg.conf_threshold,
            iou_threshold=cfg.iou_threshold,
            class_name_overrides=cfg.class_name_overrides,
        )


def _to_numpy(value: Any) -> np.ndarray:
    return value.cpu().numpy() if hasattr(value, "cpu") else np.asarray(value)


class UltralyticsCpuBackend(DetectorBackend):
    def __init__(self, cfg: CpuYoloConfig):
        self.cfg = cfg
        try:
            from ultralytics import YOLO  # type: ignore
        except Exception as e:  # pragma: no cover
            raise ImportError(
                "Ultralytics is not installed. Install with `pip install ultralytics`."
            ) from e

        self._model = YOLO(cfg.model)

    def detect(self, frame: np.ndarray) -> List[Detection]:
        results = self._model.predict(
            source=frame,
            conf=self.cfg.conf_threshold,
            iou=self.cfg.iou_threshold,
            verbose=False,
        )
        if not results:
            return []

        r0 = results[0]
        names = getattr(r0, "names", None) or {}
        boxes = getattr(r0, "boxes", None)
        if boxes is None:
            return []

        xyxy = _to_numpy(boxes.xyxy)
        conf = _to_numpy(boxes.conf)
        cls = _to_numpy(boxes.cls)

        out: List[Detection] = []
        for (x1, y1, x2, y2), c, k in zip(xyxy, conf, cls):
            class_id = int(k)
            class_name = (
                (self.cfg.class_name_overrides or {}).get(class_id)
                or names.get(class_id)
                or str(class_id)
            )
            out.append(
                Detection.from_xyxy(
                    float(x1),
                    float(y1),
                    float(x2),
                    float(y2),
                    class_name=class_name,
                    score=float(c),
                    class_id=class_id,
                )
            )

        return out
