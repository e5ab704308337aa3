"""
Class filtering for detector output.

COCO-trained models often report bicycles as motorcycles, so both count.
"""

from __future__ import annotations

from typing import Iterable, List

from models.detection import Detection

TARGET_CLASSES = ("bicycle", "motorcycle")


def filter_targets(detections: Iterable[Detection], classes: Iterable[str] = TARGET_CLASSES) -> List[Detection]:
    wanted = frozenset(classes)
    return [d for d in detections if d.class_name in wanted]
