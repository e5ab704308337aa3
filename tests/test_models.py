"""
Tests for data models.
"""

import numpy as np
import pytest

from models.detection import BoundingBox, Detection, detections_to_dicts
from models.frame import FrameData
from models.history import HistoryItem
from models.status import ModelState, STATUS_MESSAGES


class TestBoundingBox:
    def test_dimensions(self):
        bbox = BoundingBox(x1=10, y1=20, x2=110, y2=70)

        assert bbox.width == 100
        assert bbox.height == 50
        assert bbox.center == (60, 45)

    def test_xywh_round_trip(self):
        bbox = BoundingBox.from_xywh(5, 6, 7, 8)

        assert bbox.as_tuple() == (5, 6, 12, 14)
        assert bbox.as_xywh() == (5, 6, 7, 8)

    def test_int_tuple_truncates(self):
        assert BoundingBox(1.7, 2.2, 3.9, 4.5).as_int_tuple() == (1, 2, 3, 4)


class TestDetection:
    def test_from_xyxy(self):
        det = Detection.from_xyxy(10, 20, 50, 80, class_name="bicycle", score=0.87, class_id=1)

        assert det.x == 10
        assert det.y == 20
        assert det.class_id == 1

    def test_to_dict_uses_xywh(self):
        det = Detection.from_xywh(10, 30, 20, 40, class_name="motorcycle", score=0.5)

        assert det.to_dict() == {"bbox": [10, 30, 20, 40], "class": "motorcycle", "score": 0.5}

    def test_detections_to_dicts(self):
        dets = [Detection.from_xywh(0, 0, 1, 1, "bicycle"), Detection.from_xywh(1, 1, 1, 1, "person")]

        assert [d["class"] for d in detections_to_dicts(dets)] == ["bicycle", "person"]

    def test_frozen(self):
        det = Detection.from_xywh(0, 0, 1, 1, "bicycle")
        with pytest.raises(Exception):
            det.score = 0.1


class TestFrameData:
    def test_from_numpy(self):
        frame = np.zeros((480, 640, 3), dtype=np.uint8)

        fd = FrameData.from_numpy(frame, timestamp=1.0, frame_index=3, source="camera")

        assert fd.size == (640, 480)
        assert fd.frame_index == 3
        assert fd.source == "camera"


class TestHistoryItem:
    def test_to_dict(self):
        item = HistoryItem(id="abc", timestamp="12:00:00", count=2)

        assert item.to_dict() == {"id": "abc", "timestamp": "12:00:00", "count": 2}


def test_status_messages_cover_every_state():
    assert set(STATUS_MESSAGES) == set(ModelState)
    assert STATUS_MESSAGES[ModelState.LOADING] == "Loading model..."
