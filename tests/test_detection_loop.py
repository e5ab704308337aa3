"""
Tests for the detection loop state machine.
"""

import pytest

from conftest import FakeDetector, ManualScheduler, bike, frame_data
from detection.filter import filter_targets
from detection.loop import DetectionLoop
from models.status import LoopState


def make_loop(script=None, frame=True, scheduler=None, **kwargs):
    detector = FakeDetector(script)
    scheduler = scheduler or ManualScheduler()
    frames = {"current": frame_data() if frame else None}
    loop = DetectionLoop(
        detect=detector.detect,
        frame_provider=lambda: frames["current"],
        scheduler=scheduler,
        **kwargs,
    )
    return loop, detector, scheduler, frames


class TestFilter:
    def test_keeps_bicycles_and_motorcycles(self):
        dets = [bike(cls="bicycle"), bike(cls="person"), bike(cls="motorcycle"), bike(cls="car")]

        kept = filter_targets(dets)

        assert [d.class_name for d in kept] == ["bicycle", "motorcycle"]

    def test_custom_classes(self):
        assert filter_targets([bike(cls="person")], ["person"])[0].class_name == "person"


class TestDetectionLoop:
    def test_starts_idle(self):
        loop, detector, scheduler, _ = make_loop()

        assert loop.state == LoopState.IDLE
        assert loop.count == 0
        assert scheduler.scheduled == 0

    def test_count_is_number_of_target_detections(self):
        loop, _, scheduler, _ = make_loop([[bike(), bike(cls="person"), bike(cls="motorcycle")]])

        loop.start()
        scheduler.tick()

        assert loop.count == 2
        assert {d.class_name for d in loop.result.detections} == {"bicycle", "motorcycle"}

    def test_one_pass_per_tick(self):
        loop, detector, scheduler, _ = make_loop([[bike()]])

        loop.start()
        for _ in range(5):
            assert scheduler.tick() == 1

        assert detector.calls == 5
        assert loop.passes == 5

    def test_start_twice_does_not_add_chain(self):
        loop, _, scheduler, _ = make_loop()

        assert loop.start() is True
        assert loop.start() is False

        assert len(scheduler.pending) == 1

    def test_stop_returns_count_in_effect(self):
        loop, _, scheduler, _ = make_loop([[bike(), bike()]])
        loop.start()
        scheduler.tick()

        assert loop.stop() == 2
        assert loop.state == LoopState.IDLE
        assert not scheduler.pending
        # The last result stays on screen after stopping.
        assert loop.count == 2

    def test_stop_when_idle(self):
        loop, _, _, _ = make_loop()

        assert loop.stop() is None

    def test_no_passes_after_stop(self):
        loop, detector, scheduler, _ = make_loop([[bike()]])
        loop.start()
        scheduler.tick()
        stale = list(scheduler.pending)

        loop.stop()
        for callback in stale:
            callback()

        assert detector.calls == 1
        assert not scheduler.pending

    def test_restart_leaves_single_chain(self):
        """A pass scheduled before stop never joins a later run."""
        loop, detector, scheduler, _ = make_loop([[bike()]])
        loop.start()
        stale = list(scheduler.pending)
        loop.stop()
        loop.start()

        for callback in stale:
            callback()
        assert detector.calls == 0
        assert len(scheduler.pending) == 1

        scheduler.tick()
        assert detector.calls == 1
        assert len(scheduler.pending) == 1

    def test_no_frame_keeps_polling(self):
        loop, detector, scheduler, frames = make_loop([[bike()]], frame=False)
        loop.start()

        scheduler.tick()
        assert detector.calls == 0
        assert len(scheduler.pending) == 1

        frames["current"] = frame_data()
        scheduler.tick()
        assert detector.calls == 1
        assert loop.count == 1

    def test_cancel_clears_result(self):
        loop, _, scheduler, _ = make_loop([[bike()]])
        loop.start()
        scheduler.tick()

        loop.cancel()

        assert loop.state == LoopState.IDLE
        assert loop.count == 0
        assert loop.result.detections == []
        assert not scheduler.pending

    def test_on_result_called_per_pass(self):
        seen = []
        loop, _, scheduler, _ = make_loop([[bike()], []], on_result=seen.append)
        loop.start()
        scheduler.tick()
        scheduler.tick()

        assert [r.count for r in seen] == [1, 0]

    def test_detector_error_skips_frame(self):
        loop, detector, scheduler, _ = make_loop([[bike()], RuntimeError("boom"), [bike(), bike()]])
        loop.start()

        scheduler.tick()
        scheduler.tick()
        assert loop.count == 1
        assert loop.is_running

        scheduler.tick()
        assert loop.count == 2

    def test_gives_up_after_consecutive_failures(self):
        loop, detector, scheduler, _ = make_loop([RuntimeError("boom")], max_consecutive_failures=3)
        loop.start()

        for _ in range(3):
            scheduler.tick()

        assert loop.state == LoopState.IDLE
        assert not scheduler.pending
        assert detector.calls == 3

    @pytest.mark.parametrize("classes", [("bicycle",), ("motorcycle",)])
    def test_configured_target_classes(self, classes):
        loop, _, scheduler, _ = make_loop(
            [[bike(cls="bicycle"), bike(cls="motorcycle")]], target_classes=classes
        )
        loop.start()
        scheduler.tick()

        assert loop.count == 1
        assert loop.result.detections[0].class_name == classes[0]

    def test_lost_frame_clears_detections_once(self):
        seen = []
        loop, detector, scheduler, frames = make_loop([[bike()]], on_result=seen.append)
        loop.start()
        scheduler.tick()
        assert loop.count == 1

        frames["current"] = None
        scheduler.tick()

        assert loop.count == 0
        assert loop.result.detections == []
        assert loop.is_running

        scheduler.tick()

        assert [r.count for r in seen] == [1, 0]
        assert loop.passes == 1
        assert detector.calls == 1
