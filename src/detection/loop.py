"""
Detection loop: an idle/running state machine over a scheduler.

Each pass reads the current frame, runs the detector, keeps only the target
classes and publishes the result. The next pass is scheduled only after the
current one finishes, and only if the loop is still running the same run
(generation) that scheduled it, so at most one pass is ever in flight.
"""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass, field
from typing import Callable, Iterable, List, Optional

import numpy as np

from models.detection import Detection
from models.frame import FrameData
from models.status import LoopState
from .filter import TARGET_CLASSES, filter_targets
from .scheduler import Scheduler

FrameProvider = Callable[[], Optional[FrameData]]
DetectFn = Callable[[np.ndarray], List[Detection]]


@dataclass(frozen=True)
class PassResult:
    """Published outcome of one detection pass."""
    count: int = 0
    detections: List[Detection] = field(default_factory=list)
    frame_index: Optional[int] = None
    timestamp: Optional[float] = None


EMPTY_RESULT = PassResult()


class DetectionLoop:
    """
    Cooperative per-refresh detection loop.

    stop() and cancel() never abort a pass already running; they only keep it
    from scheduling a successor and (for cancel) from publishing.
    """

    def __init__(
        self,
        detect: DetectFn,
        frame_provider: FrameProvider,
        scheduler: Scheduler,
        target_classes: Iterable[str] = TARGET_CLASSES,
        on_result: Optional[Callable[[PassResult], None]] = None,
        max_consecutive_failures: int = 10,
    ):
        self._detect = detect
        self._frame_provider = frame_provider
        self._scheduler = scheduler
        self._target_classes = tuple(target_classes)
        self._on_result = on_result
        self._max_consecutive_failures = max_consecutive_failures

        self._lock = threading.Lock()
        self._state = LoopState.IDLE
        self._generation = 0
        self._result = EMPTY_RESULT
        self._passes = 0
        self._failures = 0

    @property
    def state(self) -> LoopState:
        with self._lock:
            return self._state

    @property
    def is_running(self) -> bool:
        return self.state == LoopState.RUNNING

    @property
    def result(self) -> PassResult:
        with self._lock:
            return self._result

    @property
    def count(self) -> int:
        return self.result.count

    @property
    def passes(self) -> int:
        """Number of completed detection passes since construction."""
        with self._lock:
            return self._passes

    def start(self) -> bool:
        """Begin running. Returns False if already running."""
        with self._lock:
            if self._state == LoopState.RUNNING:
                return False
            self._state = LoopState.RUNNING
            self._generation += 1
            self._failures = 0
            generation = self._generation
        logging.info("Detection started")
        self._schedule(generation)
        return True

    def stop(self) -> Optional[int]:
        """
        Stop scheduling passes.

        Returns the count in effect at this moment, or None if the loop was
        already idle.
        """
        with self._lock:
            if self._state == LoopState.IDLE:
                return None
            self._state = LoopState.IDLE
            self._generation += 1
            count = self._result.count
        self._scheduler.cancel_all()
        logging.info(f"Detection stopped (count={count})")
        return count

    def cancel(self) -> None:
        """Force idle without a snapshot and drop the published result."""
        with self._lock:
            was_running = self._state == LoopState.RUNNING
            self._state = LoopState.IDLE
            self._generation += 1
            self._result = EMPTY_RESULT
        self._scheduler.cancel_all()
        if was_running:
            logging.info("Detection cancelled")

    def _schedule(self, generation: int) -> None:
        self._scheduler.schedule(lambda: self._run_pass(generation))

    def _is_current(self, generation: int) -> bool:
        return self._state == LoopState.RUNNING and generation == self._generation

    def _run_pass(self, generation: int) -> None:
        with self._lock:
            if not self._is_current(generation):
                return

        frame_data = self._frame_provider()
        result: Optional[PassResult] = None
        if frame_data is None:
            with self._lock:
                frame_lost = self._result.frame_index is not None
            if frame_lost:
                logging.warning("Frame source stopped delivering frames, clearing detections")
                result = PassResult(timestamp=time.time())
        else:
            try:
                detections = self._detect(frame_data.frame)
            except Exception:
                logging.exception("Detection pass failed")
                if self._record_failure(generation):
                    return
            else:
                targets = filter_targets(detections, self._target_classes)
                result = PassResult(
                    count=len(targets),
                    detections=targets,
                    frame_index=frame_data.frame_index,
                    timestamp=time.time(),
                )

        with self._lock:
            if result is not None and generation == self._generation:
                self._result = result
                if result.frame_index is not None:
                    self._passes += 1
                self._failures = 0
            still_current = self._is_current(generation)

        if result is not None and still_current and self._on_result is not None:
            self._on_result(result)
        if still_current:
            self._schedule(generation)

    def _record_failure(self, generation: int) -> bool:
        """Count a failed pass. Returns True if the loop gave up."""
        with self._lock:
            self._failures += 1
            if self._failures < self._max_consecutive_failures or not self._is_current(generation):
                return False
            self._state = LoopState.IDLE
            self._generation += 1
            failures = self._failures
        logging.error(f"Too many consecutive detection failures ({failures}), stopping detection")
        return True
