"""
Dashboard session: the state behind the page and the wiring between parts.

One session per server process. All mutations go through one re-entrant
lock, so toggles, resets and source changes from concurrent requests are
applied one at a time.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import numpy as np

from detection.loop import DetectionLoop, PassResult
from detection.scheduler import Scheduler
from export.report import ReportData
from history.log import HistoryLog
from inference.loader import ModelLoader
from models.config import Config
from models.detection import Detection
from models.history import HistoryItem
from models.status import ModelState
from observation.frame_source import FrameSource
from rendering.overlay import OverlayStyle, composite, render_overlay
from .errors import ControlDisabledError


@dataclass(frozen=True)
class ToggleResult:
    processing: bool
    count: int
    history_item: Optional[HistoryItem] = None


class DashboardSession:
    """
    Presentation-side state: current count, processing flag, source kind and
    status string, plus the operations the page's controls trigger.
    """

    def __init__(
        self,
        loader: ModelLoader,
        frame_source: FrameSource,
        scheduler: Scheduler,
        history: Optional[HistoryLog] = None,
        config: Optional[Config] = None,
    ):
        self.config = config or Config()
        self.loader = loader
        self.frame_source = frame_source
        self.history = history or HistoryLog(
            capacity=self.config.history.capacity,
            timestamp_format=self.config.history.timestamp_format,
        )
        self.overlay_style = OverlayStyle.from_config(self.config.overlay)
        self.loop = DetectionLoop(
            detect=loader.detect,
            frame_provider=frame_source.current_frame,
            scheduler=scheduler,
            target_classes=self.config.detection.target_classes,
            max_consecutive_failures=self.config.detection.max_consecutive_failures,
        )
        self._lock = threading.RLock()

    # ------------------------------------------------------------------
    # Derived state
    # ------------------------------------------------------------------

    @property
    def model_state(self) -> ModelState:
        return self.loader.state

    @property
    def is_processing(self) -> bool:
        return self.loop.is_running

    @property
    def current_count(self) -> int:
        return self.loop.count

    @property
    def current_detections(self) -> List[Detection]:
        return list(self.loop.result.detections)

    @property
    def can_select_source(self) -> bool:
        return self.loader.is_ready and not self.frame_source.is_bound

    @property
    def can_start(self) -> bool:
        return self.loader.is_ready and self.frame_source.is_bound

    def snapshot(self) -> Dict[str, Any]:
        """Everything the status badge and controls need."""
        kind = self.frame_source.kind
        return {
            "model_state": self.model_state.value,
            "status": self.loader.status_message,
            "loading": self.model_state == ModelState.LOADING,
            "source": kind.value if kind is not None else None,
            "frame_available": self.frame_source.current_frame() is not None,
            "processing": self.is_processing,
            "count": self.current_count,
            "can_select_source": self.can_select_source,
            "can_start": self.can_start or self.is_processing,
            "history_length": len(self.history),
        }

    # ------------------------------------------------------------------
    # Controls
    # ------------------------------------------------------------------

    def _require_ready(self) -> None:
        if not self.loader.is_ready:
            raise ControlDisabledError(f"Model not ready: {self.loader.status_message}")

    def select_camera(self) -> None:
        with self._lock:
            self._require_ready()
            self.frame_source.select_camera()

    def select_upload(self, path: str, filename: Optional[str] = None) -> str:
        with self._lock:
            self._require_ready()
            return self.frame_source.select_upload(path, filename)

    def toggle_processing(self) -> ToggleResult:
        """
        Start detection if idle, otherwise stop it and record exactly one
        history entry with the count in effect at the moment of stopping.
        """
        with self._lock:
            if not self.loop.is_running:
                if not self.can_start:
                    raise ControlDisabledError("Select a source after the model is ready")
                self.loop.start()
                return ToggleResult(processing=True, count=self.current_count)

            count = self.loop.stop()
            if count is None:
                # Loop gave up on its own between the check and the stop.
                count = self.current_count
            item = self.history.record(count)
            return ToggleResult(processing=False, count=count, history_item=item)

    def reset(self) -> None:
        """Force idle (no snapshot), release the source, clear the count."""
        with self._lock:
            self.loop.cancel()
            self.frame_source.reset()
        logging.info("Session reset")

    # ------------------------------------------------------------------
    # Views
    # ------------------------------------------------------------------

    def history_items(self) -> List[HistoryItem]:
        return self.history.items()

    def report_data(self) -> ReportData:
        return ReportData(current_count=self.current_count, history=self.history.items())

    def overlay(self) -> Optional[np.ndarray]:
        """Transparent overlay sized to the current frame, or None without a frame."""
        frame_data = self.frame_source.current_frame()
        if frame_data is None:
            return None
        return render_overlay(self.current_detections, frame_data.size, self.overlay_style)

    def annotated_frame(self) -> Optional[np.ndarray]:
        """Current frame with the overlay blended in (for the MJPEG preview)."""
        frame_data = self.frame_source.current_frame()
        if frame_data is None:
            return None
        overlay = render_overlay(self.current_detections, frame_data.size, self.overlay_style)
        return composite(frame_data.frame, overlay)

    def last_result(self) -> PassResult:
        return self.loop.result
