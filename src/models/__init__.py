"""
Typed models for the bike parking monitor.
"""

from .frame import FrameData
from .detection import Detection, BoundingBox
from .history import HistoryItem
from .status import ModelState, SourceKind, LoopState
from .config import (
    Config,
    CameraConfig,
    DetectionConfig,
    HistoryConfig,
    OverlayConfig,
    ExportConfig,
    WebConfig,
)

__all__ = [
    # Frame
    "FrameData",
    # Detection
    "Detection",
    "BoundingBox",
    # History
    "HistoryItem",
    # State
    "ModelState",
    "SourceKind",
    "LoopState",
    # Config
    "Config",
    "CameraConfig",
    "DetectionConfig",
    "HistoryConfig",
    "OverlayConfig",
    "ExportConfig",
    "WebConfig",
]
