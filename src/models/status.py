"""
State enums shared by the loader, frame source, detection loop and web layer.
"""

from __future__ import annotations

from enum import Enum


class ModelState(str, Enum):
    """Model loader lifecycle."""
    LOADING = "loading"
    READY = "ready"
    FAILED = "failed"


class SourceKind(str, Enum):
    """Which frame source is bound to the playback surface."""
    CAMERA = "camera"
    UPLOAD = "upload"


class LoopState(str, Enum):
    """Detection loop states."""
    IDLE = "idle"
    RUNNING = "running"


STATUS_MESSAGES = {
    ModelState.LOADING: "Loading model...",
    ModelState.READY: "Model ready",
    ModelState.FAILED: "Model load failed",
}
