"""
Detection module: class filtering, refresh scheduling and the detection loop.
"""

from .filter import TARGET_CLASSES, filter_targets
from .scheduler import RefreshScheduler, Scheduler
from .loop import DetectionLoop, PassResult

__all__ = [
    "TARGET_CLASSES",
    "filter_targets",
    "RefreshScheduler",
    "Scheduler",
    "DetectionLoop",
    "PassResult",
]
