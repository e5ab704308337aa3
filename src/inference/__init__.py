"""
Detector access: backend interface, Ultralytics CPU backend and the async loader.
"""

from .backend import DetectorBackend
from .cpu_backend import CpuYoloConfig, UltralyticsCpuBackend
from .loader import ModelLoader

__all__ = [
    "DetectorBackend",
    "CpuYoloConfig",
    "UltralyticsCpuBackend",
    "ModelLoader",
]
