"""
Observation layer: frame sources and the playback surface.

Sources (camera, video file, still image) implement the ObservationSource
interface and return FrameData objects. FrameSource binds one of them to a
Playback that keeps the latest frame for detection and preview.
"""

from .base import ObservationSource, ObservationConfig
from .opencv_source import OpenCVSource, OpenCVSourceConfig
from .image_source import StillImageSource, StillImageConfig
from .playback import Playback
from .frame_source import FrameSource, media_kind

__all__ = [
    "ObservationSource",
    "ObservationConfig",
    "OpenCVSource",
    "OpenCVSourceConfig",
    "StillImageSource",
    "StillImageConfig",
    "Playback",
    "FrameSource",
    "media_kind",
]
