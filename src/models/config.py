"""
Typed configuration models matching the YAML config structure.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union

DEFAULT_TARGET_CLASSES = ["bicycle", "motorcycle"]


@dataclass
class CameraConfig:
    """Camera configuration."""
    device_id: Union[int, str] = 0
    resolution: List[int] = field(default_factory=lambda: [640, 480])
    fps: int = 30

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "CameraConfig":
        """Adapter: Create from config dictionary."""
        return cls(
            device_id=d.get("device_id", 0),
            resolution=d.get("resolution", [640, 480]),
            fps=d.get("fps", 30),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "device_id": self.device_id,
            "resolution": self.resolution,
            "fps": self.fps,
        }


@dataclass
class DetectionConfig:
    """Detector and detection loop configuration."""
    model: str = "yolov8n.pt"
    conf_threshold: float = 0.25
    iou_threshold: float = 0.45
    class_name_overrides: Optional[Dict[int, str]] = None
    target_classes: List[str] = field(default_factory=lambda: list(DEFAULT_TARGET_CLASSES))
    refresh_fps: int = 30
    max_consecutive_failures: int = 10

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "DetectionConfig":
        return cls(
            model=d.get("model", "yolov8n.pt"),
            conf_threshold=d.get("conf_threshold", 0.25),
            iou_threshold=d.get("iou_threshold", 0.45),
            class_name_overrides=d.get("class_name_overrides"),
            target_classes=list(d.get("target_classes") or DEFAULT_TARGET_CLASSES),
            refresh_fps=d.get("refresh_fps", 30),
            max_consecutive_failures=d.get("max_consecutive_failures", 10),
        )

    def to_dict(self) -> Dict[str, Any]:
        d = {
            "model": self.model,
            "conf_threshold": self.conf_threshold,
            "iou_threshold": self.iou_threshold,
            "target_classes": self.target_classes,
            "refresh_fps": self.refresh_fps,
            "max_consecutive_failures": self.max_consecutive_failures,
        }
        if self.class_name_overrides is not None:
            d["class_name_overrides"] = self.class_name_overrides
        return d


@dataclass
class HistoryConfig:
    """History log configuration."""
    capacity: int = 10
    timestamp_format: str = "%H:%M:%S"

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "HistoryConfig":
        return cls(
            capacity=d.get("capacity", 10),
            timestamp_format=d.get("timestamp_format", "%H:%M:%S"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {"capacity": self.capacity, "timestamp_format": self.timestamp_format}


@dataclass
class OverlayConfig:
    """Overlay drawing style. Color is a hex RGB string."""
    color: str = "#22c55e"
    line_width: int = 4
    font_scale: float = 0.6

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "OverlayConfig":
        return cls(
            color=d.get("color", "#22c55e"),
            line_width=d.get("line_width", 4),
            font_scale=d.get("font_scale", 0.6),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {"color": self.color, "line_width": self.line_width, "font_scale": self.font_scale}


@dataclass
class ExportConfig:
    """Report export file naming."""
    report_filename: str = "bike-report.pdf"
    data_filename: str = "bike-data.xlsx"
    sheet_name: str = "Detection History"

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "ExportConfig":
        return cls(
            report_filename=d.get("report_filename", "bike-report.pdf"),
            data_filename=d.get("data_filename", "bike-data.xlsx"),
            sheet_name=d.get("sheet_name", "Detection History"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "report_filename": self.report_filename,
            "data_filename": self.data_filename,
            "sheet_name": self.sheet_name,
        }


@dataclass
class WebConfig:
    """HTTP server binding."""
    host: str = "0.0.0.0"
    port: int = 5000

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "WebConfig":
        return cls(host=d.get("host", "0.0.0.0"), port=d.get("port", 5000))

    def to_dict(self) -> Dict[str, Any]:
        return {"host": self.host, "port": self.port}


@dataclass
class Config:
    """
    Complete application configuration.

    This is a typed representation of the YAML config structure.
    """
    camera: CameraConfig = field(default_factory=CameraConfig)
    detection: DetectionConfig = field(default_factory=DetectionConfig)
    history: HistoryConfig = field(default_factory=HistoryConfig)
    overlay: OverlayConfig = field(default_factory=OverlayConfig)
    export: ExportConfig = field(default_factory=ExportConfig)
    web: WebConfig = field(default_factory=WebConfig)
    upload_dir: str = "data/uploads"
    log_path: str = "logs/bikepark_monitor.log"
    log_level: str = "INFO"

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "Config":
        """Adapter: Create Config from raw dictionary (e.g., from load_config)."""
        return cls(
            camera=CameraConfig.from_dict(d.get("camera", {}) or {}),
            detection=DetectionConfig.from_dict(d.get("detection", {}) or {}),
            history=HistoryConfig.from_dict(d.get("history", {}) or {}),
            overlay=OverlayConfig.from_dict(d.get("overlay", {}) or {}),
            export=ExportConfig.from_dict(d.get("export", {}) or {}),
            web=WebConfig.from_dict(d.get("web", {}) or {}),
            upload_dir=(d.get("uploads", {}) or {}).get("directory", "data/uploads"),
            log_path=d.get("log_path", "logs/bikepark_monitor.log"),
            log_level=d.get("log_level", "INFO"),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert back to dictionary."""
        return {
            "camera": self.camera.to_dict(),
            "detection": self.detection.to_dict(),
            "history": self.history.to_dict(),
            "overlay": self.overlay.to_dict(),
            "export": self.export.to_dict(),
            "web": self.web.to_dict(),
            "uploads": {"directory": self.upload_dir},
            "log_path": self.log_path,
            "log_level": self.log_level,
        }
