"""
Layered YAML configuration.

- `config/default.yaml` (checked in)
- `config/config.yaml` (local overrides)
- plus any explicitly provided `--config` path (treated as overrides)
"""

from __future__ import annotations

import logging
import os
import sys
from typing import Any, Dict, Optional, Tuple

import yaml

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Recursively merge override into base and return base."""
    for k, v in (override or {}).items():
        if isinstance(v, dict) and isinstance(base.get(k), dict):
            _deep_merge(base[k], v)
        else:
            base[k] = v
    return base


def _read_yaml(path: str) -> Dict[str, Any]:
    if not os.path.exists(path):
        return {}
    with open(path, "r") as f:
        return yaml.safe_load(f) or {}


def load_config(config_path: str) -> Dict[str, Any]:
    """Load and merge the config layers. Exits the process if a file is malformed."""
    config_dir = os.path.dirname(config_path)
    local_overrides_path = os.path.join(config_dir, "config.yaml")
    try:
        merged = _read_yaml(os.path.join(config_dir, "default.yaml"))
        merged = _deep_merge(merged, _read_yaml(local_overrides_path))

        if os.path.abspath(config_path) != os.path.abspath(local_overrides_path):
            merged = _deep_merge(merged, _read_yaml(config_path))

        return merged
    except (OSError, yaml.YAMLError) as e:
        logging.error(f"Failed to load configuration: {e}")
        sys.exit(1)


def _is_positive_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value > 0


def validate_config(config: Dict[str, Any]) -> Tuple[bool, Optional[str]]:
    """
    Validate configuration structure and values.

    Returns:
        Tuple of (is_valid, error_message)
    """
    for section in ("camera", "detection", "log_path", "log_level"):
        if section not in config:
            return False, f"Missing required configuration section: {section}"

    camera = config.get("camera") or {}
    device_id = camera.get("device_id", 0)
    if not isinstance(device_id, (int, str)) or isinstance(device_id, bool):
        return False, "camera.device_id must be an integer (index) or string (path)"
    if isinstance(device_id, int) and device_id < 0:
        return False, "camera.device_id integer must be non-negative"
    resolution = camera.get("resolution")
    if resolution is not None:
        if not isinstance(resolution, list) or len(resolution) != 2:
            return False, "camera.resolution must be a list of [width, height]"
        if not all(_is_positive_int(x) for x in resolution):
            return False, "camera.resolution values must be positive integers"
    if "fps" in camera and not _is_positive_int(camera["fps"]):
        return False, "camera.fps must be a positive integer"

    detection = config.get("detection") or {}
    if not isinstance(detection.get("model"), str) or not detection.get("model"):
        return False, "detection.model is required"
    for key in ("conf_threshold", "iou_threshold"):
        if key in detection:
            value = detection[key]
            if not isinstance(value, (int, float)) or not (0.0 <= float(value) <= 1.0):
                return False, f"detection.{key} must be between 0 and 1"
    targets = detection.get("target_classes")
    if targets is not None:
        if not isinstance(targets, list) or not targets or not all(isinstance(t, str) for t in targets):
            return False, "detection.target_classes must be a non-empty list of class names"
    for key in ("refresh_fps", "max_consecutive_failures"):
        if key in detection and not _is_positive_int(detection[key]):
            return False, f"detection.{key} must be a positive integer"

    history = config.get("history") or {}
    if "capacity" in history and not _is_positive_int(history["capacity"]):
        return False, "history.capacity must be a positive integer"

    overlay = config.get("overlay") or {}
    color = overlay.get("color")
    if color is not None:
        if not isinstance(color, str) or len(color.lstrip("#")) != 6:
            return False, "overlay.color must be a #rrggbb string"
        try:
            int(color.lstrip("#"), 16)
        except ValueError:
            return False, "overlay.color must be a #rrggbb string"

    web = config.get("web") or {}
    if "port" in web and not (_is_positive_int(web["port"]) and web["port"] < 65536):
        return False, "web.port must be between 1 and 65535"

    if str(config.get("log_level", "")).upper() not in LOG_LEVELS:
        return False, f"log_level must be one of: {', '.join(LOG_LEVELS)}"

    return True, None
