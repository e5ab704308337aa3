from __future__ import annotations

import platform
import shutil
import time
from dataclasses import dataclass
from typing import Any, Dict, Optional

from inference.loader import ModelLoader


@dataclass
class HealthService:
    loader: ModelLoader
    upload_dir: str = "."

    def get_health_summary(self) -> Dict[str, Any]:
        return {
            "timestamp": time.time(),
            "platform": platform.platform(),
            "python": platform.python_version(),
            "model_state": self.loader.state.value,
            "model_error": self.loader.error,
            "disk": self.disk_usage(self.upload_dir),
        }

    @staticmethod
    def disk_usage(path: Optional[str] = None) -> Dict[str, Optional[float]]:
        """
        Free space where uploads are written.
        """
        target = path or "."
        try:
            usage = shutil.disk_usage(target)
        except OSError:
            return {"total_bytes": None, "free_bytes": None, "pct_free": None}
        pct_free = (usage.free / usage.total * 100) if usage.total else None
        return {
            "total_bytes": float(usage.total),
            "free_bytes": float(usage.free),
            "pct_free": pct_free,
        }
