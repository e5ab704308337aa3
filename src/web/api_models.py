from __future__ import annotations

from typing import Dict, List, Optional

from pydantic import BaseModel, Field


class StatusResponse(BaseModel):
    """
    Session status for the dashboard (polled every second).
    Drives the status badge and which controls are enabled.
    """
    model_state: str = Field(..., description="loading|ready|failed")
    status: str = Field(..., description="Human-readable model status")
    loading: bool
    source: Optional[str] = Field(None, description="camera|upload, null when unselected")
    frame_available: bool = Field(False, description="False while the bound source has no current frame")
    processing: bool
    count: int = Field(0, description="Bikes in the most recent processed frame")
    can_select_source: bool
    can_start: bool
    history_length: int

    model_config = {"protected_namespaces": ()}


class DetectionItem(BaseModel):
    bbox: List[float] = Field(..., description="[x, y, width, height] in pixels")
    class_name: str = Field(..., alias="class")
    score: float

    model_config = {"populate_by_name": True}


class DetectionsResponse(BaseModel):
    count: int
    frame_index: Optional[int] = None
    detections: List[DetectionItem] = Field(default_factory=list)


class HistoryEntry(BaseModel):
    id: str
    timestamp: str
    count: int


class HistoryResponse(BaseModel):
    capacity: int
    items: List[HistoryEntry] = Field(default_factory=list, description="Most recent first")


class ChartSeries(BaseModel):
    labels: List[str] = Field(default_factory=list, description="Timestamps, oldest first")
    counts: List[int] = Field(default_factory=list)


class ToggleResponse(BaseModel):
    processing: bool
    count: int
    history_item: Optional[HistoryEntry] = None


class SourceResponse(BaseModel):
    source: str
    media: Optional[str] = Field(None, description="image|video for uploads")


class HealthResponse(BaseModel):
    timestamp: float
    platform: str
    python: str
    model_state: str
    model_error: Optional[str] = None
    disk: Dict[str, Optional[float]]

    model_config = {"protected_namespaces": ()}
