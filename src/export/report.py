"""
Report content shared by the exporters.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import List

from models.history import HistoryItem

REPORT_TITLE = "Bike Detection Report"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


@dataclass(frozen=True)
class ReportData:
    """
    Snapshot of what a report shows.

    Attributes:
        current_count: Count currently on screen.
        history: History entries, most recent first.
        generated_at: When the report was requested.
    """
    current_count: int
    history: List[HistoryItem] = field(default_factory=list)
    generated_at: datetime = field(default_factory=datetime.now)


def history_line(item: HistoryItem) -> str:
    return f"{item.timestamp}: {item.count} bikes detected"


def build_report_lines(data: ReportData) -> List[str]:
    """Header, date, current count, then one line per history entry."""
    lines = [
        REPORT_TITLE,
        f"Date: {data.generated_at.strftime(DATE_FORMAT)}",
        f"Current Count: {data.current_count}",
        "History Logs:",
    ]
    lines.extend(history_line(item) for item in data.history)
    return lines
