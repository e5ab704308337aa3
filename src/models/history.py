"""
HistoryItem model for count snapshots taken when detection stops.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict


@dataclass(frozen=True)
class HistoryItem:
    """
    A snapshot of the bike count at a stop event.

    Attributes:
        id: Unique token for this entry.
        timestamp: Human-readable local time of the snapshot.
        count: Number of bicycles/motorcycles in effect when detection stopped.
    """
    id: str
    timestamp: str
    count: int

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization and spreadsheet rows."""
        return {
            "id": self.id,
            "timestamp": self.timestamp,
            "count": self.count,
        }
