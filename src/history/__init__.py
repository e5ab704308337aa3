"""
In-memory history of count snapshots.
"""

from .log import HistoryLog

__all__ = ["HistoryLog"]
