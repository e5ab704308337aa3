"""
Bounded in-memory history of count snapshots.
"""

from __future__ import annotations

import logging
import threading
import uuid
from datetime import datetime
from typing import Callable, List, Optional

from models.history import HistoryItem


def _new_id() -> str:
    return uuid.uuid4().hex


class HistoryLog:
    """
    Fixed-capacity ring buffer of HistoryItem, newest first.

    record() is the only mutator. When the buffer is full the oldest entry is
    overwritten. Entries live until evicted or the process exits.
    """

    def __init__(
        self,
        capacity: int = 10,
        timestamp_format: str = "%H:%M:%S",
        clock: Callable[[], datetime] = datetime.now,
        id_factory: Callable[[], str] = _new_id,
    ):
        if capacity <= 0:
            raise ValueError("capacity must be positive")
        self._capacity = capacity
        self._timestamp_format = timestamp_format
        self._clock = clock
        self._id_factory = id_factory
        self._lock = threading.Lock()
        self._slots: List[Optional[HistoryItem]] = [None] * capacity
        self._next = 0  # slot the next record() writes
        self._size = 0

    @property
    def capacity(self) -> int:
        return self._capacity

    def __len__(self) -> int:
        with self._lock:
            return self._size

    def record(self, count: int) -> HistoryItem:
        """Insert a snapshot of `count` at the front, evicting the oldest if full."""
        if count < 0:
            raise ValueError("count must be >= 0")
        item = HistoryItem(
            id=self._id_factory(),
            timestamp=self._clock().strftime(self._timestamp_format),
            count=int(count),
        )
        with self._lock:
            evicted = self._slots[self._next] if self._size == self._capacity else None
            self._slots[self._next] = item
            self._next = (self._next + 1) % self._capacity
            if self._size < self._capacity:
                self._size += 1
        if evicted is not None:
            logging.debug(f"History full, evicted {evicted.id}")
        logging.info(f"History recorded: {item.timestamp} count={item.count}")
        return item

    def items(self) -> List[HistoryItem]:
        """Entries, most recent first."""
        with self._lock:
            out = []
            for offset in range(1, self._size + 1):
                item = self._slots[(self._next - offset) % self._capacity]
                out.append(item)
            return out

    def chronological(self) -> List[HistoryItem]:
        """Entries, oldest first (chart order)."""
        return list(reversed(self.items()))
