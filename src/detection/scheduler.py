"""
Refresh-tick scheduling for the detection loop.

RefreshScheduler is the server-side stand-in for requestAnimationFrame: a
callback scheduled now runs on the next refresh tick of a single worker
thread. One worker means callbacks never overlap.
"""

from __future__ import annotations

import logging
import threading
import time
from collections import deque
from typing import Callable, Deque, Optional, Protocol

Callback = Callable[[], None]


class Scheduler(Protocol):
    def schedule(self, callback: Callback) -> None:
        ...

    def cancel_all(self) -> None:
        ...


class RefreshScheduler:
    """Runs scheduled callbacks at most `fps` times per second on one thread."""

    def __init__(self, fps: float = 30.0, clock: Callable[[], float] = time.monotonic):
        if fps <= 0:
            raise ValueError("fps must be positive")
        self._interval = 1.0 / fps
        self._clock = clock
        self._cond = threading.Condition()
        self._pending: Deque[Callback] = deque()
        self._next_tick: Optional[float] = None
        self._closed = False
        self._thread = threading.Thread(target=self._run, name="refresh-scheduler", daemon=True)
        self._thread.start()

    @property
    def interval(self) -> float:
        return self._interval

    def schedule(self, callback: Callback) -> None:
        with self._cond:
            if self._closed:
                raise RuntimeError("Scheduler is shut down")
            self._pending.append(callback)
            self._cond.notify()

    def cancel_all(self) -> None:
        with self._cond:
            self._pending.clear()

    def shutdown(self, timeout: float = 2.0) -> None:
        with self._cond:
            self._closed = True
            self._pending.clear()
            self._cond.notify()
        self._thread.join(timeout=timeout)

    def _run(self) -> None:
        while True:
            with self._cond:
                while not self._pending and not self._closed:
                    self._cond.wait()
                if self._closed:
                    return

                now = self._clock()
                if self._next_tick is None or self._next_tick < now:
                    self._next_tick = now
                delay = self._next_tick - now
                if delay > 0:
                    # Woken early by schedule()/cancel_all(); re-check on wake.
                    self._cond.wait(delay)
                    if self._closed:
                        return
                    if self._clock() < self._next_tick or not self._pending:
                        continue

                batch = list(self._pending)
                self._pending.clear()
                self._next_tick += self._interval

            for callback in batch:
                try:
                    callback()
                except Exception:
                    logging.exception("Scheduled callback failed")
