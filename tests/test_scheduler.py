"""
Tests for the refresh-tick scheduler.
"""

import threading

import pytest

from detection.scheduler import RefreshScheduler


@pytest.fixture
def scheduler():
    sched = RefreshScheduler(fps=100)
    yield sched
    sched.shutdown()


class TestRefreshScheduler:
    def test_runs_callback(self, scheduler):
        done = threading.Event()

        scheduler.schedule(done.set)

        assert done.wait(timeout=2.0)

    def test_chained_callbacks_run_in_order(self, scheduler):
        calls = []
        done = threading.Event()

        def step():
            calls.append(len(calls))
            if len(calls) < 3:
                scheduler.schedule(step)
            else:
                done.set()

        scheduler.schedule(step)

        assert done.wait(timeout=2.0)
        assert calls == [0, 1, 2]

    def test_failing_callback_does_not_kill_worker(self, scheduler):
        done = threading.Event()

        def boom():
            raise RuntimeError("boom")

        scheduler.schedule(boom)
        scheduler.schedule(done.set)

        assert done.wait(timeout=2.0)

    def test_interval(self):
        sched = RefreshScheduler(fps=20)
        try:
            assert sched.interval == pytest.approx(0.05)
        finally:
            sched.shutdown()

    def test_schedule_after_shutdown(self):
        sched = RefreshScheduler(fps=30)
        sched.shutdown()

        with pytest.raises(RuntimeError):
            sched.schedule(lambda: None)

    def test_invalid_fps(self):
        with pytest.raises(ValueError):
            RefreshScheduler(fps=0)
