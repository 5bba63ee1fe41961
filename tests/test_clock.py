"""Tests for repaso.core.clock – the per-screen logical clock."""

from __future__ import annotations

from typing import List

import pytest

from repaso.core.clock import ScreenClock


class TestScreenClock:
    def test_one_shot_fires_once(self):
        clock = ScreenClock()
        fired: List[float] = []
        clock.schedule(1.0, lambda: fired.append(clock.now))
        clock.advance(0.5)
        assert fired == []
        clock.advance(0.5)
        assert fired == [1.0]
        clock.advance(5.0)
        assert fired == [1.0]
        assert clock.pending() == 0

    def test_repeating_job(self):
        clock = ScreenClock()
        fired: List[float] = []
        clock.schedule(1.0, lambda: fired.append(clock.now), repeat=True)
        clock.advance(3.5)
        assert fired == [1.0, 2.0, 3.0]
        assert clock.now == 3.5

    def test_due_time_order(self):
        clock = ScreenClock()
        order: List[str] = []
        clock.schedule(2.0, lambda: order.append("b"))
        clock.schedule(1.0, lambda: order.append("a"))
        clock.schedule(3.0, lambda: order.append("c"))
        clock.advance(10)
        assert order == ["a", "b", "c"]

    def test_cancel(self):
        clock = ScreenClock()
        fired: List[int] = []
        job = clock.schedule(1.0, lambda: fired.append(1), repeat=True)
        clock.advance(1.0)
        clock.cancel(job)
        clock.advance(5.0)
        assert fired == [1]

    def test_cancel_unknown_is_noop(self):
        ScreenClock().cancel(42)

    def test_job_scheduled_from_callback(self):
        clock = ScreenClock()
        fired: List[float] = []

        def first() -> None:
            clock.schedule(0.5, lambda: fired.append(clock.now))

        clock.schedule(1.0, first)
        clock.advance(2.0)
        assert fired == [1.5]

    def test_stop_cancels_everything(self):
        clock = ScreenClock()
        fired: List[int] = []
        clock.schedule(1.0, lambda: fired.append(1), repeat=True)
        clock.stop()
        clock.advance(10)
        assert fired == []
        assert clock.stopped
        assert clock.pending() == 0

    def test_schedule_after_stop_is_noop(self):
        clock = ScreenClock()
        clock.stop()
        fired: List[int] = []
        clock.schedule(0.1, lambda: fired.append(1))
        clock.advance(1)
        assert fired == []

    def test_stop_from_callback(self):
        clock = ScreenClock()
        fired: List[str] = []
        clock.schedule(1.0, clock.stop)
        clock.schedule(2.0, lambda: fired.append("late"))
        clock.advance(5)
        assert fired == []

    def test_repeat_needs_positive_interval(self):
        with pytest.raises(ValueError):
            ScreenClock().schedule(0, lambda: None, repeat=True)
