from __future__ import annotations

import heapq
import itertools
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Tuple


@dataclass
class _Job:
    job_id: int
    callback: Callable[[], None]
    interval: Optional[float]
    cancelled: bool = field(default=False)


class ScreenClock:
    """Logical clock owned by a single screen.

    Timers (question countdown, arcade clock, bubble spawns) are scheduled here
    instead of on real timers. The UI advances the clock from one ``QTimer``;
    ``stop()`` cancels everything so nothing fires after the screen is gone.
    """

    def __init__(self) -> None:
        self._now = 0.0
        self._queue: List[Tuple[float, int, _Job]] = []
        self._jobs: Dict[int, _Job] = {}
        self._ids = itertools.count(1)
        self._stopped = False

    @property
    def now(self) -> float:
        return self._now

    @property
    def stopped(self) -> bool:
        return self._stopped

    def schedule(self, delay: float, callback: Callable[[], None], repeat: bool = False) -> int:
        """Run *callback* after *delay* seconds (and every *delay* seconds if *repeat*)."""
        job_id = next(self._ids)
        if self._stopped:
            return job_id
        if repeat and delay <= 0:
            raise ValueError("repeating jobs need a positive interval")
        job = _Job(job_id=job_id, callback=callback, interval=delay if repeat else None)
        self._jobs[job_id] = job
        heapq.heappush(self._queue, (self._now + max(0.0, delay), job_id, job))
        return job_id

    def cancel(self, job_id: int) -> None:
        job = self._jobs.pop(job_id, None)
        if job is not None:
            job.cancelled = True

    def pending(self) -> int:
        return len(self._jobs)

    def advance(self, seconds: float) -> None:
        """Move time forward, firing due jobs in order of their due time."""
        if self._stopped:
            return
        target = self._now + max(0.0, seconds)
        while self._queue and self._queue[0][0] <= target and not self._stopped:
            due, job_id, job = heapq.heappop(self._queue)
            if job.cancelled:
                continue
            self._now = due
            if job.interval is not None:
                heapq.heappush(self._queue, (due + job.interval, job_id, job))
            else:
                self._jobs.pop(job_id, None)
            job.callback()
        if not self._stopped:
            self._now = target

    def stop(self) -> None:
        for job in self._jobs.values():
            job.cancelled = True
        self._jobs.clear()
        self._queue.clear()
        self._stopped = True
