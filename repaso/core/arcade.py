"""Timed bubble arcade: tap the bubbles that hold a multiple of 5."""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional

from repaso.core.clock import ScreenClock
from repaso.core.models import MissionReward
from repaso.core.rewards import XP_PER_CORRECT_TAP, XP_PER_WRONG_TAP, arcade_reward

logger = logging.getLogger(__name__)

GAME_DURATION = 30
MAX_BUBBLES = 5
SPAWN_DELAY = (0.5, 1.5)
TRAVEL_DURATION = (6.0, 11.0)
MULTIPLE_OF_FIVE_CHANCE = 0.6


@dataclass(frozen=True)
class Bubble:
    id: int
    value: int
    x: float  # horizontal position, 0-85 (% of field width)
    duration: float  # seconds to cross the field
    spawned_at: float

    @property
    def is_target(self) -> bool:
        return self.value % 5 == 0


def bubble_value(rng: random.Random) -> int:
    """Pick a value in 1..60, a multiple of 5 about 60% of the time."""
    if rng.random() < MULTIPLE_OF_FIVE_CHANCE:
        return rng.randint(1, 12) * 5
    value = rng.randint(1, 60)
    while value % 5 == 0:
        value = rng.randint(1, 60)
    return value


class BubbleGame:
    """One arcade session, driven entirely by the owning screen's clock.

    Three kinds of jobs run on the clock: the one-second countdown, the
    self-rescheduling spawner, and one escape job per bubble. All of them are
    cancelled when the session ends.
    """

    def __init__(
        self,
        clock: ScreenClock,
        rng: Optional[random.Random] = None,
        duration: int = GAME_DURATION,
        max_bubbles: int = MAX_BUBBLES,
        on_finished: Optional[Callable[[], None]] = None,
    ) -> None:
        self._clock = clock
        self._rng = rng or random.Random()
        self._max_bubbles = max_bubbles
        self._on_finished = on_finished
        self._time_left = duration
        self._bubbles: Dict[int, Bubble] = {}
        self._escape_jobs: Dict[int, int] = {}
        self._next_id = 0
        self._correct = 0
        self._wrong = 0
        self._score = 0
        self._finished = False
        self._tick_job = self._clock.schedule(1.0, self._tick, repeat=True)
        self._spawn_job: Optional[int] = None
        self._spawn()

    @property
    def time_left(self) -> int:
        return self._time_left

    @property
    def finished(self) -> bool:
        return self._finished

    @property
    def bubbles(self) -> List[Bubble]:
        return list(self._bubbles.values())

    @property
    def correct_taps(self) -> int:
        return self._correct

    @property
    def wrong_taps(self) -> int:
        return self._wrong

    @property
    def total_taps(self) -> int:
        return self._correct + self._wrong

    @property
    def score(self) -> int:
        """Running XP total as shown during play (may be negative)."""
        return self._score

    def accuracy(self) -> float:
        return self._correct / self.total_taps if self.total_taps else 0.0

    def tap(self, bubble_id: int) -> Optional[bool]:
        """Pop a bubble. Returns None if the bubble is gone or the game is over."""
        if self._finished:
            return None
        bubble = self._bubbles.pop(bubble_id, None)
        if bubble is None:
            return None
        job = self._escape_jobs.pop(bubble_id, None)
        if job is not None:
            self._clock.cancel(job)
        if bubble.is_target:
            self._correct += 1
            self._score += XP_PER_CORRECT_TAP
        else:
            self._wrong += 1
            self._score += XP_PER_WRONG_TAP
        return bubble.is_target

    def reward(self) -> MissionReward:
        return arcade_reward(self._correct, self.total_taps)

    def finish(self) -> None:
        if self._finished:
            return
        self._finished = True
        for job in [self._tick_job, self._spawn_job, *self._escape_jobs.values()]:
            if job is None:
                continue
            self._clock.cancel(job)
        self._escape_jobs.clear()
        self._bubbles.clear()
        logger.info("Arcade finished: %d/%d correct taps", self._correct, self.total_taps)
        if self._on_finished is not None:
            self._on_finished()

    def _tick(self) -> None:
        self._time_left = max(0, self._time_left - 1)
        if self._time_left == 0:
            self.finish()

    def _spawn(self) -> None:
        if self._finished:
            return
        if len(self._bubbles) < self._max_bubbles:
            bubble = Bubble(
                id=self._next_id,
                value=bubble_value(self._rng),
                x=self._rng.random() * 85,
                duration=self._rng.uniform(*TRAVEL_DURATION),
                spawned_at=self._clock.now,
            )
            self._next_id += 1
            self._bubbles[bubble.id] = bubble
            self._escape_jobs[bubble.id] = self._clock.schedule(
                bubble.duration, lambda bubble_id=bubble.id: self._escape(bubble_id)
            )
        self._spawn_job = self._clock.schedule(self._rng.uniform(*SPAWN_DELAY), self._spawn)

    def _escape(self, bubble_id: int) -> None:
        self._bubbles.pop(bubble_id, None)
        self._escape_jobs.pop(bubble_id, None)
