"""Tests for repaso.core.arcade – the bubble game."""

from __future__ import annotations

import random
from typing import List

import pytest

from repaso.core.arcade import (
    GAME_DURATION,
    MAX_BUBBLES,
    Bubble,
    BubbleGame,
    bubble_value,
)
from repaso.core.clock import ScreenClock
from repaso.core.models import MissionReward


@pytest.fixture()
def clock() -> ScreenClock:
    return ScreenClock()


def _game(clock: ScreenClock, seed: int = 7, **kwargs) -> BubbleGame:
    return BubbleGame(clock, rng=random.Random(seed), **kwargs)


def _tap_first(game: BubbleGame, target: bool) -> bool:
    for bubble in game.bubbles:
        if bubble.is_target == target:
            game.tap(bubble.id)
            return True
    return False


# ---------------------------------------------------------------------------
# Bubble values
# ---------------------------------------------------------------------------

class TestBubbleValue:
    def test_range(self):
        rng = random.Random(1)
        values = [bubble_value(rng) for _ in range(500)]
        assert all(1 <= v <= 60 for v in values)

    def test_mix_of_targets(self):
        rng = random.Random(2)
        targets = sum(bubble_value(rng) % 5 == 0 for _ in range(1000))
        assert 500 < targets < 700

    def test_is_target(self):
        assert Bubble(id=0, value=35, x=0, duration=6, spawned_at=0).is_target
        assert not Bubble(id=0, value=12, x=0, duration=6, spawned_at=0).is_target


# ---------------------------------------------------------------------------
# BubbleGame
# ---------------------------------------------------------------------------

class TestBubbleGame:
    def test_first_bubble_spawns_immediately(self, clock: ScreenClock):
        game = _game(clock)
        assert len(game.bubbles) == 1
        assert game.time_left == GAME_DURATION

    def test_never_more_than_max(self, clock: ScreenClock):
        game = _game(clock)
        for _ in range(100):
            clock.advance(0.25)
            assert len(game.bubbles) <= MAX_BUBBLES

    def test_bubbles_escape(self, clock: ScreenClock):
        game = _game(clock)
        first = game.bubbles[0]
        clock.advance(first.duration + 0.01)
        assert first.id not in {b.id for b in game.bubbles}
        assert game.total_taps == 0

    def test_tap_scoring(self, clock: ScreenClock):
        game = _game(clock)
        tapped_target = tapped_other = False
        while not (tapped_target and tapped_other) and not game.finished:
            clock.advance(0.5)
            if not tapped_target:
                tapped_target = _tap_first(game, True)
            if not tapped_other:
                tapped_other = _tap_first(game, False)
        assert game.correct_taps == 1
        assert game.wrong_taps == 1
        assert game.score == 5

    def test_tap_removes_bubble(self, clock: ScreenClock):
        game = _game(clock)
        bubble = game.bubbles[0]
        assert game.tap(bubble.id) is bubble.is_target
        assert game.tap(bubble.id) is None
        assert game.total_taps == 1

    def test_finishes_after_duration(self, clock: ScreenClock):
        done: List[bool] = []
        game = _game(clock, on_finished=lambda: done.append(True))
        clock.advance(GAME_DURATION)
        assert game.finished
        assert game.time_left == 0
        assert game.bubbles == []
        assert done == [True]
        assert clock.pending() == 0

    def test_tap_after_finish_ignored(self, clock: ScreenClock):
        game = _game(clock)
        bubble = game.bubbles[0]
        game.finish()
        assert game.tap(bubble.id) is None

    def test_finish_once(self, clock: ScreenClock):
        done: List[bool] = []
        game = _game(clock, on_finished=lambda: done.append(True))
        game.finish()
        game.finish()
        assert done == [True]

    def test_stopped_clock_freezes_game(self, clock: ScreenClock):
        game = _game(clock)
        clock.stop()
        clock.advance(GAME_DURATION)
        assert not game.finished
        assert game.time_left == GAME_DURATION

    def test_reward_without_taps(self, clock: ScreenClock):
        game = _game(clock, duration=1)
        clock.advance(1)
        assert game.reward() == MissionReward(stars=1, xp=0, coins=0, is_perfect=False)

    def test_reward_matches_taps(self, clock: ScreenClock):
        game = _game(clock)
        while game.correct_taps < 3 and not game.finished:
            clock.advance(0.5)
            _tap_first(game, True)
        game.finish()
        reward = game.reward()
        assert reward.is_perfect
        assert reward.xp == 3 * 10 + 20
        assert reward.coins == 10
