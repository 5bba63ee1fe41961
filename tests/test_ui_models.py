"""Tests for repaso.ui.models – map node states and feedback helpers."""

from __future__ import annotations

import pytest

from repaso.core.catalog import Catalog
from repaso.core.models import Player, Subject
from repaso.ui.models import (
    answer_feedback,
    arcade_message,
    build_level_states,
    levels_by_subject,
)


@pytest.fixture(scope="module")
def catalog() -> Catalog:
    return Catalog.load()


# ---------------------------------------------------------------------------
# build_level_states
# ---------------------------------------------------------------------------

class TestBuildLevelStates:
    def test_new_player(self, catalog: Catalog):
        states = build_level_states(Player(name="A"), catalog.levels, Subject.MATH)
        assert [s.level.subject for s in states] == [Subject.MATH] * len(states)
        assert states[0].unlocked and states[0].is_current
        assert not any(s.unlocked for s in states[1:])
        assert not any(s.completed for s in states)

    def test_current_moves_past_completed(self, catalog: Catalog):
        player = Player(name="A", level=2, mission_history={"math_1": 3})
        states = build_level_states(player, catalog.levels, Subject.MATH)
        assert states[0].completed and states[0].stars == 3
        assert not states[0].is_current
        assert states[1].is_current
        assert sum(s.is_current for s in states) == 1

    def test_all_done_has_no_current(self, catalog: Catalog):
        history = {lvl.id: 1 for lvl in catalog.levels}
        states = build_level_states(Player(name="A", level=9, mission_history=history), catalog.levels, Subject.HISTORY)
        assert not any(s.is_current for s in states)

    def test_unlock_follows_player_level(self, catalog: Catalog):
        states = build_level_states(Player(name="A", level=3), catalog.levels, Subject.MATH)
        assert [s.unlocked for s in states] == [s.level.required_level <= 3 for s in states]


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

class TestLevelsBySubject:
    def test_groups_in_order(self, catalog: Catalog):
        grouped = levels_by_subject(catalog.levels)
        assert set(grouped) == {Subject.MATH, Subject.HISTORY}
        assert [lvl.level_number for lvl in grouped[Subject.HISTORY]] == [1, 2, 3]


class TestAnswerFeedback:
    def test_before_answer(self):
        assert answer_feedback(0, None, 1) == "neutral"

    def test_after_wrong_answer(self):
        assert answer_feedback(1, 2, 1) == "correct"
        assert answer_feedback(2, 2, 1) == "wrong"
        assert answer_feedback(0, 2, 1) == "dimmed"

    def test_after_timeout(self):
        assert answer_feedback(1, -1, 1) == "correct"
        assert answer_feedback(0, -1, 1) == "dimmed"


class TestArcadeMessage:
    def test_excellent(self):
        assert arcade_message(10, 10).startswith("¡Excelente!")

    def test_good(self):
        assert arcade_message(8, 10) == "¡Muy bien!"

    def test_almost(self):
        assert arcade_message(5, 10).startswith("¡Casi!")

    def test_no_taps(self):
        assert arcade_message(0, 0).startswith("¡Excelente!")
