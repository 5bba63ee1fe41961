"""Tests for repaso.core.models – domain types and their JSON shape."""

from __future__ import annotations

import pytest

from repaso.core.models import (
    ItemCategory,
    MissionLevel,
    Player,
    Question,
    Screen,
    Subject,
)


# ---------------------------------------------------------------------------
# Question
# ---------------------------------------------------------------------------

class TestQuestion:
    def test_is_correct(self):
        q = Question(text="2 x 3?", options=("5", "6", "8", "4"), correct_answer_index=1)
        assert q.is_correct(1)
        assert not q.is_correct(0)
        assert not q.is_correct(-1)

    def test_to_dict_uses_camel_case(self):
        q = Question(text="2 x 3?", options=("5", "6"), correct_answer_index=1)
        assert q.to_dict() == {"text": "2 x 3?", "options": ["5", "6"], "correctAnswerIndex": 1}


# ---------------------------------------------------------------------------
# MissionLevel
# ---------------------------------------------------------------------------

class TestMissionLevel:
    def test_defaults(self):
        lvl = MissionLevel(id="m1", name="Tabla", level_number=1, subject=Subject.MATH, required_level=1)
        assert lvl.questions == ()
        assert lvl.time_limit is None
        assert lvl.has_bubble_game is False
        assert lvl.summary is None

    def test_to_dict_omits_unset_optionals(self):
        lvl = MissionLevel(id="m1", name="Tabla", level_number=1, subject=Subject.MATH, required_level=1)
        data = lvl.to_dict()
        assert data["subject"] == "math"
        assert data["requiredLevel"] == 1
        assert "timeLimit" not in data
        assert "hasBubbleGame" not in data
        assert "summary" not in data

    def test_to_dict_includes_set_optionals(self):
        lvl = MissionLevel(
            id="boss", name="Jefe", level_number=4, subject=Subject.MATH, required_level=4,
            time_limit=10, has_bubble_game=True, summary="Hola",
        )
        data = lvl.to_dict()
        assert data["timeLimit"] == 10
        assert data["hasBubbleGame"] is True
        assert data["summary"] == "Hola"


# ---------------------------------------------------------------------------
# Player
# ---------------------------------------------------------------------------

class TestPlayer:
    def test_defaults(self):
        p = Player(name="Lucía")
        assert p.level == 1
        assert p.xp == 0
        assert p.coins == 0
        assert p.owned_items == frozenset()
        assert dict(p.equipped_items) == {}

    def test_stars_for_unplayed_level_is_zero(self):
        p = Player(name="Lucía", mission_history={"math_1": 2})
        assert p.stars_for("math_1") == 2
        assert p.stars_for("math_2") == 0

    def test_dict_round_trip(self):
        p = Player(
            name="Mateo",
            avatar="🐼",
            level=3,
            xp=40,
            coins=15,
            owned_items=frozenset({"hat_cap", "bg_space"}),
            equipped_items={ItemCategory.HAT: "hat_cap"},
            achievements=frozenset({"basic_tables_master"}),
            mission_history={"math_1": 3},
        )
        data = p.to_dict()
        assert data["ownedItems"] == ["bg_space", "hat_cap"]
        assert data["equippedItems"] == {"Hats": "hat_cap"}
        assert Player.from_dict(data) == p

    def test_from_dict_requires_name(self):
        with pytest.raises(ValueError):
            Player.from_dict({"avatar": "🦊"})

    def test_from_dict_rejects_unknown_category(self):
        with pytest.raises(ValueError):
            Player.from_dict({"name": "X", "equippedItems": {"Shoes": "boot"}})

    def test_from_dict_clamps_negative_values(self):
        p = Player.from_dict({"name": "X", "level": 0, "xp": -5, "coins": -1})
        assert p.level == 1
        assert p.xp == 0
        assert p.coins == 0


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------

class TestEnums:
    def test_screen_values(self):
        assert Screen("bubble_game") is Screen.ARCADE
        assert Screen("generated_mission") is Screen.GENERATED_MISSION

    def test_category_values(self):
        assert {c.value for c in ItemCategory} == {"Hats", "Accessories", "Backgrounds"}
