"""Domain types shared by the core and the UI."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, FrozenSet, Mapping, Optional, Tuple

XP_PER_LEVEL = 100


class Screen(str, Enum):
    HOME = "home"
    MAP = "map"
    SUMMARY = "summary"
    MISSION = "mission"
    GENERATED_MISSION = "generated_mission"
    PROFILE = "profile"
    SHOP = "shop"
    ARCADE = "bubble_game"


class Subject(str, Enum):
    MATH = "math"
    HISTORY = "history"


class ItemCategory(str, Enum):
    HAT = "Hats"
    ACCESSORY = "Accessories"
    BACKGROUND = "Backgrounds"


@dataclass(frozen=True)
class Question:
    text: str
    options: Tuple[str, ...]
    correct_answer_index: int

    def is_correct(self, index: int) -> bool:
        return index == self.correct_answer_index

    def to_dict(self) -> Dict[str, Any]:
        return {
            "text": self.text,
            "options": list(self.options),
            "correctAnswerIndex": self.correct_answer_index,
        }


@dataclass(frozen=True)
class MissionLevel:
    """A level on the subject map.

    Everything except ``summary`` comes from configuration; ``summary`` is
    filled in by the content provider the first time the level is opened.
    """

    id: str
    name: str
    level_number: int
    subject: Subject
    required_level: int
    questions: Tuple[Question, ...] = ()
    xp_reward: int = 0
    coin_reward: int = 0
    time_limit: Optional[int] = None
    has_bubble_game: bool = False
    summary: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "levelNumber": self.level_number,
            "subject": self.subject.value,
            "requiredLevel": self.required_level,
            "questions": [q.to_dict() for q in self.questions],
            "xpReward": self.xp_reward,
            "coinReward": self.coin_reward,
        }
        if self.time_limit is not None:
            data["timeLimit"] = self.time_limit
        if self.has_bubble_game:
            data["hasBubbleGame"] = True
        if self.summary is not None:
            data["summary"] = self.summary
        return data


@dataclass(frozen=True)
class ShopItem:
    id: str
    name: str
    price: int
    category: ItemCategory
    image_url: str = ""


@dataclass(frozen=True)
class Achievement:
    id: str
    name: str
    description: str
    icon: str = ""


@dataclass(frozen=True)
class MissionReward:
    """Outcome of a mission or of one phase of it."""

    stars: int
    xp: int
    coins: int
    is_perfect: bool


@dataclass(frozen=True)
class Player:
    """Persistent player record.

    Instances are never mutated; the ledger and the shop return updated
    copies. Mapping fields are copied on every update so sharing them between
    snapshots is safe.
    """

    name: str
    avatar: str = ""
    level: int = 1
    xp: int = 0
    coins: int = 0
    owned_items: FrozenSet[str] = frozenset()
    equipped_items: Mapping[ItemCategory, str] = field(default_factory=dict)
    achievements: FrozenSet[str] = frozenset()
    mission_history: Mapping[str, int] = field(default_factory=dict)

    def stars_for(self, level_id: str) -> int:
        return int(self.mission_history.get(level_id, 0))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "avatar": self.avatar,
            "level": self.level,
            "xp": self.xp,
            "coins": self.coins,
            "ownedItems": sorted(self.owned_items),
            "equippedItems": {cat.value: item_id for cat, item_id in self.equipped_items.items()},
            "achievements": sorted(self.achievements),
            "missionHistory": dict(self.mission_history),
        }

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "Player":
        """Build a player from its JSON shape. Raises ValueError/TypeError on bad input."""
        name = raw.get("name")
        if not name or not isinstance(name, str):
            raise ValueError("player record without a name")
        equipped: Dict[ItemCategory, str] = {}
        for cat, item_id in dict(raw.get("equippedItems") or {}).items():
            equipped[ItemCategory(cat)] = str(item_id)
        history = {str(k): int(v) for k, v in dict(raw.get("missionHistory") or {}).items()}
        return cls(
            name=name,
            avatar=str(raw.get("avatar", "")),
            level=max(1, int(raw.get("level", 1))),
            xp=max(0, int(raw.get("xp", 0))),
            coins=max(0, int(raw.get("coins", 0))),
            owned_items=frozenset(str(i) for i in raw.get("ownedItems") or []),
            equipped_items=equipped,
            achievements=frozenset(str(a) for a in raw.get("achievements") or []),
            mission_history=history,
        )
