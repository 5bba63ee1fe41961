from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import yaml

from repaso.core.models import (
    Achievement,
    ItemCategory,
    MissionLevel,
    Player,
    Question,
    ShopItem,
    Subject,
)

DATA_DIR = Path(__file__).resolve().parent.parent / "data"


@dataclass(frozen=True)
class Catalog:
    """Canonical, read-only game content loaded from the YAML files in ``data/``."""

    levels: Tuple[MissionLevel, ...]
    shop_items: Tuple[ShopItem, ...]
    achievements: Tuple[Achievement, ...]
    initial_players: Tuple[Player, ...]

    def level(self, level_id: str) -> Optional[MissionLevel]:
        return next((lvl for lvl in self.levels if lvl.id == level_id), None)

    def shop_item(self, item_id: str) -> Optional[ShopItem]:
        return next((item for item in self.shop_items if item.id == item_id), None)

    def achievement(self, achievement_id: str) -> Optional[Achievement]:
        return next((a for a in self.achievements if a.id == achievement_id), None)

    @classmethod
    def load(cls, base_dir: Optional[Path] = None) -> "Catalog":
        base_dir = base_dir or DATA_DIR
        if not base_dir.exists():
            raise FileNotFoundError(f"Data directory not found: {base_dir}")
        return cls(
            levels=tuple(_load_levels(base_dir / "levels.yaml")),
            shop_items=tuple(_load_shop_items(base_dir / "shop.yaml")),
            achievements=tuple(_load_achievements(base_dir / "achievements.yaml")),
            initial_players=tuple(_load_players(base_dir / "players.yaml")),
        )


def _read_list(path: Path) -> List[Dict[str, Any]]:
    if not path.exists():
        raise FileNotFoundError(f"Data file not found: {path}")
    raw = yaml.safe_load(path.read_text(encoding="utf-8"))
    if not raw or not isinstance(raw, list):
        raise ValueError(f"{path.name}: expected a non-empty YAML list")
    for entry in raw:
        if not isinstance(entry, dict):
            raise ValueError(f"{path.name}: every entry must be a mapping")
    return raw


def _require_str(path: Path, entry: Dict[str, Any], key: str) -> str:
    value = entry.get(key)
    if not value or not isinstance(value, str):
        raise ValueError(f"{path.name}: entry {entry.get('id', '?')!r} missing or invalid {key!r}")
    return value.strip()


def _check_unique(path: Path, ids: List[str]) -> None:
    seen = set()
    for item_id in ids:
        if item_id in seen:
            raise ValueError(f"{path.name}: duplicate id {item_id!r}")
        seen.add(item_id)


def _parse_question(path: Path, level_id: str, raw: Any) -> Question:
    if not isinstance(raw, dict):
        raise ValueError(f"{path.name}: level {level_id!r} has a malformed question")
    text = raw.get("text")
    options = raw.get("options")
    answer = raw.get("answer")
    if not text or not isinstance(text, str):
        raise ValueError(f"{path.name}: level {level_id!r} has a question without text")
    if not isinstance(options, list) or len(options) < 2:
        raise ValueError(f"{path.name}: level {level_id!r} question needs at least 2 options")
    if not isinstance(answer, int) or not 0 <= answer < len(options):
        raise ValueError(f"{path.name}: level {level_id!r} question has an invalid 'answer'")
    return Question(text=text.strip(), options=tuple(str(o) for o in options), correct_answer_index=answer)


def _load_levels(path: Path) -> List[MissionLevel]:
    levels: List[MissionLevel] = []
    for entry in _read_list(path):
        level_id = _require_str(path, entry, "id")
        try:
            subject = Subject(entry.get("subject"))
        except ValueError:
            raise ValueError(f"{path.name}: level {level_id!r} has unknown subject {entry.get('subject')!r}")
        questions = tuple(_parse_question(path, level_id, q) for q in entry.get("questions") or [])
        time_limit = entry.get("time_limit")
        levels.append(
            MissionLevel(
                id=level_id,
                name=_require_str(path, entry, "name"),
                level_number=int(entry.get("level_number", len(levels) + 1)),
                subject=subject,
                required_level=int(entry.get("required_level", 1)),
                questions=questions,
                xp_reward=int(entry.get("xp_reward", 0)),
                coin_reward=int(entry.get("coin_reward", 0)),
                time_limit=int(time_limit) if time_limit else None,
                has_bubble_game=bool(entry.get("has_bubble_game", False)),
            )
        )
    _check_unique(path, [lvl.id for lvl in levels])
    return levels


def _load_shop_items(path: Path) -> List[ShopItem]:
    items: List[ShopItem] = []
    for entry in _read_list(path):
        item_id = _require_str(path, entry, "id")
        try:
            category = ItemCategory(entry.get("category"))
        except ValueError:
            raise ValueError(f"{path.name}: item {item_id!r} has unknown category {entry.get('category')!r}")
        price = int(entry.get("price", 0))
        if price < 0:
            raise ValueError(f"{path.name}: item {item_id!r} has a negative price")
        items.append(
            ShopItem(
                id=item_id,
                name=_require_str(path, entry, "name"),
                price=price,
                category=category,
                image_url=str(entry.get("image", "")),
            )
        )
    _check_unique(path, [item.id for item in items])
    return items


def _load_achievements(path: Path) -> List[Achievement]:
    achievements = [
        Achievement(
            id=_require_str(path, entry, "id"),
            name=_require_str(path, entry, "name"),
            description=str(entry.get("description", "")),
            icon=str(entry.get("icon", "")),
        )
        for entry in _read_list(path)
    ]
    _check_unique(path, [a.id for a in achievements])
    return achievements


def _load_players(path: Path) -> List[Player]:
    players: List[Player] = []
    for entry in _read_list(path):
        _require_str(path, entry, "name")
        try:
            players.append(Player.from_dict(_camel_case_keys(entry)))
        except (TypeError, ValueError) as e:
            raise ValueError(f"{path.name}: invalid player {entry.get('name')!r}: {e}")
    return players


def _camel_case_keys(entry: Dict[str, Any]) -> Dict[str, Any]:
    def _camel(key: str) -> str:
        head, *rest = key.split("_")
        return head + "".join(part.title() for part in rest)

    return {_camel(str(k)): v for k, v in entry.items()}
