from __future__ import annotations

import json
import logging
import os
from dataclasses import replace
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple

from repaso.core.catalog import Catalog
from repaso.core.models import MissionLevel, Player

logger = logging.getLogger(__name__)

PLAYERS_KEY = "review-adventures-players"
LEVELS_KEY = "review-adventures-levels"


def default_store_dir() -> Path:
    override = os.environ.get("REPASO_HOME")
    if override:
        return Path(override).expanduser()
    return Path.home() / ".repaso"


class JsonKeyValueStore:
    """One JSON document per key, stored as ``<base_dir>/<key>.json``."""

    def __init__(self, base_dir: Optional[Path] = None) -> None:
        self._base_dir = base_dir or default_store_dir()

    @property
    def base_dir(self) -> Path:
        return self._base_dir

    def path_for(self, key: str) -> Path:
        return self._base_dir / f"{key}.json"

    def read(self, key: str) -> Optional[Any]:
        """Return the stored document, or None if nothing is stored under *key*.

        Raises OSError / json.JSONDecodeError on unreadable data.
        """
        path = self.path_for(key)
        if not path.exists():
            return None
        return json.loads(path.read_text(encoding="utf-8"))

    def write(self, key: str, value: Any) -> None:
        self._base_dir.mkdir(parents=True, exist_ok=True)
        self.path_for(key).write_text(json.dumps(value, indent=2, ensure_ascii=False), encoding="utf-8")


def merge_levels(canonical: Sequence[MissionLevel], stored: Any) -> List[MissionLevel]:
    """Canonical levels with cached summaries carried over from *stored* by id.

    Stored entries whose id no longer exists are dropped.
    """
    summaries: Dict[str, str] = {}
    if isinstance(stored, list):
        for entry in stored:
            if not isinstance(entry, dict):
                continue
            summary = entry.get("summary")
            if isinstance(entry.get("id"), str) and isinstance(summary, str) and summary:
                summaries[entry["id"]] = summary
    merged = []
    for level in canonical:
        if level.id in summaries:
            level = replace(level, summary=summaries[level.id])
        merged.append(level)
    return merged


class PersistentStore:
    """Loads and saves players and levels. Never raises on I/O problems.

    Read errors fall back to the canonical catalog; write errors are logged and
    the in-memory state stays authoritative.
    """

    def __init__(self, catalog: Catalog, kv: Optional[JsonKeyValueStore] = None) -> None:
        self._catalog = catalog
        self._kv = kv or JsonKeyValueStore()

    def load(self) -> Tuple[List[Player], List[MissionLevel]]:
        return self.load_players(), self.load_levels()

    def load_players(self) -> List[Player]:
        try:
            raw = self._kv.read(PLAYERS_KEY)
        except (json.JSONDecodeError, OSError) as e:
            logger.warning("Could not load players from %s: %s", self._kv.path_for(PLAYERS_KEY), e)
            raw = None
        if not raw or not isinstance(raw, list):
            return list(self._catalog.initial_players)

        players: List[Player] = []
        for entry in raw:
            try:
                players.append(Player.from_dict(entry))
            except (AttributeError, TypeError, ValueError) as e:
                logger.warning("Skipping malformed player record %r: %s", entry, e)
        return players or list(self._catalog.initial_players)

    def load_levels(self) -> List[MissionLevel]:
        try:
            raw = self._kv.read(LEVELS_KEY)
        except (json.JSONDecodeError, OSError) as e:
            logger.warning("Could not load levels from %s: %s", self._kv.path_for(LEVELS_KEY), e)
            raw = None
        return merge_levels(self._catalog.levels, raw)

    def save_players(self, players: Sequence[Player]) -> None:
        self._write(PLAYERS_KEY, [p.to_dict() for p in players])

    def save_levels(self, levels: Sequence[MissionLevel]) -> None:
        self._write(LEVELS_KEY, [lvl.to_dict() for lvl in levels])

    def _write(self, key: str, payload: Any) -> None:
        try:
            self._kv.write(key, payload)
        except (OSError, TypeError, ValueError) as e:
            logger.warning("Could not save %s to %s: %s", key, self._kv.path_for(key), e)
