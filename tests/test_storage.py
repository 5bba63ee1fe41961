"""Tests for repaso.core.storage – JSON persistence of players and levels."""

from __future__ import annotations

import json
from dataclasses import replace
from pathlib import Path

import pytest

from repaso.core.catalog import Catalog
from repaso.core.models import Player
from repaso.core.storage import (
    LEVELS_KEY,
    PLAYERS_KEY,
    JsonKeyValueStore,
    PersistentStore,
    default_store_dir,
    merge_levels,
)


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture(scope="module")
def catalog() -> Catalog:
    return Catalog.load()


@pytest.fixture()
def kv(tmp_path: Path) -> JsonKeyValueStore:
    """Key-value store in a temp dir so tests don't touch ~/.repaso."""
    return JsonKeyValueStore(tmp_path / "store")


@pytest.fixture()
def store(catalog: Catalog, kv: JsonKeyValueStore) -> PersistentStore:
    return PersistentStore(catalog, kv)


# ---------------------------------------------------------------------------
# JsonKeyValueStore
# ---------------------------------------------------------------------------

class TestJsonKeyValueStore:
    def test_missing_key_reads_none(self, kv: JsonKeyValueStore):
        assert kv.read("nothing") is None

    def test_write_then_read(self, kv: JsonKeyValueStore):
        kv.write("k", {"name": "Lucía"})
        assert kv.read("k") == {"name": "Lucía"}
        assert "Lucía" in kv.path_for("k").read_text(encoding="utf-8")

    def test_corrupt_file_raises(self, kv: JsonKeyValueStore):
        kv.base_dir.mkdir(parents=True)
        kv.path_for("k").write_text("{not json", encoding="utf-8")
        with pytest.raises(json.JSONDecodeError):
            kv.read("k")

    def test_default_dir_env_override(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("REPASO_HOME", str(tmp_path / "custom"))
        assert default_store_dir() == tmp_path / "custom"

    def test_default_dir_home(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.delenv("REPASO_HOME", raising=False)
        assert default_store_dir() == Path.home() / ".repaso"


# ---------------------------------------------------------------------------
# merge_levels
# ---------------------------------------------------------------------------

class TestMergeLevels:
    def test_no_stored_data(self, catalog: Catalog):
        assert merge_levels(catalog.levels, None) == list(catalog.levels)

    def test_summary_carried_over(self, catalog: Catalog):
        stored = [{"id": "math_1", "name": "Old name", "summary": "Resumen"}]
        merged = merge_levels(catalog.levels, stored)
        math_1 = next(lvl for lvl in merged if lvl.id == "math_1")
        assert math_1.summary == "Resumen"
        assert math_1.name == catalog.level("math_1").name

    def test_unknown_ids_dropped(self, catalog: Catalog):
        stored = [{"id": "retired_level", "summary": "x"}]
        merged = merge_levels(catalog.levels, stored)
        assert [lvl.id for lvl in merged] == [lvl.id for lvl in catalog.levels]
        assert all(lvl.summary is None for lvl in merged)

    def test_garbage_entries_ignored(self, catalog: Catalog):
        merged = merge_levels(catalog.levels, ["x", 3, {"id": 5, "summary": "y"}])
        assert all(lvl.summary is None for lvl in merged)


# ---------------------------------------------------------------------------
# PersistentStore
# ---------------------------------------------------------------------------

class TestPersistentStore:
    def test_fresh_store_uses_initial_players(self, store: PersistentStore, catalog: Catalog):
        players, levels = store.load()
        assert players == list(catalog.initial_players)
        assert levels == list(catalog.levels)

    def test_players_round_trip(self, store: PersistentStore):
        players = [Player(name="Lucía", level=3, xp=20, coins=7, mission_history={"math_1": 3})]
        store.save_players(players)
        assert store.load_players() == players

    def test_levels_round_trip_keeps_summary(self, store: PersistentStore, catalog: Catalog):
        levels = [replace(lvl, summary="Hola") if lvl.id == "history_1" else lvl for lvl in catalog.levels]
        store.save_levels(levels)
        assert store.load_levels() == levels

    def test_corrupt_players_fall_back(self, store: PersistentStore, kv: JsonKeyValueStore, catalog: Catalog):
        kv.base_dir.mkdir(parents=True)
        kv.path_for(PLAYERS_KEY).write_text("[{broken", encoding="utf-8")
        assert store.load_players() == list(catalog.initial_players)

    def test_corrupt_levels_fall_back(self, store: PersistentStore, kv: JsonKeyValueStore, catalog: Catalog):
        kv.base_dir.mkdir(parents=True)
        kv.path_for(LEVELS_KEY).write_text("nope", encoding="utf-8")
        assert store.load_levels() == list(catalog.levels)

    def test_malformed_player_skipped(self, store: PersistentStore, kv: JsonKeyValueStore):
        kv.write(PLAYERS_KEY, [{"name": "Mateo", "coins": 5}, {"avatar": "no name"}, "junk"])
        players = store.load_players()
        assert [p.name for p in players] == ["Mateo"]

    def test_all_malformed_falls_back(self, store: PersistentStore, kv: JsonKeyValueStore, catalog: Catalog):
        kv.write(PLAYERS_KEY, [{"avatar": "no name"}])
        assert store.load_players() == list(catalog.initial_players)

    def test_write_failure_is_logged_not_raised(self, catalog: Catalog, tmp_path: Path):
        blocker = tmp_path / "file"
        blocker.write_text("", encoding="utf-8")
        store = PersistentStore(catalog, JsonKeyValueStore(blocker))
        store.save_players(list(catalog.initial_players))
