"""Game state snapshot and the mission lifecycle.

The module has two layers:

  * **Transitions** – pure functions ``(GameState, ...) -> GameState``. Invalid
    operations return the snapshot unchanged.
  * **GameController** – holds the current snapshot, persists players and
    levels whenever a transition replaced them, and hands summary requests to
    the UI, which runs them off the GUI thread.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Optional, Set, Tuple

from repaso.core import ledger, shop
from repaso.core.catalog import Catalog
from repaso.core.models import (
    MissionLevel,
    MissionReward,
    Player,
    Screen,
    ShopItem,
    Subject,
)
from repaso.core.rewards import combine_phases
from repaso.core.storage import PersistentStore

logger = logging.getLogger(__name__)

SUMMARY_EMPTY_FALLBACK = "¡Prepárate para el desafío! Demuestra lo que sabes."
SUMMARY_ERROR_FALLBACK = "No se pudo cargar el resumen. ¡Mucha suerte en la misión!"

NEUTRAL_PART1 = MissionReward(stars=0, xp=0, coins=0, is_perfect=False)

NAVIGABLE_SCREENS = frozenset({Screen.HOME, Screen.MAP, Screen.PROFILE, Screen.SHOP})


@dataclass(frozen=True)
class GameState:
    screen: Screen = Screen.HOME
    players: Tuple[Player, ...] = ()
    current_player_index: int = -1
    levels: Tuple[MissionLevel, ...] = ()
    current_level_id: Optional[str] = None
    current_subject: Optional[Subject] = None
    mission_part1_result: Optional[MissionReward] = None

    @property
    def current_player(self) -> Optional[Player]:
        if 0 <= self.current_player_index < len(self.players):
            return self.players[self.current_player_index]
        return None

    @property
    def current_level(self) -> Optional[MissionLevel]:
        if self.current_level_id is None:
            return None
        return self.level(self.current_level_id)

    def level(self, level_id: str) -> Optional[MissionLevel]:
        return next((lvl for lvl in self.levels if lvl.id == level_id), None)

    def subject_levels(self) -> Tuple[MissionLevel, ...]:
        return tuple(lvl for lvl in self.levels if lvl.subject == self.current_subject)

    def with_current_player(self, player: Player) -> "GameState":
        players = list(self.players)
        players[self.current_player_index] = player
        return replace(self, players=tuple(players))


@dataclass(frozen=True)
class SummaryRequest:
    level_id: str
    topic: str
    subject: Subject


def is_unlocked(player: Player, level: MissionLevel) -> bool:
    return player.level >= level.required_level


# ---------------------------------------------------------------------------
# Transitions
# ---------------------------------------------------------------------------

def select_player(state: GameState, index: int) -> GameState:
    if not 0 <= index < len(state.players):
        logger.info("No player at index %d", index)
        return state
    return replace(state, current_player_index=index, screen=Screen.HOME)


def switch_player(state: GameState) -> GameState:
    return replace(
        state,
        current_player_index=-1,
        screen=Screen.HOME,
        current_subject=None,
        current_level_id=None,
        mission_part1_result=None,
    )


def select_subject(state: GameState, subject: Subject) -> GameState:
    if state.current_player is None:
        return state
    return replace(state, current_subject=subject, screen=Screen.MAP)


def set_screen(state: GameState, screen: Screen) -> GameState:
    """Free navigation between the hub screens. Leaving a mission abandons it."""
    if state.current_player is None:
        return state
    if screen not in NAVIGABLE_SCREENS:
        logger.info("Screen %s can only be reached through the mission flow", screen.value)
        return state
    if screen is Screen.MAP and state.current_subject is None:
        logger.info("Map requested without a subject; staying on %s", state.screen.value)
        return state
    return replace(state, screen=screen, current_level_id=None, mission_part1_result=None)


def start_mission(state: GameState, level_id: str) -> GameState:
    """Open the summary of *level_id* if the current player has unlocked it."""
    player = state.current_player
    level = state.level(level_id)
    if player is None or level is None:
        logger.info("Level %s not found or no player selected", level_id)
        return state
    if not is_unlocked(player, level):
        logger.info("Level %s is locked for %s (level %d < %d)", level_id, player.name, player.level, level.required_level)
        return state
    return replace(state, screen=Screen.SUMMARY, current_level_id=level_id)


def proceed_to_mission(state: GameState) -> GameState:
    level = state.current_level
    if state.screen is not Screen.SUMMARY or level is None:
        return state
    screen = Screen.MISSION if level.questions else Screen.GENERATED_MISSION
    return replace(state, screen=screen, mission_part1_result=None)


def stash_part1_result(state: GameState, reward: MissionReward) -> GameState:
    """Carry the quiz result over to the arcade phase."""
    level = state.current_level
    if level is None or not level.has_bubble_game:
        return state
    return replace(state, mission_part1_result=reward, screen=Screen.ARCADE)


def complete_mission(state: GameState, level_id: str, reward: MissionReward) -> GameState:
    level = state.level(level_id)
    player = state.current_player
    if level is None or player is None:
        logger.info("Cannot complete mission %s: level or player missing", level_id)
        return state
    updated = ledger.apply_reward(player, level, reward.stars, reward.xp, reward.coins, reward.is_perfect)
    logger.info(
        "%s completed %s: %d stars, +%d xp, +%d coins%s",
        player.name, level_id, reward.stars, reward.xp, reward.coins, " (perfect)" if reward.is_perfect else "",
    )
    return replace(
        state.with_current_player(updated),
        screen=Screen.MAP,
        current_level_id=None,
        mission_part1_result=None,
    )


def complete_arcade(state: GameState, arcade: MissionReward) -> GameState:
    if state.current_level_id is None:
        return state
    part1 = state.mission_part1_result or NEUTRAL_PART1
    return complete_mission(state, state.current_level_id, combine_phases(part1, arcade))


def buy_item(state: GameState, item: ShopItem) -> GameState:
    player = state.current_player
    if player is None:
        return state
    updated = shop.buy(player, item)
    return state if updated is player else state.with_current_player(updated)


def equip_item(state: GameState, item: ShopItem) -> GameState:
    player = state.current_player
    if player is None:
        return state
    updated = shop.equip(player, item)
    return state if updated is player else state.with_current_player(updated)


def apply_summary(state: GameState, level_id: str, summary: str) -> GameState:
    """Cache *summary* on the level with *level_id*, unless it is gone or already cached."""
    level = state.level(level_id)
    if level is None or level.summary:
        return state
    levels = tuple(replace(lvl, summary=summary) if lvl.id == level_id else lvl for lvl in state.levels)
    return replace(state, levels=levels)


# ---------------------------------------------------------------------------
# Controller
# ---------------------------------------------------------------------------

class GameController:
    """Owns the session snapshot; every UI action goes through here."""

    def __init__(self, catalog: Catalog, store: PersistentStore) -> None:
        self._catalog = catalog
        self._store = store
        players, levels = store.load()
        self._state = GameState(players=tuple(players), levels=tuple(levels))
        self._pending_summaries: Set[str] = set()

    @property
    def state(self) -> GameState:
        return self._state

    @property
    def catalog(self) -> Catalog:
        return self._catalog

    def is_summary_loading(self, level_id: str) -> bool:
        return level_id in self._pending_summaries

    def select_player(self, index: int) -> None:
        self._commit(select_player(self._state, index))

    def switch_player(self) -> None:
        self._commit(switch_player(self._state))

    def select_subject(self, subject: Subject) -> None:
        self._commit(select_subject(self._state, subject))

    def set_screen(self, screen: Screen) -> None:
        self._commit(set_screen(self._state, screen))

    def start_mission(self, level_id: str) -> Optional[SummaryRequest]:
        """Open the level summary; returns a request if its summary must be generated."""
        self._commit(start_mission(self._state, level_id))
        level = self._state.current_level
        if self._state.screen is not Screen.SUMMARY or level is None or level.id != level_id:
            return None
        if level.summary or level.id in self._pending_summaries:
            return None
        self._pending_summaries.add(level.id)
        return SummaryRequest(level_id=level.id, topic=level.name, subject=level.subject)

    def resolve_summary(self, request: SummaryRequest, summary: Optional[str], failed: bool = False) -> None:
        """Apply a finished summary request, substituting the fallback text on failure."""
        self._pending_summaries.discard(request.level_id)
        if failed:
            text = SUMMARY_ERROR_FALLBACK
        else:
            text = summary.strip() if summary and summary.strip() else SUMMARY_EMPTY_FALLBACK
        self._commit(apply_summary(self._state, request.level_id, text))

    def proceed_to_mission(self) -> None:
        self._commit(proceed_to_mission(self._state))

    def finish_quiz(self, reward: MissionReward) -> None:
        """End the quiz phase: on to the arcade if the level has one, else credit the reward."""
        level = self._state.current_level
        if level is None or self._state.screen is not Screen.MISSION:
            return
        if level.has_bubble_game:
            self._commit(stash_part1_result(self._state, reward))
        else:
            self._commit(complete_mission(self._state, level.id, reward))

    def finish_arcade(self, reward: MissionReward) -> None:
        if self._state.screen is not Screen.ARCADE:
            return
        self._commit(complete_arcade(self._state, reward))

    def finish_practice(self, reward: MissionReward) -> None:
        level = self._state.current_level
        if level is None or self._state.screen is not Screen.GENERATED_MISSION:
            return
        self._commit(complete_mission(self._state, level.id, reward))

    def buy_item(self, item_id: str) -> None:
        item = self._catalog.shop_item(item_id)
        if item is None:
            logger.info("Unknown shop item %s", item_id)
            return
        self._commit(buy_item(self._state, item))

    def equip_item(self, item_id: str) -> None:
        item = self._catalog.shop_item(item_id)
        if item is None:
            logger.info("Unknown shop item %s", item_id)
            return
        self._commit(equip_item(self._state, item))

    def _commit(self, new_state: GameState) -> None:
        old = self._state
        self._state = new_state
        if new_state.players is not old.players:
            self._store.save_players(new_state.players)
        if new_state.levels is not old.levels:
            self._store.save_levels(new_state.levels)
