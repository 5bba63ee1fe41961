from __future__ import annotations

import logging
from dataclasses import replace

from repaso.core.models import XP_PER_LEVEL, MissionLevel, Player

logger = logging.getLogger(__name__)

BOSS_LEVEL_ID = "boss_mission_1"
BOSS_ACHIEVEMENT_ID = "basic_tables_master"


def apply_reward(
    player: Player,
    level: MissionLevel,
    stars: int,
    xp_earned: int,
    coins_earned: int,
    is_perfect: bool,
) -> Player:
    """Return *player* with a completed mission of *level* credited.

    The best star rating per level is kept, a perfect clear of the level that
    currently gates the player grants one level up front, and XP overflow is
    converted into levels until ``0 <= xp < XP_PER_LEVEL``.
    """
    if xp_earned < 0 or coins_earned < 0:
        raise ValueError("rewards cannot be negative")

    history = dict(player.mission_history)
    history[level.id] = max(history.get(level.id, 0), stars)

    achievements = player.achievements
    if level.id == BOSS_LEVEL_ID and stars >= 3 and BOSS_ACHIEVEMENT_ID not in achievements:
        achievements = achievements | {BOSS_ACHIEVEMENT_ID}
        logger.info("%s unlocked achievement %s", player.name, BOSS_ACHIEVEMENT_ID)

    new_level = player.level
    if is_perfect and player.level == level.required_level:
        new_level += 1

    xp = player.xp + xp_earned
    while xp >= XP_PER_LEVEL:
        new_level += 1
        xp -= XP_PER_LEVEL

    if new_level != player.level:
        logger.info("%s levelled up: %d -> %d", player.name, player.level, new_level)

    return replace(
        player,
        level=new_level,
        xp=xp,
        coins=player.coins + coins_earned,
        achievements=achievements,
        mission_history=history,
    )


def xp_progress(player: Player) -> float:
    """Fraction (0..1) of the way to the next level."""
    return max(0.0, min(1.0, player.xp / XP_PER_LEVEL))
