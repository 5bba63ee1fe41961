"""Reward formulas for quiz, arcade and practice phases.

All functions are pure. Star thresholds are shared by every phase:

  * **3 stars** – accuracy of at least 80%.
  * **2 stars** – accuracy above 50%.
  * **1 star** – anything else.
"""

from __future__ import annotations

from repaso.core.models import MissionReward

XP_PER_CORRECT_ANSWER = 10
COINS_PER_CORRECT_ANSWER = 5
PERFECT_BONUS_XP = 20

XP_PER_CORRECT_TAP = 10
XP_PER_WRONG_TAP = -5
ARCADE_COIN_BONUS = 10
ARCADE_COIN_BONUS_ACCURACY = 0.8


def star_rating(accuracy: float) -> int:
    if accuracy >= 0.8:
        return 3
    if accuracy > 0.5:
        return 2
    return 1


def quiz_reward(correct_count: int, total_questions: int) -> MissionReward:
    """Reward for a fixed-question quiz phase."""
    if total_questions <= 0:
        raise ValueError("a quiz needs at least one question")
    if not 0 <= correct_count <= total_questions:
        raise ValueError(f"correct_count {correct_count} outside 0..{total_questions}")
    is_perfect = correct_count == total_questions
    xp = correct_count * XP_PER_CORRECT_ANSWER
    if is_perfect:
        xp += PERFECT_BONUS_XP
    return MissionReward(
        stars=star_rating(correct_count / total_questions),
        xp=xp,
        coins=correct_count * COINS_PER_CORRECT_ANSWER,
        is_perfect=is_perfect,
    )


def practice_reward(correct_count: int, rounds: int) -> MissionReward:
    """Reward for a generated ("infinite practice") mission of *rounds* questions."""
    return quiz_reward(correct_count, rounds)


def arcade_reward(correct_taps: int, total_taps: int) -> MissionReward:
    """Reward for the bubble arcade phase.

    Each correct tap is worth +10 XP and each wrong tap -5 XP; the phase total
    is floored at 0 before bonuses. Bonuses need at least one tap.
    """
    if not 0 <= correct_taps <= total_taps:
        raise ValueError(f"correct_taps {correct_taps} outside 0..{total_taps}")
    wrong_taps = total_taps - correct_taps
    accuracy = correct_taps / total_taps if total_taps > 0 else 0.0
    is_perfect = total_taps > 0 and correct_taps == total_taps

    xp = max(0, correct_taps * XP_PER_CORRECT_TAP + wrong_taps * XP_PER_WRONG_TAP)
    if is_perfect:
        xp += PERFECT_BONUS_XP
    coins = ARCADE_COIN_BONUS if total_taps > 0 and accuracy >= ARCADE_COIN_BONUS_ACCURACY else 0
    return MissionReward(stars=star_rating(accuracy), xp=xp, coins=coins, is_perfect=is_perfect)


def combine_phases(quiz: MissionReward, arcade: MissionReward) -> MissionReward:
    """Final reward of a two-phase mission. The arcade phase decides the stars."""
    return MissionReward(
        stars=arcade.stars,
        xp=quiz.xp + arcade.xp,
        coins=quiz.coins + arcade.coins,
        is_perfect=quiz.is_perfect and arcade.is_perfect,
    )
