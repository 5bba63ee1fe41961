"""Data models used by the UI."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence

from repaso.core.models import MissionLevel, Player, Subject


@dataclass
class LevelState:
    """UI state for a single map node: unlock status, best stars, and selection."""

    level: MissionLevel
    unlocked: bool
    stars: int
    is_current: bool = False

    @property
    def completed(self) -> bool:
        return self.stars > 0


def build_level_states(
    player: Player,
    levels: Sequence[MissionLevel],
    subject: Subject,
) -> List[LevelState]:
    """Compute map nodes for *subject* and mark the first playable, uncompleted one."""
    states = [
        LevelState(
            level=level,
            unlocked=player.level >= level.required_level,
            stars=player.stars_for(level.id),
        )
        for level in levels
        if level.subject == subject
    ]
    for st in states:
        if st.unlocked and not st.completed:
            st.is_current = True
            break
    return states


def levels_by_subject(levels: Sequence[MissionLevel]) -> Dict[Subject, List[MissionLevel]]:
    grouped: Dict[Subject, List[MissionLevel]] = {}
    for level in levels:
        grouped.setdefault(level.subject, []).append(level)
    return grouped


def answer_feedback(index: int, selected: Optional[int], correct_index: int) -> str:
    """How to draw option *index*: 'neutral' before answering, then 'correct', 'wrong' or 'dimmed'."""
    if selected is None:
        return "neutral"
    if index == correct_index:
        return "correct"
    if index == selected:
        return "wrong"
    return "dimmed"


def arcade_message(correct_taps: int, total_taps: int) -> str:
    accuracy = correct_taps / total_taps * 100 if total_taps else 100.0
    if accuracy > 90:
        return "¡Excelente! Dominas la tabla del 5"
    if accuracy >= 80:
        return "¡Muy bien!"
    return "¡Casi! Practica un poco más"
