"""Small reusable widgets: map nodes, XP bar, star labels, answer buttons."""

from __future__ import annotations

from typing import Callable, Optional

from PySide6.QtCore import Qt
from PySide6.QtGui import QColor
from PySide6.QtWidgets import (
    QGraphicsDropShadowEffect,
    QHBoxLayout,
    QLabel,
    QProgressBar,
    QPushButton,
    QVBoxLayout,
    QWidget,
)

from repaso.core.models import XP_PER_LEVEL, Player
from repaso.ui.colors import GameColors, blend_hex, subject_color
from repaso.ui.models import LevelState


def stars_text(stars: int) -> str:
    stars = max(0, min(3, stars))
    return "★" * stars + "☆" * (3 - stars)


def add_shadow(widget: QWidget, blur: int = 22, dy: int = 8) -> None:
    shadow = QGraphicsDropShadowEffect(widget)
    shadow.setBlurRadius(blur)
    shadow.setOffset(0, dy)
    shadow.setColor(QColor(15, 23, 42, 70))
    widget.setGraphicsEffect(shadow)


def primary_button(text: str, color: str = GameColors.PRIMARY) -> QPushButton:
    button = QPushButton(text)
    button.setCursor(Qt.PointingHandCursor)
    button.setMinimumHeight(48)
    button.setStyleSheet(
        f"""
        QPushButton {{
            background: {color};
            color: white;
            border: none;
            border-bottom: 4px solid {blend_hex(color, "#000000", 0.3)};
            border-radius: 14px;
            padding: 8px 20px;
            font-size: 18px;
            font-weight: 700;
        }}
        QPushButton:hover {{ background: {blend_hex(color, "#ffffff", 0.15)}; }}
        QPushButton:disabled {{ background: {GameColors.LOCKED}; border-bottom-color: #6b7280; }}
        """
    )
    return button


class XpBar(QWidget):
    """Level badge plus XP progress bar toward the next level."""

    def __init__(self, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self._level_label = QLabel("")
        self._level_label.setStyleSheet(f"font-weight: 800; font-size: 16px; color: {GameColors.PRIMARY_DARK};")
        self._bar = QProgressBar()
        self._bar.setRange(0, XP_PER_LEVEL)
        self._bar.setTextVisible(True)
        self._bar.setFixedHeight(22)
        self._bar.setStyleSheet(
            f"""
            QProgressBar {{
                background: #e5e7eb;
                border-radius: 11px;
                text-align: center;
                font-weight: 700;
                color: {GameColors.TEXT_PRIMARY};
            }}
            QProgressBar::chunk {{ background: {GameColors.GOLD}; border-radius: 11px; }}
            """
        )
        layout = QHBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)
        layout.addWidget(self._level_label)
        layout.addWidget(self._bar, 1)

    def set_player(self, player: Player) -> None:
        self._level_label.setText(f"LVL {player.level}")
        self._bar.setValue(player.xp)
        self._bar.setFormat(f"XP: {player.xp} / {XP_PER_LEVEL}")


class LevelNode(QWidget):
    """A round map node: lock when locked, check when completed, subject icon otherwise."""

    def __init__(self, state: LevelState, on_click: Callable[[str], None], parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self._level_id = state.level.id
        self._on_click = on_click

        if state.completed:
            color, icon = GameColors.NODE_COMPLETED, "✔"
        elif state.unlocked:
            color, icon = subject_color(state.level.subject.value), str(state.level.level_number)
        else:
            color, icon = GameColors.LOCKED, "🔒"

        self._button = QPushButton(icon)
        self._button.setFixedSize(84, 84)
        self._button.setEnabled(state.unlocked)
        self._button.setCursor(Qt.PointingHandCursor if state.unlocked else Qt.ForbiddenCursor)
        ring = GameColors.PRIMARY if state.is_current else "white"
        self._button.setStyleSheet(
            f"""
            QPushButton {{
                background: {color};
                color: white;
                border: 5px solid {ring};
                border-radius: 42px;
                font-size: 26px;
                font-weight: 900;
            }}
            QPushButton:hover {{ background: {blend_hex(color, "#ffffff", 0.2)}; }}
            QPushButton:disabled {{ background: {GameColors.LOCKED}; color: #f3f4f6; }}
            """
        )
        self._button.clicked.connect(lambda _=False: self._on_click(self._level_id))
        add_shadow(self._button, blur=18, dy=6)

        name = QLabel(state.level.name)
        name.setAlignment(Qt.AlignCenter)
        name.setStyleSheet(f"font-weight: 700; color: {GameColors.TEXT_PRIMARY};")
        stars = QLabel(stars_text(state.stars) if state.completed else "")
        stars.setAlignment(Qt.AlignCenter)
        stars.setStyleSheet(f"color: {GameColors.AMBER}; font-size: 16px;")

        layout = QVBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)
        layout.setSpacing(4)
        layout.addWidget(self._button, 0, Qt.AlignHCenter)
        layout.addWidget(name)
        layout.addWidget(stars)


class AnswerButton(QPushButton):
    """Quiz option that recolors itself once the question is answered."""

    NEUTRAL = GameColors.PRIMARY_LIGHT

    def __init__(self, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self.setMinimumHeight(64)
        self.setCursor(Qt.PointingHandCursor)
        self.show_state(self.NEUTRAL)

    def show_state(self, color: str, dimmed: bool = False) -> None:
        opacity = "0.7" if dimmed else "1"
        self.setStyleSheet(
            f"""
            QPushButton {{
                background: {color};
                color: white;
                border: none;
                border-bottom: 4px solid {blend_hex(color, "#000000", 0.3)};
                border-radius: 16px;
                font-size: 22px;
                font-weight: 800;
            }}
            QPushButton:disabled {{ color: rgba(255, 255, 255, {opacity}); }}
            """
        )
