"""One widget per game screen. Screens only render and emit signals; the window decides."""

from __future__ import annotations

from typing import List, Optional

from PySide6.QtCore import Qt, Signal
from PySide6.QtWidgets import (
    QFrame,
    QGridLayout,
    QHBoxLayout,
    QLabel,
    QPushButton,
    QScrollArea,
    QTabBar,
    QVBoxLayout,
    QWidget,
)

from repaso.core.arcade import BubbleGame
from repaso.core.catalog import Catalog
from repaso.core.controller import GameState
from repaso.core.models import ItemCategory, MissionLevel, Player, Question, Subject
from repaso.core.quiz import PracticeSession, QuizSession, RoundStatus
from repaso.core.shop import can_buy, is_equipped
from repaso.ui.colors import GameColors, timer_color
from repaso.ui.models import LevelState, answer_feedback, arcade_message, levels_by_subject
from repaso.ui.widgets import AnswerButton, LevelNode, XpBar, add_shadow, primary_button, stars_text

_FEEDBACK_COLORS = {
    "neutral": AnswerButton.NEUTRAL,
    "correct": GameColors.GREEN,
    "wrong": GameColors.RED,
    "dimmed": GameColors.LOCKED,
}

SUBJECT_NAMES = {Subject.MATH: "Matemáticas", Subject.HISTORY: "Historia"}


def _title(text: str, size: int = 28) -> QLabel:
    label = QLabel(text)
    label.setAlignment(Qt.AlignCenter)
    label.setWordWrap(True)
    label.setStyleSheet(f"font-size: {size}px; font-weight: 900; color: {GameColors.PRIMARY_DARK};")
    return label


def _clear(layout) -> None:
    while layout.count():
        item = layout.takeAt(0)
        w = item.widget()
        if w is not None:
            w.setParent(None)
            w.deleteLater()


class _Header(QWidget):
    """Back button, title and the coin counter."""

    back = Signal()

    def __init__(self, title: str, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        back = QPushButton("←")
        back.setFixedSize(44, 44)
        back.setCursor(Qt.PointingHandCursor)
        back.setStyleSheet("QPushButton { background: white; border-radius: 22px; font-size: 22px; }")
        back.clicked.connect(self.back.emit)
        self._title = _title(title, 24)
        self._coins = QLabel("")
        self._coins.setStyleSheet(f"font-size: 18px; font-weight: 800; color: {GameColors.AMBER};")
        layout = QHBoxLayout(self)
        layout.addWidget(back)
        layout.addWidget(self._title, 1)
        layout.addWidget(self._coins)

    def set_title(self, text: str) -> None:
        self._title.setText(text)

    def set_coins(self, coins: int) -> None:
        self._coins.setText(f"🪙 {coins}")


class PlayerSelectScreen(QWidget):
    player_chosen = Signal(int)

    def __init__(self, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self._buttons = QVBoxLayout()
        layout = QVBoxLayout(self)
        layout.addStretch(1)
        layout.addWidget(_title("¿Quién va a jugar?", 34))
        layout.addLayout(self._buttons)
        layout.addStretch(1)

    def refresh(self, state: GameState) -> None:
        _clear(self._buttons)
        for index, player in enumerate(state.players):
            button = primary_button(f"{player.avatar}  {player.name}   ·   LVL {player.level}")
            button.clicked.connect(lambda _=False, i=index: self.player_chosen.emit(i))
            self._buttons.addWidget(button)


class HomeScreen(QWidget):
    subject_chosen = Signal(object)
    profile_requested = Signal()
    shop_requested = Signal()

    def __init__(self, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self._player_label = _title("", 22)
        self._xp = XpBar()
        self._coins = QLabel("")
        self._coins.setAlignment(Qt.AlignCenter)
        self._coins.setStyleSheet(f"font-size: 18px; font-weight: 800; color: {GameColors.AMBER};")

        subjects = QGridLayout()
        math = primary_button("Matemáticas", GameColors.NODE_MATH)
        math.clicked.connect(lambda _=False: self.subject_chosen.emit(Subject.MATH))
        history = primary_button("Historia", GameColors.NODE_HISTORY)
        history.clicked.connect(lambda _=False: self.subject_chosen.emit(Subject.HISTORY))
        english = primary_button("Inglés")
        english.setEnabled(False)
        french = primary_button("Francés")
        french.setEnabled(False)
        subjects.addWidget(math, 0, 0)
        subjects.addWidget(english, 0, 1)
        subjects.addWidget(french, 1, 0)
        subjects.addWidget(history, 1, 1)

        nav = QHBoxLayout()
        profile = primary_button("Perfil", GameColors.PRIMARY_DARK)
        profile.clicked.connect(self.profile_requested.emit)
        shop = primary_button("Tienda", GameColors.GREEN)
        shop.clicked.connect(self.shop_requested.emit)
        nav.addWidget(profile)
        nav.addWidget(shop)

        layout = QVBoxLayout(self)
        layout.addWidget(_title("Aventuras de Repaso", 36))
        layout.addStretch(1)
        layout.addLayout(subjects)
        layout.addStretch(1)
        layout.addWidget(self._player_label)
        layout.addWidget(self._xp)
        layout.addWidget(self._coins)
        layout.addLayout(nav)

    def refresh(self, player: Player) -> None:
        self._player_label.setText(f"{player.avatar} {player.name}")
        self._xp.set_player(player)
        self._coins.setText(f"🪙 {player.coins}")


class MapScreen(QWidget):
    level_clicked = Signal(str)
    back = Signal()

    def __init__(self, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self.header = _Header("Mapa")
        self.header.back.connect(self.back.emit)
        self._nodes = QVBoxLayout()
        self._nodes.setSpacing(18)
        container = QWidget()
        container.setLayout(self._nodes)
        self._scroll = QScrollArea()
        self._scroll.setWidgetResizable(True)
        self._scroll.setFrameShape(QFrame.NoFrame)
        self._scroll.setWidget(container)
        layout = QVBoxLayout(self)
        layout.addWidget(self.header)
        layout.addWidget(self._scroll, 1)

    def refresh(self, player: Player, subject: Subject, states: List[LevelState]) -> None:
        self.header.set_title(SUBJECT_NAMES.get(subject, subject.value))
        self.header.set_coins(player.coins)
        _clear(self._nodes)
        # First level at the bottom of the path.
        for index, st in enumerate(reversed(states)):
            row = QHBoxLayout()
            offset = (len(states) - index) % 3
            row.addStretch(1 + offset)
            row.addWidget(LevelNode(st, self.level_clicked.emit))
            row.addStretch(3 - offset)
            holder = QWidget()
            holder.setLayout(row)
            self._nodes.addWidget(holder)
        bar = self._scroll.verticalScrollBar()
        bar.setValue(bar.maximum())


class SummaryScreen(QWidget):
    proceed = Signal()
    back = Signal()

    def __init__(self, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self.header = _Header("")
        self.header.back.connect(self.back.emit)
        self._summary = QLabel("")
        self._summary.setWordWrap(True)
        self._summary.setAlignment(Qt.AlignCenter)
        self._summary.setStyleSheet(
            f"background: {GameColors.CARD_BG}; border-radius: 20px; padding: 24px; "
            f"font-size: 20px; color: {GameColors.TEXT_PRIMARY};"
        )
        add_shadow(self._summary)
        go = primary_button("¡Empezar misión!", GameColors.GREEN)
        go.clicked.connect(self.proceed.emit)
        layout = QVBoxLayout(self)
        layout.addWidget(self.header)
        layout.addStretch(1)
        layout.addWidget(self._summary)
        layout.addStretch(1)
        layout.addWidget(go)

    def refresh(self, level: Optional[MissionLevel], loading: bool) -> None:
        if level is None:
            self.header.set_title("Nivel no encontrado")
            self._summary.setText("")
            return
        self.header.set_title(level.name)
        if level.summary:
            self._summary.setText(level.summary)
        elif loading:
            self._summary.setText("Cargando resumen… ⏳")
        else:
            self._summary.setText("")


class _QuestionScreen(QWidget):
    """Shared layout for fixed and generated missions."""

    answered = Signal(int)
    next_requested = Signal()

    def __init__(self, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self._progress = QLabel("")
        self._progress.setStyleSheet(f"font-size: 16px; color: {GameColors.TEXT_SECONDARY};")
        self._timer = QLabel("")
        self._timer.setAlignment(Qt.AlignRight)
        self._question = _title("", 30)
        self._feedback = QLabel("")
        self._feedback.setAlignment(Qt.AlignCenter)
        self._next = primary_button("Siguiente →")
        self._next.clicked.connect(self.next_requested.emit)

        self._options: List[AnswerButton] = []
        grid = QGridLayout()
        for i in range(4):
            button = AnswerButton()
            button.clicked.connect(lambda _=False, idx=i: self.answered.emit(idx))
            self._options.append(button)
            grid.addWidget(button, i // 2, i % 2)

        top = QHBoxLayout()
        top.addWidget(self._progress)
        top.addWidget(self._timer, 1)
        self._layout = QVBoxLayout(self)
        self._layout.addLayout(top)
        self._layout.addStretch(1)
        self._layout.addWidget(self._question)
        self._layout.addStretch(1)
        self._layout.addLayout(grid)
        self._layout.addWidget(self._feedback)
        self._layout.addWidget(self._next)

    def _show_question(self, question: Optional[Question], selected: Optional[int]) -> None:
        self._question.setText(question.text if question else "")
        for i, button in enumerate(self._options):
            if question is None or i >= len(question.options):
                button.setVisible(False)
                continue
            button.setVisible(True)
            button.setText(question.options[i])
            button.setEnabled(selected is None)
            kind = answer_feedback(i, selected, question.correct_answer_index)
            button.show_state(_FEEDBACK_COLORS[kind], dimmed=kind == "dimmed")

    def _show_feedback(self, correct: Optional[bool], timed_out: bool = False) -> None:
        if correct is None:
            self._feedback.setText("")
            return
        if correct:
            text, color = "¡Respuesta correcta!", GameColors.GREEN
        elif timed_out:
            text, color = "¡Se acabó el tiempo!", GameColors.RED
        else:
            text, color = "¡Respuesta incorrecta!", GameColors.RED
        self._feedback.setText(text)
        self._feedback.setStyleSheet(f"font-size: 22px; font-weight: 800; color: {color};")


class MissionScreen(_QuestionScreen):
    def refresh(self, quiz: QuizSession) -> None:
        if quiz.is_complete():
            return
        self._progress.setText(f"Pregunta {quiz.index + 1} de {quiz.total_questions}")
        if quiz.time_limit:
            self._timer.setText(f"⏱ {quiz.time_left}s")
            self._timer.setStyleSheet(f"font-size: 20px; font-weight: 800; color: {timer_color(quiz.time_left)};")
        else:
            self._timer.setText("")
        self._show_question(quiz.current_question(), quiz.selected)
        self._show_feedback(quiz.last_answer_correct, quiz.timed_out)
        self._next.setVisible(quiz.is_locked)
        self._next.setText("Finalizar" if quiz.is_last_question() else "Siguiente →")


class PracticeScreen(_QuestionScreen):
    retry_requested = Signal()

    def __init__(self, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self._retry = primary_button("Reintentar", GameColors.AMBER)
        self._retry.clicked.connect(self.retry_requested.emit)
        self._layout.addWidget(self._retry)

    def refresh(self, practice: PracticeSession) -> None:
        if practice.is_complete():
            return
        self._progress.setText(f"Pregunta {practice.round_index + 1} de {practice.rounds}")
        status = practice.status
        self._retry.setVisible(status is RoundStatus.ERROR)
        if status is RoundStatus.LOADING:
            self._show_question(None, None)
            self._question.setText("Generando pregunta… ⏳")
        elif status is RoundStatus.ERROR:
            self._show_question(None, None)
            self._question.setText(practice.error or "")
        else:
            self._show_question(practice.question, practice.selected)
        answered = status is RoundStatus.ANSWERED
        correct = None
        if answered and practice.question is not None and practice.selected is not None:
            correct = practice.question.is_correct(practice.selected)
        self._show_feedback(correct)
        self._next.setVisible(answered)
        self._next.setText("Finalizar" if practice.is_last_round() else "Siguiente →")


class ArcadeScreen(QWidget):
    bubble_tapped = Signal(int)
    finish_requested = Signal()

    BUBBLE_SIZE = 72

    def __init__(self, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self._status = QLabel("")
        self._status.setAlignment(Qt.AlignCenter)
        self._status.setStyleSheet(f"font-size: 20px; font-weight: 800; color: {GameColors.PRIMARY_DARK};")
        self._field = QWidget()
        self._field.setMinimumHeight(420)
        self._field.setStyleSheet(f"background: {GameColors.BG_TOP}; border-radius: 20px;")
        self._bubble_buttons: dict[int, QPushButton] = {}

        self._result = _title("", 26)
        self._continue = primary_button("Continuar", GameColors.GREEN)
        self._continue.clicked.connect(self.finish_requested.emit)

        layout = QVBoxLayout(self)
        layout.addWidget(_title("¡Explota los múltiplos de 5!", 26))
        layout.addWidget(self._status)
        layout.addWidget(self._field, 1)
        layout.addWidget(self._result)
        layout.addWidget(self._continue)

    def refresh(self, game: BubbleGame, now: float) -> None:
        self._status.setText(f"⏱ {game.time_left}s    ⭐ {game.score} XP")
        self._result.setVisible(game.finished)
        self._continue.setVisible(game.finished)
        if game.finished:
            self._field.setVisible(False)
            self._result.setText(
                f"{arcade_message(game.correct_taps, game.total_taps)}\n"
                f"Aciertos: {game.correct_taps}   Fallos: {game.wrong_taps}"
            )
            self.clear_bubbles()
            return
        self._field.setVisible(True)

        live = {b.id: b for b in game.bubbles}
        for bubble_id in list(self._bubble_buttons):
            if bubble_id not in live:
                self._bubble_buttons.pop(bubble_id).deleteLater()
        width = max(1, self._field.width() - self.BUBBLE_SIZE)
        height = self._field.height()
        for bubble in live.values():
            button = self._bubble_buttons.get(bubble.id)
            if button is None:
                button = QPushButton(str(bubble.value), self._field)
                button.setFixedSize(self.BUBBLE_SIZE, self.BUBBLE_SIZE)
                button.setCursor(Qt.PointingHandCursor)
                button.setStyleSheet(
                    f"QPushButton {{ background: rgba(59, 130, 246, 0.8); color: white; "
                    f"border-radius: {self.BUBBLE_SIZE // 2}px; font-size: 24px; font-weight: 900; }}"
                )
                button.clicked.connect(lambda _=False, bid=bubble.id: self.bubble_tapped.emit(bid))
                button.show()
                self._bubble_buttons[bubble.id] = button
            travelled = min(1.0, max(0.0, (now - bubble.spawned_at) / bubble.duration))
            x = int(bubble.x / 85 * width)
            y = int(height - travelled * (height + self.BUBBLE_SIZE))
            button.move(x, y)

    def clear_bubbles(self) -> None:
        for button in self._bubble_buttons.values():
            button.deleteLater()
        self._bubble_buttons.clear()


class ProfileScreen(QWidget):
    back = Signal()
    switch_player = Signal()

    def __init__(self, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self.header = _Header("Progreso")
        self.header.back.connect(self.back.emit)
        self._name = _title("", 26)
        self._xp = XpBar()
        switch = primary_button("Cambiar de usuario", GameColors.AMBER)
        switch.clicked.connect(self.switch_player.emit)
        self._body = QVBoxLayout()
        container = QWidget()
        container.setLayout(self._body)
        scroll = QScrollArea()
        scroll.setWidgetResizable(True)
        scroll.setFrameShape(QFrame.NoFrame)
        scroll.setWidget(container)
        layout = QVBoxLayout(self)
        layout.addWidget(self.header)
        layout.addWidget(self._name)
        layout.addWidget(self._xp)
        layout.addWidget(switch)
        layout.addWidget(scroll, 1)

    def refresh(self, player: Player, state: GameState, catalog: Catalog) -> None:
        self.header.set_coins(player.coins)
        self._name.setText(f"{player.avatar} {player.name}")
        self._xp.set_player(player)
        _clear(self._body)

        self._body.addWidget(_title("Logros", 22))
        for achievement in catalog.achievements:
            held = achievement.id in player.achievements
            label = QLabel(f"{achievement.icon if held else '🔒'}  {achievement.name} – {achievement.description}")
            label.setWordWrap(True)
            label.setStyleSheet(f"font-size: 16px; color: {GameColors.TEXT_PRIMARY if held else GameColors.TEXT_MUTED};")
            self._body.addWidget(label)

        for subject, levels in levels_by_subject(state.levels).items():
            self._body.addWidget(_title(SUBJECT_NAMES.get(subject, subject.value), 22))
            for level in levels:
                stars = player.stars_for(level.id)
                mark = stars_text(stars) if level.id in player.mission_history else "🔒"
                row = QLabel(f"{level.name}    {mark}")
                row.setStyleSheet(f"font-size: 17px; color: {GameColors.TEXT_PRIMARY};")
                self._body.addWidget(row)
        self._body.addStretch(1)


class ShopScreen(QWidget):
    back = Signal()
    buy_requested = Signal(str)
    equip_requested = Signal(str)

    def __init__(self, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self.header = _Header("Tienda")
        self.header.back.connect(self.back.emit)
        self._categories = list(ItemCategory)
        self._tabs = QTabBar()
        for category in self._categories:
            self._tabs.addTab(category.value)
        self._tabs.currentChanged.connect(lambda _index: self._rebuild())
        self._grid = QGridLayout()
        self._player: Optional[Player] = None
        self._catalog: Optional[Catalog] = None
        layout = QVBoxLayout(self)
        layout.addWidget(self.header)
        layout.addWidget(self._tabs)
        layout.addLayout(self._grid)
        layout.addStretch(1)

    def refresh(self, player: Player, catalog: Catalog) -> None:
        self._player = player
        self._catalog = catalog
        self.header.set_coins(player.coins)
        self._rebuild()

    def _rebuild(self) -> None:
        _clear(self._grid)
        if self._player is None or self._catalog is None:
            return
        category = self._categories[max(0, self._tabs.currentIndex())]
        items = [item for item in self._catalog.shop_items if item.category is category]
        for index, item in enumerate(items):
            card = QFrame()
            card.setStyleSheet(f"QFrame {{ background: {GameColors.CARD_BG}; border-radius: 16px; }}")
            box = QVBoxLayout(card)
            name = QLabel(item.name)
            name.setAlignment(Qt.AlignCenter)
            name.setStyleSheet("font-size: 17px; font-weight: 700;")
            box.addWidget(name)
            if item.id in self._player.owned_items:
                equipped = is_equipped(self._player, item)
                button = primary_button("Equipado" if equipped else "Equipar", GameColors.PRIMARY)
                button.setEnabled(not equipped)
                button.clicked.connect(lambda _=False, item_id=item.id: self.equip_requested.emit(item_id))
            else:
                button = primary_button(f"🪙 {item.price}", GameColors.GREEN)
                button.setEnabled(can_buy(self._player, item))
                button.clicked.connect(lambda _=False, item_id=item.id: self.buy_requested.emit(item_id))
            box.addWidget(button)
            self._grid.addWidget(card, index // 3, index % 3)
