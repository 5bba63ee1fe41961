from __future__ import annotations

import logging
from typing import Any, Optional, Tuple

from PySide6.QtCore import QTimer
from PySide6.QtGui import QCloseEvent
from PySide6.QtWidgets import QMainWindow, QStackedWidget, QWidget

from repaso.core.arcade import BubbleGame
from repaso.core.clock import ScreenClock
from repaso.core.content import ContentProvider
from repaso.core.controller import GameController, SummaryRequest
from repaso.core.models import Question, Screen, Subject
from repaso.core.quiz import PracticeSession, QuizSession
from repaso.ui import workers
from repaso.ui.colors import GameColors
from repaso.ui.models import build_level_states
from repaso.ui.screens import (
    ArcadeScreen,
    HomeScreen,
    MapScreen,
    MissionScreen,
    PlayerSelectScreen,
    PracticeScreen,
    ProfileScreen,
    ShopScreen,
    SummaryScreen,
)

logger = logging.getLogger(__name__)

CLOCK_STEP_MS = 100


class MainWindow(QMainWindow):
    """Hosts every screen in a stack and forwards user actions to the controller.

    Timed screens (quiz countdown, arcade) get a fresh ``ScreenClock`` driven by
    a single ``QTimer``; both are stopped whenever the screen changes.
    Provider calls run on the thread pool and come back to ``_on_*_ready``.
    """

    def __init__(self, controller: GameController, provider: ContentProvider) -> None:
        super().__init__()
        self._controller = controller
        self._provider = provider
        self._quiz: Optional[QuizSession] = None
        self._practice: Optional[PracticeSession] = None
        self._arcade: Optional[BubbleGame] = None
        self._clock: Optional[ScreenClock] = None
        self._shown_screen: Optional[Screen] = None

        self._clock_timer = QTimer(self)
        self._clock_timer.setInterval(CLOCK_STEP_MS)
        self._clock_timer.timeout.connect(self._on_clock_tick)

        self.setWindowTitle("Aventuras de Repaso")
        self._build_ui()
        self._render()

    def _build_ui(self) -> None:
        self._stack = QStackedWidget()
        self._stack.setStyleSheet(
            f"background: qlineargradient(x1:0, y1:0, x2:0, y2:1, stop:0 {GameColors.BG_TOP}, "
            f"stop:0.5 {GameColors.BG_MIDDLE}, stop:1 {GameColors.BG_BOTTOM});"
        )
        self.setCentralWidget(self._stack)

        self._player_select = PlayerSelectScreen()
        self._player_select.player_chosen.connect(self._on_player_chosen)

        self._home = HomeScreen()
        self._home.subject_chosen.connect(self._on_subject_chosen)
        self._home.profile_requested.connect(lambda: self._go(Screen.PROFILE))
        self._home.shop_requested.connect(lambda: self._go(Screen.SHOP))

        self._map = MapScreen()
        self._map.level_clicked.connect(self._on_level_clicked)
        self._map.back.connect(lambda: self._go(Screen.HOME))

        self._summary = SummaryScreen()
        self._summary.proceed.connect(self._on_proceed)
        self._summary.back.connect(lambda: self._go(Screen.MAP))

        self._mission = MissionScreen()
        self._mission.answered.connect(self._on_quiz_answer)
        self._mission.next_requested.connect(self._on_quiz_next)

        self._practice_screen = PracticeScreen()
        self._practice_screen.answered.connect(self._on_practice_answer)
        self._practice_screen.next_requested.connect(self._on_practice_next)
        self._practice_screen.retry_requested.connect(self._on_practice_retry)

        self._arcade_screen = ArcadeScreen()
        self._arcade_screen.bubble_tapped.connect(self._on_bubble_tapped)
        self._arcade_screen.finish_requested.connect(self._on_arcade_finish)

        self._profile = ProfileScreen()
        self._profile.back.connect(lambda: self._go(Screen.HOME))
        self._profile.switch_player.connect(self._on_switch_player)

        self._shop = ShopScreen()
        self._shop.back.connect(self._on_shop_back)
        self._shop.buy_requested.connect(self._on_buy)
        self._shop.equip_requested.connect(self._on_equip)

        self._pages: dict[Screen, QWidget] = {
            Screen.HOME: self._home,
            Screen.MAP: self._map,
            Screen.SUMMARY: self._summary,
            Screen.MISSION: self._mission,
            Screen.GENERATED_MISSION: self._practice_screen,
            Screen.ARCADE: self._arcade_screen,
            Screen.PROFILE: self._profile,
            Screen.SHOP: self._shop,
        }
        self._stack.addWidget(self._player_select)
        for page in self._pages.values():
            self._stack.addWidget(page)

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def _render(self) -> None:
        state = self._controller.state
        player = state.current_player
        if player is None:
            self._leave_timed_screen()
            self._shown_screen = None
            self._player_select.refresh(state)
            self._stack.setCurrentWidget(self._player_select)
            return

        if state.screen is not self._shown_screen:
            self._leave_timed_screen()
            self._shown_screen = state.screen

        screen = state.screen
        if screen is Screen.HOME:
            self._home.refresh(player)
        elif screen is Screen.MAP and state.current_subject is not None:
            states = build_level_states(player, state.levels, state.current_subject)
            self._map.refresh(player, state.current_subject, states)
        elif screen is Screen.SUMMARY:
            level = state.current_level
            loading = level is not None and self._controller.is_summary_loading(level.id)
            self._summary.refresh(level, loading)
        elif screen is Screen.MISSION and self._quiz is not None:
            self._mission.refresh(self._quiz)
        elif screen is Screen.GENERATED_MISSION and self._practice is not None:
            self._practice_screen.refresh(self._practice)
        elif screen is Screen.ARCADE and self._arcade is not None and self._clock is not None:
            self._arcade_screen.refresh(self._arcade, self._clock.now)
        elif screen is Screen.PROFILE:
            self._profile.refresh(player, state, self._controller.catalog)
        elif screen is Screen.SHOP:
            self._shop.refresh(player, self._controller.catalog)
        self._stack.setCurrentWidget(self._pages[screen])

    def _go(self, screen: Screen) -> None:
        self._controller.set_screen(screen)
        self._render()

    # ------------------------------------------------------------------
    # Screen clock
    # ------------------------------------------------------------------

    def _start_clock(self) -> ScreenClock:
        self._stop_clock()
        self._clock = ScreenClock()
        self._clock_timer.start()
        return self._clock

    def _stop_clock(self) -> None:
        self._clock_timer.stop()
        if self._clock is not None:
            self._clock.stop()
        self._clock = None

    def _leave_timed_screen(self) -> None:
        self._stop_clock()
        self._quiz = None
        self._practice = None
        self._arcade = None
        self._arcade_screen.clear_bubbles()

    def _on_clock_tick(self) -> None:
        if self._clock is None:
            return
        self._clock.advance(CLOCK_STEP_MS / 1000.0)
        self._render()

    # ------------------------------------------------------------------
    # Navigation
    # ------------------------------------------------------------------

    def _on_player_chosen(self, index: int) -> None:
        self._controller.select_player(index)
        self._render()

    def _on_switch_player(self) -> None:
        self._controller.switch_player()
        self._render()

    def _on_subject_chosen(self, subject: Subject) -> None:
        self._controller.select_subject(subject)
        self._render()

    def _on_shop_back(self) -> None:
        self._go(Screen.MAP if self._controller.state.current_subject is not None else Screen.HOME)

    def _on_level_clicked(self, level_id: str) -> None:
        request = self._controller.start_mission(level_id)
        if request is not None:
            provider = self._provider
            workers.submit(
                request,
                lambda: provider.generate_summary(request.topic, request.subject),
                self._on_summary_ready,
            )
        self._render()

    def _on_summary_ready(self, request: SummaryRequest, summary: Any, failed: bool) -> None:
        self._controller.resolve_summary(request, summary, failed)
        if self._controller.state.screen is Screen.SUMMARY:
            self._render()

    def _on_proceed(self) -> None:
        self._controller.proceed_to_mission()
        state = self._controller.state
        level = state.current_level
        self._leave_timed_screen()
        self._shown_screen = state.screen
        if level is None:
            self._render()
            return
        if state.screen is Screen.MISSION:
            self._quiz = QuizSession(level.questions, level.time_limit)
            if self._quiz.time_limit:
                self._start_clock().schedule(1.0, self._quiz.tick, repeat=True)
        elif state.screen is Screen.GENERATED_MISSION:
            self._practice = PracticeSession()
            self._request_question(self._practice.begin_round())
        self._render()

    # ------------------------------------------------------------------
    # Fixed mission
    # ------------------------------------------------------------------

    def _on_quiz_answer(self, index: int) -> None:
        if self._quiz is not None:
            self._quiz.answer(index)
            self._render()

    def _on_quiz_next(self) -> None:
        quiz = self._quiz
        if quiz is None or not quiz.is_locked:
            return
        if not quiz.is_last_question():
            quiz.next()
            self._render()
            return
        self._controller.finish_quiz(quiz.reward())
        if self._controller.state.screen is Screen.ARCADE:
            self._leave_timed_screen()
            self._shown_screen = Screen.ARCADE
            clock = self._start_clock()
            self._arcade = BubbleGame(clock)
        self._render()

    # ------------------------------------------------------------------
    # Arcade
    # ------------------------------------------------------------------

    def _on_bubble_tapped(self, bubble_id: int) -> None:
        if self._arcade is not None:
            self._arcade.tap(bubble_id)
            self._render()

    def _on_arcade_finish(self) -> None:
        if self._arcade is None or not self._arcade.finished:
            return
        self._controller.finish_arcade(self._arcade.reward())
        self._render()

    # ------------------------------------------------------------------
    # Generated mission
    # ------------------------------------------------------------------

    def _request_question(self, token: int) -> None:
        state = self._controller.state
        level, player = state.current_level, state.current_player
        if level is None or player is None or self._practice is None:
            return
        provider = self._provider
        topic, skill = level.name, player.level
        workers.submit(
            (self._practice, token),
            lambda: provider.generate_question(topic, skill),
            self._on_question_ready,
        )

    def _on_question_ready(self, key: Tuple[PracticeSession, int], question: Optional[Question], failed: bool) -> None:
        session, token = key
        if session is not self._practice:
            logger.debug("Dropping question %d: practice session no longer active", token)
            return
        self._practice.deliver(token, None if failed else question)
        self._render()

    def _on_practice_answer(self, index: int) -> None:
        if self._practice is not None:
            self._practice.answer(index)
            self._render()

    def _on_practice_next(self) -> None:
        practice = self._practice
        if practice is None or not practice.next():
            return
        if practice.is_complete():
            self._controller.finish_practice(practice.reward())
        else:
            self._request_question(practice.token)
        self._render()

    def _on_practice_retry(self) -> None:
        if self._practice is None:
            return
        token = self._practice.retry()
        if token is not None:
            self._request_question(token)
        self._render()

    # ------------------------------------------------------------------
    # Shop
    # ------------------------------------------------------------------

    def _on_buy(self, item_id: str) -> None:
        self._controller.buy_item(item_id)
        self._render()

    def _on_equip(self, item_id: str) -> None:
        self._controller.equip_item(item_id)
        self._render()

    def closeEvent(self, event: QCloseEvent) -> None:
        """Stop timers before closing."""
        self._stop_clock()
        super().closeEvent(event)
