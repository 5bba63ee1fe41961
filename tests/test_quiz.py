"""Tests for repaso.core.quiz – fixed quizzes and generated practice rounds."""

from __future__ import annotations

import pytest

from repaso.core.clock import ScreenClock
from repaso.core.models import MissionReward, Question
from repaso.core.quiz import (
    QUESTION_ERROR_MESSAGE,
    TIMEOUT_ANSWER,
    PracticeSession,
    QuizSession,
    RoundStatus,
)


def _questions(n: int = 3):
    return [Question(text=f"q{i}", options=("a", "b", "c", "d"), correct_answer_index=1) for i in range(n)]


Q = Question(text="2 x 2?", options=("3", "4", "5", "6"), correct_answer_index=1)


# ---------------------------------------------------------------------------
# QuizSession
# ---------------------------------------------------------------------------

class TestQuizSession:
    def test_requires_questions(self):
        with pytest.raises(ValueError):
            QuizSession([])

    def test_answer_locks_question(self):
        quiz = QuizSession(_questions())
        assert quiz.answer(1) is True
        assert quiz.is_locked
        assert quiz.answer(0) is None
        assert quiz.correct_count == 1

    def test_next_requires_answer(self):
        quiz = QuizSession(_questions())
        assert quiz.next() is False
        quiz.answer(0)
        assert quiz.next() is True
        assert quiz.index == 1
        assert quiz.selected is None

    def test_full_run_reward(self):
        quiz = QuizSession(_questions(5))
        for i in range(5):
            quiz.answer(1 if i < 4 else 0)
            if not quiz.is_last_question():
                quiz.next()
        assert quiz.reward() == MissionReward(stars=3, xp=40, coins=20, is_perfect=False)

    def test_untimed_tick_does_nothing(self):
        quiz = QuizSession(_questions())
        quiz.tick()
        assert quiz.time_left == 0
        assert not quiz.is_locked

    def test_timeout_forces_wrong_answer(self):
        quiz = QuizSession(_questions(), time_limit=3)
        for _ in range(3):
            quiz.tick()
        assert quiz.selected == TIMEOUT_ANSWER
        assert quiz.timed_out
        assert quiz.last_answer_correct is False
        assert quiz.correct_count == 0
        assert quiz.answer(1) is None

    def test_timer_resets_on_next(self):
        quiz = QuizSession(_questions(), time_limit=5)
        quiz.tick()
        quiz.answer(1)
        quiz.next()
        assert quiz.time_left == 5

    def test_answer_stops_countdown(self):
        quiz = QuizSession(_questions(), time_limit=5)
        quiz.tick()
        quiz.answer(1)
        quiz.tick()
        quiz.tick()
        assert quiz.time_left == 4

    def test_driven_by_clock(self):
        clock = ScreenClock()
        quiz = QuizSession(_questions(), time_limit=2)
        clock.schedule(1.0, quiz.tick, repeat=True)
        clock.advance(2.0)
        assert quiz.timed_out


# ---------------------------------------------------------------------------
# PracticeSession
# ---------------------------------------------------------------------------

class TestPracticeSession:
    def test_round_flow(self):
        session = PracticeSession(rounds=2)
        token = session.begin_round()
        assert session.status is RoundStatus.LOADING
        assert session.deliver(token, Q)
        assert session.status is RoundStatus.READY
        assert session.answer(1) is True
        assert session.status is RoundStatus.ANSWERED
        assert session.next()
        assert session.round_index == 1
        assert session.status is RoundStatus.LOADING

    def test_stale_token_dropped(self):
        session = PracticeSession()
        old = session.begin_round()
        session.deliver(old, None)
        new = session.retry()
        assert new is not None and new != old
        assert session.deliver(old, Q) is False
        assert session.status is RoundStatus.LOADING
        assert session.deliver(new, Q) is True

    def test_provider_failure_sets_error(self):
        session = PracticeSession()
        token = session.begin_round()
        session.deliver(token, None)
        assert session.status is RoundStatus.ERROR
        assert session.error == QUESTION_ERROR_MESSAGE
        assert session.answer(0) is None

    def test_retry_only_after_error(self):
        session = PracticeSession()
        session.begin_round()
        assert session.retry() is None

    def test_answer_before_ready_ignored(self):
        session = PracticeSession()
        session.begin_round()
        assert session.answer(1) is None
        assert session.next() is False

    def test_second_delivery_ignored(self):
        session = PracticeSession()
        token = session.begin_round()
        session.deliver(token, Q)
        assert session.deliver(token, Q) is False

    def test_completion_and_reward(self):
        session = PracticeSession(rounds=5)
        session.begin_round()
        for i in range(5):
            session.deliver(session.token, Q)
            session.answer(1 if i < 3 else 0)
            session.next()
        assert session.is_complete()
        assert session.status is RoundStatus.DONE
        assert session.reward() == MissionReward(stars=2, xp=30, coins=15, is_perfect=False)

    def test_late_delivery_after_done(self):
        session = PracticeSession(rounds=1)
        token = session.begin_round()
        session.deliver(token, Q)
        session.answer(1)
        session.next()
        assert session.deliver(token, Q) is False
        assert session.status is RoundStatus.DONE

    def test_requires_rounds(self):
        with pytest.raises(ValueError):
            PracticeSession(rounds=0)
