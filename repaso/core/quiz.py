from __future__ import annotations

import logging
from enum import Enum
from typing import Optional, Sequence

from repaso.core.models import MissionReward, Question
from repaso.core.rewards import practice_reward, quiz_reward

logger = logging.getLogger(__name__)

TIMEOUT_ANSWER = -1
PRACTICE_ROUNDS = 5
QUESTION_ERROR_MESSAGE = "No se pudo generar una pregunta. Intenta de nuevo."


class QuizSession:
    """Fixed-question mission: one question at a time, optional countdown per question.

    Selecting an answer locks the question until ``next()``. When the countdown
    reaches zero first, the answer is forced to ``TIMEOUT_ANSWER`` and scored
    as incorrect.
    """

    def __init__(self, questions: Sequence[Question], time_limit: Optional[int] = None) -> None:
        if not questions:
            raise ValueError("a quiz session needs at least one question")
        self._questions = tuple(questions)
        self._time_limit = time_limit if time_limit and time_limit > 0 else None
        self._index = 0
        self._selected: Optional[int] = None
        self._last_correct: Optional[bool] = None
        self._correct_count = 0
        self._time_left = self._time_limit or 0

    @property
    def index(self) -> int:
        return self._index

    @property
    def total_questions(self) -> int:
        return len(self._questions)

    @property
    def correct_count(self) -> int:
        return self._correct_count

    @property
    def selected(self) -> Optional[int]:
        return self._selected

    @property
    def last_answer_correct(self) -> Optional[bool]:
        return self._last_correct

    @property
    def time_limit(self) -> Optional[int]:
        return self._time_limit

    @property
    def time_left(self) -> int:
        return self._time_left

    @property
    def is_locked(self) -> bool:
        return self._selected is not None

    @property
    def timed_out(self) -> bool:
        return self._selected == TIMEOUT_ANSWER

    def current_question(self) -> Question:
        return self._questions[self._index]

    def is_complete(self) -> bool:
        return self._index >= len(self._questions)

    def is_last_question(self) -> bool:
        return self._index == len(self._questions) - 1

    def answer(self, index: int) -> Optional[bool]:
        """Answer the current question. Returns None if input is locked."""
        if self.is_complete() or self.is_locked:
            return None
        correct = self.current_question().is_correct(index)
        self._selected = index
        self._last_correct = correct
        if correct:
            self._correct_count += 1
        return correct

    def tick(self) -> None:
        """One second of countdown for the current question."""
        if self._time_limit is None or self.is_locked or self.is_complete():
            return
        self._time_left = max(0, self._time_left - 1)
        if self._time_left == 0:
            self._selected = TIMEOUT_ANSWER
            self._last_correct = False

    def next(self) -> bool:
        """Advance past an answered question. Returns False if nothing was answered yet."""
        if not self.is_locked or self.is_complete():
            return False
        self._index += 1
        self._selected = None
        self._last_correct = None
        self._time_left = self._time_limit or 0
        return True

    def reward(self) -> MissionReward:
        return quiz_reward(self._correct_count, len(self._questions))


class RoundStatus(str, Enum):
    LOADING = "loading"
    READY = "ready"
    ANSWERED = "answered"
    ERROR = "error"
    DONE = "done"


class PracticeSession:
    """Generated mission: a fixed number of rounds, each fed by the content provider.

    Each request is identified by a token; a question delivered for an older
    token (the player retried or moved on) is dropped.
    """

    def __init__(self, rounds: int = PRACTICE_ROUNDS) -> None:
        if rounds <= 0:
            raise ValueError("a practice session needs at least one round")
        self._rounds = rounds
        self._round_index = 0
        self._correct_count = 0
        self._status = RoundStatus.LOADING
        self._question: Optional[Question] = None
        self._selected: Optional[int] = None
        self._error: Optional[str] = None
        self._token = 0

    @property
    def rounds(self) -> int:
        return self._rounds

    @property
    def round_index(self) -> int:
        return self._round_index

    @property
    def correct_count(self) -> int:
        return self._correct_count

    @property
    def status(self) -> RoundStatus:
        return self._status

    @property
    def question(self) -> Optional[Question]:
        return self._question

    @property
    def selected(self) -> Optional[int]:
        return self._selected

    @property
    def error(self) -> Optional[str]:
        return self._error

    @property
    def token(self) -> int:
        return self._token

    def is_complete(self) -> bool:
        return self._round_index >= self._rounds

    def is_last_round(self) -> bool:
        return self._round_index == self._rounds - 1

    def begin_round(self) -> int:
        """Mark the current round as loading and return the token for its request."""
        self._token += 1
        self._status = RoundStatus.LOADING
        self._question = None
        self._selected = None
        self._error = None
        return self._token

    def deliver(self, token: int, question: Optional[Question]) -> bool:
        """Apply a provider result. Returns False if the result is stale."""
        if token != self._token or self._status is not RoundStatus.LOADING:
            logger.debug("Dropping stale question for request %d (current %d)", token, self._token)
            return False
        if question is None:
            self._status = RoundStatus.ERROR
            self._error = QUESTION_ERROR_MESSAGE
        else:
            self._status = RoundStatus.READY
            self._question = question
        return True

    def retry(self) -> Optional[int]:
        if self._status is not RoundStatus.ERROR:
            return None
        return self.begin_round()

    def answer(self, index: int) -> Optional[bool]:
        if self._status is not RoundStatus.READY or self._question is None:
            return None
        correct = self._question.is_correct(index)
        self._selected = index
        self._status = RoundStatus.ANSWERED
        if correct:
            self._correct_count += 1
        return correct

    def next(self) -> bool:
        """Finish the answered round.

        If rounds remain, the next one starts loading and its request token is
        available as ``token``.
        """
        if self._status is not RoundStatus.ANSWERED:
            return False
        self._round_index += 1
        if self.is_complete():
            self._status = RoundStatus.DONE
            self._token += 1
        else:
            self.begin_round()
        return True

    def reward(self) -> MissionReward:
        return practice_reward(self._correct_count, self._rounds)
