"""Question and summary generation.

Providers never raise: any failure is logged and reported as ``None`` so the
caller can apply its fallback (cached summary text, retryable round error).
"""

from __future__ import annotations

import json
import logging
import os
import random
from typing import Any, Optional, Protocol

import google.generativeai as genai

from repaso.core.models import Question, Subject

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "gemini-2.5-flash"


class ContentProvider(Protocol):
    def generate_question(self, topic: str, skill_level: int) -> Optional[Question]:
        ...

    def generate_summary(self, topic: str, subject: Subject) -> Optional[str]:
        ...


def parse_question(payload: Any) -> Optional[Question]:
    """Validate a decoded provider response; None if it is not a 4-option question."""
    if not isinstance(payload, dict):
        return None
    text = payload.get("questionText")
    options = payload.get("options")
    index = payload.get("correctAnswerIndex")
    if (
        isinstance(text, str)
        and text.strip()
        and isinstance(options, list)
        and len(options) == 4
        and isinstance(index, int)
        and not isinstance(index, bool)
        and 0 <= index < 4
    ):
        return Question(text=text.strip(), options=tuple(str(o) for o in options), correct_answer_index=index)
    return None


def question_prompt(topic: str, skill_level: int) -> str:
    return (
        f"Generate a new multiple-choice math question in Spanish for a child at skill level {skill_level} "
        f'(1 is easy, 10 is hard). The topic is "{topic}". Provide one correct answer and three plausible '
        "but incorrect answers. The correct answer should not be the first option. "
        "Answer with a JSON object with the keys questionText (string), options (array of 4 strings) "
        "and correctAnswerIndex (integer 0-3)."
    )


def summary_prompt(topic: str, subject: Subject) -> str:
    if subject is Subject.MATH:
        return (
            f'Genera un resumen muy breve y fácil de entender para un niño de 7 años sobre la "{topic}". '
            "Explica un truco o dato curioso si es posible. El resumen debe estar en español y no debe "
            "exceder las 50 palabras."
        )
    return (
        f'Genera un resumen muy breve y emocionante para un niño de 7 años sobre la "{topic}". '
        "Menciona 2 o 3 datos curiosos o importantes de forma sencilla. El resumen debe estar en "
        "español y no debe exceder las 60 palabras."
    )


class GeminiContentProvider:
    """Content provider backed by the Gemini API."""

    def __init__(self, api_key: str, model_name: str = DEFAULT_MODEL) -> None:
        genai.configure(api_key=api_key)
        self._model_name = model_name
        self._model = genai.GenerativeModel(model_name)
        logger.info("Gemini content provider using model '%s'", model_name)

    def generate_question(self, topic: str, skill_level: int) -> Optional[Question]:
        try:
            response = self._model.generate_content(
                question_prompt(topic, skill_level),
                generation_config={
                    "response_mime_type": "application/json",
                    "temperature": 1.0,
                },
            )
            payload = json.loads(response.text.strip())
        except Exception as e:
            logger.warning("Error generating question for %r: %s", topic, e)
            return None
        question = parse_question(payload)
        if question is None:
            logger.warning("Gemini response did not match the question schema: %r", payload)
        return question

    def generate_summary(self, topic: str, subject: Subject) -> Optional[str]:
        try:
            response = self._model.generate_content(
                summary_prompt(topic, subject),
                generation_config={"temperature": 0.7},
            )
            text = response.text.strip()
        except Exception as e:
            logger.warning("Error generating summary for %r: %s", topic, e)
            return None
        return text or None


class LocalMathProvider:
    """Offline provider: multiplication questions sized by skill level, no summaries."""

    def __init__(self, rng: Optional[random.Random] = None) -> None:
        self._rng = rng or random.Random()

    def generate_question(self, topic: str, skill_level: int) -> Optional[Question]:
        top = min(12, 3 + max(1, skill_level))
        a = self._rng.randint(2, top)
        b = self._rng.randint(1, 10)
        answer = a * b

        wrong: set[int] = set()
        while len(wrong) < 3:
            candidate = answer + self._rng.choice([-a, a, -b, b, -1, 1, 2 * a, -2])
            if candidate > 0 and candidate != answer:
                wrong.add(candidate)
        options = [str(v) for v in sorted(wrong)]
        correct_index = self._rng.randint(1, 3)
        options.insert(correct_index, str(answer))
        return Question(text=f"¿Cuánto es {a} x {b}?", options=tuple(options), correct_answer_index=correct_index)

    def generate_summary(self, topic: str, subject: Subject) -> Optional[str]:
        return None


def provider_from_env() -> ContentProvider:
    api_key = os.environ.get("GEMINI_API_KEY") or os.environ.get("API_KEY")
    if not api_key:
        logger.warning("GEMINI_API_KEY not set; using the offline math provider.")
        return LocalMathProvider()
    return GeminiContentProvider(api_key, os.environ.get("REPASO_GEMINI_MODEL", DEFAULT_MODEL))
