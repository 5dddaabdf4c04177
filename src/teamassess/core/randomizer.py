"""Deterministic, seed-driven ordering of questions and options.

Orders are regenerated from stable seeds (attempt id, question id) on every
render, so no shuffled copy of a test is ever persisted.
"""

from __future__ import annotations

import hashlib
import math
from typing import Any, Iterable, Mapping, Sequence, TypeVar

from ..schemas import Question, QuestionOption, Test

T = TypeVar("T")

_UINT32_RANGE = 2**32


def seeded_random(seed: str, index: int) -> float:
    """Return a reproducible float in ``[0, 1)`` for ``(seed, index)``."""
    digest = hashlib.sha256(f"{seed}{index}".encode("utf-8")).digest()
    return int.from_bytes(digest[:4], "big") / _UINT32_RANGE


def seeded_shuffle(items: Iterable[T], seed: str) -> list[T]:
    """Fisher-Yates shuffle driven by :func:`seeded_random`.

    The input is never mutated; identical ``(items, seed)`` pairs always
    produce the same permutation.
    """
    shuffled = list(items)
    for i in range(len(shuffled) - 1, 0, -1):
        j = math.floor(seeded_random(seed, i) * (i + 1))
        shuffled[i], shuffled[j] = shuffled[j], shuffled[i]
    return shuffled


def option_seed(attempt_id: str, question_id: str) -> str:
    return f"{attempt_id}:{question_id}"


class AssessmentRandomizer:
    """Produce per-attempt question and option order."""

    def question_order(
        self,
        test: Test | Mapping[str, Any],
        questions: Sequence[Question],
        attempt_id: str,
    ) -> list[Question]:
        profile = test if isinstance(test, Test) else Test.model_validate(test)
        ordered = sorted(questions, key=lambda q: q.order)
        if not profile.randomize_question_order:
            return ordered
        return seeded_shuffle(ordered, attempt_id)

    def option_order(
        self,
        test: Test | Mapping[str, Any],
        question: Question,
        attempt_id: str,
    ) -> list[QuestionOption]:
        profile = test if isinstance(test, Test) else Test.model_validate(test)
        ordered = sorted(question.options, key=lambda o: o.order)
        if not profile.randomize_option_order:
            return ordered
        return seeded_shuffle(ordered, option_seed(attempt_id, question.id))

    def render(
        self,
        test: Test | Mapping[str, Any],
        questions: Sequence[Question],
        attempt_id: str,
    ) -> list[Question]:
        """Return question copies in attempt order with options reordered."""
        profile = test if isinstance(test, Test) else Test.model_validate(test)
        rendered: list[Question] = []
        for question in self.question_order(profile, questions, attempt_id):
            options = self.option_order(profile, question, attempt_id)
            rendered.append(question.model_copy(update={"options": options}))
        return rendered
