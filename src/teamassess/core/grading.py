"""Auto grading of submitted answers and attempt score summaries."""

from __future__ import annotations

import json
import math
import re
from dataclasses import dataclass
from typing import Any, Iterable, Literal, Mapping, assert_never

import structlog
from pydantic import ValidationError

from ..exceptions import AnswerKeyError
from ..schemas import Answer, BlankAnswerKey, Question, QuestionType

BLANK_MARKER = re.compile(r"\[blank\d*\]")
BLANK_DELIMITER = " | "

GradingStatusType = Literal["UNGRADED", "PARTIALLY_GRADED", "FULLY_GRADED"]

_logger = structlog.get_logger(__name__)


@dataclass(slots=True)
class GradeResult:
    """Outcome of grading one answer.

    ``auto_graded`` is False when the answer still needs a human grader; the
    caller must then leave ``graded_at`` unset.
    """

    points_awarded: float
    is_correct: bool
    auto_graded: bool = True


@dataclass(slots=True)
class GradingStatus:
    status: GradingStatusType
    graded_count: int
    total_count: int
    ungraded_count: int


@dataclass(slots=True)
class ScoreBreakdown:
    earned_points: float
    graded_total_points: float
    overall_total_points: float
    has_ungraded_questions: bool


def has_blank_markers(prompt_md: str | None) -> bool:
    return bool(prompt_md) and BLANK_MARKER.search(prompt_md) is not None


def parse_blank_answer_key(raw: str | None) -> BlankAnswerKey:
    """Parse a key stored as JSON text in a question's ``explanation``.

    Accepts the legacy bare list of answers and the ``{answers, points}``
    object.
    """
    if not raw:
        raise AnswerKeyError("answer key is empty")
    try:
        parsed = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise AnswerKeyError(f"answer key is not valid JSON: {exc}") from exc

    try:
        if isinstance(parsed, list):
            return BlankAnswerKey(answers=parsed)
        if isinstance(parsed, dict) and "answers" in parsed:
            return BlankAnswerKey(
                answers=parsed.get("answers") or [],
                points=parsed.get("points") or [],
            )
    except ValidationError as exc:
        raise AnswerKeyError(f"answer key has invalid entries: {exc}") from exc
    raise AnswerKeyError("answer key must be a list or an object with 'answers'")


def migrate_blank_answer_key(question: Question) -> Question:
    """Return a copy with ``blank_answer_key`` filled from ``explanation``."""
    if question.blank_answer_key is not None or not has_blank_markers(question.prompt_md):
        return question
    key = parse_blank_answer_key(question.explanation)
    return question.model_copy(update={"blank_answer_key": key, "explanation": None})


def _correct_options(question: Question) -> list[str]:
    return [option.id for option in question.options if option.is_correct]


def _parse_number(text: str) -> float | None:
    # Leading numeric literal only, e.g. "3.14 m" -> 3.14.
    match = re.match(r"\s*[-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?", text or "")
    if match is None:
        return None
    value = float(match.group(0))
    return value if math.isfinite(value) else None


class AutoGrader:
    """Type-dispatched grader for a single answer."""

    method = "auto_grade"

    def grade(
        self,
        question: Question | Mapping[str, Any],
        answer: Answer | Mapping[str, Any],
    ) -> GradeResult:
        item = question if isinstance(question, Question) else Question.model_validate(question)
        response = answer if isinstance(answer, Answer) else Answer.model_validate(answer)
        result = self._dispatch(item, response)
        return self._clamp(result, item.points)

    def _dispatch(self, question: Question, answer: Answer) -> GradeResult:
        qtype = question.type
        if qtype is QuestionType.MCQ_SINGLE:
            return self._grade_single(question, answer)
        if qtype is QuestionType.MCQ_MULTI:
            return self._grade_multi(question, answer)
        if qtype is QuestionType.NUMERIC:
            return self._grade_numeric(question, answer)
        if qtype is QuestionType.SHORT_TEXT:
            if has_blank_markers(question.prompt_md):
                return self._grade_blanks(question, answer)
            return self._manual(question)
        if qtype is QuestionType.LONG_TEXT:
            return self._manual(question)
        assert_never(qtype)

    @staticmethod
    def _all_or_nothing(question: Question, is_correct: bool) -> GradeResult:
        return GradeResult(
            points_awarded=question.points if is_correct else 0.0,
            is_correct=is_correct,
        )

    def _grade_single(self, question: Question, answer: Answer) -> GradeResult:
        correct = _correct_options(question)
        selected = (answer.selected_option_ids or [None])[0]
        is_correct = bool(correct) and selected == correct[0]
        return self._all_or_nothing(question, is_correct)

    def _grade_multi(self, question: Question, answer: Answer) -> GradeResult:
        correct = set(_correct_options(question))
        selected = set(answer.selected_option_ids or [])
        return self._all_or_nothing(question, selected == correct)

    def _grade_numeric(self, question: Question, answer: Answer) -> GradeResult:
        correct = _correct_options(question)
        if not correct or answer.numeric_answer is None:
            return GradeResult(0.0, False)
        label = next(o.label for o in question.options if o.id == correct[0])
        expected = _parse_number(label)
        student = float(answer.numeric_answer)
        if expected is None or not math.isfinite(student):
            return GradeResult(0.0, False)
        tolerance = abs(question.numeric_tolerance or 0.0)
        return self._all_or_nothing(question, abs(student - expected) <= tolerance)

    def _grade_blanks(self, question: Question, answer: Answer) -> GradeResult:
        if not answer.answer_text:
            return self._manual(question)
        try:
            key = question.blank_answer_key or parse_blank_answer_key(question.explanation)
        except AnswerKeyError as exc:
            _logger.warning("grading.answer_key_invalid", question_id=question.id, error=str(exc))
            return self._manual(question)
        if not key.answers:
            return self._manual(question)

        responses = [part.strip() for part in answer.answer_text.split(BLANK_DELIMITER)]
        if len(responses) != len(key.answers):
            return GradeResult(0.0, False)

        matches = [
            response.lower() == expected.strip().lower()
            for response, expected in zip(responses, key.answers)
        ]

        if any(p is not None for p in key.points):
            earned = 0.0
            all_correct = True
            for index, matched in enumerate(matches):
                blank_points = key.points[index] if index < len(key.points) else None
                if matched and blank_points is not None:
                    earned += blank_points
                else:
                    all_correct = False
            return GradeResult(earned, all_correct)

        return self._all_or_nothing(question, all(matches))

    @staticmethod
    def _manual(question: Question) -> GradeResult:
        _logger.debug("grading.manual_required", question_id=question.id, type=question.type.value)
        return GradeResult(0.0, False, auto_graded=False)

    @staticmethod
    def _clamp(result: GradeResult, points: float) -> GradeResult:
        ceiling = max(points, 0.0)
        result.points_awarded = min(max(result.points_awarded, 0.0), ceiling)
        return result


def auto_grade(
    question: Question | Mapping[str, Any],
    answer: Answer | Mapping[str, Any],
) -> GradeResult:
    """Grade ``answer`` against ``question`` with the default grader."""
    return AutoGrader().grade(question, answer)


def _answer_view(answer: Answer | Mapping[str, Any]) -> tuple[Any, Any, float]:
    if isinstance(answer, Mapping):
        question = answer.get("question") or {}
        points = question.get("points") if isinstance(question, Mapping) else getattr(question, "points", 0)
        return answer.get("graded_at"), answer.get("points_awarded"), float(points or 0)
    question = getattr(answer, "question", None)
    return answer.graded_at, answer.points_awarded, float(getattr(question, "points", 0) or 0)


def grading_status(answers: Iterable[Answer | Mapping[str, Any]]) -> GradingStatus:
    """Summarize how many answers of an attempt carry a grade."""
    rows = [_answer_view(a) for a in answers]
    total = len(rows)
    graded = sum(1 for graded_at, _, _ in rows if graded_at is not None)

    status: GradingStatusType
    if graded == 0:
        status = "UNGRADED"
    elif graded == total:
        status = "FULLY_GRADED"
    else:
        status = "PARTIALLY_GRADED"
    return GradingStatus(
        status=status,
        graded_count=graded,
        total_count=total,
        ungraded_count=total - graded,
    )


def score_breakdown(answers: Iterable[Answer | Mapping[str, Any]]) -> ScoreBreakdown:
    """Earned points over graded and overall totals."""
    earned = 0.0
    graded_total = 0.0
    overall_total = 0.0
    for graded_at, points_awarded, question_points in (_answer_view(a) for a in answers):
        overall_total += question_points
        if graded_at is not None:
            graded_total += question_points
            earned += float(points_awarded or 0)
    return ScoreBreakdown(
        earned_points=earned,
        graded_total_points=graded_total,
        overall_total_points=overall_total,
        has_ungraded_questions=graded_total < overall_total,
    )
