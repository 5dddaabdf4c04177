"""Score disclosure rules for attempts viewed by test-takers."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Mapping, assert_never

import pendulum
import structlog
from pydantic import BaseModel

from ..schemas import Attempt, ScoreReleaseMode, Test, TestStatus
from .clock import NowProvider, as_utc, resolve_now

PROJECTED_QUESTION_FIELDS = ("id", "prompt_md", "type", "points", "section_id", "order")
HIDDEN_RESPONSE_FIELDS = ("answer_text", "selected_option_ids", "numeric_answer", "grader_note")
GRADING_FIELDS = ("points_awarded", "graded_at", "grader_note")
ANSWER_KEY_FIELDS = ("explanation", "blank_answer_key")


def _as_record(value: Any) -> dict[str, Any]:
    if isinstance(value, BaseModel):
        return value.model_dump(mode="python")
    return dict(value)


class ScoreReleasePolicy:
    """Decide whether and how graded content is exposed to non-admins."""

    def __init__(self, *, now_provider: NowProvider | None = None) -> None:
        self._now_provider = now_provider or pendulum.now
        self._logger = structlog.get_logger(__name__)

    def should_release(self, test: Test | Mapping[str, Any], *, now: datetime | None = None) -> bool:
        profile = test if isinstance(test, Test) else Test.model_validate(test)
        if profile.status is not TestStatus.PUBLISHED:
            return True
        if profile.release_scores_at is None:
            return True
        return resolve_now(now, self._now_provider) >= as_utc(profile.release_scores_at)

    def filter_attempt(
        self,
        attempt: Attempt | Mapping[str, Any],
        test: Test | Mapping[str, Any],
        *,
        is_admin: bool,
        now: datetime | None = None,
    ) -> Attempt | Mapping[str, Any]:
        """Project ``attempt`` for the viewer.

        Admins get the attempt object back untouched. Everyone else gets a new
        dict with the fields the release state and mode allow.
        """
        if is_admin:
            return attempt

        profile = test if isinstance(test, Test) else Test.model_validate(test)
        record = _as_record(attempt)
        answers = record.get("answers")

        if not self.should_release(profile, now=now):
            self._logger.debug("release.withheld", attempt_id=record.get("id"))
            return {
                **record,
                "grade_earned": None,
                "proctoring_score": None,
                "answers": None
                if answers is None
                else [self._withhold_answer(a) for a in answers],
            }

        mode = profile.score_release_mode
        if mode is ScoreReleaseMode.NONE:
            return {**record, "grade_earned": None, "proctoring_score": None, "answers": None}
        if mode is ScoreReleaseMode.SCORE_ONLY:
            return {**record, "proctoring_score": None, "answers": None}
        if mode is ScoreReleaseMode.SCORE_WITH_WRONG:
            return {
                **record,
                "proctoring_score": None,
                "answers": None if answers is None else [self._project_answer(a) for a in answers],
            }
        if mode is ScoreReleaseMode.FULL_TEST:
            return record
        assert_never(mode)

    @staticmethod
    def _withhold_answer(answer: Any) -> dict[str, Any]:
        row = {**_as_record(answer), **dict.fromkeys(GRADING_FIELDS)}
        question = row.get("question")
        if question is not None:
            source = _as_record(question)
            row["question"] = {
                **source,
                **dict.fromkeys(ANSWER_KEY_FIELDS),
                "options": [
                    {name: value for name, value in _as_record(option).items() if name != "is_correct"}
                    for option in source.get("options") or []
                ],
            }
        return row

    @staticmethod
    def _project_answer(answer: Any) -> dict[str, Any]:
        row = _as_record(answer)
        question = row.get("question")
        projected_question = None
        if question is not None:
            source = _as_record(question)
            projected_question = {name: source.get(name) for name in PROJECTED_QUESTION_FIELDS}
            projected_question["options"] = []
        return {
            "id": row.get("id"),
            "question_id": row.get("question_id"),
            "points_awarded": row.get("points_awarded"),
            "question": projected_question,
            **dict.fromkeys(HIDDEN_RESPONSE_FIELDS),
        }


def wrong_question_ids(projected_attempt: Mapping[str, Any]) -> list[str]:
    """Question ids whose awarded points fall short of the question's value."""
    wrong: list[str] = []
    for answer in projected_attempt.get("answers") or []:
        question = answer.get("question") or {}
        awarded = answer.get("points_awarded")
        points = question.get("points")
        if awarded is None or points is None:
            continue
        if float(awarded) < float(points):
            wrong.append(answer.get("question_id") or question.get("id"))
    return wrong


def should_release_scores(test: Test | Mapping[str, Any], *, now: datetime | None = None) -> bool:
    return ScoreReleasePolicy().should_release(test, now=now)


def filter_attempt_by_release_mode(
    attempt: Attempt | Mapping[str, Any],
    test: Test | Mapping[str, Any],
    *,
    is_admin: bool,
    now: datetime | None = None,
) -> Attempt | Mapping[str, Any]:
    return ScoreReleasePolicy().filter_attempt(attempt, test, is_admin=is_admin, now=now)
