"""Attempt grading pipeline assembly and execution."""

from __future__ import annotations

import json
from dataclasses import asdict
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any

import pendulum
import structlog
from pydantic import BaseModel, Field, ValidationError

from . import __version__
from .core import AutoGrader, ProctoringScorer, grading_status, score_breakdown
from .core.clock import NowProvider, resolve_now
from .exceptions import BundleLoadError
from .schemas import Attempt, AttemptAnswer, Question, Test


class TestBundle(BaseModel):
    """A test header together with its questions."""

    __test__ = False

    test: Test
    questions: list[Question] = Field(default_factory=list)

    def question_index(self) -> dict[str, Question]:
        return {question.id: question for question in self.questions}


class AttemptLoader:
    """Load attempts from a JSON lines file."""

    def load(self, path: Path) -> list[Attempt]:
        attempts: list[Attempt] = []
        errors: list[str] = []
        with path.open("r", encoding="utf-8") as handle:
            for idx, line in enumerate(handle, start=1):
                raw = line.strip()
                if not raw:
                    continue
                try:
                    record = json.loads(raw)
                except json.JSONDecodeError as exc:
                    errors.append(f"line {idx}: invalid JSON ({exc})")
                    continue
                if not isinstance(record, dict):
                    errors.append(f"line {idx}: attempt must be a JSON object")
                    continue
                try:
                    attempts.append(Attempt.model_validate(record))
                except ValidationError as exc:
                    errors.append(f"line {idx}: {exc}")
        if errors:
            raise BundleLoadError(errors, attempts)
        return attempts


class TestLoader:
    """Load a test bundle document."""

    __test__ = False

    def load(self, path: Path) -> TestBundle:
        with path.open("r", encoding="utf-8") as handle:
            try:
                data = json.load(handle)
            except json.JSONDecodeError as exc:
                raise ValueError(f"Invalid test JSON: {exc}") from exc
        return TestBundle.model_validate(data)


class OutputWriter:
    """Persist grading results."""

    def write(self, path: Path, payload: dict | list[dict]) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(
            json.dumps(payload, ensure_ascii=False, indent=2, default=json_default),
            encoding="utf-8",
        )


class AttemptGrader:
    """Grade every answer of an attempt and derive its summary fields."""

    def __init__(
        self,
        *,
        grader: AutoGrader,
        scorer: ProctoringScorer,
        now_provider: NowProvider | None = None,
    ) -> None:
        self._grader = grader
        self._scorer = scorer
        self._now_provider = now_provider or pendulum.now
        self._logger = structlog.get_logger(__name__)

    def grade(
        self,
        attempt: Attempt,
        questions: dict[str, Question],
        *,
        now: datetime | None = None,
    ) -> Attempt:
        graded_at = resolve_now(now, self._now_provider)
        answers: list[AttemptAnswer] = []
        for answer in attempt.answers:
            question = answer.question or questions.get(answer.question_id or "")
            if question is None:
                self._logger.warning(
                    "grading.unknown_question",
                    attempt_id=attempt.id,
                    question_id=answer.question_id,
                )
                answers.append(answer)
                continue

            result = self._grader.grade(question, answer)
            update: dict[str, Any] = {"question": question}
            if result.auto_graded:
                update["points_awarded"] = result.points_awarded
                update["graded_at"] = graded_at
            answers.append(answer.model_copy(update=update))

        breakdown = score_breakdown(answers)
        return attempt.model_copy(
            update={
                "answers": answers,
                "grade_earned": breakdown.earned_points,
                "proctoring_score": self._scorer.score(attempt.proctoring_events),
            }
        )


class AttemptGradingPipeline:
    """End-to-end grading orchestrator."""

    def __init__(
        self,
        *,
        attempt_grader: AttemptGrader,
        attempt_loader: AttemptLoader | None = None,
        test_loader: TestLoader | None = None,
        writer: OutputWriter | None = None,
    ) -> None:
        self._attempt_grader = attempt_grader
        self._attempts = attempt_loader or AttemptLoader()
        self._tests = test_loader or TestLoader()
        self._writer = writer or OutputWriter()
        self._logger = structlog.get_logger(__name__)

    def run(
        self,
        *,
        test_path: Path,
        attempts_path: Path,
        output_path: Path,
        now: datetime | None = None,
        audit_logger: "AuditLogger | None" = None,
    ) -> list[dict]:
        bundle = self._tests.load(test_path)
        load_errors: list[str] = []
        with structlog.contextvars.bound_contextvars(test_id=bundle.test.id):
            try:
                attempts = self._attempts.load(attempts_path)
            except BundleLoadError as exc:
                attempts = exc.partial
                load_errors.extend(exc.errors)
                self._logger.warning("attempts.partial_load", errors=exc.errors)

            serialized_results = [
                self._grade_one(attempt, bundle, now=now, audit_logger=audit_logger)
                for attempt in attempts
            ]

        payload_with_meta = {
            "metadata": {
                "test_id": bundle.test.id,
                "attempt_count": len(attempts),
                "errors": load_errors,
                "timestamp": pendulum.now().to_iso8601_string(),
                "app_version": __version__,
            },
            "results": serialized_results,
        }
        self._writer.write(output_path, payload_with_meta)
        return serialized_results

    def _grade_one(
        self,
        attempt: Attempt,
        bundle: TestBundle,
        *,
        now: datetime | None,
        audit_logger: "AuditLogger | None",
    ) -> dict:
        graded = self._attempt_grader.grade(attempt, bundle.question_index(), now=now)
        status = grading_status(graded.answers)
        breakdown = score_breakdown(graded.answers)

        entry = graded.model_dump(mode="json")
        entry["grading"] = asdict(status)
        entry["breakdown"] = asdict(breakdown)

        if audit_logger:
            audit_logger.append(
                {
                    "attempt_id": graded.id,
                    "test_id": bundle.test.id,
                    "membership_id": graded.membership_id,
                    "grade_earned": graded.grade_earned,
                    "proctoring_score": graded.proctoring_score,
                    "grading_status": status.status,
                }
            )

        self._logger.info(
            "pipeline.attempt_graded",
            attempt_id=graded.id,
            grade_earned=graded.grade_earned,
            proctoring_score=graded.proctoring_score,
            grading_status=status.status,
        )
        return entry


def json_default(value: Any) -> Any:
    if isinstance(value, pendulum.DateTime):
        return value.to_iso8601_string()
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, Enum):
        return value.value
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


class AuditLogger:
    """Append-only audit logger writing JSON lines."""

    def __init__(self, path: Path):
        self._path = path
        self._path.parent.mkdir(parents=True, exist_ok=True)

    def append(self, record: dict) -> None:
        with self._path.open("a", encoding="utf-8") as handle:
            handle.write(json.dumps(record, ensure_ascii=False, default=json_default))
            handle.write("\n")
