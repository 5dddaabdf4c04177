from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class QuestionType(str, Enum):
    MCQ_SINGLE = "MCQ_SINGLE"
    MCQ_MULTI = "MCQ_MULTI"
    SHORT_TEXT = "SHORT_TEXT"
    LONG_TEXT = "LONG_TEXT"
    NUMERIC = "NUMERIC"


class TestStatus(str, Enum):
    __test__ = False

    DRAFT = "DRAFT"
    PUBLISHED = "PUBLISHED"
    CLOSED = "CLOSED"


class ScoreReleaseMode(str, Enum):
    """How much graded detail a test-taker sees once scores are released."""

    NONE = "NONE"
    SCORE_ONLY = "SCORE_ONLY"
    SCORE_WITH_WRONG = "SCORE_WITH_WRONG"
    FULL_TEST = "FULL_TEST"


class QuestionOption(BaseModel):
    """Selectable option of a question."""

    id: str
    label: str = ""
    is_correct: bool = False
    order: int = 0

    model_config = ConfigDict(extra="allow")


class BlankAnswerKey(BaseModel):
    """Structured answer key for fill-in-the-blank questions."""

    answers: list[str] = Field(default_factory=list)
    points: list[float | None] = Field(default_factory=list)

    model_config = ConfigDict(extra="ignore")


class Question(BaseModel):
    """Assessment question as stored by the platform."""

    id: str
    type: QuestionType
    points: float = 0.0
    prompt_md: str = ""
    options: list[QuestionOption] = Field(default_factory=list)
    numeric_tolerance: float | None = None
    explanation: str | None = None
    blank_answer_key: BlankAnswerKey | None = None
    section_id: str | None = None
    order: int = 0

    model_config = ConfigDict(extra="allow")


class Answer(BaseModel):
    """A submitted answer plus its grading metadata."""

    id: str | None = None
    question_id: str | None = None
    selected_option_ids: list[str] | None = None
    numeric_answer: float | None = None
    answer_text: str | None = None
    points_awarded: float | None = None
    graded_at: datetime | None = None
    grader_note: str | None = None

    model_config = ConfigDict(extra="allow")


class Test(BaseModel):
    """Assessment header: lifecycle, schedule and disclosure settings."""

    __test__ = False

    id: str | None = None
    name: str | None = None
    status: TestStatus = TestStatus.DRAFT
    start_at: datetime | None = None
    end_at: datetime | None = None
    allow_late_until: datetime | None = None
    score_release_mode: ScoreReleaseMode = ScoreReleaseMode.FULL_TEST
    release_scores_at: datetime | None = None
    randomize_question_order: bool = False
    randomize_option_order: bool = False
    max_attempts: int | None = None
    duration_minutes: int | None = None

    model_config = ConfigDict(extra="allow")


class ProctoringEvent(BaseModel):
    """Client-reported integrity signal captured during an attempt."""

    kind: str
    ts: datetime | None = None
    meta: dict[str, Any] = Field(default_factory=dict)

    model_config = ConfigDict(extra="allow")


class AttemptAnswer(Answer):
    """Answer row joined with its question."""

    question: Question | None = None


class Attempt(BaseModel):
    """A test-taker's attempt as loaded from the store."""

    id: str
    test_id: str | None = None
    membership_id: str | None = None
    status: str | None = None
    grade_earned: float | None = None
    proctoring_score: int | None = None
    answers: list[AttemptAnswer] = Field(default_factory=list)
    proctoring_events: list[ProctoringEvent] = Field(default_factory=list)

    model_config = ConfigDict(extra="allow")
