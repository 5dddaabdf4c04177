"""Pydantic schema definitions for records consumed by the core."""

from __future__ import annotations

from .assessment import (
    Answer,
    Attempt,
    AttemptAnswer,
    BlankAnswerKey,
    ProctoringEvent,
    Question,
    QuestionOption,
    QuestionType,
    ScoreReleaseMode,
    Test,
    TestStatus,
)
from .membership import (
    AssignmentScope,
    CalendarItem,
    Membership,
    MembershipRole,
    RosterAssignment,
    TestAssignment,
    VisibilityTarget,
    user_event_ids,
)

__all__ = [
    "Answer",
    "Attempt",
    "AttemptAnswer",
    "BlankAnswerKey",
    "ProctoringEvent",
    "Question",
    "QuestionOption",
    "QuestionType",
    "ScoreReleaseMode",
    "Test",
    "TestStatus",
    "AssignmentScope",
    "CalendarItem",
    "Membership",
    "MembershipRole",
    "RosterAssignment",
    "TestAssignment",
    "VisibilityTarget",
    "user_event_ids",
]
