"""Assessment and visibility core components."""

from __future__ import annotations

from .access import (
    AccessPolicyEngine,
    has_announcement_target_access,
    has_calendar_access,
    has_test_assignment_access,
)
from .audience import audience_roles, ordered_audience_roles
from .availability import Availability, AvailabilityWindow, is_test_available
from .grading import (
    AutoGrader,
    GradeResult,
    GradingStatus,
    ScoreBreakdown,
    auto_grade,
    grading_status,
    migrate_blank_answer_key,
    parse_blank_answer_key,
    score_breakdown,
)
from .proctoring import ProctoringConfig, ProctoringReport, ProctoringScorer, calculate_proctoring_score
from .randomizer import AssessmentRandomizer, seeded_random, seeded_shuffle
from .release import (
    ScoreReleasePolicy,
    filter_attempt_by_release_mode,
    should_release_scores,
    wrong_question_ids,
)

__all__ = [
    "AccessPolicyEngine",
    "has_announcement_target_access",
    "has_calendar_access",
    "has_test_assignment_access",
    "audience_roles",
    "ordered_audience_roles",
    "Availability",
    "AvailabilityWindow",
    "is_test_available",
    "AutoGrader",
    "GradeResult",
    "GradingStatus",
    "ScoreBreakdown",
    "auto_grade",
    "grading_status",
    "migrate_blank_answer_key",
    "parse_blank_answer_key",
    "score_breakdown",
    "ProctoringConfig",
    "ProctoringReport",
    "ProctoringScorer",
    "calculate_proctoring_score",
    "AssessmentRandomizer",
    "seeded_random",
    "seeded_shuffle",
    "ScoreReleasePolicy",
    "filter_attempt_by_release_mode",
    "should_release_scores",
    "wrong_question_ids",
]
