from __future__ import annotations

import json

import pytest

from teamassess.core import auto_grade, migrate_blank_answer_key, parse_blank_answer_key
from teamassess.core.grading import AutoGrader
from teamassess.exceptions import AnswerKeyError
from teamassess.schemas import Answer, BlankAnswerKey, Question, QuestionOption, QuestionType


def mcq(qtype: QuestionType, correct: set[str], points: float = 4) -> Question:
    return Question(
        id="q-mcq",
        type=qtype,
        points=points,
        options=[QuestionOption(id=oid, label=oid.upper(), is_correct=oid in correct) for oid in "abcd"],
    )


def numeric(label: str, tolerance: float | None = 0.5, points: float = 10) -> Question:
    return Question(
        id="q-num",
        type=QuestionType.NUMERIC,
        points=points,
        numeric_tolerance=tolerance,
        options=[QuestionOption(id="correct", label=label, is_correct=True)],
    )


def blanks(explanation: str | None, points: float = 10, **extra) -> Question:
    return Question(
        id="q-blank",
        type=QuestionType.SHORT_TEXT,
        points=points,
        prompt_md="The capital of [blank1] is in [blank2].",
        explanation=explanation,
        **extra,
    )


def test_mcq_single_correct_and_wrong():
    question = mcq(QuestionType.MCQ_SINGLE, {"b"})

    right = auto_grade(question, Answer(selected_option_ids=["b"]))
    wrong = auto_grade(question, Answer(selected_option_ids=["a"]))
    empty = auto_grade(question, Answer())

    assert (right.points_awarded, right.is_correct) == (4, True)
    assert (wrong.points_awarded, wrong.is_correct) == (0, False)
    assert (empty.points_awarded, empty.is_correct) == (0, False)
    assert right.auto_graded and wrong.auto_graded


def test_mcq_single_without_correct_option_never_matches():
    question = mcq(QuestionType.MCQ_SINGLE, set())

    assert auto_grade(question, Answer()).is_correct is False


def test_mcq_multi_requires_exact_set():
    question = mcq(QuestionType.MCQ_MULTI, {"a", "c"})

    assert auto_grade(question, Answer(selected_option_ids=["c", "a"])).points_awarded == 4
    assert auto_grade(question, Answer(selected_option_ids=["a"])).points_awarded == 0
    assert auto_grade(question, Answer(selected_option_ids=["a", "c", "d"])).points_awarded == 0


def test_numeric_within_tolerance():
    question = numeric("3.14")

    close = auto_grade(question, Answer(numeric_answer=3.1))
    far = auto_grade(question, Answer(numeric_answer=2))

    assert (close.points_awarded, close.is_correct) == (10, True)
    assert (far.points_awarded, far.is_correct) == (0, False)


def test_numeric_tolerance_defaults_to_exact():
    question = numeric("42", tolerance=None)

    assert auto_grade(question, Answer(numeric_answer=42)).is_correct is True
    assert auto_grade(question, Answer(numeric_answer=42.01)).is_correct is False


@pytest.mark.parametrize("label", ["", "n/a", "abc12"])
def test_numeric_unparseable_key_scores_zero(label: str):
    result = auto_grade(numeric(label), Answer(numeric_answer=1))

    assert (result.points_awarded, result.is_correct) == (0, False)


def test_numeric_missing_answer_scores_zero():
    result = auto_grade(numeric("1"), Answer())

    assert (result.points_awarded, result.is_correct) == (0, False)


def test_numeric_label_with_unit_suffix():
    assert auto_grade(numeric("9.8 m/s^2", tolerance=0.05), Answer(numeric_answer=9.81)).is_correct


def test_fill_blank_partial_credit():
    key = json.dumps({"answers": ["Paris", "France"], "points": [5, 5]})

    result = auto_grade(blanks(key), Answer(answer_text="Paris | Germany"))

    assert (result.points_awarded, result.is_correct) == (5, False)
    assert result.auto_graded is True


def test_fill_blank_per_blank_points_full_marks_case_insensitive():
    key = json.dumps({"answers": ["Paris", "France"], "points": [4, 6]})

    result = auto_grade(blanks(key), Answer(answer_text="  paris |   FRANCE "))

    assert (result.points_awarded, result.is_correct) == (10, True)


def test_fill_blank_all_or_nothing_without_points():
    key = json.dumps({"answers": ["Paris", "France"]})

    assert auto_grade(blanks(key), Answer(answer_text="paris | france")).points_awarded == 10
    assert auto_grade(blanks(key), Answer(answer_text="Paris | Spain")).points_awarded == 0


def test_fill_blank_legacy_list_key():
    question = blanks(json.dumps(["Paris", "France"]))

    result = auto_grade(question, Answer(answer_text="Paris | France"))

    assert (result.points_awarded, result.is_correct) == (10, True)


def test_fill_blank_count_mismatch_scores_zero():
    key = json.dumps({"answers": ["Paris", "France"], "points": [5, 5]})

    result = auto_grade(blanks(key), Answer(answer_text="Paris"))

    assert (result.points_awarded, result.is_correct) == (0, False)


def test_fill_blank_null_point_entries_only_credit_scored_blanks():
    key = json.dumps({"answers": ["Paris", "France"], "points": [None, 3]})

    result = auto_grade(blanks(key), Answer(answer_text="Paris | France"))

    assert (result.points_awarded, result.is_correct) == (3, False)


def test_fill_blank_points_never_exceed_question_points():
    key = json.dumps({"answers": ["Paris", "France"], "points": [8, 8]})

    result = auto_grade(blanks(key, points=10), Answer(answer_text="Paris | France"))

    assert result.points_awarded == 10


@pytest.mark.parametrize("explanation", ["{not json", '{"foo": 1}', "42", '[1, 2]', None, "[]"])
def test_fill_blank_malformed_key_requires_manual_grading(explanation):
    result = auto_grade(blanks(explanation), Answer(answer_text="Paris | France"))

    assert (result.points_awarded, result.is_correct, result.auto_graded) == (0, False, False)


def test_fill_blank_structured_key_takes_precedence():
    question = blanks(
        "Capitals are easy.",
        blank_answer_key=BlankAnswerKey(answers=["Paris", "France"], points=[2, 3]),
    )

    result = auto_grade(question, Answer(answer_text="Paris | France"))

    assert (result.points_awarded, result.is_correct) == (5, True)


@pytest.mark.parametrize(
    "question",
    [
        Question(id="q-long", type=QuestionType.LONG_TEXT, points=5, prompt_md="Explain."),
        Question(id="q-short", type=QuestionType.SHORT_TEXT, points=5, prompt_md="Name a city."),
    ],
)
def test_free_text_requires_manual_grading(question: Question):
    result = auto_grade(question, Answer(answer_text="Paris"))

    assert (result.points_awarded, result.is_correct, result.auto_graded) == (0, False, False)


def test_grader_accepts_mappings():
    result = AutoGrader().grade(
        {
            "id": "q1",
            "type": "MCQ_SINGLE",
            "points": 2,
            "options": [{"id": "x", "label": "X", "is_correct": True}],
        },
        {"selected_option_ids": ["x"]},
    )

    assert result.points_awarded == 2


def test_points_never_exceed_question_points_across_types():
    grader = AutoGrader()
    questions = [
        mcq(QuestionType.MCQ_SINGLE, {"a"}, points=3),
        mcq(QuestionType.MCQ_MULTI, {"a", "b"}, points=3),
        numeric("1", points=3),
        blanks(json.dumps({"answers": ["a"], "points": [99]}), points=3).model_copy(
            update={"prompt_md": "[blank]"}
        ),
    ]
    answers = [
        Answer(selected_option_ids=["a"]),
        Answer(selected_option_ids=["a", "b"]),
        Answer(numeric_answer=1),
        Answer(answer_text="a"),
    ]

    for question in questions:
        for answer in answers:
            assert grader.grade(question, answer).points_awarded <= question.points


def test_parse_blank_answer_key_shapes():
    assert parse_blank_answer_key('["a", "b"]').answers == ["a", "b"]
    parsed = parse_blank_answer_key('{"answers": ["a"], "points": [2]}')
    assert parsed.answers == ["a"]
    assert parsed.points == [2]
    with pytest.raises(AnswerKeyError):
        parse_blank_answer_key("nope")


def test_migrate_blank_answer_key_moves_key_out_of_explanation():
    question = blanks(json.dumps({"answers": ["Paris", "France"], "points": [5, 5]}))

    migrated = migrate_blank_answer_key(question)

    assert migrated.blank_answer_key == BlankAnswerKey(answers=["Paris", "France"], points=[5, 5])
    assert migrated.explanation is None
    assert question.blank_answer_key is None
    assert auto_grade(migrated, Answer(answer_text="Paris | Germany")).points_awarded == 5
