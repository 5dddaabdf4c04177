from __future__ import annotations

import json
from pathlib import Path

import pytest


@pytest.fixture
def test_bundle() -> dict:
    return {
        "test": {
            "id": "T-001",
            "name": "Regional practice",
            "status": "PUBLISHED",
            "score_release_mode": "SCORE_WITH_WRONG",
        },
        "questions": [
            {
                "id": "q1",
                "type": "MCQ_SINGLE",
                "points": 2,
                "prompt_md": "Pick B.",
                "options": [
                    {"id": "q1-a", "label": "A", "is_correct": False},
                    {"id": "q1-b", "label": "B", "is_correct": True},
                ],
            },
            {
                "id": "q2",
                "type": "NUMERIC",
                "points": 10,
                "numeric_tolerance": 0.5,
                "prompt_md": "Approximate pi.",
                "options": [{"id": "q2-key", "label": "3.14", "is_correct": True}],
            },
            {
                "id": "q3",
                "type": "SHORT_TEXT",
                "points": 10,
                "prompt_md": "[blank1] is the capital of [blank2].",
                "explanation": "{\"answers\": [\"Paris\", \"France\"], \"points\": [5, 5]}",
            },
            {
                "id": "q4",
                "type": "LONG_TEXT",
                "points": 8,
                "prompt_md": "Describe your method.",
            },
        ],
    }


@pytest.fixture
def attempts() -> list[dict]:
    return [
        {
            "id": "att-1",
            "membership_id": "m1",
            "answers": [
                {"id": "a1", "question_id": "q1", "selected_option_ids": ["q1-b"]},
                {"id": "a2", "question_id": "q2", "numeric_answer": 3.1},
                {"id": "a3", "question_id": "q3", "answer_text": "Paris | Germany"},
                {"id": "a4", "question_id": "q4", "answer_text": "I estimated."},
            ],
            "proctoring_events": [
                {"kind": "TAB_SWITCH"},
                {"kind": "TAB_SWITCH"},
                {"kind": "EXIT_FULLSCREEN"},
            ],
        }
    ]


@pytest.fixture
def write_json():
    def _write(path: Path, payload: object) -> None:
        path.write_text(json.dumps(payload, ensure_ascii=False), encoding="utf-8")

    return _write


@pytest.fixture
def write_jsonl():
    def _write(path: Path, records: list) -> None:
        path.write_text("\n".join(json.dumps(r, ensure_ascii=False) for r in records), encoding="utf-8")

    return _write
