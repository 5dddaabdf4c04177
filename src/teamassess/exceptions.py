"""Exception types raised by the assessment core."""

from __future__ import annotations

from typing import Any


class TeamAssessError(Exception):
    """Base class for package errors."""


class AnswerKeyError(TeamAssessError, ValueError):
    """Raised when a stored fill-in-blank answer key cannot be parsed."""


class BundleLoadError(TeamAssessError, ValueError):
    """Raised when an attempt bundle contains invalid records."""

    def __init__(self, errors: list[str], partial: list[Any]):
        super().__init__("Attempt bundle loading failed")
        self.errors = errors
        self.partial = partial

    def __str__(self) -> str:  # pragma: no cover - trivial
        return f"Attempt bundle loading failed: {self.errors}"
