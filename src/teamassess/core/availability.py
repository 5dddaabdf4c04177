"""Submission window checks for tests."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Mapping

import pendulum

from ..schemas import Test, TestStatus
from .clock import NowProvider, as_utc, resolve_now

REASON_NOT_PUBLISHED = "Test is not published"
REASON_NOT_STARTED = "Test has not started yet"
REASON_DEADLINE_PASSED = "Test deadline has passed"
REASON_ATTEMPTS_EXHAUSTED = "Maximum attempts reached"


@dataclass(slots=True)
class Availability:
    available: bool
    reason: str | None = None


class AvailabilityWindow:
    """Decide whether a test currently accepts submissions."""

    def __init__(self, *, now_provider: NowProvider | None = None) -> None:
        self._now_provider = now_provider or pendulum.now

    def check(
        self,
        test: Test | Mapping[str, Any],
        *,
        now: datetime | None = None,
        attempts_used: int | None = None,
    ) -> Availability:
        profile = test if isinstance(test, Test) else Test.model_validate(test)
        if profile.status is not TestStatus.PUBLISHED:
            return Availability(False, REASON_NOT_PUBLISHED)

        current = resolve_now(now, self._now_provider)

        if profile.start_at is not None and current < as_utc(profile.start_at):
            return Availability(False, REASON_NOT_STARTED)

        if profile.end_at is not None:
            deadline = profile.allow_late_until or profile.end_at
            if current > as_utc(deadline):
                return Availability(False, REASON_DEADLINE_PASSED)

        if (
            profile.max_attempts is not None
            and attempts_used is not None
            and attempts_used >= profile.max_attempts
        ):
            return Availability(False, REASON_ATTEMPTS_EXHAUSTED)

        return Availability(True)

    def is_late(self, test: Test | Mapping[str, Any], *, now: datetime | None = None) -> bool:
        """True while inside the grace period after ``end_at``."""
        profile = test if isinstance(test, Test) else Test.model_validate(test)
        if profile.end_at is None or profile.allow_late_until is None:
            return False
        current = resolve_now(now, self._now_provider)
        return as_utc(profile.end_at) < current <= as_utc(profile.allow_late_until)


def is_test_available(test: Test | Mapping[str, Any], *, now: datetime | None = None) -> Availability:
    return AvailabilityWindow().check(test, now=now)
