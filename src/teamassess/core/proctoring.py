"""Proctoring risk score derived from client-reported integrity events."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping

import structlog

from ..schemas import ProctoringEvent

DEFAULT_EVENT_WEIGHTS: dict[str, float] = {
    "EXIT_FULLSCREEN": 15,
    "TAB_SWITCH": 10,
    "VISIBILITY_HIDDEN": 8,
    "DEVTOOLS_OPEN": 20,
    "BLUR": 5,
    "COPY": 10,
    "PASTE": 8,
    "CONTEXTMENU": 3,
    "RESIZE": 2,
    "NETWORK_OFFLINE": 5,
    "MULTI_MONITOR_HINT": 12,
}


@dataclass
class ProctoringConfig:
    """Weight table and bounds for the risk score."""

    weights: dict[str, float] = field(default_factory=lambda: dict(DEFAULT_EVENT_WEIGHTS))
    default_weight: float = 1.0
    max_score: int = 100

    def __post_init__(self) -> None:
        if not 0 <= self.max_score <= 100:
            raise ValueError("max_score must be within 0..100")
        if self.default_weight < 0 or any(w < 0 for w in self.weights.values()):
            raise ValueError("event weights must be non-negative")


@dataclass(slots=True)
class ProctoringReport:
    score: int
    raw_total: float
    counts: dict[str, int]


def _event_kind(event: ProctoringEvent | Mapping[str, Any] | str) -> str:
    if isinstance(event, ProctoringEvent):
        return event.kind
    if isinstance(event, Mapping):
        return str(event.get("kind", ""))
    return str(event)


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


class ProctoringScorer:
    """Aggregate integrity events into a 0-100 risk score.

    Each event adds ``weight * ln(count + 1)`` where ``count`` is the running
    number of events of that kind, so repeated signals of one kind weigh
    progressively more.
    """

    method = "proctoring"

    def __init__(self, *, config: ProctoringConfig | None = None) -> None:
        self._config = config or ProctoringConfig()
        self._logger = structlog.get_logger(__name__)

    def weight_for(self, kind: str) -> float:
        return self._config.weights.get(kind, self._config.default_weight)

    def evaluate(
        self,
        events: Iterable[ProctoringEvent | Mapping[str, Any] | str],
    ) -> ProctoringReport:
        counts: dict[str, int] = {}
        total = 0.0
        for event in events:
            kind = _event_kind(event)
            counts[kind] = counts.get(kind, 0) + 1
            total += self.weight_for(kind) * math.log(counts[kind] + 1)

        score = min(max(_round_half_up(total), 0), self._config.max_score)
        if score >= self._config.max_score:
            self._logger.info("proctoring.score_capped", raw_total=total, counts=counts)
        return ProctoringReport(score=score, raw_total=total, counts=counts)

    def score(self, events: Iterable[ProctoringEvent | Mapping[str, Any] | str]) -> int:
        return self.evaluate(events).score


def calculate_proctoring_score(
    events: Iterable[ProctoringEvent | Mapping[str, Any] | str],
) -> int:
    """Score ``events`` with the default weight table."""
    return ProctoringScorer().score(events)
