"""Time helpers shared by schedule-based policies."""

from __future__ import annotations

from datetime import datetime
from typing import Callable

import pendulum

NowProvider = Callable[[], datetime]


def as_utc(value: datetime) -> pendulum.DateTime:
    """Coerce ``value`` to an aware pendulum instance; naive values are UTC."""
    if isinstance(value, pendulum.DateTime) and value.tzinfo is not None:
        return value
    return pendulum.instance(value, tz="UTC")


def resolve_now(now: datetime | None, provider: NowProvider) -> pendulum.DateTime:
    return as_utc(now if now is not None else provider())
