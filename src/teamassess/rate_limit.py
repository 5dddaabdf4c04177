"""Fixed-window rate limiting for assessment actions.

State lives behind :class:`RateLimitStore`. The default in-memory store is
process-local: it is not shared between service instances and is lost on
restart.
"""

from __future__ import annotations

import threading
import time
from dataclasses import dataclass
from typing import Callable, Iterator, Protocol, runtime_checkable

import structlog

logger = structlog.get_logger(__name__)

DEFAULT_SWEEP_INTERVAL_SECONDS = 60 * 60


@dataclass
class RateLimitConfig:
    """Defaults applied when a check omits its own limits."""

    max_requests: int = 30
    window_ms: int = 60_000


@dataclass(slots=True)
class WindowRecord:
    count: int
    reset_at: int


@dataclass(slots=True)
class RateLimitResult:
    allowed: bool
    remaining: int
    reset_at: int


@runtime_checkable
class RateLimitStore(Protocol):
    """Key-value contract for rate-limit windows."""

    def get(self, key: str) -> WindowRecord | None:
        """Return the record for ``key`` if present."""

    def set(self, key: str, record: WindowRecord) -> None:
        """Store ``record`` under ``key``."""

    def delete(self, key: str) -> None:
        """Remove ``key`` if present."""

    def items(self) -> Iterator[tuple[str, WindowRecord]]:
        """Iterate over a snapshot of stored records."""


class InMemoryRateLimitStore:
    """Dict-backed store for a single process."""

    def __init__(self) -> None:
        self._records: dict[str, WindowRecord] = {}

    def get(self, key: str) -> WindowRecord | None:
        return self._records.get(key)

    def set(self, key: str, record: WindowRecord) -> None:
        self._records[key] = record

    def delete(self, key: str) -> None:
        self._records.pop(key, None)

    def items(self) -> Iterator[tuple[str, WindowRecord]]:
        return iter(list(self._records.items()))

    def __len__(self) -> int:
        return len(self._records)


def _now_ms() -> int:
    return int(time.time() * 1000)


class RateLimiter:
    """Count actions per key inside fixed windows.

    Examples:
        limiter = RateLimiter()
        result = limiter.check("attempt:submit:m1", max_requests=5, window_ms=60_000)
        if not result.allowed:
            ...
    """

    def __init__(
        self,
        store: RateLimitStore | None = None,
        *,
        config: RateLimitConfig | None = None,
        clock: Callable[[], int] | None = None,
    ) -> None:
        self._store = store if store is not None else InMemoryRateLimitStore()
        self._config = config or RateLimitConfig()
        self._clock = clock or _now_ms
        self._lock = threading.Lock()

    @property
    def store(self) -> RateLimitStore:
        return self._store

    def check(
        self,
        key: str,
        max_requests: int | None = None,
        window_ms: int | None = None,
    ) -> RateLimitResult:
        if max_requests is None:
            max_requests = self._config.max_requests
        if window_ms is None:
            window_ms = self._config.window_ms
        with self._lock:
            now = self._clock()
            record = self._store.get(key)

            if record is None or now > record.reset_at:
                reset_at = now + window_ms
                self._store.set(key, WindowRecord(count=1, reset_at=reset_at))
                return RateLimitResult(True, max(max_requests - 1, 0), reset_at)

            if record.count >= max_requests:
                logger.info("rate_limit.exceeded", key=key, reset_at=record.reset_at)
                return RateLimitResult(False, 0, record.reset_at)

            record.count += 1
            self._store.set(key, record)
            return RateLimitResult(True, max_requests - record.count, record.reset_at)

    def sweep(self) -> int:
        """Remove expired windows and return how many were evicted."""
        with self._lock:
            now = self._clock()
            expired = [key for key, record in self._store.items() if now > record.reset_at]
            for key in expired:
                self._store.delete(key)
        if expired:
            logger.debug("rate_limit.swept", evicted=len(expired))
        return len(expired)


class RateLimitSweeper:
    """Daemon thread calling :meth:`RateLimiter.sweep` on an interval."""

    def __init__(
        self,
        limiter: RateLimiter,
        *,
        interval_seconds: float = DEFAULT_SWEEP_INTERVAL_SECONDS,
    ) -> None:
        self._limiter = limiter
        self._interval = interval_seconds
        self._stopped = threading.Event()
        self._thread: threading.Thread | None = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        if self.running:
            return
        self._stopped.clear()
        self._thread = threading.Thread(target=self._run, name="rate-limit-sweeper", daemon=True)
        self._thread.start()

    def stop(self, timeout: float | None = None) -> None:
        self._stopped.set()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None

    def _run(self) -> None:
        while not self._stopped.wait(self._interval):
            self._limiter.sweep()


_default_limiter = RateLimiter()
_default_sweeper = RateLimitSweeper(_default_limiter)


def check_rate_limit(key: str, max_requests: int, window_ms: int) -> RateLimitResult:
    """Check ``key`` against the shared process-local limiter."""
    if not _default_sweeper.running:
        _default_sweeper.start()
    return _default_limiter.check(key, max_requests, window_ms)
