from __future__ import annotations

import time
from enum import Enum

from .logging import get_logger

logger = get_logger(__name__)


class BreakerState(str, Enum):
    CLOSED = "closed"
    OPEN = "open"
    HALF_OPEN = "half_open"


class CircuitBreaker:
    """Failure-window circuit breaker guarding a graph store.

    Opens after ``max_failures`` failures inside ``window_seconds`` and
    rejects calls for ``cooldown_seconds``. The first call after the
    cooldown is a trial: success closes the breaker, failure reopens it.
    """

    def __init__(
        self,
        name: str = "graph_store",
        max_failures: int = 5,
        window_seconds: float = 60.0,
        cooldown_seconds: float = 30.0,
    ) -> None:
        self.name = name
        self.max_failures = max(1, max_failures)
        self.window_seconds = window_seconds
        self.cooldown_seconds = cooldown_seconds
        self._failures: list[float] = []
        self._opened_at: float | None = None
        self._trial = False

    @property
    def state(self) -> BreakerState:
        if self._opened_at is not None:
            return BreakerState.OPEN
        if self._trial:
            return BreakerState.HALF_OPEN
        return BreakerState.CLOSED

    @property
    def is_open(self) -> bool:
        return self.state is BreakerState.OPEN

    def retry_after(self) -> float:
        """Seconds until the breaker lets a trial call through."""
        if self._opened_at is None:
            return 0.0
        return max(0.0, self._opened_at + self.cooldown_seconds - time.monotonic())

    def allow_call(self) -> bool:
        if self._opened_at is not None:
            if self.retry_after() > 0:
                return False
            self._opened_at = None
            self._failures.clear()
            self._trial = True
            logger.info("breaker_half_open", breaker=self.name)
        self._evict(time.monotonic())
        return True

    def record_success(self) -> None:
        if self._trial:
            logger.info("breaker_closed", breaker=self.name)
        self._failures.clear()
        self._opened_at = None
        self._trial = False

    def record_failure(self) -> None:
        now = time.monotonic()
        self._evict(now)
        self._failures.append(now)
        if self._trial or len(self._failures) >= self.max_failures:
            self._opened_at = now
            self._trial = False
            logger.warning("breaker_opened", breaker=self.name, failures=len(self._failures))

    def _evict(self, now: float) -> None:
        cutoff = now - self.window_seconds
        self._failures = [t for t in self._failures if t >= cutoff]
