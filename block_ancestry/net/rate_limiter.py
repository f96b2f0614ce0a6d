"""
Block Ancestry Repository
Introductory remarks: This module is part of the block_ancestry codebase.

Token-bucket rate limiter shared by outbound Esplora requests.
"""

from __future__ import annotations

import threading
import time
from collections.abc import Callable
from typing import Optional

from block_ancestry import config


class RateLimiter:
    """Allow at most ``max_calls`` requests per ``period_seconds``.

    Each :meth:`acquire` spends one token; tokens flow back at a constant
    rate, so a full bucket permits a short burst before callers wait.
    """

    def __init__(
        self,
        max_calls: int = config.RATE_LIMIT_MAX_CALLS,
        period_seconds: float = config.RATE_LIMIT_PERIOD_SECONDS,
        *,
        time_fn: Optional[Callable[[], float]] = None,
        sleep_fn: Optional[Callable[[float], None]] = None,
    ) -> None:
        if max_calls <= 0:
            raise ValueError("max_calls must be positive.")
        if period_seconds <= 0:
            raise ValueError("period_seconds must be positive.")

        self._capacity = float(max_calls)
        self._seconds_per_token = float(period_seconds) / self._capacity
        self._time_fn = time_fn or time.monotonic
        self._sleep_fn = sleep_fn or time.sleep

        self._lock = threading.Lock()
        self._tokens = self._capacity
        self._updated_at = self._time_fn()
        self.total_wait_seconds = 0.0

    def acquire(self) -> None:
        """Block until a token is available, then spend it."""
        while True:
            with self._lock:
                self._refill(self._time_fn())
                if self._tokens >= 1.0:
                    self._tokens -= 1.0
                    return
                wait_time = (1.0 - self._tokens) * self._seconds_per_token

            # Sleep outside the lock so other threads can refill.
            self.total_wait_seconds += wait_time
            self._sleep_fn(wait_time)

    def _refill(self, now: float) -> None:
        elapsed = now - self._updated_at
        if elapsed <= 0:
            return
        self._tokens = min(
            self._capacity,
            self._tokens + elapsed / self._seconds_per_token,
        )
        self._updated_at = now
