"""Base class for rate-limited, retrying service clients."""

from __future__ import annotations

import logging
import time
from typing import Callable, Generic, Optional, TypeVar

import requests

from block_ancestry import config
from block_ancestry.errors import SupplierError
from block_ancestry.net.rate_limiter import RateLimiter

T = TypeVar("T")

RETRYABLE_STATUS_CODES = frozenset({429, 500, 502, 503, 504})


class TransientRequestError(SupplierError):
    """Raised for failures worth retrying (throttling, 5xx, timeouts)."""

    def __init__(
        self,
        message: str,
        *,
        retry_after: Optional[float] = None,
    ) -> None:
        super().__init__(message)
        self.retry_after = retry_after


class BaseClient(Generic[T]):
    """Provide rate-limited execution of outbound requests with retries."""

    def __init__(
        self,
        rate_limiter: RateLimiter,
        *,
        logger: Optional[logging.Logger] = None,
        max_attempts: int = config.RETRY_MAX_ATTEMPTS,
        backoff_seconds: float = config.RETRY_BACKOFF_SECONDS,
        backoff_cap_seconds: float = config.RETRY_BACKOFF_CAP_SECONDS,
        sleep_fn: Optional[Callable[[float], None]] = None,
    ) -> None:
        if max_attempts <= 0:
            raise ValueError("max_attempts must be positive.")
        self._rate_limiter = rate_limiter
        self._logger = logger or logging.getLogger(self.__class__.__name__)
        self._max_attempts = max_attempts
        self._backoff_seconds = backoff_seconds
        self._backoff_cap_seconds = backoff_cap_seconds
        self._sleep_fn = sleep_fn or time.sleep

    def _execute_with_rate_limit(
        self,
        operation: Callable[[], T],
        *,
        name: Optional[str] = None,
    ) -> T:
        """Run ``operation`` after waiting for rate-limiter availability."""
        label = name or getattr(operation, "__name__", "<anonymous>")
        self._rate_limiter.acquire()

        started_at = time.perf_counter()
        try:
            return operation()
        finally:
            elapsed_ms = (time.perf_counter() - started_at) * 1000.0
            if self._logger.isEnabledFor(logging.DEBUG):
                self._logger.debug(
                    "Operation %s completed in %.2f ms",
                    label,
                    elapsed_ms,
                )

    def _execute_with_retry(
        self,
        operation: Callable[[], T],
        *,
        name: Optional[str] = None,
    ) -> T:
        """Run ``operation`` rate-limited, retrying transient failures.

        Delays double after each failed attempt, capped at
        ``backoff_cap_seconds``; a server ``Retry-After`` hint wins when
        present. The last failure is re-raised as :class:`SupplierError`.
        """
        label = name or getattr(operation, "__name__", "<anonymous>")
        delay = self._backoff_seconds
        for attempt in range(1, self._max_attempts + 1):
            try:
                return self._execute_with_rate_limit(operation, name=label)
            except TransientRequestError as error:
                failure: SupplierError = error
                wait = error.retry_after if error.retry_after else delay
            except (requests.ConnectionError, requests.Timeout) as error:
                failure = SupplierError(f"{label} failed: {error}")
                failure.__cause__ = error
                wait = delay

            if attempt == self._max_attempts:
                self._logger.error(
                    "%s failed after %d attempts: %s",
                    label,
                    attempt,
                    failure,
                )
                raise failure

            self._logger.warning(
                "%s attempt %d/%d failed (%s); retrying in %.2f s",
                label,
                attempt,
                self._max_attempts,
                failure,
                wait,
            )
            self._sleep_fn(min(wait, self._backoff_cap_seconds))
            delay = min(delay * 2, self._backoff_cap_seconds)

        raise AssertionError("unreachable")  # pragma: no cover
