"""Tests for base client module."""

from __future__ import annotations

import logging
from typing import Any, List

import pytest
import requests

from block_ancestry.clients.base_client import (BaseClient,
                                                TransientRequestError)
from block_ancestry.errors import SupplierError
from block_ancestry.net.rate_limiter import RateLimiter


class DummyRateLimiter(RateLimiter):
    def __init__(self) -> None:
        # Provide dummy configuration but override acquire.
        super().__init__(max_calls=1, period_seconds=1.0)
        self.calls: List[None] = []

    def acquire(self) -> None:  # type: ignore[override]
        self.calls.append(None)


class SampleClient(BaseClient[Any]):
    def get_value(self) -> int:
        return self._execute_with_rate_limit(lambda: 42, name="get_value")

    def call(self, operation: Any) -> Any:
        return self._execute_with_retry(operation, name="sample.call")


class FlakyOperation:
    def __init__(self, failures: List[Exception], result: Any = "ok") -> None:
        self._failures = list(failures)
        self._result = result
        self.calls = 0

    def __call__(self) -> Any:
        self.calls += 1
        if self._failures:
            raise self._failures.pop(0)
        return self._result


def _client(limiter: RateLimiter, sleeps: List[float], **kwargs: Any) -> SampleClient:
    return SampleClient(limiter, sleep_fn=sleeps.append, **kwargs)


def test_base_client_executes_operation_and_observes_rate_limit() -> None:
    limiter = DummyRateLimiter()
    client = SampleClient(limiter)

    value = client.get_value()

    assert value == 42
    assert len(limiter.calls) == 1


def test_base_client_logs_latency(caplog: pytest.LogCaptureFixture) -> None:
    limiter = DummyRateLimiter()
    logger = logging.getLogger("test_logger")
    logger.setLevel(logging.DEBUG)
    client = SampleClient(limiter, logger=logger)

    with caplog.at_level(logging.DEBUG, logger="test_logger"):
        client.get_value()

    assert any("get_value" in message for message in caplog.messages)


def test_retry_recovers_from_transient_failures() -> None:
    limiter = DummyRateLimiter()
    sleeps: List[float] = []
    client = _client(limiter, sleeps, backoff_seconds=0.5)
    operation = FlakyOperation(
        [
            requests.ConnectionError("reset"),
            TransientRequestError("503"),
        ]
    )

    assert client.call(operation) == "ok"
    assert operation.calls == 3
    assert sleeps == [0.5, 1.0]
    # Every attempt waits for the rate limiter.
    assert len(limiter.calls) == 3


def test_retry_honours_retry_after_hint() -> None:
    sleeps: List[float] = []
    client = _client(DummyRateLimiter(), sleeps, backoff_seconds=0.5)
    operation = FlakyOperation([TransientRequestError("429", retry_after=3.0)])

    client.call(operation)

    assert sleeps == [3.0]


def test_retry_delay_is_capped() -> None:
    sleeps: List[float] = []
    client = _client(
        DummyRateLimiter(),
        sleeps,
        max_attempts=5,
        backoff_seconds=1.0,
        backoff_cap_seconds=2.5,
    )
    operation = FlakyOperation([requests.Timeout("slow")] * 4)

    client.call(operation)

    assert sleeps == [1.0, 2.0, 2.5, 2.5]


def test_retry_gives_up_with_supplier_error() -> None:
    sleeps: List[float] = []
    client = _client(DummyRateLimiter(), sleeps, max_attempts=2)
    operation = FlakyOperation([requests.ConnectionError("down")] * 2)

    with pytest.raises(SupplierError, match="sample.call"):
        client.call(operation)
    assert operation.calls == 2
    assert len(sleeps) == 1


def test_non_transient_errors_are_not_retried() -> None:
    sleeps: List[float] = []
    client = _client(DummyRateLimiter(), sleeps)
    operation = FlakyOperation([SupplierError("404")])

    with pytest.raises(SupplierError, match="404"):
        client.call(operation)
    assert operation.calls == 1
    assert sleeps == []


def test_max_attempts_must_be_positive() -> None:
    with pytest.raises(ValueError):
        SampleClient(DummyRateLimiter(), max_attempts=0)
