"""
Block Ancestry Repository
Introductory remarks: This module is part of the block_ancestry codebase.

Shared fixtures for the test suite.
"""

from __future__ import annotations

from typing import Sequence

import pytest

from factories import tx

from block_ancestry.models.transaction import Transaction
from block_ancestry.utils import env


@pytest.fixture(autouse=True)
def _isolated_runtime_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep tests independent of the developer's shell and ``.env`` file."""

    monkeypatch.setattr(env, "_ENV_LOADED", True)
    for name in (
        "ESPLORA_API_URL",
        "BLOCK_HEIGHT",
        "TOP_RESULT_LIMIT",
        "CACHE_TTL_SECONDS",
        "LOG_FILE",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("LOG_LEVEL", "0")


@pytest.fixture
def chain() -> Sequence[Transaction]:
    return [tx("T1"), tx("T2", "T1"), tx("T3", "T2")]


@pytest.fixture
def diamond() -> Sequence[Transaction]:
    return [
        tx("T1"),
        tx("T2", "T1"),
        tx("T3", "T1"),
        tx("T4", "T2", "T3"),
    ]
