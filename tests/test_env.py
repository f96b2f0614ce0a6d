"""Tests for environment helpers."""

from __future__ import annotations

import logging
from pathlib import Path

import pytest

from block_ancestry import config
from block_ancestry.utils import env


def test_load_dotenv_sets_missing_keys_only(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    dotenv = tmp_path / ".env"
    dotenv.write_text(
        "# comment\nBLOCK_HEIGHT=700000\nTOP_RESULT_LIMIT='3'\nnot a pair\n",
        encoding="utf-8",
    )
    monkeypatch.setattr(env, "_ENV_LOADED", False)
    monkeypatch.setenv("TOP_RESULT_LIMIT", "8")
    # Register BLOCK_HEIGHT with monkeypatch so teardown removes it again.
    monkeypatch.setenv("BLOCK_HEIGHT", "unset")
    monkeypatch.delenv("BLOCK_HEIGHT")

    env.load_dotenv(dotenv)

    assert env.os.environ["BLOCK_HEIGHT"] == "700000"
    assert env.os.environ["TOP_RESULT_LIMIT"] == "8"


def test_load_settings_defaults() -> None:
    settings = env.load_settings()

    assert settings.api_url == config.ESPLORA_API_URL
    assert settings.block_height == config.BLOCK_HEIGHT
    assert settings.top_result_limit == config.TOP_RESULT_LIMIT
    assert settings.cache_ttl_seconds == config.CACHE_TTL_SECONDS


def test_load_settings_reads_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ESPLORA_API_URL", "https://mempool.test/api")
    monkeypatch.setenv("BLOCK_HEIGHT", "1")
    monkeypatch.setenv("TOP_RESULT_LIMIT", "25")
    monkeypatch.setenv("CACHE_TTL_SECONDS", "60")

    settings = env.load_settings()

    assert settings.api_url == "https://mempool.test/api"
    assert settings.block_height == 1
    assert settings.top_result_limit == 25
    assert settings.cache_ttl_seconds == 60


def test_read_int_falls_back_on_garbage(
    monkeypatch: pytest.MonkeyPatch, caplog: pytest.LogCaptureFixture
) -> None:
    monkeypatch.setenv("TOP_RESULT_LIMIT", "ten")

    with caplog.at_level(logging.WARNING):
        value = env.read_int("TOP_RESULT_LIMIT", 10)

    assert value == 10
    assert any("TOP_RESULT_LIMIT" in message for message in caplog.messages)


def test_read_int_enforces_minimum(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("CACHE_TTL_SECONDS", "0")

    assert env.read_int("CACHE_TTL_SECONDS", 30, minimum=1) == 30
