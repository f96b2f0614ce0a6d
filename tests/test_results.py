"""Tests for results module."""

from __future__ import annotations

import json

import pytest

from block_ancestry.ranker import AncestorCount
from block_ancestry.results import (OUTPUT_FORMATS, ReportFormatter,
                                    to_ndjson_line)

RANKED = [
    AncestorCount(txid="a" * 64, ancestor_count=12),
    AncestorCount(txid="b" * 64, ancestor_count=3),
]


def test_table_lists_rank_txid_and_count() -> None:
    lines = ReportFormatter("table").format_lines(RANKED, limit=10)

    assert "Top 10 Transactions" in lines[0]
    assert lines[1].split(" | ") == ["rank", "txid".ljust(64), "ancestors"]
    assert set(lines[2]) <= {"-", "+"}
    assert lines[3].split(" | ") == ["   1", "a" * 64, "       12"]
    assert lines[4].endswith("3")
    assert len(lines) == 5


def test_table_for_empty_ranking_still_has_header() -> None:
    lines = ReportFormatter().format_lines([], limit=0)

    assert len(lines) == 3
    assert "Top 0" in lines[0]


def test_ndjson_emits_one_object_per_entry() -> None:
    lines = ReportFormatter("ndjson").format_lines(RANKED, limit=10)

    assert [json.loads(line) for line in lines] == [
        {"txid": "a" * 64, "ancestors": 12},
        {"txid": "b" * 64, "ancestors": 3},
    ]


def test_unknown_format_rejected() -> None:
    with pytest.raises(ValueError, match="Unknown output format"):
        ReportFormatter("csv")


def test_to_ndjson_line_is_compact() -> None:
    assert to_ndjson_line({"txid": "x", "ancestors": 1}) == (
        '{"txid":"x","ancestors":1}'
    )
    assert OUTPUT_FORMATS == ("table", "ndjson")
