"""Tests for transaction file parser module."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from factories import esplora_tx

from block_ancestry.errors import MalformedTransaction
from block_ancestry.parser import TransactionFileParser


def test_parse_list_of_transactions(tmp_path: Path) -> None:
    path = tmp_path / "block.json"
    path.write_text(
        json.dumps([esplora_tx("T1", coinbase=True), esplora_tx("T2", "T1")]),
        encoding="utf-8",
    )

    records = TransactionFileParser(path).parse()

    assert [record.txid for record in records] == ["T1", "T2"]
    assert records[1].inputs == ("T1",)


def test_parse_object_with_txs_key(tmp_path: Path) -> None:
    path = tmp_path / "block.json"
    path.write_text(
        json.dumps({"id": "h", "txs": [esplora_tx("T1")]}),
        encoding="utf-8",
    )

    assert [record.txid for record in TransactionFileParser(path).parse()] == [
        "T1"
    ]


def test_missing_file_raises(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        TransactionFileParser(tmp_path / "missing.json").parse()


def test_invalid_json_is_malformed(tmp_path: Path) -> None:
    path = tmp_path / "block.json"
    path.write_text("{not json", encoding="utf-8")

    with pytest.raises(MalformedTransaction):
        TransactionFileParser(path).parse()


def test_non_list_payload_is_malformed(tmp_path: Path) -> None:
    path = tmp_path / "block.json"
    path.write_text(json.dumps({"id": "h"}), encoding="utf-8")

    with pytest.raises(MalformedTransaction, match="transaction list"):
        TransactionFileParser(path).parse()
