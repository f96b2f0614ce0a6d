"""Loader for block transaction lists saved as JSON files."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, List, Union

from block_ancestry.errors import MalformedTransaction
from block_ancestry.models.transaction import (Transaction,
                                               transactions_from_payloads)

_LOGGER = logging.getLogger(__name__)


class TransactionFileParser:
    """Parse a saved block into :class:`Transaction` records.

    The file holds either a JSON list of Esplora transaction objects or an
    object with that list under ``"txs"``. Order is preserved.
    """

    def __init__(self, path: Union[Path, str]) -> None:
        self._path = Path(path)

    def parse(self) -> List[Transaction]:
        payload = self._read_payload()
        records = payload.get("txs") if isinstance(payload, dict) else payload
        if not isinstance(records, list):
            raise MalformedTransaction(
                f"{self._path} does not contain a transaction list"
            )

        transactions = transactions_from_payloads(records)
        _LOGGER.info(
            "Parsed %d transactions from %s",
            len(transactions),
            self._path,
        )
        return transactions

    def _read_payload(self) -> Any:
        if not self._path.exists():
            raise FileNotFoundError(
                f"Transaction file not found: {self._path}"
            )

        with self._path.open("r", encoding="utf-8") as handle:
            try:
                return json.load(handle)
            except json.JSONDecodeError as error:
                raise MalformedTransaction(
                    f"{self._path} is not valid JSON: {error}"
                ) from error
