"""Collect every transaction of a block from the Esplora API."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from block_ancestry import config
from block_ancestry.clients.esplora_client import EsploraClient
from block_ancestry.errors import SupplierError
from block_ancestry.models.transaction import (Transaction,
                                               transactions_from_payloads)

_LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class BlockTransactions:
    """Transactions of one block in the order the API lists them."""

    block_hash: str
    transactions: List[Transaction]
    height: Optional[int] = None
    tx_count: Optional[int] = None
    skipped_pages: Tuple[int, ...] = field(default=())

    @property
    def complete(self) -> bool:
        return not self.skipped_pages


class TransactionSupplier:
    """Page through ``block/:hash/txs/:start_index`` for a whole block."""

    def __init__(
        self,
        client: Optional[EsploraClient] = None,
        *,
        page_size: int = config.BLOCK_TRANSACTION_PAGE_SIZE,
    ) -> None:
        if page_size <= 0:
            raise ValueError("page_size must be positive.")
        self._client = client or EsploraClient()
        self._page_size = page_size

    def fetch_by_height(self, height: int) -> BlockTransactions:
        block_hash = self._client.get_block_hash(height)
        _LOGGER.info("Block %d has hash %s", height, block_hash)
        return self.fetch_block(block_hash, height=height)

    def fetch_block(
        self,
        block_hash: str,
        *,
        height: Optional[int] = None,
    ) -> BlockTransactions:
        """Fetch block metadata, then every transaction page.

        A page that still fails after the client's retries is skipped and
        its start index recorded in ``skipped_pages``.
        """

        block = self._client.get_block(block_hash)
        tx_count = block.get("tx_count")
        if not isinstance(tx_count, int) or tx_count < 0:
            raise SupplierError(
                f"Block {block_hash} reports no usable tx_count: {tx_count!r}"
            )
        if height is None and isinstance(block.get("height"), int):
            height = block["height"]

        transactions: List[Transaction] = []
        skipped: List[int] = []
        for start_index in range(0, tx_count, self._page_size):
            last_index = min(start_index + self._page_size, tx_count)
            _LOGGER.info(
                "Fetching transactions %d - %d out of %d",
                start_index + 1,
                last_index,
                tx_count,
            )
            try:
                page = self._client.get_block_transactions(
                    block_hash, start_index
                )
            except SupplierError as error:
                _LOGGER.warning(
                    "Skipping transactions %d - %d of block %s: %s",
                    start_index + 1,
                    last_index,
                    block_hash,
                    error,
                )
                skipped.append(start_index)
                continue
            transactions.extend(transactions_from_payloads(page))

        if skipped:
            _LOGGER.warning(
                "Block %s is incomplete: %d page(s) skipped",
                block_hash,
                len(skipped),
            )
        return BlockTransactions(
            block_hash=block_hash,
            transactions=transactions,
            height=height,
            tx_count=tx_count,
            skipped_pages=tuple(skipped),
        )
