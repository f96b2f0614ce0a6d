"""Pipeline that turns one block's transactions into a ranked report."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import FrozenSet, List, Mapping, Sequence, Tuple

from block_ancestry import config
from block_ancestry.errors import CyclicDependency
from block_ancestry.graph.builder import DependencyGraph, build_graph
from block_ancestry.graph.resolver import resolve_ancestors
from block_ancestry.models.transaction import Transaction
from block_ancestry.ranker import AncestorCount, rank_ancestor_counts

_LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class BlockAnalysis:
    """Everything derived from one block's transaction list."""

    graph: DependencyGraph
    ancestors: Mapping[str, FrozenSet[str]]
    ranked: List[AncestorCount]
    cycles: Tuple[CyclicDependency, ...]
    latency_ms: int

    @property
    def transaction_count(self) -> int:
        return len(self.graph)

    def counts(self) -> List[AncestorCount]:
        """All ancestor counts in supplier order."""
        return [
            AncestorCount(txid=txid, ancestor_count=len(found))
            for txid, found in self.ancestors.items()
        ]


def analyze_transactions(
    transactions: Sequence[Transaction],
    *,
    top: int = config.TOP_RESULT_LIMIT,
) -> BlockAnalysis:
    """Build the graph, resolve ancestor sets and rank the top ``top``.

    Raises :class:`~block_ancestry.errors.MalformedTransaction` for records
    without a usable id; cycles are reported on the result instead.
    """

    started_at = time.perf_counter()
    _LOGGER.info("Analysing ancestry of %d transactions", len(transactions))

    graph = build_graph(transactions)
    resolved = resolve_ancestors(graph)
    ranked = rank_ancestor_counts(resolved.counts(), limit=top)

    latency_ms = int((time.perf_counter() - started_at) * 1000)
    _LOGGER.debug("Ancestry analysis completed in %d ms", latency_ms)
    return BlockAnalysis(
        graph=graph,
        ancestors=resolved.ancestors,
        ranked=ranked,
        cycles=resolved.cycles,
        latency_ms=latency_ms,
    )
