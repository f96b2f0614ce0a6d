"""Build the in-block dependency graph from transaction records."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from types import MappingProxyType
from typing import Dict, Iterable, List, Mapping, Sequence, Tuple

from block_ancestry.errors import MalformedTransaction
from block_ancestry.models.transaction import Transaction

_LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class DependencyGraph:
    """Transactions of one block and the in-block outputs they spend.

    ``nodes`` keeps supplier order. ``parents`` maps every node to the
    in-block transactions its inputs reference, deduplicated and in
    first-seen order.
    """

    nodes: Tuple[str, ...]
    parents: Mapping[str, Tuple[str, ...]]

    def __contains__(self, txid: object) -> bool:
        return txid in self.parents

    def __len__(self) -> int:
        return len(self.nodes)

    @property
    def edge_count(self) -> int:
        return sum(len(parents) for parents in self.parents.values())

    def parents_of(self, txid: str) -> Tuple[str, ...]:
        return self.parents[txid]


def build_graph(transactions: Sequence[Transaction]) -> DependencyGraph:
    """Create a :class:`DependencyGraph` restricted to the block's node set.

    Input references to transactions outside ``transactions`` are dropped.
    Raises :class:`MalformedTransaction` when a record has no usable or a
    repeated ``txid``; no graph is produced in that case.
    """

    nodes = _validated_node_ids(transactions)
    node_set = set(nodes)

    parents: Dict[str, Tuple[str, ...]] = {}
    dangling = 0
    for transaction in transactions:
        kept: List[str] = []
        seen: set[str] = set()
        for reference in transaction.inputs:
            if reference not in node_set:
                dangling += 1
                continue
            if reference in seen:
                continue
            seen.add(reference)
            kept.append(reference)
        parents[transaction.txid] = tuple(kept)

    graph = DependencyGraph(nodes=nodes, parents=MappingProxyType(parents))
    _LOGGER.info(
        "Built dependency graph with %d nodes and %d edges "
        "(%d dangling references pruned)",
        len(graph),
        graph.edge_count,
        dangling,
    )
    return graph


def _validated_node_ids(
    transactions: Iterable[Transaction],
) -> Tuple[str, ...]:
    nodes: List[str] = []
    seen: set[str] = set()
    for index, transaction in enumerate(transactions):
        txid = getattr(transaction, "txid", None)
        if not isinstance(txid, str) or not txid:
            raise MalformedTransaction(
                f"Transaction at position {index} has no usable txid",
                index=index,
            )
        if txid in seen:
            raise MalformedTransaction(
                f"Transaction id {txid} appears more than once",
                index=index,
            )
        seen.add(txid)
        nodes.append(txid)
    return tuple(nodes)
