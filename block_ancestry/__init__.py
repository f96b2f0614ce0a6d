"""
Block Ancestry Repository
Introductory remarks: This module is part of the block_ancestry codebase.

In-block transaction ancestry analysis.
"""

from __future__ import annotations

from block_ancestry.analysis import BlockAnalysis, analyze_transactions
from block_ancestry.errors import (AncestryError, CyclicDependency,
                                   MalformedTransaction, SupplierError)
from block_ancestry.graph.builder import DependencyGraph, build_graph
from block_ancestry.graph.resolver import AncestryResult, resolve_ancestors
from block_ancestry.models.transaction import Transaction
from block_ancestry.ranker import AncestorCount, rank_ancestor_counts

__all__ = [
    "AncestorCount",
    "AncestryError",
    "AncestryResult",
    "BlockAnalysis",
    "CyclicDependency",
    "DependencyGraph",
    "MalformedTransaction",
    "SupplierError",
    "Transaction",
    "analyze_transactions",
    "build_graph",
    "rank_ancestor_counts",
    "resolve_ancestors",
]
