"""Ancestor closure for every transaction of a dependency graph.

Nodes are visited once, parents strictly before children, so each node's
ancestor set is assembled from its parents' finished sets instead of a
fresh traversal. Kahn's algorithm orders the acyclic part of the graph.
Whatever it cannot release sits on, or below, a cycle; those nodes are
grouped into strongly connected components (iterative Tarjan), which come
out parents first. A node below a cycle inherits the whole closure of the
cycle it depends on, so its set stays exact. Nodes on a cycle are ordered
by a depth-first postorder that ignores the edge closing each loop, and
the cycle is reported.
"""

from __future__ import annotations

import logging
import warnings
from collections import deque
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import (Deque, Dict, FrozenSet, Iterator, List, Mapping,
                    MutableMapping, Sequence, Set, Tuple)

from block_ancestry.errors import CyclicDependency
from block_ancestry.graph.builder import DependencyGraph

_LOGGER = logging.getLogger(__name__)

_EMPTY: FrozenSet[str] = frozenset()
_ON_STACK = 1
_DONE = 2

Edge = Tuple[str, str]


@dataclass(frozen=True)
class AncestryResult:
    """Ancestor sets keyed by txid, in graph order, plus cycle reports."""

    ancestors: Mapping[str, FrozenSet[str]]
    cycles: Tuple[CyclicDependency, ...] = field(default=())

    def ancestors_of(self, txid: str) -> FrozenSet[str]:
        return self.ancestors[txid]

    def count(self, txid: str) -> int:
        return len(self.ancestors[txid])

    def counts(self) -> List[Tuple[str, int]]:
        """Return ``(txid, ancestor_count)`` pairs in graph order."""
        return [(txid, len(found)) for txid, found in self.ancestors.items()]

    @property
    def has_cycles(self) -> bool:
        return bool(self.cycles)


def resolve_ancestors(graph: DependencyGraph) -> AncestryResult:
    """Compute the in-block ancestor set of every node in ``graph``.

    A node's set is the union, over its parents, of the parent itself and
    the parent's own set. Cycles do not abort the computation. Every node
    that is not on a cycle still receives its exact closure; a node on a
    cycle has the closing edge left out and is named in a
    :class:`CyclicDependency` warning, which is logged and issued through
    :mod:`warnings`.
    """

    order, components = _processing_order(graph)
    position = {txid: index for index, txid in enumerate(graph.nodes)}

    resolved: Dict[str, FrozenSet[str]] = {}
    # Cycle member -> closure of its whole component, members included.
    closures: Dict[str, FrozenSet[str]] = {}
    for node in order:
        resolved[node] = _union_of_parents(
            graph.parents[node], resolved, closures
        )

    cycles: List[CyclicDependency] = []
    for component in components:
        if not _is_cycle(graph, component):
            node = component[0]
            resolved[node] = _union_of_parents(
                graph.parents[node], resolved, closures
            )
            continue

        members = sorted(component, key=position.__getitem__)
        ignored = _resolve_cycle(graph, members, resolved, closures)
        cycle = CyclicDependency(members)
        _LOGGER.warning(
            "Ignoring %d cycle-closing edge(s); %s", len(ignored), cycle
        )
        warnings.warn(cycle, stacklevel=2)
        cycles.append(cycle)

    ancestors = MappingProxyType(
        {txid: resolved[txid] for txid in graph.nodes}
    )
    _LOGGER.info(
        "Resolved ancestor sets for %d transactions (%d cycle(s))",
        len(ancestors),
        len(cycles),
    )
    return AncestryResult(ancestors=ancestors, cycles=tuple(cycles))


def _reach(
    parent: str,
    resolved: Mapping[str, FrozenSet[str]],
    closures: Mapping[str, FrozenSet[str]],
) -> FrozenSet[str]:
    """``parent`` plus everything reachable from it."""
    closure = closures.get(parent)
    if closure is not None:
        return closure
    return resolved[parent].union((parent,))


def _union_of_parents(
    parents: Sequence[str],
    resolved: Mapping[str, FrozenSet[str]],
    closures: Mapping[str, FrozenSet[str]],
) -> FrozenSet[str]:
    if not parents:
        return _EMPTY

    if len(parents) == 1:
        return _reach(parents[0], resolved, closures)

    def _known(parent: str) -> FrozenSet[str]:
        return closures.get(parent, resolved[parent])

    # Seed from the largest parent set; any parent already inside it
    # contributes nothing new, since finished sets are closed.
    largest = max(parents, key=lambda parent: len(_known(parent)))
    merged: Set[str] = set(_known(largest))
    merged.add(largest)
    for parent in parents:
        if parent in merged:
            continue
        merged.add(parent)
        merged.update(_known(parent))
    return frozenset(merged)


def _is_cycle(graph: DependencyGraph, component: Sequence[str]) -> bool:
    if len(component) > 1:
        return True
    node = component[0]
    return node in graph.parents[node]


def _resolve_cycle(
    graph: DependencyGraph,
    members: Sequence[str],
    resolved: MutableMapping[str, FrozenSet[str]],
    closures: MutableMapping[str, FrozenSet[str]],
) -> Set[Edge]:
    """Assign sets to the members of one cycle; return the ignored edges."""

    member_set = frozenset(members)
    order, ignored = _postorder_ignoring_back_edges(graph, members, member_set)

    external: Set[str] = set()
    for txid in order:
        found: Set[str] = set()
        for parent in graph.parents[txid]:
            if (txid, parent) in ignored:
                continue
            if parent in member_set:
                found.add(parent)
                found.update(resolved[parent])
                continue
            reach = _reach(parent, resolved, closures)
            found.update(reach)
            external.update(reach)
        resolved[txid] = frozenset(found)

    closure = frozenset(external.union(members))
    for txid in members:
        closures[txid] = closure
    return ignored


def _processing_order(
    graph: DependencyGraph,
) -> Tuple[List[str], List[List[str]]]:
    """Kahn order for the acyclic part; components, parents first, for
    the rest."""

    children: Dict[str, List[str]] = {txid: [] for txid in graph.nodes}
    unresolved: Dict[str, int] = {}
    for txid in graph.nodes:
        parents = graph.parents[txid]
        unresolved[txid] = len(parents)
        for parent in parents:
            children[parent].append(txid)

    queue: Deque[str] = deque(
        txid for txid in graph.nodes if unresolved[txid] == 0
    )
    order: List[str] = []
    while queue:
        txid = queue.popleft()
        order.append(txid)
        for child in children[txid]:
            unresolved[child] -= 1
            if unresolved[child] == 0:
                queue.append(child)

    if len(order) == len(graph.nodes):
        return order, []

    released = frozenset(order)
    residual = [txid for txid in graph.nodes if txid not in released]
    _LOGGER.debug(
        "%d transaction(s) blocked by cyclic dependencies", len(residual)
    )
    return order, _strongly_connected(graph, residual, released)


def _strongly_connected(
    graph: DependencyGraph,
    residual: Sequence[str],
    released: FrozenSet[str],
) -> List[List[str]]:
    """Tarjan's components of ``residual``, each after those it spends from.

    Edges run from a node to its parents, so a component is only emitted
    once every component it depends on has been.
    """

    index_of: Dict[str, int] = {}
    lowlink: Dict[str, int] = {}
    stack: List[str] = []
    on_stack: Set[str] = set()
    components: List[List[str]] = []

    def _enter(txid: str) -> Tuple[str, Iterator[str]]:
        index_of[txid] = lowlink[txid] = len(index_of)
        stack.append(txid)
        on_stack.add(txid)
        return txid, iter(graph.parents[txid])

    for root in residual:
        if root in index_of:
            continue
        work = [_enter(root)]
        while work:
            txid, remaining = work[-1]
            descended = False
            for parent in remaining:
                if parent in released:
                    continue
                if parent not in index_of:
                    work.append(_enter(parent))
                    descended = True
                    break
                if parent in on_stack:
                    lowlink[txid] = min(lowlink[txid], index_of[parent])
            if descended:
                continue

            work.pop()
            if work:
                caller = work[-1][0]
                lowlink[caller] = min(lowlink[caller], lowlink[txid])
            if lowlink[txid] != index_of[txid]:
                continue

            component: List[str] = []
            while True:
                member = stack.pop()
                on_stack.discard(member)
                component.append(member)
                if member == txid:
                    break
            components.append(component)

    return components


def _postorder_ignoring_back_edges(
    graph: DependencyGraph,
    members: Sequence[str],
    member_set: FrozenSet[str],
) -> Tuple[List[str], Set[Edge]]:
    """Depth-first postorder of one cycle's members.

    An edge pointing at a member still on the traversal stack closes a
    loop; it is recorded as ignored and not followed.
    """

    state: Dict[str, int] = {}
    ignored: Set[Edge] = set()
    order: List[str] = []

    for root in members:
        if root in state:
            continue
        state[root] = _ON_STACK
        stack: List[Tuple[str, Iterator[str]]] = [
            (root, iter(graph.parents[root]))
        ]
        while stack:
            txid, remaining = stack[-1]
            descended = False
            for parent in remaining:
                if parent not in member_set:
                    continue
                mark = state.get(parent)
                if mark is None:
                    state[parent] = _ON_STACK
                    stack.append((parent, iter(graph.parents[parent])))
                    descended = True
                    break
                if mark == _ON_STACK:
                    ignored.add((txid, parent))
            if descended:
                continue
            stack.pop()
            state[txid] = _DONE
            order.append(txid)

    return order, ignored
