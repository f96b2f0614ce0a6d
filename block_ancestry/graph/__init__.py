"""Dependency graph construction and ancestor resolution."""

from .builder import DependencyGraph, build_graph
from .resolver import AncestryResult, resolve_ancestors

__all__ = [
    "AncestryResult",
    "DependencyGraph",
    "build_graph",
    "resolve_ancestors",
]
