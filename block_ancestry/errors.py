"""Error and warning types raised across the ancestry pipeline."""

from __future__ import annotations

from typing import Iterable, Tuple


class AncestryError(RuntimeError):
    """Base class for fatal ancestry analysis failures."""


class MalformedTransaction(AncestryError):
    """Raised when a supplied record lacks a usable transaction id."""

    def __init__(self, message: str, *, index: int | None = None) -> None:
        super().__init__(message)
        self.index = index


class SupplierError(AncestryError):
    """Raised when the remote source cannot provide block data."""


class AncestryWarning(UserWarning):
    """Base class for non-fatal anomalies found during analysis."""


class CyclicDependency(AncestryWarning):
    """A set of in-block transactions that depend on each other in a loop."""

    def __init__(self, nodes: Iterable[str]) -> None:
        self.nodes: Tuple[str, ...] = tuple(nodes)
        super().__init__(
            "Cyclic dependency between transactions: "
            + ", ".join(self.nodes)
        )
