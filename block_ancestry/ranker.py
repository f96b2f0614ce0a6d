"""Select the transactions with the largest in-block ancestor sets."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Tuple, Union

from block_ancestry import config


@dataclass(frozen=True)
class AncestorCount:
    """A transaction id paired with the size of its ancestor set."""

    txid: str
    ancestor_count: int

    def as_dict(self) -> dict[str, object]:
        return {"txid": self.txid, "ancestors": self.ancestor_count}


CountLike = Union[AncestorCount, Tuple[str, int]]


def rank_ancestor_counts(
    counts: Iterable[CountLike],
    limit: int = config.TOP_RESULT_LIMIT,
) -> List[AncestorCount]:
    """Return the top ``limit`` entries by ancestor count, largest first.

    Entries with equal counts keep their input order. A ``limit`` above the
    number of entries returns all of them.
    """

    if limit < 0:
        raise ValueError("limit must be zero or positive.")

    entries = [_as_count(entry) for entry in counts]
    # sorted() is stable, so ties keep supplier order.
    ranked = sorted(entries, key=lambda entry: -entry.ancestor_count)
    return ranked[:limit]


def _as_count(entry: CountLike) -> AncestorCount:
    if isinstance(entry, AncestorCount):
        return entry
    txid, count = entry
    return AncestorCount(txid=txid, ancestor_count=int(count))
