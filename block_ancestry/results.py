from __future__ import annotations

"""Utilities for rendering ranked ancestry results for the CLI."""

import json
from typing import Any, List, Mapping, Sequence

from block_ancestry.ranker import AncestorCount

OUTPUT_FORMATS: Sequence[str] = ("table", "ndjson")

TABLE_COLUMNS: Sequence[str] = ("rank", "txid", "ancestors")


class ReportFormatter:
    """Format ranked :class:`AncestorCount` entries as text lines."""

    def __init__(self, output_format: str = "table") -> None:
        if output_format not in OUTPUT_FORMATS:
            raise ValueError(
                f"Unknown output format {output_format!r}; "
                f"expected one of {', '.join(OUTPUT_FORMATS)}"
            )
        self._output_format = output_format

    def format_lines(
        self,
        ranked: Sequence[AncestorCount],
        *,
        limit: int,
    ) -> List[str]:
        if self._output_format == "ndjson":
            return [to_ndjson_line(entry.as_dict()) for entry in ranked]
        return self._format_table(ranked, limit=limit)

    def _format_table(
        self,
        ranked: Sequence[AncestorCount],
        *,
        limit: int,
    ) -> List[str]:
        title = (
            f"----------- Top {limit} Transactions with highest "
            f"no. of Ancestors -----------"
        )
        rows = [
            (str(index), entry.txid, str(entry.ancestor_count))
            for index, entry in enumerate(ranked, start=1)
        ]
        widths = [
            max([len(column)] + [len(row[position]) for row in rows])
            for position, column in enumerate(TABLE_COLUMNS)
        ]

        def _render(cells: Sequence[str]) -> str:
            return " | ".join(
                cell.ljust(width) if position == 1 else cell.rjust(width)
                for position, (cell, width) in enumerate(zip(cells, widths))
            ).rstrip()

        separator = "-+-".join("-" * width for width in widths)
        lines = [title, _render(TABLE_COLUMNS), separator]
        lines.extend(_render(row) for row in rows)
        return lines


def to_ndjson_line(record: Mapping[str, Any]) -> str:
    """Serialize a record as a compact JSON line."""
    return json.dumps(dict(record), separators=(",", ":"))
