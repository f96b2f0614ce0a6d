"""Transaction records consumed by the graph builder."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, List, Mapping, Sequence, Tuple

from block_ancestry.errors import MalformedTransaction


@dataclass(frozen=True)
class Transaction:
    """A block transaction reduced to its id and spent-output references.

    ``inputs`` holds the ``txid`` of every transaction whose output one of
    this transaction's inputs spends, in input order. References may point
    outside the block; the graph builder prunes those.
    """

    txid: str
    inputs: Tuple[str, ...] = ()

    @classmethod
    def from_payload(
        cls,
        payload: Mapping[str, Any],
        *,
        index: int | None = None,
    ) -> "Transaction":
        """Build a record from an Esplora ``/tx`` style JSON object."""

        if not isinstance(payload, Mapping):
            raise MalformedTransaction(
                f"Transaction record must be an object, got "
                f"{type(payload).__name__}",
                index=index,
            )

        txid = payload.get("txid")
        if not isinstance(txid, str) or not txid.strip():
            raise MalformedTransaction(
                f"Transaction record has no usable txid: {txid!r}",
                index=index,
            )

        raw_inputs = payload.get("vin") or ()
        if not isinstance(raw_inputs, Sequence) or isinstance(
            raw_inputs, (str, bytes)
        ):
            raise MalformedTransaction(
                f"Transaction {txid} has a malformed 'vin' field",
                index=index,
            )

        inputs: List[str] = []
        for vin in raw_inputs:
            if not isinstance(vin, Mapping) or vin.get("is_coinbase"):
                # Coinbase inputs spend no earlier output.
                continue
            parent = vin.get("txid")
            if isinstance(parent, str) and parent:
                inputs.append(parent)

        return cls(txid=txid.strip(), inputs=tuple(inputs))


def transactions_from_payloads(
    payloads: Sequence[Mapping[str, Any]],
) -> List[Transaction]:
    """Convert raw JSON objects, keeping supplier order."""
    return [
        Transaction.from_payload(payload, index=index)
        for index, payload in enumerate(payloads)
    ]
