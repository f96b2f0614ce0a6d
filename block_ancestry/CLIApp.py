"""CLI wiring that fetches a block and prints its ranked ancestry report."""

from __future__ import annotations

import argparse
import logging
import sys
import warnings
from pathlib import Path
from typing import Optional, Sequence, TextIO

from block_ancestry import config
from block_ancestry.analysis import BlockAnalysis, analyze_transactions
from block_ancestry.clients.esplora_client import EsploraClient
from block_ancestry.errors import (CyclicDependency, MalformedTransaction,
                                   SupplierError)
from block_ancestry.logging_config import configure_logging
from block_ancestry.net.response_cache import ResponseCache
from block_ancestry.parser import TransactionFileParser
from block_ancestry.results import OUTPUT_FORMATS, ReportFormatter
from block_ancestry.supplier import BlockTransactions, TransactionSupplier
from block_ancestry.utils.env import (RuntimeSettings, load_dotenv,
                                      load_settings)

logger = logging.getLogger(__name__)


class CLIApp:
    """Command-line entry point for the block ancestry tool."""

    def __init__(
        self,
        *,
        height: Optional[int] = None,
        block_hash: Optional[str] = None,
        input_file: Optional[Path] = None,
        top: int = config.TOP_RESULT_LIMIT,
        output_format: str = "table",
        supplier: Optional[TransactionSupplier] = None,
        stdout: Optional[TextIO] = None,
        stderr: Optional[TextIO] = None,
    ) -> None:
        self._height = height
        self._block_hash = block_hash
        self._input_file = Path(input_file) if input_file is not None else None
        self._top = top
        self._formatter = ReportFormatter(output_format)
        self._supplier = supplier
        self._stdout = stdout or sys.stdout
        self._stderr = stderr or sys.stderr

    def load_transactions(self) -> BlockTransactions:
        """Read the block from a saved file or from the Esplora API."""
        if self._input_file is not None:
            transactions = TransactionFileParser(self._input_file).parse()
            return BlockTransactions(
                block_hash=self._input_file.stem,
                transactions=transactions,
            )

        supplier = self._supplier or TransactionSupplier()
        if self._block_hash:
            return supplier.fetch_block(self._block_hash)
        if self._height is None:
            raise ValueError(
                "A block height, block hash or input file is required."
            )
        return supplier.fetch_by_height(self._height)

    def generate_results(
        self,
        block: Optional[BlockTransactions] = None,
    ) -> BlockAnalysis:
        """Analyse ``block`` (loading it when omitted)."""
        if block is None:
            block = self.load_transactions()
        with warnings.catch_warnings():
            # Cycles are reported on stderr by run().
            warnings.simplefilter("ignore", CyclicDependency)
            return analyze_transactions(block.transactions, top=self._top)

    def run(self) -> int:
        """Execute the CLI workflow and print the ranked report."""
        block = self.load_transactions()
        logger.info("Loaded block %s", block.block_hash)

        if block.skipped_pages:
            self._warn(
                f"{len(block.skipped_pages)} transaction page(s) could not "
                f"be fetched; results cover "
                f"{len(block.transactions)} of {block.tx_count} transactions."
            )

        if not block.transactions:
            label = (
                f"block-height {block.height}"
                if block.height is not None
                else f"block {block.block_hash}"
            )
            print(
                f"There are no transactions in the block for {label}",
                file=self._stdout,
            )
            return 0

        analysis = self.generate_results(block)
        for cycle in analysis.cycles:
            self._warn(str(cycle))

        for line in self._formatter.format_lines(
            analysis.ranked, limit=self._top
        ):
            print(line, file=self._stdout)
        return 0

    def _warn(self, message: str) -> None:
        print(f"Warning: {message}", file=self._stderr)


def build_arg_parser(settings: RuntimeSettings) -> argparse.ArgumentParser:
    argument_parser = argparse.ArgumentParser(
        description=(
            "Block ancestry CLI: rank the transactions of a block by the "
            "number of in-block ancestors they depend on."
        )
    )
    source = argument_parser.add_mutually_exclusive_group()
    source.add_argument(
        "--height",
        type=int,
        default=None,
        help=f"Block height to analyse (default: {settings.block_height}).",
    )
    source.add_argument(
        "--block-hash",
        default=None,
        help="Block hash to analyse instead of a height.",
    )
    source.add_argument(
        "--input",
        type=Path,
        default=None,
        dest="input_file",
        help="JSON file holding the block's transactions (no network).",
    )
    argument_parser.add_argument(
        "--top",
        type=_non_negative_int,
        default=settings.top_result_limit,
        help="Number of transactions to list (default: %(default)s).",
    )
    argument_parser.add_argument(
        "--format",
        choices=OUTPUT_FORMATS,
        default="table",
        dest="output_format",
        help="Report format (default: %(default)s).",
    )
    argument_parser.add_argument(
        "--api-url",
        default=settings.api_url,
        help="Esplora API base URL (default: %(default)s).",
    )
    return argument_parser


def _non_negative_int(raw: str) -> int:
    try:
        value = int(raw)
    except ValueError as error:
        raise argparse.ArgumentTypeError(
            f"invalid integer: {raw!r}"
        ) from error
    if value < 0:
        raise argparse.ArgumentTypeError("must be zero or positive")
    return value


def main(argv: Optional[Sequence[str]] = None) -> int:
    # LOG_LEVEL and LOG_FILE may come from .env.
    load_dotenv()
    configure_logging()
    settings = load_settings()
    argument_parser = build_arg_parser(settings)
    parsed_args = argument_parser.parse_args(argv)

    height = parsed_args.height
    if (
        height is None
        and parsed_args.block_hash is None
        and parsed_args.input_file is None
    ):
        height = settings.block_height

    supplier = TransactionSupplier(
        EsploraClient(
            base_url=parsed_args.api_url,
            cache=ResponseCache(ttl_seconds=settings.cache_ttl_seconds),
        )
    )
    app = CLIApp(
        height=height,
        block_hash=parsed_args.block_hash,
        input_file=parsed_args.input_file,
        top=parsed_args.top,
        output_format=parsed_args.output_format,
        supplier=supplier,
    )
    try:
        return app.run()
    except (SupplierError, MalformedTransaction, OSError) as error:
        logger.error("Block ancestry run failed: %s", error)
        print(f"Error: {error}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
