"""
Block Ancestry Repository
Introductory remarks: This module is part of the block_ancestry codebase.

Central configuration constants for the block ancestry CLI.
"""

from __future__ import annotations

# Esplora data source -------------------------------------------------------

ESPLORA_API_URL = "https://blockstream.info/api"
"""Base URL of the Esplora REST API used to fetch blocks."""

BLOCK_HEIGHT = 680000
"""Block analysed when neither a height nor a hash is supplied."""

BLOCK_TRANSACTION_PAGE_SIZE = 25
"""Transactions returned per ``block/:hash/txs/:start_index`` page."""

REQUEST_TIMEOUT_SECONDS = 30
"""Socket timeout for each outbound request."""

# Outbound request policy ---------------------------------------------------

RATE_LIMIT_MAX_CALLS = 5
RATE_LIMIT_PERIOD_SECONDS = 1.0

RETRY_MAX_ATTEMPTS = 4
"""Total attempts per request, first try included."""

RETRY_BACKOFF_SECONDS = 0.5
RETRY_BACKOFF_CAP_SECONDS = 8.0

CACHE_TTL_SECONDS = 3 * 60 * 60
"""Cached responses expire after three hours."""

CACHE_MAX_ENTRIES = 4096

# Report --------------------------------------------------------------------

TOP_RESULT_LIMIT = 10
"""Number of transactions listed in the ranked report."""
