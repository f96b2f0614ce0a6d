"""Client for the Blockstream Esplora REST API with caching and retries."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import requests

from block_ancestry import config
from block_ancestry.clients.base_client import (RETRYABLE_STATUS_CODES,
                                                BaseClient,
                                                TransientRequestError)
from block_ancestry.errors import SupplierError
from block_ancestry.net.rate_limiter import RateLimiter
from block_ancestry.net.response_cache import ResponseCache


class EsploraClient(BaseClient[Any]):
    """Minimal wrapper around the Esplora block endpoints."""

    def __init__(
        self,
        *,
        base_url: str = config.ESPLORA_API_URL,
        rate_limiter: Optional[RateLimiter] = None,
        cache: Optional[ResponseCache] = None,
        session: Optional[requests.Session] = None,
        logger: Optional[logging.Logger] = None,
        timeout: float = config.REQUEST_TIMEOUT_SECONDS,
        **retry_options: Any,
    ) -> None:
        super().__init__(
            rate_limiter or RateLimiter(),
            logger=logger,
            **retry_options,
        )
        self._base_url = base_url.rstrip("/")
        self._cache = cache if cache is not None else ResponseCache()
        self._session = session or requests.Session()
        self._timeout = timeout

    @property
    def cache(self) -> ResponseCache:
        return self._cache

    def get_block_hash(self, height: int) -> str:
        """Return the hash of the block at ``height``."""
        if height < 0:
            raise ValueError("Block height must be zero or positive.")
        body = self._get(f"block-height/{height}", as_json=False)
        block_hash = str(body).strip()
        if not block_hash:
            raise SupplierError(f"Empty block hash for height {height}")
        return block_hash

    def get_block(self, block_hash: str) -> Dict[str, Any]:
        """Return block metadata, including ``tx_count``."""
        body = self._get(f"block/{block_hash}")
        if not isinstance(body, dict):
            raise SupplierError(
                f"Unexpected block payload for {block_hash}: "
                f"{type(body).__name__}"
            )
        return body

    def get_block_transactions(
        self,
        block_hash: str,
        start_index: int = 0,
    ) -> List[Dict[str, Any]]:
        """Return one transaction page beginning at ``start_index``."""
        body = self._get(f"block/{block_hash}/txs/{start_index}")
        if not isinstance(body, list):
            raise SupplierError(
                f"Unexpected transaction page for {block_hash} at "
                f"{start_index}: {type(body).__name__}"
            )
        return body

    def _get(self, path: str, *, as_json: bool = True) -> Any:
        url = f"{self._base_url}/{path}"
        cached = self._cache.get(url)
        if cached is not None:
            return cached

        def _operation() -> Any:
            self._logger.debug("GET %s", url)
            response = self._session.get(url, timeout=self._timeout)
            status = response.status_code
            if status in RETRYABLE_STATUS_CODES:
                raise TransientRequestError(
                    f"Esplora returned {status} for {path}",
                    retry_after=_retry_after_seconds(response),
                )
            if status != 200:
                raise SupplierError(
                    f"Esplora returned {status} for {path}: {response.text}"
                )
            if not as_json:
                return response.text
            try:
                return response.json()
            except ValueError as error:
                raise SupplierError(
                    f"Esplora returned invalid JSON for {path}"
                ) from error

        body = self._execute_with_retry(_operation, name=f"esplora.{path}")
        self._cache.set(url, body)
        return body


def _retry_after_seconds(response: Any) -> Optional[float]:
    headers = getattr(response, "headers", None) or {}
    raw = headers.get("Retry-After")
    if raw is None:
        return None
    try:
        return max(0.0, float(raw))
    except (TypeError, ValueError):
        return None
