"""Scoped, expiring cache for Esplora responses."""

from __future__ import annotations

import logging
import threading
import time
from typing import Any, Callable, Optional

from cachetools import TTLCache

from block_ancestry import config

_LOGGER = logging.getLogger(__name__)

_MISSING = object()


class ResponseCache:
    """Keep decoded response bodies for a fixed time, keyed by URL.

    The cache is owned by a single client instance; there is no module-level
    cache. Entries older than ``ttl_seconds`` are evicted, as are the least
    recently used ones once ``max_entries`` is reached.
    """

    def __init__(
        self,
        ttl_seconds: float = config.CACHE_TTL_SECONDS,
        max_entries: int = config.CACHE_MAX_ENTRIES,
        *,
        time_fn: Optional[Callable[[], float]] = None,
    ) -> None:
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be positive.")
        if max_entries <= 0:
            raise ValueError("max_entries must be positive.")
        self._entries: TTLCache = TTLCache(
            maxsize=max_entries,
            ttl=ttl_seconds,
            timer=time_fn or time.monotonic,
        )
        self._lock = threading.Lock()
        self.hits = 0
        self.misses = 0

    def get(self, key: str) -> Any:
        """Return the cached value for ``key`` or ``None``."""
        with self._lock:
            value = self._entries.get(key, _MISSING)
            if value is _MISSING:
                self.misses += 1
                return None
            self.hits += 1
        _LOGGER.debug("Cache hit for %s", key)
        return value

    def set(self, key: str, value: Any) -> None:
        with self._lock:
            self._entries[key] = value

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
