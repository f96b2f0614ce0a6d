from __future__ import annotations

"""Helpers for loading environment configuration."""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Tuple, Union

from block_ancestry import config

_ENV_LOADED = False

_LOGGER = logging.getLogger(__name__)


def load_dotenv(dotenv_path: Union[str, Path] = ".env") -> None:
    """Load environment variables from a simple ``.env`` file if present."""
    global _ENV_LOADED
    if _ENV_LOADED:
        return

    path = Path(dotenv_path)
    if path.exists():
        for line in path.read_text().splitlines():
            parsed = _parse_line(line)
            if parsed:
                key, value = parsed
                os.environ.setdefault(key, value)

    _ENV_LOADED = True


def _parse_line(line: str) -> Optional[Tuple[str, str]]:
    stripped = line.strip()
    if not stripped or stripped.startswith("#"):
        return None

    if "=" not in stripped:
        return None

    key, value = stripped.split("=", 1)
    return (key.strip(), value.strip().strip("\"'"))


def read_int(name: str, default: int, *, minimum: int = 0) -> int:
    """Return the integer value of ``name`` or ``default`` when unusable."""
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default

    try:
        value = int(raw.strip())
    except ValueError:
        _LOGGER.warning(
            "Ignoring non-integer %s=%r; using default %d",
            name,
            raw,
            default,
        )
        return default

    if value < minimum:
        _LOGGER.warning(
            "Ignoring %s=%d below minimum %d; using default %d",
            name,
            value,
            minimum,
            default,
        )
        return default
    return value


@dataclass(frozen=True)
class RuntimeSettings:
    """Effective settings after applying environment overrides."""

    api_url: str
    block_height: int
    top_result_limit: int
    cache_ttl_seconds: int


def load_settings() -> RuntimeSettings:
    """Resolve runtime settings from ``.env``, the environment and defaults."""

    load_dotenv()
    api_url = os.environ.get("ESPLORA_API_URL", "").strip()
    return RuntimeSettings(
        api_url=api_url or config.ESPLORA_API_URL,
        block_height=read_int("BLOCK_HEIGHT", config.BLOCK_HEIGHT),
        top_result_limit=read_int(
            "TOP_RESULT_LIMIT", config.TOP_RESULT_LIMIT
        ),
        cache_ttl_seconds=read_int(
            "CACHE_TTL_SECONDS", config.CACHE_TTL_SECONDS, minimum=1
        ),
    )
