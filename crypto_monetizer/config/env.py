"""
Environment variable loading for Crypto Monetizer.

- Loads .env from project root when available.
- Small typed readers (bool/float/int) that raise ConfigurationError on garbage.
"""

from __future__ import annotations

import os
from pathlib import Path

from crypto_monetizer.core.exceptions import ConfigurationError

# Project root: config is crypto_monetizer/config/, root is 2 levels up
_CONFIG_DIR = Path(__file__).resolve().parent
_PACKAGE_DIR = _CONFIG_DIR.parent
_ROOT = _PACKAGE_DIR.parent
_ENV_PATH = _ROOT / ".env"

_TRUE = ("1", "true", "yes", "on")
_FALSE = ("0", "false", "no", "off")


def load_monetizer_env() -> None:
    """Load .env from project root. Safe to call multiple times; real env vars win."""
    from dotenv import load_dotenv

    load_dotenv(_ENV_PATH, override=False)


def env_str(name: str, default: str = "") -> str:
    return (os.getenv(name) or "").strip() or default


def env_bool(name: str, default: bool) -> bool:
    raw = (os.getenv(name) or "").strip().lower()
    if not raw:
        return default
    if raw in _TRUE:
        return True
    if raw in _FALSE:
        return False
    raise ConfigurationError(f"{name} must be a boolean, got {raw!r}")


def env_float(name: str, default: float) -> float:
    raw = (os.getenv(name) or "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError as e:
        raise ConfigurationError(f"{name} must be a number, got {raw!r}") from e


def env_int(name: str, default: int) -> int:
    raw = (os.getenv(name) or "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError as e:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}") from e
