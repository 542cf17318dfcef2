"""
structlog setup for the API, the store and the sequencer.

Each line carries event_type, level, logger, an ISO timestamp and whatever the
request middleware bound (request_id, method, path). Wallet and payout
addresses passed under *_address / wallet / payout keys are shortened before
rendering so full addresses never reach the log sink.

Imports nothing from crypto_monetizer, so any module may import it first.
"""

from __future__ import annotations

import logging
import os
import sys
from typing import Any

import structlog

# Keys whose values are wallet-like addresses.
_ADDRESS_KEYS = frozenset({"wallet", "payout"})


def short_address(address: str | None) -> str:
    """Truncate a wallet address for logs: 0x1234...abcd."""
    if not address:
        return "?"
    address = address.strip()
    if len(address) <= 12:
        return address
    return f"{address[:6]}...{address[-4:]}"


def _shorten_addresses(logger: Any, method_name: str, event_dict: dict[str, Any]) -> dict[str, Any]:
    for key, value in event_dict.items():
        if isinstance(value, str) and (key in _ADDRESS_KEYS or key.endswith("_address")):
            event_dict[key] = short_address(value)
    return event_dict


def _default_message(logger: Any, method_name: str, event_dict: dict[str, Any]) -> dict[str, Any]:
    if "message" not in event_dict and "event_type" in event_dict:
        event_dict["message"] = str(event_dict["event_type"])
    return event_dict


def configure_structlog(level: str | None = None, fmt: str | None = None) -> None:
    """(Re)configure structlog. Defaults come from LOG_LEVEL and LOG_FORMAT (json | console)."""
    level_name = (level or os.getenv("LOG_LEVEL", "INFO")).upper()
    fmt = (fmt or os.getenv("LOG_FORMAT", "json")).strip().lower()

    processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.TimeStamper(fmt="iso", utc=True, key="timestamp"),
        _shorten_addresses,
    ]
    if fmt == "json":
        processors += [
            structlog.processors.EventRenamer("event_type"),
            _default_message,
            structlog.processors.JSONRenderer(),
        ]
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty()))
    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(getattr(logging, level_name, logging.INFO)),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stdout),
        cache_logger_on_first_use=True,
    )


if not structlog.is_configured():
    configure_structlog()


def get_logger(name: str) -> structlog.BoundLogger:
    """
    Structured logger for a module:

        logger = get_logger(__name__)
        logger.info("settings_upserted", wallet=wallet, has_payout=True)
    """
    return structlog.get_logger(name).bind(logger=name)


def bind_request(request_id: str, **extra: Any) -> None:
    """Bind request_id (and extras) to every log line emitted in the current context."""
    structlog.contextvars.clear_contextvars()
    structlog.contextvars.bind_contextvars(request_id=request_id, **extra)
