"""
Structured logging for Crypto Monetizer.

JSON logs with timestamp, event_type and request context.
Use get_logger() in all modules for aggregation-friendly output.
"""

from crypto_monetizer.logging.logger import bind_request, get_logger, short_address

__all__ = ["bind_request", "get_logger", "short_address"]
