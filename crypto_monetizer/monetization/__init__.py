"""
Client-side monetization workflow (simulated; never moves funds).
"""

from crypto_monetizer.monetization.sequencer import (
    LocalQuoteFetcher,
    MonetizationSequencer,
    MonetizationSession,
    MonetizeOutcome,
    Phase,
    QuoteFetcher,
    parse_amount,
)

__all__ = [
    "LocalQuoteFetcher",
    "MonetizationSequencer",
    "MonetizationSession",
    "MonetizeOutcome",
    "Phase",
    "QuoteFetcher",
    "parse_amount",
]
