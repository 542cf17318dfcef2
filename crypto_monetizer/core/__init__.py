"""
Core utilities: the error taxonomy shared by storage, rates, sequencer and API.
"""

from crypto_monetizer.core.exceptions import (
    ConfigurationError,
    MonetizerError,
    PayoutAddressRequired,
    SequencerBusy,
    ServiceUnavailable,
    StorageError,
    ValidationError,
)

__all__ = [
    "ConfigurationError",
    "MonetizerError",
    "PayoutAddressRequired",
    "SequencerBusy",
    "ServiceUnavailable",
    "StorageError",
    "ValidationError",
]
