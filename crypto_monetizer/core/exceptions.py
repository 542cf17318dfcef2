"""
Application-level exceptions.

Every error carries a stable code and the HTTP status the API boundary renders
it with, so API handlers and the client can translate in both directions.
"""

from __future__ import annotations


class MonetizerError(Exception):
    """Base error: code + message, rendered as {"code", "message"} by the API."""

    code = "internal_error"
    status_code = 500
    retryable = False

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message()
        super().__init__(self.message)

    @classmethod
    def default_message(cls) -> str:
        return "Internal error"

    def to_dict(self) -> dict[str, str]:
        return {"code": self.code, "message": self.message}


class ConfigurationError(MonetizerError):
    """Backend credentials/connection are missing or invalid. Not retryable."""

    code = "configuration_error"
    status_code = 500

    @classmethod
    def default_message(cls) -> str:
        return "Storage backend is not configured"


class StorageError(MonetizerError):
    """Backend read/write fault. Retry by re-issuing the call."""

    code = "storage_error"
    status_code = 500
    retryable = True

    @classmethod
    def default_message(cls) -> str:
        return "Failed to access settings storage. Please try again."


class ServiceUnavailable(MonetizerError):
    """Exchange rate source failed (injected or real). Retryable."""

    code = "service_unavailable"
    status_code = 503
    retryable = True

    @classmethod
    def default_message(cls) -> str:
        return "Exchange rate service temporarily unavailable. Please retry."


class ValidationError(MonetizerError):
    """Input rejected before it reaches storage or the rate source."""

    code = "validation_error"
    status_code = 400

    @classmethod
    def default_message(cls) -> str:
        return "Invalid request"


class PayoutAddressRequired(ValidationError):
    """Monetize requested without a configured payout address."""

    code = "payout_address_required"
    redirect = "settings"

    @classmethod
    def default_message(cls) -> str:
        return "Configure a payout address in settings before monetizing"


class SequencerBusy(MonetizerError):
    """A monetization run is already in flight for this session."""

    code = "sequencer_busy"
    status_code = 409

    @classmethod
    def default_message(cls) -> str:
        return "A monetization is already in progress"


ERRORS_BY_CODE: dict[str, type[MonetizerError]] = {
    cls.code: cls
    for cls in (
        MonetizerError,
        ConfigurationError,
        StorageError,
        ServiceUnavailable,
        ValidationError,
        PayoutAddressRequired,
        SequencerBusy,
    )
}
