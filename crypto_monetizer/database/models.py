"""
Domain models for database entities.

Only the per-wallet settings record lives here; no ORM coupling so the store
can hand records to the API and tools without a session attached.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class SettingsRecord:
    """Payout settings for one wallet address."""

    wallet_address: str
    payout_address: str = ""
    """Destination for simulated proceeds. Free-form, may be empty."""

    @property
    def has_payout_address(self) -> bool:
        return bool(self.payout_address.strip())

    def to_dict(self) -> dict[str, str]:
        return {
            "walletAddress": self.wallet_address,
            "payoutAddress": self.payout_address,
        }
