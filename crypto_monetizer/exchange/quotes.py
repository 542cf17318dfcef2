"""
Exchange rate quotes: source interface, synthetic generator, valuation.

SyntheticQuoteSource stands in for real exchange price feeds. Any replacement
must keep the output contract: one ExchangeQuote per exchange, best rate first.
"""

from __future__ import annotations

import random
from abc import ABC, abstractmethod
from dataclasses import dataclass
from decimal import Decimal

from crypto_monetizer.core.exceptions import ServiceUnavailable, ValidationError
from crypto_monetizer.logging import get_logger

logger = get_logger(__name__)

# Fixed fee fraction per exchange, in display order.
EXCHANGE_FEES: dict[str, float] = {
    "Binance": 0.001,
    "Coinbase": 0.005,
    "Kraken": 0.002,
    "OKX": 0.001,
    "Kucoin": 0.001,
    "1inch": 0.0005,
}

RATE_SPREAD = 0.01  # rate = base * (1 + U), U ~ Uniform[-spread, spread]
DEFAULT_BASE_PRICE = 1.0

# USD reference price per native asset, used only to value quotes.
REFERENCE_PRICES_USD: dict[str, Decimal] = {
    "ETH": Decimal("2500"),
    "BNB": Decimal("625"),
}


@dataclass(frozen=True)
class ExchangeQuote:
    name: str
    rate: float
    fee: float

    def to_dict(self) -> dict[str, float | str]:
        return {"name": self.name, "rate": self.rate, "fee": self.fee}


@dataclass(frozen=True)
class FailureInjectionPolicy:
    """enabled: fail each call with `probability`; disabled: always succeed."""

    enabled: bool = False
    probability: float = 0.1

    def __post_init__(self) -> None:
        if not 0.0 <= self.probability <= 1.0:
            raise ValueError("probability must be within [0, 1]")


def normalize_symbol(symbol: str | None) -> str:
    cleaned = (symbol or "").strip().upper()
    if not cleaned:
        raise ValidationError("symbol must be non-empty")
    return cleaned


def sort_quotes(quotes: list[ExchangeQuote]) -> list[ExchangeQuote]:
    """Best price first."""
    return sorted(quotes, key=lambda q: q.rate, reverse=True)


class QuoteSource(ABC):
    """Produces the ordered quote list for a trading symbol."""

    @abstractmethod
    def get_quotes(self, symbol: str) -> list[ExchangeQuote]:
        """Return one quote per exchange, sorted by rate descending. Raises ServiceUnavailable."""
        ...


class SyntheticQuoteSource(QuoteSource):
    """
    Random quotes around a fixed base price. No network access.

    rng is injectable so tests can seed it; the failure draw uses the same rng
    before the rate draws.
    """

    def __init__(
        self,
        policy: FailureInjectionPolicy | None = None,
        rng: random.Random | None = None,
        base_price: float = DEFAULT_BASE_PRICE,
    ) -> None:
        if base_price <= 0:
            raise ValueError("base_price must be positive")
        self.policy = policy or FailureInjectionPolicy()
        self.rng = rng or random.Random()
        self.base_price = base_price

    def get_quotes(self, symbol: str) -> list[ExchangeQuote]:
        symbol = normalize_symbol(symbol)
        if self.policy.enabled and self.rng.random() < self.policy.probability:
            logger.warning("quotes_failure_injected", symbol=symbol)
            raise ServiceUnavailable()
        quotes = [
            ExchangeQuote(
                name=name,
                rate=self.base_price * (1 + self.rng.uniform(-RATE_SPREAD, RATE_SPREAD)),
                fee=fee,
            )
            for name, fee in EXCHANGE_FEES.items()
        ]
        ordered = sort_quotes(quotes)
        logger.debug("quotes_generated", symbol=symbol, best=ordered[0].name, count=len(ordered))
        return ordered


@dataclass(frozen=True)
class QuoteValuation:
    """What monetizing `amount` through one exchange would yield, in USD."""

    name: str
    rate: float
    fee: float
    gross: Decimal
    fee_cost: Decimal
    net: Decimal


def reference_price(symbol: str) -> Decimal:
    """USD reference price for a native asset; unknown symbols fall back to ETH."""
    return REFERENCE_PRICES_USD.get(normalize_symbol(symbol), REFERENCE_PRICES_USD["ETH"])


def value_quotes(
    quotes: list[ExchangeQuote],
    amount: Decimal,
    price_usd: Decimal,
) -> list[QuoteValuation]:
    """
    Fee cost and net proceeds per exchange, in input order.

    gross = rate * price_usd * amount; fee_cost = gross * fee; net = gross - fee_cost.
    """
    out: list[QuoteValuation] = []
    for q in quotes:
        gross = Decimal(str(q.rate)) * price_usd * amount
        fee_cost = gross * Decimal(str(q.fee))
        out.append(
            QuoteValuation(
                name=q.name,
                rate=q.rate,
                fee=q.fee,
                gross=gross,
                fee_cost=fee_cost,
                net=gross - fee_cost,
            )
        )
    return out
