# Exchange quotes: synthetic rate source and quote valuation.

from crypto_monetizer.exchange.quotes import (
    EXCHANGE_FEES,
    ExchangeQuote,
    FailureInjectionPolicy,
    QuoteSource,
    QuoteValuation,
    SyntheticQuoteSource,
    reference_price,
    value_quotes,
)

__all__ = [
    "EXCHANGE_FEES",
    "ExchangeQuote",
    "FailureInjectionPolicy",
    "QuoteSource",
    "QuoteValuation",
    "SyntheticQuoteSource",
    "reference_price",
    "value_quotes",
]
