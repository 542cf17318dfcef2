from crypto_monetizer.catalog.tokens import (
    SUPPORTED_TOKENS,
    Token,
    native_symbol,
    native_token,
    token_price_usd,
    tokens_for_chain,
)

__all__ = [
    "SUPPORTED_TOKENS",
    "Token",
    "native_symbol",
    "native_token",
    "token_price_usd",
    "tokens_for_chain",
]
