"""
Static catalog of tokens the dashboard scans for, per chain.

Balances are read client-side from the chain; this module only answers which
tokens exist for a chain, filters them by symbol search and prices a holding
for display.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from crypto_monetizer.exchange.quotes import reference_price

CHAIN_ETHEREUM = 1
CHAIN_BSC = 56

PLACEHOLDER_ADDRESS = "0x...placeholder"
NATIVE_ADDRESS = "native"

# Display prices for held tokens; anything not listed counts as a $1 stablecoin.
TOKEN_PRICES_USD: dict[str, Decimal] = {
    "BTC": Decimal("67000"),
    "WBTC": Decimal("67000"),
    "SHIB": Decimal("0.00003"),
}
DEFAULT_TOKEN_PRICE_USD = Decimal("1")


@dataclass(frozen=True)
class Token:
    symbol: str
    chain_id: int
    address: str

    @property
    def is_placeholder(self) -> bool:
        return self.address == PLACEHOLDER_ADDRESS

    @property
    def is_native(self) -> bool:
        return self.address == NATIVE_ADDRESS

    def to_dict(self) -> dict[str, str | int]:
        return {"symbol": self.symbol, "chainId": self.chain_id, "address": self.address}


SUPPORTED_TOKENS: tuple[Token, ...] = (
    # Ethereum mainnet
    Token("USDT", CHAIN_ETHEREUM, "0xdAC17F958D2ee523a2206206994597C13D831ec7"),
    Token("WBTC", CHAIN_ETHEREUM, "0x2260FAC5E5542a773Aa44fBCfeDf7C193bc2C599"),
    # BNB Smart Chain
    Token("SHIB", CHAIN_BSC, "0x2859e4544C4bB03966803b044a93563Bd2D0DD4D"),
    Token("BabyDoge", CHAIN_BSC, "0xc748673057861a797275CD8A068AbB95A902e8de"),
    Token("BTC", CHAIN_BSC, "0x7130d2A12B9BCbFAe4f2634d864A1Ee1Ce3Ead9c"),
    Token("USD.Z", CHAIN_BSC, PLACEHOLDER_ADDRESS),
    Token("LitterCoin", CHAIN_BSC, PLACEHOLDER_ADDRESS),
)


def native_symbol(chain_id: int | None) -> str:
    """Native gas asset: BNB on BSC, ETH everywhere else."""
    return "BNB" if chain_id == CHAIN_BSC else "ETH"


def native_token(chain_id: int) -> Token:
    return Token(native_symbol(chain_id), chain_id, NATIVE_ADDRESS)


def token_price_usd(token: Token) -> Decimal:
    """USD display price: native assets use the quote reference price."""
    if token.is_native:
        return reference_price(token.symbol)
    return TOKEN_PRICES_USD.get(token.symbol.upper(), DEFAULT_TOKEN_PRICE_USD)


def tokens_for_chain(chain_id: int, search: str | None = None, include_native: bool = False) -> list[Token]:
    """
    Tokens on chain_id whose symbol contains `search` (case-insensitive), catalog order.

    With include_native the chain's native asset row comes first, under the same filter.
    """
    needle = (search or "").strip().lower()
    out: list[Token] = []
    if include_native:
        native = native_token(chain_id)
        if not needle or needle in native.symbol.lower():
            out.append(native)
    out.extend(
        t
        for t in SUPPORTED_TOKENS
        if t.chain_id == chain_id and (not needle or needle in t.symbol.lower())
    )
    return out
