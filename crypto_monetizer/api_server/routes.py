"""
API route definitions: settings, rates, tokens.

Routes validate request params and delegate to the settings store, the quote
source and the token catalog. Domain errors propagate as MonetizerError and are
rendered by the handlers registered in server.py.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query, Request
from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from crypto_monetizer.catalog import token_price_usd, tokens_for_chain
from crypto_monetizer.database import get_settings_record, upsert_settings
from crypto_monetizer.exchange import QuoteSource
from crypto_monetizer.logging import get_logger, short_address

logger = get_logger(__name__)

router = APIRouter()


# -----------------------------------------------------------------------------
# Request / response models
# -----------------------------------------------------------------------------


class SettingsResponse(BaseModel):
    """GET /api/settings/{address} response. payoutAddress is "" when nothing is stored."""

    walletAddress: str = Field(..., description="Wallet address the settings belong to")
    payoutAddress: str = Field("", description="Destination for simulated proceeds")


class SettingsUpsertRequest(BaseModel):
    """POST /api/settings body. snake_case keys from older clients are accepted too."""

    model_config = ConfigDict(populate_by_name=True)

    wallet_address: str = Field(
        ...,
        max_length=128,
        validation_alias=AliasChoices("walletAddress", "wallet_address"),
    )
    payout_address: str = Field(
        "",
        validation_alias=AliasChoices("payoutAddress", "payout_address", "binance_usdt_address"),
    )

    @field_validator("payout_address", mode="before")
    @classmethod
    def _none_is_empty(cls, v: object) -> object:
        return "" if v is None else v


class SuccessResponse(BaseModel):
    success: bool = True


class QuoteResponse(BaseModel):
    name: str
    rate: float
    fee: float = Field(..., ge=0, lt=1)


class TokenResponse(BaseModel):
    symbol: str
    chainId: int
    address: str
    priceUsd: float = Field(..., description="USD display price per unit")


# -----------------------------------------------------------------------------
# Dependencies
# -----------------------------------------------------------------------------


def get_quote_source(request: Request) -> QuoteSource:
    """Dependency: quote source attached to the app at creation time."""
    return request.app.state.quote_source


# -----------------------------------------------------------------------------
# Routes
# -----------------------------------------------------------------------------


@router.get("/settings/{address}", response_model=SettingsResponse)
def read_settings(address: str) -> SettingsResponse:
    """Stored payout settings for a wallet, or the default record when none exist."""
    record = get_settings_record(address)
    return SettingsResponse(**record.to_dict())


@router.post("/settings", response_model=SuccessResponse)
def save_settings(body: SettingsUpsertRequest) -> SuccessResponse:
    """Insert or overwrite the payout address for a wallet."""
    logger.info("save_settings_called", wallet=short_address(body.wallet_address))
    upsert_settings(body.wallet_address, body.payout_address)
    return SuccessResponse(success=True)


@router.get("/rates/{symbol}", response_model=list[QuoteResponse])
def read_rates(symbol: str, source: QuoteSource = Depends(get_quote_source)) -> list[QuoteResponse]:
    """Quotes from every exchange, best rate first. 503 when the rate source fails."""
    quotes = source.get_quotes(symbol)
    return [QuoteResponse(**q.to_dict()) for q in quotes]


@router.get("/tokens/{chain_id}", response_model=list[TokenResponse])
def read_tokens(
    chain_id: int,
    search: str | None = Query(None, max_length=64, description="Case-insensitive symbol filter"),
    include_native: bool = Query(False, alias="includeNative", description="Prepend the chain's native asset"),
) -> list[TokenResponse]:
    """Tokens the dashboard scans for on a chain."""
    return [
        TokenResponse(**t.to_dict(), priceUsd=float(token_price_usd(t)))
        for t in tokens_for_chain(chain_id, search, include_native=include_native)
    ]
